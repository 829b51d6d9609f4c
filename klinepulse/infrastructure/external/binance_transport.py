"""
KlinePulse – Binance WebSocket Transport (asíncrono)
=====================================================
Implementación de IStreamTransport sobre streams públicos de Binance
(wss://stream.binance.com:9443/ws/<stream>).

CADA open() LANZA UNA TASK:
  1. websockets.connect(url) → on_open()
  2. async for frame → on_message(frame)
  3. cierre del servidor → on_close(None)
     error de red / protocolo / callback → on_close(StreamConnectionError)

SIN RECONEXIÓN:
- Al contrario que un cliente de larga vida, aquí no hay backoff: la
  decisión de reabrir es del SubscriptionManager (cambio de selección).

CANCELACIÓN:
- handle.close() cancela la task; el bloque ``async with`` cierra el
  socket. Una task cancelada NO invoca on_close.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import websockets

from klinepulse.application.ports.stream_transport import (
    IConnectionHandle,
    IStreamTransport,
    OnClose,
    OnMessage,
    OnOpen,
)
from klinepulse.domain.exceptions.domain_errors import StreamConnectionError
from klinepulse.shared.config.settings import Settings
from klinepulse.shared.logging.logger import get_logger

logger = get_logger("binance_transport")


class WebSocketConnectionHandle(IConnectionHandle):
    """Handle de una task de conexión WebSocket."""

    def __init__(self, url: str) -> None:
        self._url = url
        self._task: Optional[asyncio.Task] = None
        self._closed = False

    @property
    def url(self) -> str:
        return self._url

    @property
    def closed(self) -> bool:
        return self._closed

    def attach(self, task: asyncio.Task) -> None:
        self._task = task

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._task and not self._task.done():
            self._task.cancel()
        logger.info("Conexión liberada: %s", self._url)

    def mark_closed(self) -> None:
        self._closed = True


class BinanceStreamTransport(IStreamTransport):
    """Transporte WebSocket: una task por conexión abierta."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._tasks: set[asyncio.Task] = set()

    def open(
        self,
        url: str,
        on_open: OnOpen,
        on_message: OnMessage,
        on_close: OnClose,
    ) -> WebSocketConnectionHandle:
        """Lanza la task de conexión y devuelve el handle sin esperar."""
        handle = WebSocketConnectionHandle(url)
        task = asyncio.get_running_loop().create_task(
            self._run(handle, on_open, on_message, on_close),
            name=f"binance-stream:{url.rsplit('/', 1)[-1]}",
        )
        # Referencia fuerte: el loop solo guarda referencias débiles a tasks
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        handle.attach(task)
        return handle

    async def _run(
        self,
        handle: WebSocketConnectionHandle,
        on_open: OnOpen,
        on_message: OnMessage,
        on_close: OnClose,
    ) -> None:
        error: Optional[BaseException] = None
        try:
            logger.info("Conectando a %s", handle.url)
            async with websockets.connect(
                handle.url,
                open_timeout=self._settings.ws_open_timeout,
                close_timeout=self._settings.ws_close_timeout,
                ping_interval=self._settings.ws_ping_interval,
                max_size=self._settings.ws_max_size,
            ) as ws:
                on_open()
                async for raw_msg in ws:
                    on_message(raw_msg)
        except asyncio.CancelledError:
            handle.mark_closed()
            raise
        except websockets.exceptions.ConnectionClosed as e:
            error = StreamConnectionError(f"Conexión cerrada: {e}", url=handle.url)
        except websockets.exceptions.WebSocketException as e:
            error = StreamConnectionError(f"Error de protocolo: {e}", url=handle.url)
        except (OSError, asyncio.TimeoutError) as e:
            error = StreamConnectionError(f"Error de red: {e!r}", url=handle.url)
        except Exception as e:
            logger.exception("Fallo inesperado en %s", handle.url)
            error = StreamConnectionError(f"Error inesperado: {e!r}", url=handle.url)

        if handle.closed:
            return
        handle.mark_closed()
        on_close(error)

    async def aclose(self) -> None:
        """Cancelar todas las tasks pendientes (shutdown)."""
        tasks = [t for t in self._tasks if not t.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("BinanceStreamTransport detenido (%d tasks canceladas)", len(tasks))

    @property
    def active_tasks(self) -> int:
        return sum(1 for t in self._tasks if not t.done())
