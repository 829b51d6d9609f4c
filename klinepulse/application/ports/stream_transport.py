"""
KlinePulse – Application Port: Stream Transport
=================================================
Interfaz del transporte en vivo.

El SubscriptionManager decide QUÉ stream abrir; la infraestructura
decide CÓMO (WebSocket Binance, transporte falso en tests, etc.)

CONTRATO DE CALLBACKS:
- on_open()          → handshake completado
- on_message(raw)    → un frame recibido (texto o bytes)
- on_close(exc)      → cierre del servidor (exc=None) o fallo (exc)
Tras ``handle.close()`` el transporte no debe invocar on_close.
Los callbacks se invocan en el event loop, uno a la vez.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Optional

OnOpen = Callable[[], None]
OnMessage = Callable[[str | bytes], None]
OnClose = Callable[[Optional[BaseException]], None]


class IConnectionHandle(ABC):
    """Recurso opaco que representa UNA suscripción en vivo."""

    @property
    @abstractmethod
    def url(self) -> str:
        """URL completa del stream."""
        pass

    @property
    @abstractmethod
    def closed(self) -> bool:
        """True una vez liberado o cerrado."""
        pass

    @abstractmethod
    def close(self) -> None:
        """
        Libera la conexión. Idempotente y no bloqueante: el cierre del
        socket subyacente puede completarse de forma asíncrona.
        """
        pass


class IStreamTransport(ABC):
    """
    Fábrica de conexiones en vivo.

    IMPLEMENTACIONES:
    - BinanceStreamTransport (websockets)
    - FakeTransport (tests)
    """

    @abstractmethod
    def open(
        self,
        url: str,
        on_open: OnOpen,
        on_message: OnMessage,
        on_close: OnClose,
    ) -> IConnectionHandle:
        """
        Abre una conexión sin esperar al handshake.

        Args:
            url: URL completa del stream
            on_open: callback de conexión establecida
            on_message: callback por mensaje recibido
            on_close: callback de cierre/fallo

        Returns:
            Handle de la nueva conexión
        """
        pass
