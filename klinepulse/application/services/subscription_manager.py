"""
KlinePulse – Subscription Manager
====================================
Mantiene UNA conexión en vivo que coincide con la SubscriptionKey
seleccionada y enruta los mensajes aceptados al SeriesBuffer.

CICLO DE VIDA:
  CLOSED ──set_key(nueva)──▸ OPEN ──teardown / error / cambio de clave──▸ CLOSED
No hay estado de reconexión ni backoff: tras un error la suscripción
queda cerrada hasta el próximo set_key() o force_reconnect().

GENERACIONES:
- Cada handle se abre con callbacks atados a la generación vigente.
- Liberar un handle incrementa la generación.
- Un mensaje cuya generación no coincide con la actual se descarta
  (StaleGenerationIgnored). Así los mensajes en vuelo de una conexión
  reemplazada nunca llegan al buffer, aunque el transporte los entregue.

CONCURRENCIA:
- Todo corre en el mismo event loop asyncio. set_key(), on_message()
  y teardown() son síncronos y no se intercalan.
- Abrir una conexión no bloquea: el handshake ocurre en una task.
"""

from __future__ import annotations

from enum import Enum
from functools import partial
from typing import Optional

from klinepulse.application.ports.stream_transport import (
    IConnectionHandle,
    IStreamTransport,
)
from klinepulse.domain.events.domain_events import (
    ConnectionLost,
    ConnectionOpened,
    SampleAppended,
    SubscriptionChanged,
)
from klinepulse.domain.exceptions.domain_errors import (
    DecodeError,
    StaleGenerationIgnored,
    StreamConnectionError,
)
from klinepulse.domain.services.kline_decoder import KlineDecoder
from klinepulse.domain.value_objects.subscription_key import SubscriptionKey
from klinepulse.infrastructure.event_bus import (
    CONNECTION_TOPIC,
    SAMPLE_TOPIC,
    SUBSCRIPTION_TOPIC,
    EventBus,
)
from klinepulse.shared.logging.logger import get_logger
from klinepulse.state.series_buffer import SeriesBuffer

logger = get_logger("subscription_manager")


class ConnectionState(str, Enum):
    CLOSED = "CLOSED"
    OPEN = "OPEN"


class SubscriptionManager:
    """
    Dueño exclusivo del ConnectionHandle activo.

    Único escritor del SeriesBuffer; los lectores usan snapshot().
    """

    def __init__(
        self,
        transport: IStreamTransport,
        buffer: SeriesBuffer,
        base_url: str,
        event_bus: Optional[EventBus] = None,
        decoder: Optional[KlineDecoder] = None,
    ) -> None:
        self._transport = transport
        self._buffer = buffer
        self._base_url = base_url.rstrip("/")
        self._event_bus = event_bus
        self._decoder = decoder or KlineDecoder()

        self._key: Optional[SubscriptionKey] = None
        self._handle: Optional[IConnectionHandle] = None
        self._generation: int = 0
        self._state = ConnectionState.CLOSED
        self._connected = False
        self._last_error: Optional[str] = None

        # Contadores de monitoreo
        self._opens: int = 0
        self._messages_received: int = 0
        self._samples_appended: int = 0
        self._ignored_events: int = 0
        self._decode_errors: int = 0
        self._stale_dropped: int = 0
        self._connection_errors: int = 0

    # ──────────────────────── Propiedades ────────────────────────────────

    @property
    def key(self) -> Optional[SubscriptionKey]:
        return self._key

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def buffer(self) -> SeriesBuffer:
        return self._buffer

    def url_for(self, key: SubscriptionKey) -> str:
        """``<base>/ethusdt@kline_1m``"""
        return f"{self._base_url}/{key.stream_name}"

    # ──────────────────────── Control ────────────────────────────────────

    def set_key(self, new_key: SubscriptionKey) -> bool:
        """
        Selecciona la clave activa.

        Si la clave es distinta de la actual, o no hay conexión abierta,
        libera el handle vigente y abre uno nuevo. Misma clave con
        conexión abierta → no-op.

        Returns:
            True si se abrió una conexión nueva
        """
        if new_key == self._key and self._handle is not None:
            logger.debug("set_key(%s) sin cambios, ignorando", new_key.stream_name)
            return False

        self._release()
        self._key = new_key
        self._open(forced=False)
        return True

    def force_reconnect(self) -> bool:
        """
        Reabre la conexión para la clave actual aunque no haya cambiado.
        Sin clave seleccionada no hace nada.
        """
        if self._key is None:
            logger.warning("force_reconnect() sin clave seleccionada, ignorando")
            return False

        self._release()
        self._open(forced=True)
        return True

    def teardown(self) -> None:
        """
        Libera la conexión activa. Los mensajes que el handle liberado
        entregue después se descartan por generación.
        """
        had_handle = self._handle is not None
        self._release()
        if had_handle:
            logger.info("Suscripción liberada (generación=%d)", self._generation)

    # ──────────────────────── Callbacks del transporte ───────────────────

    def on_open(self, generation: int) -> None:
        if generation != self._generation:
            return
        self._connected = True
        logger.info("✓ Conectado a %s", self._handle.url if self._handle else "?")
        self._publish(CONNECTION_TOPIC, ConnectionOpened(
            symbol=self._key.symbol,
            interval=self._key.interval.value,
            generation=generation,
        ))

    def on_message(self, generation: int, raw: str | bytes) -> None:
        """
        Procesa un mensaje entregado por el handle de ``generation``.

        - Generación obsoleta → descartado.
        - Tipo distinto de kline → ignorado.
        - Payload malformado → descartado con warning.
        - Kline válido → Sample añadido a la serie del símbolo de la clave.
        """
        try:
            self._check_generation(generation)
        except StaleGenerationIgnored as e:
            self._stale_dropped += 1
            logger.debug("Mensaje descartado: %s", e.message)
            return

        self._messages_received += 1

        try:
            update = self._decoder.decode(raw)
        except DecodeError as e:
            self._decode_errors += 1
            logger.warning("Mensaje descartado: %s", e.message)
            return

        if update is None:
            self._ignored_events += 1
            return

        sample = update.to_sample()
        symbol = self._key.symbol
        self._buffer.append(symbol, sample)
        self._samples_appended += 1

        self._publish(SAMPLE_TOPIC, SampleAppended(
            symbol=symbol,
            interval=self._key.interval.value,
            sample_time=sample.timestamp,
            price=float(sample.price),
        ))

    def on_close(self, generation: int, exc: Optional[BaseException]) -> None:
        """
        Cierre o fallo del transporte. Se reporta y la suscripción
        queda CLOSED; no se reintenta.
        """
        if generation != self._generation:
            return

        if isinstance(exc, StreamConnectionError):
            error = exc
        else:
            url = self._handle.url if self._handle else None
            reason = str(exc) if exc else "cerrada por el servidor"
            error = StreamConnectionError(f"Conexión perdida: {reason}", url=url)

        self._connection_errors += 1
        self._last_error = error.message
        logger.warning(
            "%s [%s] – sin reintento hasta nueva selección",
            error.message,
            self._key.stream_name,
        )

        # El handle ya está muerto: liberar sin esperar más callbacks
        self._release()

        self._publish(CONNECTION_TOPIC, ConnectionLost(
            symbol=self._key.symbol,
            interval=self._key.interval.value,
            generation=generation,
            reason=error.message,
        ))

    # ──────────────────────── Internos ───────────────────────────────────

    def _check_generation(self, generation: int) -> None:
        if generation != self._generation or self._handle is None:
            raise StaleGenerationIgnored(generation, self._generation)

    def _open(self, forced: bool) -> None:
        key = self._key
        generation = self._generation
        url = self.url_for(key)

        self._handle = self._transport.open(
            url,
            on_open=partial(self.on_open, generation),
            on_message=partial(self.on_message, generation),
            on_close=partial(self.on_close, generation),
        )
        self._state = ConnectionState.OPEN
        self._connected = False
        self._opens += 1
        logger.info(
            "Suscribiendo a %s (generación=%d%s)",
            key.stream_name,
            generation,
            ", forzada" if forced else "",
        )

        self._publish(SUBSCRIPTION_TOPIC, SubscriptionChanged(
            symbol=key.symbol,
            interval=key.interval.value,
            generation=generation,
            forced=forced,
        ))

    def _release(self) -> None:
        """Cerrar el handle vigente e invalidar su generación."""
        handle = self._handle
        self._handle = None
        self._state = ConnectionState.CLOSED
        self._connected = False
        self._generation += 1
        if handle is not None and not handle.closed:
            handle.close()

    def _publish(self, topic: str, event) -> None:
        if self._event_bus is not None:
            self._event_bus.publish_nowait(topic, event)

    # ──────────────────────── Stats ─────────────────────────────────────

    @property
    def stats(self) -> dict:
        """Estadísticas del manager para monitoreo."""
        return {
            "state": self._state.value,
            "connected": self._connected,
            "key": self._key.to_dict() if self._key else None,
            "stream": self._key.stream_name if self._key else None,
            "generation": self._generation,
            "opens": self._opens,
            "messages_received": self._messages_received,
            "samples_appended": self._samples_appended,
            "ignored_events": self._ignored_events,
            "decode_errors": self._decode_errors,
            "stale_dropped": self._stale_dropped,
            "connection_errors": self._connection_errors,
            "last_error": self._last_error,
        }
