"""
KlinePulse – Event Bus (asyncio.Queue fan-out)
===============================================
Bus de eventos interno para desacoplar el productor (SubscriptionManager)
de los consumidores (WebSocketManager, futuros observadores).

Arquitectura:
  ┌──────────────┐          ┌───────────┐
  │ Subscription │──event──▸│ Event Bus │──▸ Consumer 1 (WS broadcast)
  │   Manager    │          │ (fan-out) │──▸ Consumer N ...
  └──────────────┘          └───────────┘

POLÍTICA DE COLA:
- Cada consumidor tiene su propia asyncio.Queue con tamaño limitado.
- Si un consumidor es lento y su cola se llena, se descarta el evento MÁS
  ANTIGUO de esa cola (drop-oldest): el productor nunca se bloquea.

SÍNCRONO vs ASÍNCRONO:
- publish_nowait() es síncrono: lo usan los callbacks del transporte,
  que no pueden hacer await.
- publish() es la variante awaitable para coroutines.

UN SOLO EVENT LOOP:
- Registro, publicación y baja ocurren en el mismo loop y nunca se
  intercalan; no hace falta lock.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict

from klinepulse.shared.logging.logger import get_logger

logger = get_logger("event_bus")

SUBSCRIPTION_TOPIC = "subscription"
CONNECTION_TOPIC = "connection"
SAMPLE_TOPIC = "sample"


class EventBus:
    """Fan-out event bus basado en asyncio.Queue."""

    def __init__(self, max_queue_size: int = 10_000) -> None:
        self._max_queue_size = max_queue_size
        # topic → lista de (queue, nombre_consumidor)
        self._subscribers: Dict[str, list[tuple[asyncio.Queue, str]]] = {}
        self._dropped: int = 0

    async def subscribe(self, topic: str, consumer_name: str) -> asyncio.Queue:
        """
        Registrar un consumidor en un tópico.
        Retorna la Queue exclusiva de ese consumidor.
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._max_queue_size)
        self._subscribers.setdefault(topic, []).append((queue, consumer_name))
        logger.info("'%s' escucha '%s' (max_queue=%d)", consumer_name, topic, self._max_queue_size)
        return queue

    def publish_nowait(self, topic: str, data: Any) -> None:
        """
        Publicar un evento a todos los suscriptores de un tópico.
        Política drop-oldest si la cola está llena → nunca bloquea.
        """
        for queue, consumer_name in self._subscribers.get(topic, ()):
            # full() implica al menos un elemento: get_nowait no falla
            if queue.full():
                queue.get_nowait()
                self._dropped += 1
                logger.warning("'%s' lento en '%s': se descarta el evento más antiguo",
                               consumer_name, topic)
            queue.put_nowait(data)

    async def publish(self, topic: str, data: Any) -> None:
        """Variante awaitable de publish_nowait()."""
        self.publish_nowait(topic, data)

    async def unsubscribe_all(self, topic: str | None = None) -> None:
        """Desuscribir todos los consumidores (cleanup al shutdown)."""
        removed = self._subscribers.pop(topic, []) if topic else [
            sub for subs in self._subscribers.values() for sub in subs
        ]
        if not topic:
            self._subscribers.clear()
        logger.info("%d suscriptores eliminados (tópico=%s)", len(removed), topic or "*")

    @property
    def subscriber_count(self) -> int:
        return sum(len(subs) for subs in self._subscribers.values())

    @property
    def dropped_events(self) -> int:
        return self._dropped
