"""
KlinePulse – WebSocket Manager (broadcast a clientes frontend)
================================================================
Gestiona conexiones WebSocket de clientes frontend y les reenvía los
eventos del SubscriptionManager (muestras, conexión, cambios de clave).

ARQUITECTURA:
  EventBus ──(sample)────────▸ WSManager._broadcast_loop()
  EventBus ──(connection)────▸ WSManager._broadcast_loop()
  EventBus ──(subscription)──▸ WSManager._broadcast_loop()
       │
       ▼
  [Cliente WS 1, Cliente WS 2, ...]

NO BLOQUEA EL LOOP PRINCIPAL:
- Cada tópico tiene su propio task de broadcast.
- El envío a cada cliente usa asyncio.wait_for con timeout; un cliente
  lento o caído se elimina sin afectar a los demás.
"""

from __future__ import annotations

import asyncio
import json
from typing import Set

from fastapi import WebSocket, WebSocketDisconnect

from klinepulse.infrastructure.event_bus import (
    CONNECTION_TOPIC,
    SAMPLE_TOPIC,
    SUBSCRIPTION_TOPIC,
    EventBus,
)
from klinepulse.shared.logging.logger import get_logger

logger = get_logger("ws_manager")

BROADCAST_TOPICS = (SAMPLE_TOPIC, CONNECTION_TOPIC, SUBSCRIPTION_TOPIC)
SEND_TIMEOUT = 5.0


class WebSocketManager:
    """Gestiona conexiones frontend y broadcast de eventos en tiempo real."""

    def __init__(self, event_bus: EventBus) -> None:
        self._event_bus = event_bus
        self._clients: Set[WebSocket] = set()
        self._broadcast_tasks: list[asyncio.Task] = []

    async def start(self) -> None:
        """Lanzar un loop de broadcast por tópico."""
        for topic in BROADCAST_TOPICS:
            queue = await self._event_bus.subscribe(topic, f"ws_broadcast_{topic}")
            self._broadcast_tasks.append(
                asyncio.create_task(
                    self._broadcast_loop(queue, topic),
                    name=f"ws-broadcast-{topic}",
                )
            )
        logger.info(
            "WebSocketManager iniciado – broadcast loops para %s",
            ", ".join(BROADCAST_TOPICS),
        )

    async def stop(self) -> None:
        """Cancelar broadcast y cerrar todos los clientes."""
        for task in self._broadcast_tasks:
            task.cancel()
        if self._broadcast_tasks:
            await asyncio.gather(*self._broadcast_tasks, return_exceptions=True)
        self._broadcast_tasks.clear()

        for ws in list(self._clients):
            try:
                await ws.close()
            except (RuntimeError, WebSocketDisconnect) as e:
                logger.debug("Cliente WS ya cerrado: %s", e)
        self._clients.clear()
        logger.info("WebSocketManager detenido")

    async def connect(self, websocket: WebSocket) -> None:
        """Registrar un nuevo cliente WebSocket."""
        await websocket.accept()
        self._clients.add(websocket)
        logger.info("Cliente WS conectado. Total: %d", len(self._clients))

    def disconnect(self, websocket: WebSocket) -> None:
        """Des-registrar un cliente desconectado."""
        self._clients.discard(websocket)
        logger.info("Cliente WS desconectado. Total: %d", len(self._clients))

    @staticmethod
    def serialize(event_type: str, data) -> str:
        """Envoltorio JSON ``{"type": ..., "data": ...}``."""
        if hasattr(data, "to_dict"):
            payload_data = data.to_dict()
        elif isinstance(data, dict):
            payload_data = data
        else:
            payload_data = str(data)
        return json.dumps({"type": event_type, "data": payload_data})

    async def _broadcast_loop(self, queue: asyncio.Queue, event_type: str) -> None:
        """Consume eventos de una Queue y los envía a todos los clientes."""
        try:
            while True:
                data = await queue.get()
                if not self._clients:
                    continue

                payload = self.serialize(event_type, data)

                disconnected: list[WebSocket] = []
                await asyncio.gather(*(
                    self._safe_send(ws, payload, disconnected)
                    for ws in list(self._clients)
                ))

                for ws in disconnected:
                    self._clients.discard(ws)
        except asyncio.CancelledError:
            pass  # Shutdown limpio

    async def _safe_send(
        self, ws: WebSocket, payload: str, disconnected: list[WebSocket]
    ) -> None:
        """
        Enviar payload a un cliente con timeout.
        Si falla, marcar como desconectado para limpieza.
        """
        try:
            await asyncio.wait_for(ws.send_text(payload), timeout=SEND_TIMEOUT)
        except (WebSocketDisconnect, asyncio.TimeoutError, RuntimeError) as e:
            logger.debug("Envío fallido a cliente WS: %r", e)
            disconnected.append(ws)

    @property
    def client_count(self) -> int:
        return len(self._clients)
