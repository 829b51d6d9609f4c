"""
KlinePulse – Domain Events
============================
Eventos de dominio publicados por el SubscriptionManager.

Representan HECHOS ya ocurridos: son inmutables y llevan timestamp.
El WebSocketManager los reenvía al frontend vía ``to_dict()``.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, Any


@dataclass(frozen=True)
class DomainEvent:
    """Evento base de dominio."""

    event_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_id": self.event_id,
            "event_type": self.__class__.__name__,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class SubscriptionChanged(DomainEvent):
    """Evento: se abrió una suscripción para una nueva clave (o forzada)."""

    symbol: str = ""
    interval: str = ""
    generation: int = 0
    forced: bool = False

    def to_dict(self) -> Dict[str, Any]:
        base = super().to_dict()
        base.update({
            "symbol": self.symbol,
            "interval": self.interval,
            "generation": self.generation,
            "forced": self.forced,
        })
        return base


@dataclass(frozen=True)
class ConnectionOpened(DomainEvent):
    """Evento: el transporte completó el handshake."""

    symbol: str = ""
    interval: str = ""
    generation: int = 0

    def to_dict(self) -> Dict[str, Any]:
        base = super().to_dict()
        base.update({
            "symbol": self.symbol,
            "interval": self.interval,
            "generation": self.generation,
        })
        return base


@dataclass(frozen=True)
class ConnectionLost(DomainEvent):
    """Evento: la conexión activa se cerró o falló. No hay reintento."""

    symbol: str = ""
    interval: str = ""
    generation: int = 0
    reason: str = ""

    def to_dict(self) -> Dict[str, Any]:
        base = super().to_dict()
        base.update({
            "symbol": self.symbol,
            "interval": self.interval,
            "generation": self.generation,
            "reason": self.reason,
        })
        return base


@dataclass(frozen=True)
class SampleAppended(DomainEvent):
    """Evento: se añadió una muestra a la serie de un símbolo."""

    symbol: str = ""
    interval: str = ""
    sample_time: int = 0
    price: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        base = super().to_dict()
        base.update({
            "symbol": self.symbol,
            "interval": self.interval,
            "sample_time": self.sample_time,
            "price": self.price,
        })
        return base
