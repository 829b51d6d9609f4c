"""
KlinePulse – Domain Value Object: SubscriptionKey
===================================================
Identifica qué stream en vivo está activo: par (símbolo, intervalo).

- frozen=True → inmutable y hashable; igualdad estructural.
- El intervalo es un Enum cerrado con los periodos de vela de Binance.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Interval(str, Enum):
    """Periodo de vela soportado por los streams kline de Binance."""

    S1 = "1s"
    M1 = "1m"
    M3 = "3m"
    M5 = "5m"
    M15 = "15m"
    M30 = "30m"
    H1 = "1h"
    H2 = "2h"
    H4 = "4h"
    H6 = "6h"
    H8 = "8h"
    H12 = "12h"
    D1 = "1d"
    D3 = "3d"
    W1 = "1w"
    MO1 = "1M"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class SubscriptionKey:
    """Clave de suscripción (símbolo, intervalo)."""

    symbol: str          # ticker del exchange, e.g. "ETHUSDT"
    interval: Interval   # periodo de vela, e.g. Interval.M1

    @classmethod
    def of(cls, symbol: str, interval: str | Interval) -> "SubscriptionKey":
        """Construye la clave normalizando el símbolo a mayúsculas."""
        return cls(symbol=symbol.upper(), interval=Interval(interval))

    @property
    def stream_name(self) -> str:
        """Nombre del stream: ``ethusdt@kline_1m``."""
        return f"{self.symbol.lower()}@kline_{self.interval.value}"

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "interval": self.interval.value,
        }
