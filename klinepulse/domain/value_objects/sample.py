"""
KlinePulse – Domain Value Object: Sample
==========================================
Punto (timestamp, precio) de la serie que consume el gráfico.

- frozen=True → inmutable una vez creado; se puede compartir entre
  el buffer y los lectores sin copias defensivas.
- Precio en Decimal: Binance envía el cierre como texto decimal.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True, slots=True)
class Sample:
    """Muestra de precio de cierre en un instante."""

    timestamp: int    # epoch en milisegundos (open time de la vela)
    price: Decimal    # precio de cierre

    def to_dict(self) -> dict:
        """Serialización para API / frontend."""
        return {
            "timestamp": self.timestamp,
            "price": float(self.price),
        }
