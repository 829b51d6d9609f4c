"""
KlinePulse – Domain Value Object: KlineUpdate
===============================================
Actualización incremental de vela decodificada de un mensaje ``kline``.
Solo se conservan los campos que el sistema usa.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from klinepulse.domain.value_objects.sample import Sample


@dataclass(frozen=True, slots=True)
class KlineUpdate:
    """Vela en curso (o cerrada) recibida del stream."""

    symbol: str          # "s" del evento
    event_time: int      # "E": epoch ms del evento
    open_time: int       # "k.t": epoch ms de apertura de la vela
    close: Decimal       # "k.c": precio de cierre actual
    is_closed: bool      # "k.x": la vela ya cerró

    def to_sample(self) -> Sample:
        return Sample(timestamp=self.open_time, price=self.close)
