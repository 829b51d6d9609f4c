"""
KlinePulse – Chart Presenter
==============================
Convierte un snapshot de la serie en el payload que dibuja el frontend
(gráfico de línea: etiquetas de hora + un dataset de precios).

El core nunca empuja al renderer: el frontend pide /api/chart cuando
recibe un evento ``sample`` o con un timer propio.
"""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from typing import Sequence

from klinepulse.domain.value_objects.sample import Sample
from klinepulse.domain.value_objects.subscription_key import SubscriptionKey

LINE_COLOR = "rgb(75, 192, 192)"
LINE_TENSION = 0.1
MAX_X_TICKS = 10


class ChartPresenter:
    """Formato de gráfico de precio para una clave."""

    def __init__(self, tz: tzinfo = timezone.utc) -> None:
        self._tz = tz

    def label(self, timestamp_ms: int) -> str:
        """Hora ``HH:MM:SS`` de un timestamp en ms."""
        return datetime.fromtimestamp(timestamp_ms / 1000, tz=self._tz).strftime("%H:%M:%S")

    @staticmethod
    def title(key: SubscriptionKey) -> str:
        return f"{key.symbol} Price Chart ({key.interval.value})"

    def build(self, key: SubscriptionKey, samples: Sequence[Sample]) -> dict:
        return {
            "title": self.title(key),
            "symbol": key.symbol,
            "interval": key.interval.value,
            "labels": [self.label(s.timestamp) for s in samples],
            "datasets": [
                {
                    "label": key.symbol,
                    "data": [float(s.price) for s in samples],
                    "borderColor": LINE_COLOR,
                    "tension": LINE_TENSION,
                }
            ],
            "options": {"maxTicksLimit": MAX_X_TICKS},
        }
