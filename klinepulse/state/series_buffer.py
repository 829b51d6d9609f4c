"""
KlinePulse – Series Buffer
============================
Serie en memoria por símbolo: muestras (timestamp, precio) recientes.

PROTECCIÓN DE MEMORIA:
- Cada símbolo usa collections.deque con maxlen → descarta automáticamente
  la muestra más antigua al exceder la capacidad. O(1) en append.
- Nunca se almacenan más de `capacity` muestras por símbolo.

ORDEN:
- Se respeta el orden de llegada. No se deduplican timestamps ni se
  reordenan muestras fuera de orden.

LECTURA SEGURA:
- snapshot() devuelve una tupla nueva (copy-on-read). El llamador no
  puede alterar el deque interno a través del valor devuelto.
- Todas las escrituras ocurren en el event loop; el único escritor es
  el SubscriptionManager.

Las series de símbolos no seleccionados se conservan hasta que se
vuelvan a seleccionar; nunca se mezclan entre símbolos.
"""

from __future__ import annotations

from collections import deque
from typing import Deque, Dict, Tuple

from klinepulse.domain.value_objects.sample import Sample
from klinepulse.shared.logging.logger import get_logger

logger = get_logger("series_buffer")

DEFAULT_CAPACITY = 100


class SeriesBuffer:
    """Buffer FIFO acotado de muestras por símbolo."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity debe ser >= 1, recibido {capacity}")
        self._capacity = capacity
        self._series: Dict[str, Deque[Sample]] = {}
        self._total_appends: int = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    def append(self, symbol: str, sample: Sample) -> None:
        """
        Añadir una muestra al final de la serie del símbolo.
        deque(maxlen=N) descarta la más antigua si se excede el límite.
        """
        series = self._series.get(symbol)
        if series is None:
            series = deque(maxlen=self._capacity)
            self._series[symbol] = series
            logger.info("Serie creada para '%s' (capacity=%d)", symbol, self._capacity)
        series.append(sample)
        self._total_appends += 1

    def snapshot(self, symbol: str) -> Tuple[Sample, ...]:
        """Copia inmutable de la serie; vacía si el símbolo no existe."""
        series = self._series.get(symbol)
        if series is None:
            return ()
        return tuple(series)

    def __len__(self) -> int:
        return len(self._series)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._series

    def symbols(self) -> list[str]:
        """Símbolos con serie creada."""
        return list(self._series.keys())

    def stats(self) -> dict:
        """Resumen para diagnóstico / API."""
        return {
            "capacity": self._capacity,
            "total_appends": self._total_appends,
            "series": {symbol: len(s) for symbol, s in self._series.items()},
        }
