"""Estado en memoria."""
from klinepulse.state.series_buffer import SeriesBuffer, DEFAULT_CAPACITY

__all__ = ["SeriesBuffer", "DEFAULT_CAPACITY"]
