"""Domain services."""
from klinepulse.domain.services.kline_decoder import KlineDecoder, KLINE_EVENT

__all__ = ["KlineDecoder", "KLINE_EVENT"]
