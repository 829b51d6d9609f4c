"""Adaptadores a servicios externos."""
from klinepulse.infrastructure.external.binance_transport import (
    BinanceStreamTransport,
    WebSocketConnectionHandle,
)

__all__ = ["BinanceStreamTransport", "WebSocketConnectionHandle"]
