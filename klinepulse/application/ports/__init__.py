"""Application ports - Interfaces to infrastructure."""
from klinepulse.application.ports.stream_transport import (
    IConnectionHandle,
    IStreamTransport,
)

__all__ = [
    "IConnectionHandle",
    "IStreamTransport",
]
