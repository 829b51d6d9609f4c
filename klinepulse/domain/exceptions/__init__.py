"""Domain exceptions."""
from klinepulse.domain.exceptions.domain_errors import (
    DomainError,
    DecodeError,
    StaleGenerationIgnored,
    StreamConnectionError,
    InvalidSelectionError,
)

__all__ = [
    "DomainError",
    "DecodeError",
    "StaleGenerationIgnored",
    "StreamConnectionError",
    "InvalidSelectionError",
]
