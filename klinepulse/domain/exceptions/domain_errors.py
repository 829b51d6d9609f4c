"""
KlinePulse – Domain Exceptions
================================
Excepciones del dominio de streaming.

JERARQUÍA:
    DomainError (base)
    ├── DecodeError             → payload malformado, se descarta
    ├── StaleGenerationIgnored  → mensaje de una conexión reemplazada
    ├── StreamConnectionError   → fallo/cierre del transporte
    └── InvalidSelectionError   → símbolo/intervalo no seleccionable
"""

from __future__ import annotations


class DomainError(Exception):
    """Excepción base para errores de dominio."""

    def __init__(self, message: str, code: str = "DOMAIN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            "error": self.code,
            "message": self.message,
        }


class DecodeError(DomainError):
    """Mensaje del stream que no se puede interpretar como kline."""

    def __init__(self, message: str, raw: str | bytes | None = None):
        super().__init__(message, code="DECODE_ERROR")
        self.raw = raw


class StaleGenerationIgnored(DomainError):
    """Mensaje entregado por una conexión ya liberada."""

    def __init__(self, generation: int, current: int):
        super().__init__(
            f"Generación {generation} obsoleta (actual {current})",
            code="STALE_GENERATION",
        )
        self.generation = generation
        self.current = current


class StreamConnectionError(DomainError):
    """Fallo o cierre abrupto de la conexión en vivo."""

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message, code="CONNECTION_ERROR")
        self.url = url


class InvalidSelectionError(DomainError):
    """Selección de símbolo/intervalo fuera de lo configurado."""

    def __init__(self, message: str, field: str | None = None, value: str | None = None):
        super().__init__(message, code="INVALID_SELECTION")
        self.field = field
        self.value = value
