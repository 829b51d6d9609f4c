"""Configuración centralizada."""
from klinepulse.shared.config.settings import Settings

__all__ = ["Settings"]
