"""
KlinePulse – Settings (Pydantic BaseSettings)
=============================================
Configuración centralizada cargada desde variables de entorno / .env.
Se usa pydantic-settings para validación estricta al arranque.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings
from pydantic import Field, model_validator
from typing import List


class Settings(BaseSettings):
    # ─── Binance WebSocket ──────────────────────────────────────────────
    binance_ws_url: str = Field(
        default="wss://stream.binance.com:9443/ws",
        description="Endpoint base de streams públicos de Binance",
    )

    # ─── Selección (lo que ofrece el selector del frontend) ─────────────
    symbols: List[str] = Field(
        default=["ETHUSDT", "BNBUSDT", "DOTUSDT"],
        description="Símbolos seleccionables",
    )
    intervals: List[str] = Field(
        default=["1m", "3m", "5m"],
        description="Intervalos de vela seleccionables",
    )
    default_symbol: str = Field(default="ETHUSDT", description="Símbolo inicial")
    default_interval: str = Field(default="1m", description="Intervalo inicial")

    # ─── Serie en memoria ───────────────────────────────────────────────
    series_capacity: int = Field(
        default=100, ge=1, description="Máximo de muestras en memoria por símbolo",
    )

    # ─── Conexión ───────────────────────────────────────────────────────
    ws_open_timeout: float = Field(
        default=10.0, description="Timeout (seg) del handshake WebSocket",
    )
    ws_close_timeout: float = Field(
        default=5.0, description="Timeout (seg) del cierre WebSocket",
    )
    ws_ping_interval: float = Field(
        default=20.0, description="Intervalo (seg) de ping del cliente websockets",
    )
    ws_max_size: int = Field(
        default=2**20, description="Tamaño máximo (bytes) por mensaje",
    )

    # ─── Event Bus ──────────────────────────────────────────────────────
    event_bus_max_queue_size: int = Field(
        default=10_000,
        description="Tamaño máximo de cola del Event Bus para contrapresión",
    )

    # ─── Server ─────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8888)
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    @model_validator(mode="after")
    def _defaults_are_selectable(self) -> "Settings":
        if self.default_symbol not in self.symbols:
            raise ValueError(
                f"default_symbol '{self.default_symbol}' no está en symbols"
            )
        if self.default_interval not in self.intervals:
            raise ValueError(
                f"default_interval '{self.default_interval}' no está en intervals"
            )
        return self

