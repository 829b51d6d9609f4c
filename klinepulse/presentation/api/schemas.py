"""
KlinePulse – API Schemas (Pydantic)
=====================================
Schemas de validación para request/response de la API REST.
"""

from __future__ import annotations

from pydantic import BaseModel
from typing import List, Optional


class HealthResponse(BaseModel):
    status: str
    service: str


class SelectionRequest(BaseModel):
    """Body para cambiar la selección activa."""
    symbol: str
    interval: str


class KeySchema(BaseModel):
    symbol: str
    interval: str


class SelectionResponse(BaseModel):
    active: Optional[KeySchema]
    changed: Optional[bool] = None
    symbols: List[str]
    intervals: List[str]


class SampleSchema(BaseModel):
    timestamp: int
    price: float


class SeriesResponse(BaseModel):
    symbol: str
    count: int
    capacity: int
    samples: List[SampleSchema]


class ManagerStatusSchema(BaseModel):
    state: str
    connected: bool
    key: Optional[KeySchema]
    stream: Optional[str]
    generation: int
    opens: int
    messages_received: int
    samples_appended: int
    ignored_events: int
    decode_errors: int
    stale_dropped: int
    connection_errors: int
    last_error: Optional[str]


class SystemStatusResponse(BaseModel):
    subscription: ManagerStatusSchema
    series: dict
    ws_clients: int
    event_bus_subscribers: int
