"""
KlinePulse – API Routes (FastAPI)
===================================
Endpoints REST y WebSocket para el frontend.

Endpoints disponibles:
  WS   /ws/series                 → eventos en tiempo real
  GET  /api/health                → health check
  GET  /api/status                → estado de la suscripción y series
  GET  /api/selection             → clave activa + opciones
  POST /api/selection             → cambiar símbolo/intervalo
  POST /api/selection/reconnect   → forzar reconexión
  GET  /api/series/{symbol}       → snapshot de la serie
  GET  /api/chart                 → payload de gráfico de la clave activa
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect

from klinepulse.domain.exceptions.domain_errors import InvalidSelectionError
from klinepulse.domain.value_objects.subscription_key import Interval, SubscriptionKey
from klinepulse.presentation.api.schemas import (
    HealthResponse,
    SelectionRequest,
    SelectionResponse,
    SeriesResponse,
    SystemStatusResponse,
)
from klinepulse.shared.logging.logger import get_logger

logger = get_logger("api.routes")

router = APIRouter()

# Referencias a componentes inyectados desde main.py
_ws_manager = None
_subscription_manager = None
_presenter = None
_settings = None
_event_bus = None


def init_routes(ws_manager, subscription_manager, presenter, settings, event_bus=None) -> None:
    """Inyectar dependencias desde main.py al arrancar."""
    global _ws_manager, _subscription_manager, _presenter, _settings, _event_bus
    _ws_manager = ws_manager
    _subscription_manager = subscription_manager
    _presenter = presenter
    _settings = settings
    _event_bus = event_bus


def _require_ready() -> None:
    if _subscription_manager is None:
        raise HTTPException(status_code=503, detail="Server not ready")


def parse_selection(symbol: str, interval: str, settings) -> SubscriptionKey:
    """Validar la selección contra lo configurado y construir la clave."""
    symbol = symbol.upper()
    if symbol not in settings.symbols:
        raise InvalidSelectionError(
            f"Símbolo '{symbol}' no válido", field="symbol", value=symbol,
        )
    if interval not in settings.intervals:
        raise InvalidSelectionError(
            f"Intervalo '{interval}' no válido", field="interval", value=interval,
        )
    try:
        return SubscriptionKey(symbol=symbol, interval=Interval(interval))
    except ValueError as e:
        raise InvalidSelectionError(
            f"Intervalo '{interval}' no soportado", field="interval", value=interval,
        ) from e


def _selection_response(changed: bool | None = None) -> dict:
    key = _subscription_manager.key
    return {
        "active": key.to_dict() if key else None,
        "changed": changed,
        "symbols": _settings.symbols,
        "intervals": _settings.intervals,
    }


# ─── WebSocket endpoint para streaming a frontend ─────────────────────

@router.websocket("/ws/series")
async def series_stream(websocket: WebSocket) -> None:
    """
    El frontend se conecta aquí para recibir eventos ``sample``,
    ``connection`` y ``subscription``. El broadcast lo maneja
    WebSocketManager; este handler solo gestiona el ciclo de vida.
    """
    if _ws_manager is None:
        await websocket.close(code=1011, reason="Server not ready")
        return

    await _ws_manager.connect(websocket)
    try:
        while True:
            try:
                data = await websocket.receive_text()
                logger.debug("Mensaje de cliente WS: %s", data[:100])
            except WebSocketDisconnect:
                break
    finally:
        _ws_manager.disconnect(websocket)


# ─── REST endpoints de estado ──────────────────────────────────────────

@router.get("/api/health", response_model=HealthResponse)
async def health_check() -> dict:
    """Health check para monitoreo."""
    return {"status": "ok", "service": "klinepulse"}


@router.get("/api/status", response_model=SystemStatusResponse)
async def get_status() -> dict:
    _require_ready()
    return {
        "subscription": _subscription_manager.stats,
        "series": _subscription_manager.buffer.stats(),
        "ws_clients": _ws_manager.client_count if _ws_manager else 0,
        "event_bus_subscribers": _event_bus.subscriber_count if _event_bus else 0,
    }


# ─── REST endpoints de selección ──────────────────────────────────────

@router.get("/api/selection", response_model=SelectionResponse)
async def get_selection() -> dict:
    _require_ready()
    return _selection_response()


@router.post("/api/selection", response_model=SelectionResponse)
async def set_selection(body: SelectionRequest) -> dict:
    """Cambiar símbolo/intervalo. Misma clave con conexión viva → no-op."""
    _require_ready()
    key = parse_selection(body.symbol, body.interval, _settings)
    changed = _subscription_manager.set_key(key)
    if changed:
        logger.info("Selección cambiada a: %s", key.stream_name)
    return _selection_response(changed)


@router.post("/api/selection/reconnect", response_model=SelectionResponse)
async def reconnect() -> dict:
    _require_ready()
    changed = _subscription_manager.force_reconnect()
    return _selection_response(changed)


# ─── REST endpoints de series ─────────────────────────────────────────

@router.get("/api/series/{symbol}", response_model=SeriesResponse)
async def get_series(symbol: str) -> dict:
    """Snapshot de la serie de un símbolo (vacía si no existe)."""
    _require_ready()
    buffer = _subscription_manager.buffer
    samples = buffer.snapshot(symbol.upper())
    return {
        "symbol": symbol.upper(),
        "count": len(samples),
        "capacity": buffer.capacity,
        "samples": [s.to_dict() for s in samples],
    }


@router.get("/api/chart")
async def get_chart() -> dict:
    """Payload de gráfico para la selección activa."""
    _require_ready()
    key = _subscription_manager.key
    if key is None:
        raise HTTPException(status_code=409, detail="Sin selección activa")
    samples = _subscription_manager.buffer.snapshot(key.symbol)
    return _presenter.build(key, samples)
