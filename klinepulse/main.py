"""
KlinePulse – Main Application Entry Point
============================================
Backend del gráfico de precios en vivo de Binance.

ARQUITECTURA DE ARRANQUE:
  1. Configurar logging
  2. Crear el contenedor (EventBus, SeriesBuffer, transporte, manager)
  3. FastAPI lifespan startup:
     a. Iniciar WebSocketManager (broadcast a frontend)
     b. Abrir la suscripción por defecto (symbol/interval de settings)
  4. FastAPI lifespan shutdown:
     a. teardown() del manager, cerrar transporte, detener broadcast

FLUJO DE DATOS:
  Binance WS → Transport → SubscriptionManager.on_message
       → KlineDecoder → SeriesBuffer (máx. N muestras por símbolo)
       → EventBus(sample) → WebSocketManager → Frontend
       → Frontend pide /api/chart → ChartPresenter(snapshot)

  uvicorn klinepulse.main:app --host 0.0.0.0 --port 8888
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from klinepulse.container import Container, init_container
from klinepulse.domain.exceptions.domain_errors import InvalidSelectionError
from klinepulse.domain.value_objects.subscription_key import SubscriptionKey
from klinepulse.presentation.api.routes import init_routes, router
from klinepulse.shared.logging.logger import get_logger, setup_logging

logger = get_logger("main")


def create_app(container: Optional[Container] = None) -> FastAPI:
    """Construye la app FastAPI sobre un contenedor (global si no se pasa)."""
    if container is None:
        container = init_container()
    settings = container.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("=" * 60)
        logger.info("  KlinePulse - Live Kline Chart")
        logger.info("  Endpoint: %s", settings.binance_ws_url)
        logger.info("  Símbolos: %s", ", ".join(settings.symbols))
        logger.info("  Intervalos: %s", ", ".join(settings.intervals))
        logger.info("  Buffer máximo: %d muestras por símbolo", settings.series_capacity)
        logger.info("=" * 60)

        init_routes(
            container.ws_manager,
            container.subscription_manager,
            container.presenter,
            settings,
            event_bus=container.event_bus,
        )

        await container.ws_manager.start()

        container.subscription_manager.set_key(
            SubscriptionKey.of(settings.default_symbol, settings.default_interval)
        )
        logger.info("✓ Todos los componentes iniciados correctamente")

        yield  # ← La app está corriendo aquí

        # ── SHUTDOWN ──
        logger.info("Iniciando shutdown...")
        container.subscription_manager.teardown()
        aclose = getattr(container.transport, "aclose", None)
        if aclose is not None:
            await aclose()
        await container.ws_manager.stop()
        await container.event_bus.unsubscribe_all()
        logger.info("✓ Shutdown completo")

    app = FastAPI(
        title="KlinePulse",
        description="Serie de precios en vivo (kline) de Binance con buffer acotado",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS para frontend local
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(InvalidSelectionError)
    async def invalid_selection_handler(request: Request, exc: InvalidSelectionError):
        return JSONResponse(status_code=400, content=exc.to_dict())

    app.include_router(router)
    return app


setup_logging()
app = create_app()


def run() -> None:
    """Entry point de consola: ``klinepulse``."""
    import uvicorn

    from klinepulse.container import get_container

    settings = get_container().settings
    setup_logging(settings.log_level.upper())
    uvicorn.run(
        "klinepulse.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
