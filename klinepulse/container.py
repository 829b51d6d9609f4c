"""
Dependency Injection Container.

Gestiona las instancias de servicios, transporte y estado de la aplicación.
Este contenedor vive en la capa más externa y es el único lugar donde se
crean dependencias concretas.
"""

from dataclasses import dataclass, field
from typing import Optional

from klinepulse.application.ports.stream_transport import IStreamTransport
from klinepulse.application.services.subscription_manager import SubscriptionManager
from klinepulse.infrastructure.event_bus import EventBus
from klinepulse.presentation.chart.chart_presenter import ChartPresenter
from klinepulse.presentation.websocket.websocket_manager import WebSocketManager
from klinepulse.shared.config.settings import Settings
from klinepulse.state.series_buffer import SeriesBuffer


@dataclass
class Container:
    """
    Contenedor de Inyección de Dependencias.

    Cada dependencia se crea perezosamente la primera vez que se pide
    y se comparte después (singleton por contenedor).
    """

    # Configuración
    settings: Settings = field(default_factory=Settings)

    _event_bus: Optional[EventBus] = None
    _series_buffer: Optional[SeriesBuffer] = None
    _transport: Optional[IStreamTransport] = None
    _subscription_manager: Optional[SubscriptionManager] = None
    _presenter: Optional[ChartPresenter] = None
    _ws_manager: Optional[WebSocketManager] = None

    # ==================== Infraestructura ====================

    @property
    def event_bus(self) -> EventBus:
        if self._event_bus is None:
            self._event_bus = EventBus(self.settings.event_bus_max_queue_size)
        return self._event_bus

    @property
    def transport(self) -> IStreamTransport:
        """Obtiene el transporte en vivo (Binance por defecto)."""
        if self._transport is None:
            # Import aquí: websockets solo se carga si se usa el transporte real
            from klinepulse.infrastructure.external.binance_transport import BinanceStreamTransport
            self._transport = BinanceStreamTransport(self.settings)
        return self._transport

    # ==================== Estado y servicios ====================

    @property
    def series_buffer(self) -> SeriesBuffer:
        if self._series_buffer is None:
            self._series_buffer = SeriesBuffer(self.settings.series_capacity)
        return self._series_buffer

    @property
    def subscription_manager(self) -> SubscriptionManager:
        if self._subscription_manager is None:
            self._subscription_manager = SubscriptionManager(
                transport=self.transport,
                buffer=self.series_buffer,
                base_url=self.settings.binance_ws_url,
                event_bus=self.event_bus,
            )
        return self._subscription_manager

    # ==================== Presentación ====================

    @property
    def presenter(self) -> ChartPresenter:
        if self._presenter is None:
            self._presenter = ChartPresenter()
        return self._presenter

    @property
    def ws_manager(self) -> WebSocketManager:
        if self._ws_manager is None:
            self._ws_manager = WebSocketManager(self.event_bus)
        return self._ws_manager

    # ==================== Lifecycle ====================

    def reset(self) -> None:
        """Resetea todas las instancias (útil para tests)."""
        self._event_bus = None
        self._series_buffer = None
        self._transport = None
        self._subscription_manager = None
        self._presenter = None
        self._ws_manager = None

    def override(self, name: str, instance) -> None:
        """
        Override una dependencia (útil para tests con mocks).

        Args:
            name: Nombre de la dependencia (ej: 'transport')
            instance: Instancia a usar
        """
        attr_name = f"_{name}"
        if hasattr(self, attr_name):
            setattr(self, attr_name, instance)
        else:
            raise ValueError(f"Unknown dependency: {name}")


# ==================== Global Container ====================

_container: Optional[Container] = None


def get_container() -> Container:
    """Obtiene la instancia global del contenedor."""
    global _container
    if _container is None:
        _container = Container()
    return _container


def reset_container() -> None:
    """Resetea el contenedor global."""
    global _container
    if _container is not None:
        _container.reset()
    _container = None


def init_container(settings: Optional[Settings] = None) -> Container:
    """
    Inicializa el contenedor con configuración específica.

    Args:
        settings: Configuración opcional. Si es None, usa valores por defecto.
    """
    global _container
    if settings is None:
        settings = Settings()
    _container = Container(settings=settings)
    return _container
