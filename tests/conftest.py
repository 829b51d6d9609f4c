"""Fixtures compartidas: transporte falso y mensajes kline de ejemplo."""

from __future__ import annotations

import json
from typing import Optional

import pytest

from klinepulse.application.ports.stream_transport import IConnectionHandle, IStreamTransport
from klinepulse.application.services.subscription_manager import SubscriptionManager
from klinepulse.infrastructure.event_bus import EventBus
from klinepulse.state.series_buffer import SeriesBuffer

BASE_URL = "wss://stream.binance.com:9443/ws"


class FakeHandle(IConnectionHandle):
    """Handle controlado por el test: entrega mensajes aunque esté cerrado."""

    def __init__(self, url, on_open, on_message, on_close):
        self._url = url
        self._on_open = on_open
        self._on_message = on_message
        self._on_close = on_close
        self._closed = False
        self.close_calls = 0

    @property
    def url(self) -> str:
        return self._url

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True
        self.close_calls += 1

    def ack(self) -> None:
        self._on_open()

    def deliver(self, raw) -> None:
        self._on_message(raw)

    def fail(self, exc: Optional[BaseException] = None) -> None:
        self._on_close(exc)


class FakeTransport(IStreamTransport):
    def __init__(self) -> None:
        self.handles: list[FakeHandle] = []

    def open(self, url, on_open, on_message, on_close) -> FakeHandle:
        handle = FakeHandle(url, on_open, on_message, on_close)
        self.handles.append(handle)
        return handle

    @property
    def opens(self) -> int:
        return len(self.handles)

    @property
    def closes(self) -> int:
        return sum(h.close_calls for h in self.handles)

    @property
    def last(self) -> FakeHandle:
        return self.handles[-1]


def kline_message(open_time: int, close: str, symbol: str = "ETHUSDT", event: str = "kline") -> str:
    return json.dumps({
        "e": event,
        "E": open_time + 500,
        "s": symbol,
        "k": {
            "t": open_time,
            "T": open_time + 59_999,
            "s": symbol,
            "i": "1m",
            "o": "0.0010",
            "c": close,
            "h": "0.0025",
            "l": "0.0015",
            "v": "1000",
            "x": False,
        },
    })


@pytest.fixture
def make_kline():
    return kline_message


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def buffer() -> SeriesBuffer:
    return SeriesBuffer(capacity=100)


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus(max_queue_size=100)


@pytest.fixture
def manager(transport, buffer, event_bus) -> SubscriptionManager:
    return SubscriptionManager(
        transport=transport,
        buffer=buffer,
        base_url=BASE_URL,
        event_bus=event_bus,
    )
