"""Tests del transporte WebSocket contra un servidor local."""

import asyncio
import socket

from websockets.asyncio.server import serve

from klinepulse.domain.exceptions.domain_errors import StreamConnectionError
from klinepulse.infrastructure.external.binance_transport import BinanceStreamTransport
from klinepulse.shared.config.settings import Settings


def _settings() -> Settings:
    return Settings(_env_file=None, ws_open_timeout=2.0, ws_close_timeout=1.0)


def _free_port() -> int:
    with socket.socket() as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class Recorder:
    def __init__(self) -> None:
        self.opened = asyncio.Event()
        self.closed = asyncio.Event()
        self.messages: list = []
        self.close_args: list = []

    def on_open(self) -> None:
        self.opened.set()

    def on_message(self, raw) -> None:
        self.messages.append(raw)

    def on_close(self, exc) -> None:
        self.close_args.append(exc)
        self.closed.set()


def test_forwards_frames_then_reports_server_close(make_kline):
    async def handler(ws):
        await ws.send(make_kline(1, "10.0"))
        await ws.send(make_kline(2, "10.5"))

    async def scenario():
        rec = Recorder()
        async with serve(handler, "127.0.0.1", 0) as server:
            port = server.sockets[0].getsockname()[1]
            transport = BinanceStreamTransport(_settings())
            handle = transport.open(
                f"ws://127.0.0.1:{port}/ethusdt@kline_1m",
                rec.on_open, rec.on_message, rec.on_close,
            )
            await asyncio.wait_for(rec.closed.wait(), timeout=5)
        return rec, handle

    rec, handle = asyncio.run(scenario())

    assert rec.opened.is_set()
    assert rec.messages == [make_kline(1, "10.0"), make_kline(2, "10.5")]
    assert len(rec.close_args) == 1
    assert handle.closed


def test_refused_connection_is_reported():
    async def scenario():
        rec = Recorder()
        transport = BinanceStreamTransport(_settings())
        transport.open(
            f"ws://127.0.0.1:{_free_port()}/ethusdt@kline_1m",
            rec.on_open, rec.on_message, rec.on_close,
        )
        await asyncio.wait_for(rec.closed.wait(), timeout=5)
        return rec

    rec = asyncio.run(scenario())

    assert not rec.opened.is_set()
    assert isinstance(rec.close_args[0], StreamConnectionError)
    assert rec.close_args[0].code == "CONNECTION_ERROR"


def test_close_cancels_without_reporting():
    async def handler(ws):
        await ws.wait_closed()

    async def scenario():
        rec = Recorder()
        async with serve(handler, "127.0.0.1", 0) as server:
            port = server.sockets[0].getsockname()[1]
            transport = BinanceStreamTransport(_settings())
            handle = transport.open(
                f"ws://127.0.0.1:{port}/ethusdt@kline_1m",
                rec.on_open, rec.on_message, rec.on_close,
            )
            await asyncio.wait_for(rec.opened.wait(), timeout=5)
            handle.close()
            await asyncio.sleep(0.1)
            await transport.aclose()
            active = transport.active_tasks
        return rec, handle, active

    rec, handle, active = asyncio.run(scenario())

    assert handle.closed
    assert rec.close_args == []
    assert active == 0


def test_callback_failure_is_reported_as_connection_error(make_kline):
    async def handler(ws):
        await ws.send(make_kline(1, "10.0"))
        await ws.wait_closed()

    def exploding(raw):
        raise RuntimeError("handler roto")

    async def scenario():
        rec = Recorder()
        async with serve(handler, "127.0.0.1", 0) as server:
            port = server.sockets[0].getsockname()[1]
            transport = BinanceStreamTransport(_settings())
            handle = transport.open(
                f"ws://127.0.0.1:{port}/ethusdt@kline_1m",
                rec.on_open, exploding, rec.on_close,
            )
            await asyncio.wait_for(rec.closed.wait(), timeout=5)
        return rec, handle

    rec, handle = asyncio.run(scenario())

    assert handle.closed
    assert isinstance(rec.close_args[0], StreamConnectionError)
    assert "handler roto" in rec.close_args[0].message
