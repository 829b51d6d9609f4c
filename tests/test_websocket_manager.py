"""Tests del broadcast de eventos a clientes frontend."""

import asyncio
import json

from klinepulse.domain.events.domain_events import SampleAppended
from klinepulse.infrastructure.event_bus import EventBus, SAMPLE_TOPIC
from klinepulse.presentation.websocket.websocket_manager import WebSocketManager


class FakeClient:
    def __init__(self, fail: bool = False) -> None:
        self.sent: list[str] = []
        self.accepted = False
        self.fail = fail

    async def accept(self) -> None:
        self.accepted = True

    async def send_text(self, payload: str) -> None:
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(payload)

    async def close(self) -> None:
        pass


def test_serialize_uses_to_dict():
    event = SampleAppended(symbol="ETHUSDT", interval="1m", sample_time=1, price=10.0)
    payload = json.loads(WebSocketManager.serialize("sample", event))

    assert payload["type"] == "sample"
    assert payload["data"]["event_type"] == "SampleAppended"
    assert payload["data"]["price"] == 10.0


def test_broadcast_reaches_clients_and_drops_broken_ones():
    async def scenario():
        bus = EventBus(max_queue_size=10)
        ws_manager = WebSocketManager(bus)
        good, bad = FakeClient(), FakeClient(fail=True)

        await ws_manager.start()
        await ws_manager.connect(good)
        await ws_manager.connect(bad)

        bus.publish_nowait(
            SAMPLE_TOPIC,
            SampleAppended(symbol="ETHUSDT", interval="1m", sample_time=1, price=10.0),
        )
        for _ in range(20):
            await asyncio.sleep(0.01)
            if good.sent and ws_manager.client_count == 1:
                break

        count = ws_manager.client_count
        await ws_manager.stop()
        return good, count

    good, count = asyncio.run(scenario())

    assert good.accepted
    assert len(good.sent) == 1
    assert json.loads(good.sent[0])["data"]["sample_time"] == 1
    assert count == 1


def test_event_bus_drops_oldest_when_full():
    async def scenario():
        bus = EventBus(max_queue_size=2)
        queue = await bus.subscribe("t", "slow")
        for n in range(3):
            await bus.publish("t", n)
        return queue, bus

    queue, bus = asyncio.run(scenario())
    assert [queue.get_nowait(), queue.get_nowait()] == [1, 2]
    assert bus.dropped_events == 1


def test_event_bus_unsubscribe_by_topic_and_all():
    async def scenario():
        bus = EventBus(max_queue_size=2)
        await bus.subscribe("a", "c1")
        await bus.subscribe("a", "c2")
        await bus.subscribe("b", "c3")
        await bus.unsubscribe_all("a")
        after_topic = bus.subscriber_count
        await bus.unsubscribe_all()
        return after_topic, bus.subscriber_count

    assert asyncio.run(scenario()) == (1, 0)
