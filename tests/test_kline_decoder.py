"""Tests de decodificación de mensajes kline."""

import json
from decimal import Decimal

import pytest

from klinepulse.domain.exceptions.domain_errors import DecodeError
from klinepulse.domain.services.kline_decoder import KlineDecoder


def test_decodes_kline_event(make_kline):
    update = KlineDecoder.decode(make_kline(1_700_000_000_000, "2034.51"))

    assert update.symbol == "ETHUSDT"
    assert update.open_time == 1_700_000_000_000
    assert update.event_time == 1_700_000_000_500
    assert update.close == Decimal("2034.51")
    assert update.is_closed is False

    sample = update.to_sample()
    assert (sample.timestamp, sample.price) == (1_700_000_000_000, Decimal("2034.51"))


def test_accepts_bytes(make_kline):
    update = KlineDecoder.decode(make_kline(1, "10.0").encode())
    assert update.close == Decimal("10.0")


@pytest.mark.parametrize("event", ["trade", "aggTrade", "24hrTicker"])
def test_other_event_kinds_are_ignored(make_kline, event):
    assert KlineDecoder.decode(make_kline(1, "10.0", event=event)) is None


def test_message_without_event_kind_is_ignored():
    # Respuestas de control como {"result": null, "id": 1}
    assert KlineDecoder.decode(json.dumps({"result": None, "id": 1})) is None


@pytest.mark.parametrize("raw", [
    "not json",
    "[1, 2, 3]",
    json.dumps({"e": "kline"}),
    json.dumps({"e": "kline", "k": {"c": "1.0"}}),
    json.dumps({"e": "kline", "k": {"t": "1", "c": "1.0"}}),
    json.dumps({"e": "kline", "k": {"t": True, "c": "1.0"}}),
    json.dumps({"e": "kline", "k": {"t": 1}}),
    json.dumps({"e": "kline", "k": {"t": 1, "c": "abc"}}),
    json.dumps({"e": "kline", "k": {"t": 1, "c": "NaN"}}),
    "[" * 200_000,
    "{\"e\": " * 100_000,
])
def test_malformed_kline_raises_decode_error(raw):
    with pytest.raises(DecodeError) as exc_info:
        KlineDecoder.decode(raw)
    assert exc_info.value.code == "DECODE_ERROR"
