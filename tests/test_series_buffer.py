"""Tests del buffer acotado de series."""

from decimal import Decimal

import pytest

from klinepulse.domain.value_objects.sample import Sample
from klinepulse.state.series_buffer import SeriesBuffer


def _sample(n: int) -> Sample:
    return Sample(timestamp=n, price=Decimal(n))


def test_snapshot_unknown_symbol_is_empty(buffer):
    assert buffer.snapshot("ETHUSDT") == ()
    assert "ETHUSDT" not in buffer


def test_length_never_exceeds_capacity(buffer):
    for n in range(1, 251):
        buffer.append("ETHUSDT", _sample(n))
        assert len(buffer.snapshot("ETHUSDT")) <= 100


def test_overflow_keeps_last_samples_in_order(buffer):
    for n in range(1, 106):
        buffer.append("ETHUSDT", _sample(n))

    snap = buffer.snapshot("ETHUSDT")
    assert len(snap) == 100
    assert [s.timestamp for s in snap] == list(range(6, 106))


def test_duplicates_and_out_of_order_are_kept_as_received(buffer):
    for ts in (3, 1, 1, 2):
        buffer.append("ETHUSDT", _sample(ts))
    assert [s.timestamp for s in buffer.snapshot("ETHUSDT")] == [3, 1, 1, 2]


def test_symbols_are_never_merged(buffer):
    buffer.append("ETHUSDT", _sample(1))
    buffer.append("BNBUSDT", _sample(2))
    buffer.append("ETHUSDT", _sample(3))

    assert [s.timestamp for s in buffer.snapshot("ETHUSDT")] == [1, 3]
    assert [s.timestamp for s in buffer.snapshot("BNBUSDT")] == [2]
    assert sorted(buffer.symbols()) == ["BNBUSDT", "ETHUSDT"]


def test_snapshot_is_a_detached_copy(buffer):
    buffer.append("ETHUSDT", _sample(1))
    snap = buffer.snapshot("ETHUSDT")

    assert isinstance(snap, tuple)
    buffer.append("ETHUSDT", _sample(2))
    assert len(snap) == 1
    assert len(buffer.snapshot("ETHUSDT")) == 2


def test_samples_are_immutable():
    sample = _sample(1)
    with pytest.raises(AttributeError):
        sample.price = Decimal("2")


def test_custom_capacity_and_stats():
    small = SeriesBuffer(capacity=3)
    for n in range(5):
        small.append("DOTUSDT", _sample(n))

    assert [s.timestamp for s in small.snapshot("DOTUSDT")] == [2, 3, 4]
    assert small.stats() == {
        "capacity": 3,
        "total_appends": 5,
        "series": {"DOTUSDT": 3},
    }


def test_invalid_capacity_rejected():
    with pytest.raises(ValueError):
        SeriesBuffer(capacity=0)
