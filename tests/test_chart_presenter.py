"""Tests del formato de gráfico."""

from decimal import Decimal

from klinepulse.domain.value_objects.sample import Sample
from klinepulse.domain.value_objects.subscription_key import SubscriptionKey
from klinepulse.presentation.chart.chart_presenter import ChartPresenter


def test_builds_line_chart_payload():
    key = SubscriptionKey.of("ETHUSDT", "3m")
    samples = [
        Sample(timestamp=0, price=Decimal("10.0")),
        Sample(timestamp=3_723_000, price=Decimal("10.5")),  # 01:02:03 UTC
    ]

    chart = ChartPresenter().build(key, samples)

    assert chart["title"] == "ETHUSDT Price Chart (3m)"
    assert chart["labels"] == ["00:00:00", "01:02:03"]
    dataset = chart["datasets"][0]
    assert dataset["label"] == "ETHUSDT"
    assert dataset["data"] == [10.0, 10.5]
    assert dataset["borderColor"] == "rgb(75, 192, 192)"
    assert dataset["tension"] == 0.1


def test_empty_series_gives_empty_chart():
    chart = ChartPresenter().build(SubscriptionKey.of("DOTUSDT", "5m"), ())
    assert chart["labels"] == []
    assert chart["datasets"][0]["data"] == []
