"""Domain value objects."""
from klinepulse.domain.value_objects.kline_update import KlineUpdate
from klinepulse.domain.value_objects.sample import Sample
from klinepulse.domain.value_objects.subscription_key import Interval, SubscriptionKey

__all__ = ["Interval", "KlineUpdate", "Sample", "SubscriptionKey"]
