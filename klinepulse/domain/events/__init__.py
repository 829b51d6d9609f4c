"""Domain events."""
from klinepulse.domain.events.domain_events import (
    DomainEvent,
    SubscriptionChanged,
    ConnectionOpened,
    ConnectionLost,
    SampleAppended,
)

__all__ = [
    "DomainEvent",
    "SubscriptionChanged",
    "ConnectionOpened",
    "ConnectionLost",
    "SampleAppended",
]
