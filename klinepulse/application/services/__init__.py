"""Application services."""
from klinepulse.application.services.subscription_manager import (
    ConnectionState,
    SubscriptionManager,
)

__all__ = ["ConnectionState", "SubscriptionManager"]
