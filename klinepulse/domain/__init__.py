"""
KlinePulse – Domain Layer
===========================
Núcleo puro del sistema. CERO dependencias externas.

- value_objects/: SubscriptionKey, Interval, Sample, KlineUpdate
- services/: decodificación de mensajes kline
- events/: eventos de dominio
- exceptions/: excepciones de dominio
"""

from klinepulse.domain.value_objects.subscription_key import Interval, SubscriptionKey
from klinepulse.domain.value_objects.sample import Sample
from klinepulse.domain.value_objects.kline_update import KlineUpdate

__all__ = [
    "Interval",
    "SubscriptionKey",
    "Sample",
    "KlineUpdate",
]
