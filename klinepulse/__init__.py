"""
KlinePulse
==========
Serie de precios en vivo de Binance (streams kline) con buffer acotado
por símbolo y resuscripción inmediata al cambiar símbolo/intervalo.
"""

__version__ = "0.1.0"
