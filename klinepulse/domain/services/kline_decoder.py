"""
KlinePulse – Domain Service: Kline Decoder
============================================
Traduce mensajes crudos del stream a ``KlineUpdate``.

CONTRATO:
- El payload es JSON con un campo ``e`` (tipo de evento).
- Solo ``e == "kline"`` se acepta → devuelve KlineUpdate.
- Cualquier otro tipo se ignora → devuelve None (NO es error).
- JSON inválido o campos ausentes/mal tipados → DecodeError.

Formato (campos usados):
    {"e": "kline", "E": 1700000000123, "s": "ETHUSDT",
     "k": {"t": 1700000000000, "c": "2034.51", "x": false, ...}}
"""

from __future__ import annotations

import json
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from klinepulse.domain.exceptions.domain_errors import DecodeError
from klinepulse.domain.value_objects.kline_update import KlineUpdate

KLINE_EVENT = "kline"


class KlineDecoder:
    """Decodificador stateless de mensajes kline."""

    @staticmethod
    def decode(raw: str | bytes) -> Optional[KlineUpdate]:
        """
        Decodifica un mensaje del stream.

        Args:
            raw: Texto o bytes recibidos del WebSocket

        Returns:
            KlineUpdate si el evento es ``kline``; None para otros tipos

        Raises:
            DecodeError: si el payload está malformado
        """
        try:
            data = json.loads(raw)
        # JSONDecodeError y UnicodeDecodeError son ValueError; el anidamiento
        # excesivo ("[" * N) agota la pila del parser con RecursionError
        except (ValueError, RecursionError, TypeError) as e:
            raise DecodeError(f"Mensaje no-JSON: {e}", raw=raw) from e

        if not isinstance(data, dict):
            raise DecodeError("El mensaje no es un objeto JSON", raw=raw)

        if data.get("e") != KLINE_EVENT:
            return None

        kline = data.get("k")
        if not isinstance(kline, dict):
            raise DecodeError("Evento kline sin objeto 'k'", raw=raw)

        return KlineUpdate(
            symbol=str(data.get("s") or kline.get("s") or ""),
            event_time=_as_int(data.get("E", 0), "E", raw),
            open_time=_as_int(kline.get("t"), "k.t", raw),
            close=_as_decimal(kline.get("c"), "k.c", raw),
            is_closed=bool(kline.get("x", False)),
        )


def _as_int(value: Any, name: str, raw: str | bytes) -> int:
    # bool es subclase de int: no es un timestamp válido
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(f"Campo '{name}' debe ser entero, recibido {value!r}", raw=raw)
    return value


def _as_decimal(value: Any, name: str, raw: str | bytes) -> Decimal:
    if not isinstance(value, (str, int, float)) or isinstance(value, bool):
        raise DecodeError(f"Campo '{name}' ausente o inválido: {value!r}", raw=raw)
    try:
        price = Decimal(str(value))
    except InvalidOperation as e:
        raise DecodeError(f"Campo '{name}' no es decimal: {value!r}", raw=raw) from e
    if not price.is_finite():
        raise DecodeError(f"Campo '{name}' no es finito: {value!r}", raw=raw)
    return price
