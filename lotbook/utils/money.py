# lotbook/utils/money.py

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

CENTS = Decimal("0.01")
ZERO = Decimal("0")


def _finite(d: Decimal) -> Decimal:
    # JSON NaN / Infinity literals arrive as floats
    if not d.is_finite():
        raise ValueError(f"not a finite number: {d!r}")
    return d


def parse_money(value) -> Optional[Decimal]:
    """
    Converts values like '₹1,234.50', '1.234,50', '12,500', 'Rs 1200', 1200, 12.5 to Decimal.
      - None / '' / 'nan' -> None (field not supplied)
      - floats go through str() so 0.1 stays 0.1
      - a float NaN or infinity is rejected
      - anything left unparseable raises ValueError
    """
    if value is None:
        return None

    if isinstance(value, bool):
        raise ValueError(f"not a number: {value!r}")
    if isinstance(value, Decimal):
        return _finite(value)
    if isinstance(value, (int, float)):
        try:
            return _finite(Decimal(str(value)))
        except InvalidOperation:
            raise ValueError(f"not a number: {value!r}")

    s = str(value).strip()
    if s == "" or s.lower() in ("nan", "none", "null"):
        return None

    negative = False
    if s.startswith("-"):
        negative = True
        s = s[1:].strip()

    # Drop currency symbols and letters, keep digits and separators
    s = re.sub(r"[^\d,.]", "", s)
    if s == "":
        raise ValueError(f"not a number: {value!r}")

    # Separator normalisation:
    # 1) "1.234,56" -> thousands "." decimal ","
    # 2) "1,234.56" -> thousands "," decimal "."
    # 3) "1234.56" or "1234,56"
    if s.count(",") > 0 and s.count(".") > 0:
        if s.rfind(",") > s.rfind("."):
            s = s.replace(".", "").replace(",", ".")
        else:
            s = s.replace(",", "")
    elif s.count(",") == 1:
        # "12,500" is thousands, "12,5" is a decimal comma
        head, tail = s.split(",")
        if len(tail) == 3 and head:
            s = head + tail
        else:
            s = s.replace(",", ".")
    elif s.count(",") > 1:
        s = s.replace(",", "")
    elif s.count(".") > 1:
        s = s.replace(".", "")

    try:
        val = Decimal(s)
    except InvalidOperation:
        raise ValueError(f"not a number: {value!r}")
    return -val if negative else val


def quantize(value: Decimal, places: Decimal = CENTS) -> Decimal:
    return Decimal(value).quantize(places, rounding=ROUND_HALF_UP)


def money(value) -> Decimal:
    """Money and weights are persisted with two decimals, half-up."""
    if value is None:
        return ZERO.quantize(CENTS)
    return quantize(value)
