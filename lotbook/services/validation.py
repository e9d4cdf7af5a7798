# lotbook/services/validation.py

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import List, Optional, Type, TypeVar

from lotbook.errors import ValidationError
from lotbook.utils.dates import parse_date
from lotbook.utils.money import parse_money

E = TypeVar("E", bound=Enum)


class FieldChecker:
    """
    Collects every problem in a payload before failing, so the caller gets
    the full list in one ValidationError instead of one error per round trip.

        chk = FieldChecker()
        bags = chk.positive_int(data.bags, "bags")
        moisture = chk.decimal(data.moisture, "moisture", required=True, min_value=0, max_value=100)
        chk.raise_if_errors()
    """

    def __init__(self):
        self.errors: List[str] = []

    def add(self, message: str) -> None:
        self.errors.append(message)

    def required_text(self, value, name: str) -> str:
        s = "" if value is None else str(value).strip()
        if not s:
            self.add(f"'{name}' is required")
        return s

    def decimal(
        self,
        value,
        name: str,
        required: bool = False,
        min_value=None,
        max_value=None,
        positive: bool = False,
        places: int = 2,
    ) -> Optional[Decimal]:
        """
        Numbers are stored with `places` decimals; more precision than that
        is rejected rather than rounded so stored inputs reproduce stored totals.
        """
        try:
            d = parse_money(value)
        except ValueError:
            self.add(f"'{name}' must be a valid number")
            return None

        if d is None:
            if required:
                self.add(f"'{name}' is required")
            return None

        if d.normalize().as_tuple().exponent < -places:
            self.add(f"'{name}' allows at most {places} decimal places")

        if positive and d <= 0:
            self.add(f"'{name}' must be greater than 0")
        if min_value is not None and d < Decimal(str(min_value)):
            self.add(f"'{name}' must be at least {min_value}")
        if max_value is not None and d > Decimal(str(max_value)):
            self.add(f"'{name}' must be at most {max_value}")
        return d

    def percentage(self, value, name: str, required: bool = False) -> Optional[Decimal]:
        return self.decimal(value, name, required=required, min_value=0, max_value=100)

    def positive_int(self, value, name: str) -> Optional[int]:
        if value is None or isinstance(value, bool):
            self.add(f"'{name}' must be a positive integer")
            return None
        try:
            i = int(value)
        except (TypeError, ValueError):
            self.add(f"'{name}' must be a positive integer")
            return None
        if i != value and str(i) != str(value).strip():
            self.add(f"'{name}' must be a positive integer")
            return None
        if i <= 0:
            self.add(f"'{name}' must be a positive integer")
            return None
        return i

    def choice(self, value, enum_cls: Type[E], name: str, required: bool = True) -> Optional[E]:
        if value is None or value == "":
            if required:
                self.add(f"'{name}' is required")
            return None
        try:
            return enum_cls(value)
        except ValueError:
            allowed = ", ".join(m.value for m in enum_cls)
            self.add(f"'{name}' must be one of: {allowed}")
            return None

    def date(self, value, name: str, required: bool = True):
        d = parse_date(value)
        if d is None and (required or value not in (None, "")):
            self.add(f"'{name}' must be a valid date")
        return d

    def raise_if_errors(self) -> None:
        if self.errors:
            raise ValidationError(self.errors)
