# lotbook/services/pricing.py

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional

from lotbook.enums import BaseRateType, FieldOwner, RateUnit, SuteUnit
from lotbook.errors import FieldOwnershipViolation, ValidationError
from lotbook.services.validation import FieldChecker
from lotbook.utils.logging import get_logger

logger = get_logger("pricing")

DELEGATED_FIELDS = ("sute", "moisture", "hamali", "brokerage", "lf")

# delegated fields that carry a rate unit next to the value
UNIT_FIELDS = {
    "sute": SuteUnit,
    "hamali": RateUnit,
    "brokerage": RateUnit,
    "lf": RateUnit,
}

# moisture is a percentage, the rest are rates
_PERCENT_FIELDS = {"moisture"}


@dataclass(frozen=True)
class DelegatedField:
    """
    One numeric pricing field and who finalises it.
      owned_by=ADMIN   -> fixed by the admin on the offer ("enabled")
      owned_by=MANAGER -> left open by the admin; a manager supplies it later
    """
    value: Optional[Decimal]
    owned_by: FieldOwner
    unit: Optional[str] = None

    @property
    def enabled(self) -> bool:
        return self.owned_by == FieldOwner.ADMIN

    @property
    def satisfied(self) -> bool:
        return self.enabled or self.value is not None


def missing_fields(offer) -> List[str]:
    """Manager-owned fields still waiting for a value."""
    if offer is None:
        return list(DELEGATED_FIELDS)
    return [name for name in DELEGATED_FIELDS if not offer.field(name).satisfied]


def is_complete(offer) -> bool:
    """
    Completeness is per field: every one of the five fields is either
    admin-owned or already carries a manager-supplied value.
    """
    return offer is not None and not missing_fields(offer)


def egb_applicable(base_rate_type) -> bool:
    return BaseRateType(base_rate_type).is_loose


def custom_divisor_applicable(base_rate_type) -> bool:
    return BaseRateType(base_rate_type) == BaseRateType.MD_LOOSE


def _check_value(chk: FieldChecker, name: str, value) -> Optional[Decimal]:
    if name in _PERCENT_FIELDS:
        return chk.percentage(value, name)
    return chk.decimal(value, name, min_value=0)


def apply_offer(offer, data, user_id: int) -> None:
    """
    Writes an admin offer (OfferInput) onto a PricingOffer row.

    Rules:
      - a field with enabled=False belongs to the manager: the admin may not
        put a value in it (FieldOwnershipViolation)
      - egb_value only with a LOOSE base rate type
      - custom_divisor only (and always) with MD_LOOSE
      - re-setting the offer keeps values a manager already supplied for
        fields that stay manager-owned
    """
    for name in DELEGATED_FIELDS:
        enabled = bool(getattr(data, f"{name}_enabled"))
        if not enabled and getattr(data, f"{name}_value") is not None:
            raise FieldOwnershipViolation(
                f"'{name}' is left to the manager; the admin cannot set its value",
                {"field": name},
            )

    chk = FieldChecker()

    rate_type = chk.choice(data.base_rate_type, BaseRateType, "base_rate_type")
    rate_unit = chk.choice(data.base_rate_unit, RateUnit, "base_rate_unit")
    base_value = chk.decimal(data.offer_base_rate_value, "offer_base_rate_value", required=True, positive=True)
    offer_rate = chk.decimal(data.offer_rate, "offer_rate", min_value=0)

    custom_divisor = None
    if rate_type is not None:
        if custom_divisor_applicable(rate_type):
            custom_divisor = chk.decimal(
                data.custom_divisor, "custom_divisor", required=True, min_value=1, max_value=1000
            )
        elif data.custom_divisor is not None:
            chk.add("'custom_divisor' only applies to MD_LOOSE")

    egb_value = None
    if rate_type is not None:
        if egb_applicable(rate_type):
            egb_value = chk.decimal(data.egb_value, "egb_value", min_value=0)
        elif data.egb_value is not None:
            chk.add("'egb_value' only applies to LOOSE rate types")

    fields: Dict[str, DelegatedField] = {}
    for name in DELEGATED_FIELDS:
        enabled = bool(getattr(data, f"{name}_enabled"))
        unit = None
        if name in UNIT_FIELDS:
            unit_in = getattr(data, f"{name}_unit")
            if unit_in is not None:
                parsed = chk.choice(unit_in, UNIT_FIELDS[name], f"{name}_unit")
                unit = parsed.value if parsed else None

        if enabled:
            value = _check_value(chk, name, getattr(data, f"{name}_value"))
            fields[name] = DelegatedField(value=value, owned_by=FieldOwner.ADMIN, unit=unit)
        else:
            prev = offer.field(name) if offer.id is not None else None
            if prev is not None and not prev.enabled and prev.value is not None:
                fields[name] = prev
            else:
                fields[name] = DelegatedField(value=None, owned_by=FieldOwner.MANAGER, unit=unit)

    chk.raise_if_errors()

    offer.base_rate_type = rate_type.value
    offer.base_rate_unit = rate_unit.value
    offer.offer_base_rate_value = base_value
    offer.offer_rate = offer_rate
    offer.custom_divisor = custom_divisor
    offer.egb_value = egb_value
    offer.remarks = data.remarks
    offer.set_by_user_id = user_id
    for name, f in fields.items():
        offer.set_field(name, f)

    logger.info(
        f"Offer set entry={offer.entry_id} type={offer.base_rate_type} "
        f"manager_fields={[n for n, f in fields.items() if not f.enabled]}"
    )


def apply_fill_missing(offer, data, user_id: int) -> List[str]:
    """
    Manager write of the fields the admin left open (FillMissingInput).
    Any field the admin owns is rejected, even with an unchanged value, and
    a field a manager already supplied cannot be supplied again.
    """
    for key, raw in (("values", data.values), ("units", data.units)):
        if raw is not None and not isinstance(raw, dict):
            raise ValidationError(f"'{key}' must be an object of field -> value")
    values = dict(data.values or {})
    units = dict(data.units or {})

    unknown = [k for k in list(values) + list(units) if k not in DELEGATED_FIELDS]
    if unknown:
        raise ValidationError([f"unknown pricing field '{k}'" for k in sorted(set(unknown))])
    if not values:
        raise ValidationError("no values to fill")

    for name in values:
        current = offer.field(name)
        if current.enabled:
            raise FieldOwnershipViolation(
                f"'{name}' was finalised by the admin; a manager cannot write it",
                {"field": name},
            )
        if current.value is not None:
            raise FieldOwnershipViolation(
                f"'{name}' was already supplied by a manager",
                {"field": name},
            )

    orphan_units = [k for k in units if k not in values]
    chk = FieldChecker()
    for k in orphan_units:
        chk.add(f"'{k}' unit given without a value")

    updates: Dict[str, DelegatedField] = {}
    for name, raw in values.items():
        value = _check_value(chk, name, raw)
        if raw is None or raw == "":
            chk.add(f"'{name}' is required")
        unit = offer.field(name).unit
        if name in UNIT_FIELDS and units.get(name) is not None:
            parsed = chk.choice(units[name], UNIT_FIELDS[name], f"{name}_unit")
            unit = parsed.value if parsed else unit
        updates[name] = DelegatedField(value=value, owned_by=FieldOwner.MANAGER, unit=unit)

    chk.raise_if_errors()

    for name, f in updates.items():
        offer.set_field(name, f)
    offer.filled_by_user_id = user_id

    filled = sorted(updates)
    logger.info(f"Offer fill entry={offer.entry_id} fields={filled} missing={missing_fields(offer)}")
    return filled
