# lotbook/services/settlement.py

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from lotbook.enums import BaseRateType, RateUnit, SuteUnit
from lotbook.errors import ValidationError
from lotbook.services.validation import FieldChecker
from lotbook.utils.money import ZERO, money

BAG_KG = Decimal("75")
QUINTAL_KG = Decimal("100")
TON_KG = Decimal("1000")


@dataclass(frozen=True)
class OwnerTerms:
    sute_rate: Decimal
    sute_unit: SuteUnit
    base_rate_type: BaseRateType
    base_rate_unit: RateUnit
    base_rate_value: Decimal
    custom_divisor: Optional[Decimal]
    brokerage_rate: Decimal
    brokerage_unit: RateUnit
    egb_rate: Optional[Decimal]


@dataclass(frozen=True)
class OwnerPhaseResult:
    total_sute: Decimal
    sute_net_weight: Decimal
    divisor: Decimal
    base_rate_total: Decimal
    brokerage_total: Decimal
    egb_total: Decimal
    owner_total: Decimal
    average: Decimal


@dataclass(frozen=True)
class ManagerTerms:
    lf_rate: Decimal
    lf_unit: RateUnit
    hamali_rate: Decimal
    hamali_unit: RateUnit


@dataclass(frozen=True)
class ManagerPhaseResult:
    lf_total: Decimal
    hamali_total: Decimal
    grand_total: Decimal
    average: Decimal


def _first(*values):
    for v in values:
        if v is not None and v != "":
            return v
    return None


def _average(total: Decimal, sute_net_weight: Decimal) -> Decimal:
    # rupees per kg of sute net weight
    if sute_net_weight <= 0:
        return money(ZERO)
    return money(total / sute_net_weight)


def _per_bag_or_weight(rate: Decimal, unit: RateUnit, bags: int, weight: Decimal, divisor: Decimal) -> Decimal:
    if unit == RateUnit.PER_BAG:
        return money(rate * bags)
    return money((weight / divisor) * rate)


def compute_owner_phase(bags: int, net_weight: Decimal, terms: OwnerTerms) -> OwnerPhaseResult:
    """
    Owner phase of one weight record.

      totalSute     = PER_BAG ? rate*bags : (net/1000)*rate
      suteNetWeight = net - totalSute              (weight basis only)
      divisor       = MD_LOOSE ? customDivisor : (PER_BAG ? 75 : 100)
      baseTotal     = (suteNetWeight/divisor) * baseRateValue
      brokerTotal   = PER_BAG ? rate*bags : (net/brokerDivisor)*rate
                      brokerDivisor = MD_LOOSE ? customDivisor : 100
      egbTotal      = LOOSE ? egbRate*bags : 0
      ownerTotal    = baseTotal + brokerTotal + egbTotal   (sute never enters money)

    Every component is rounded to two decimals before it is summed.
    """
    net_weight = Decimal(net_weight)

    if terms.sute_unit == SuteUnit.PER_BAG:
        total_sute = money(terms.sute_rate * bags)
    else:
        total_sute = money((net_weight / TON_KG) * terms.sute_rate)

    sute_net_weight = money(net_weight - total_sute)
    if sute_net_weight < 0:
        raise ValidationError("sute net weight cannot be negative")

    if terms.base_rate_type == BaseRateType.MD_LOOSE:
        if not terms.custom_divisor or terms.custom_divisor <= 0:
            raise ValidationError("'custom_divisor' is required for MD_LOOSE")
        divisor = Decimal(terms.custom_divisor)
        broker_divisor = divisor
    else:
        divisor = BAG_KG if terms.base_rate_unit == RateUnit.PER_BAG else QUINTAL_KG
        broker_divisor = QUINTAL_KG

    base_rate_total = money((sute_net_weight / divisor) * terms.base_rate_value)
    brokerage_total = _per_bag_or_weight(
        terms.brokerage_rate, terms.brokerage_unit, bags, net_weight, broker_divisor
    )

    if terms.base_rate_type.is_loose and terms.egb_rate is not None:
        egb_total = money(terms.egb_rate * bags)
    else:
        egb_total = money(ZERO)

    owner_total = base_rate_total + brokerage_total + egb_total

    return OwnerPhaseResult(
        total_sute=total_sute,
        sute_net_weight=sute_net_weight,
        divisor=divisor,
        base_rate_total=base_rate_total,
        brokerage_total=brokerage_total,
        egb_total=egb_total,
        owner_total=owner_total,
        average=_average(owner_total, sute_net_weight),
    )


def compute_manager_phase(
    bags: int,
    net_weight: Decimal,
    owner_total: Decimal,
    sute_net_weight: Decimal,
    terms: ManagerTerms,
) -> ManagerPhaseResult:
    """
      lfTotal     = PER_BAG ? rate*bags : (net/100)*rate
      hamaliTotal = PER_BAG ? rate*bags : (net/100)*rate
      grandTotal  = ownerTotal + lfTotal + hamaliTotal
      average     = suteNetWeight > 0 ? grandTotal/suteNetWeight : 0
    """
    net_weight = Decimal(net_weight)
    lf_total = _per_bag_or_weight(terms.lf_rate, terms.lf_unit, bags, net_weight, QUINTAL_KG)
    hamali_total = _per_bag_or_weight(terms.hamali_rate, terms.hamali_unit, bags, net_weight, QUINTAL_KG)

    grand_total = Decimal(owner_total) + lf_total + hamali_total

    return ManagerPhaseResult(
        lf_total=lf_total,
        hamali_total=hamali_total,
        grand_total=grand_total,
        average=_average(grand_total, Decimal(sute_net_weight)),
    )


def resolve_owner_terms(data, offer) -> OwnerTerms:
    """
    Owner input (OwnerSettlementInput) completed with the pricing offer:
    anything the owner leaves as None is taken from the offer.
    """
    chk = FieldChecker()

    rate_type = chk.choice(
        _first(data.base_rate_type, getattr(offer, "base_rate_type", None)), BaseRateType, "base_rate_type"
    )
    rate_unit = chk.choice(
        _first(data.base_rate_unit, getattr(offer, "base_rate_unit", None)), RateUnit, "base_rate_unit"
    )
    base_value = chk.decimal(
        _first(data.base_rate_value, getattr(offer, "offer_base_rate_value", None)),
        "base_rate_value",
        required=True,
        positive=True,
    )

    sute_rate = chk.decimal(_first(data.sute_rate, getattr(offer, "sute_value", None), 0), "sute_rate", min_value=0)
    sute_unit = chk.choice(
        _first(data.sute_unit, getattr(offer, "sute_unit", None), SuteUnit.PER_BAG.value), SuteUnit, "sute_unit"
    )

    brokerage_rate = chk.decimal(
        _first(data.brokerage_rate, getattr(offer, "brokerage_value", None), 0), "brokerage_rate", min_value=0
    )
    brokerage_unit = chk.choice(
        _first(data.brokerage_unit, getattr(offer, "brokerage_unit", None), RateUnit.PER_BAG.value),
        RateUnit,
        "brokerage_unit",
    )

    custom_divisor = None
    egb_rate = None
    if rate_type is not None:
        if rate_type == BaseRateType.MD_LOOSE:
            custom_divisor = chk.decimal(
                _first(data.custom_divisor, getattr(offer, "custom_divisor", None)),
                "custom_divisor",
                required=True,
                min_value=1,
                max_value=1000,
            )
        elif data.custom_divisor is not None:
            chk.add("'custom_divisor' only applies to MD_LOOSE")

        if rate_type.is_loose:
            egb_rate = chk.decimal(_first(data.egb_rate, getattr(offer, "egb_value", None)), "egb_rate", min_value=0)
        elif data.egb_rate is not None:
            chk.add("'egb_rate' only applies to LOOSE rate types")

    chk.raise_if_errors()

    return OwnerTerms(
        sute_rate=sute_rate,
        sute_unit=sute_unit,
        base_rate_type=rate_type,
        base_rate_unit=rate_unit,
        base_rate_value=base_value,
        custom_divisor=custom_divisor,
        brokerage_rate=brokerage_rate,
        brokerage_unit=brokerage_unit,
        egb_rate=egb_rate,
    )


def resolve_manager_terms(data, offer) -> ManagerTerms:
    chk = FieldChecker()

    lf_rate = chk.decimal(_first(data.lf_rate, getattr(offer, "lf_value", None), 0), "lf_rate", min_value=0)
    lf_unit = chk.choice(
        _first(data.lf_unit, getattr(offer, "lf_unit", None), RateUnit.PER_BAG.value), RateUnit, "lf_unit"
    )
    hamali_rate = chk.decimal(
        _first(data.hamali_rate, getattr(offer, "hamali_value", None), 0), "hamali_rate", min_value=0
    )
    hamali_unit = chk.choice(
        _first(data.hamali_unit, getattr(offer, "hamali_unit", None), RateUnit.PER_BAG.value), RateUnit, "hamali_unit"
    )

    chk.raise_if_errors()
    return ManagerTerms(lf_rate=lf_rate, lf_unit=lf_unit, hamali_rate=hamali_rate, hamali_unit=hamali_unit)


def review_summary(settlements: Iterable) -> dict:
    """
    Totals over every trip of a lot for the final review.
    The average uses the same scale as a single settlement (per kg of sute net weight).
    """
    trips = 0
    total_bags = 0
    total_net = ZERO
    total_sute_net = ZERO
    total_amount = ZERO

    for s in settlements:
        trips += 1
        total_bags += s.weight_record.bags
        total_net += Decimal(s.weight_record.net_weight)
        total_sute_net += Decimal(s.sute_net_weight)
        total_amount += Decimal(s.total_amount)

    return {
        "trips": trips,
        "total_bags": total_bags,
        "total_net_weight": str(money(total_net)),
        "total_sute_net_weight": str(money(total_sute_net)),
        "total_amount": str(money(total_amount)),
        "average": str(_average(total_amount, total_sute_net)),
    }
