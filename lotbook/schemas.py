# lotbook/schemas.py

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional

from lotbook.enums import Role


@dataclass(frozen=True)
class Caller:
    """Who is calling, as resolved by the host's identity provider."""
    user_id: int
    role: Role

    def __post_init__(self):
        object.__setattr__(self, "role", Role(self.role))


def payload_from_dict(cls, data: Optional[Dict[str, Any]]):
    """
    Builds a payload dataclass from a JSON body.
    Unknown keys are dropped; type coercion/validation happens in the services.
    """
    data = data or {}
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class EntryInput:
    entry_date: Any
    entry_type: Any
    bags: Any
    packaging: Any
    variety: Any
    party_name: Any
    broker_name: Any
    location: Any


@dataclass
class GradingInput:
    moisture: Any
    cutting_1: Any
    cutting_2: Any
    bend_1: Any
    bend_2: Any
    reported_by: Any
    mix: Any = None
    mix_s: Any = None
    mix_l: Any = None
    kandu: Any = None
    oil: Any = None
    sk: Any = None
    grains_count: Any = None
    wb_r: Any = None
    wb_bk: Any = None
    wb_t: Any = None
    paddy_wb: Any = None


@dataclass
class CookingInput:
    status: Any
    remarks: Optional[str] = None


@dataclass
class OfferInput:
    base_rate_type: Any
    base_rate_unit: Any
    offer_base_rate_value: Any
    offer_rate: Any = None
    custom_divisor: Any = None
    egb_value: Any = None

    # delegation flags: False means a manager supplies the value later
    sute_enabled: bool = True
    moisture_enabled: bool = True
    hamali_enabled: bool = True
    brokerage_enabled: bool = True
    lf_enabled: bool = True

    sute_value: Any = None
    sute_unit: Any = None
    moisture_value: Any = None
    hamali_value: Any = None
    hamali_unit: Any = None
    brokerage_value: Any = None
    brokerage_unit: Any = None
    lf_value: Any = None
    lf_unit: Any = None

    remarks: Optional[str] = None


@dataclass
class FillMissingInput:
    """values / units keyed by delegated field name (sute, moisture, hamali, brokerage, lf)."""
    values: Dict[str, Any] = field(default_factory=dict)
    units: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AssignInput:
    supervisor_id: Any
    allotted_bags: Any = None


@dataclass
class TripInput:
    trip_date: Any
    lorry_number: Any
    bags: Any
    cutting_1: Any
    cutting_2: Any
    bend: Any
    remarks: Optional[str] = None


@dataclass
class WeightInput:
    wb_number: Any
    gross_weight: Any
    tare_weight: Any
    storage_kind: Any
    storage_target_id: Any = None
    moisture: Any = None


@dataclass
class CloseLotInput:
    reason: Optional[str] = None


@dataclass
class OwnerSettlementInput:
    """Anything left as None is taken from the entry's pricing offer."""
    sute_rate: Any = None
    sute_unit: Any = None
    base_rate_type: Any = None
    base_rate_unit: Any = None
    base_rate_value: Any = None
    custom_divisor: Any = None
    brokerage_rate: Any = None
    brokerage_unit: Any = None
    egb_rate: Any = None


@dataclass
class ManagerSettlementInput:
    lf_rate: Any = None
    lf_unit: Any = None
    hamali_rate: Any = None
    hamali_unit: Any = None
