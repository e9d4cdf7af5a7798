# lotbook/services/delivery.py

from __future__ import annotations

from typing import Any, Dict, Iterable

from lotbook.enums import StorageKind, TRIP_STAGES, WorkflowStatus
from lotbook.errors import InvalidTransition, ValidationError
from lotbook.services.validation import FieldChecker
from lotbook.utils.money import money
from lotbook.utils.strings import normalize_lorry_number


def trip_stage(trip) -> WorkflowStatus:
    weight = trip.weight
    if weight is None:
        return WorkflowStatus.DELIVERING
    if weight.settlement is None:
        return WorkflowStatus.WEIGHED
    if not weight.settlement.has_manager_phase:
        return WorkflowStatus.OWNER_SETTLED
    return WorkflowStatus.MANAGER_SETTLED


def aggregate_status(stages: Iterable[WorkflowStatus]) -> WorkflowStatus:
    """
    Entry status over its N trips = the lowest trip stage.
      no trips                  -> ALLOTTED
      all trips MANAGER_SETTLED -> REVIEW
    A trip recorded later drops the entry back to DELIVERING.
    """
    stages = list(stages)
    if not stages:
        return WorkflowStatus.ALLOTTED
    lowest = min(stages, key=TRIP_STAGES.index)
    if lowest == WorkflowStatus.MANAGER_SETTLED:
        return WorkflowStatus.REVIEW
    return lowest


def entry_delivery_status(allotment) -> WorkflowStatus:
    return aggregate_status(trip_stage(t) for t in allotment.trips)


def validate_assignment(data, entry_bags: int) -> Dict[str, Any]:
    chk = FieldChecker()
    supervisor_id = chk.positive_int(data.supervisor_id, "supervisor_id")

    allotted = entry_bags
    if data.allotted_bags is not None:
        allotted = chk.positive_int(data.allotted_bags, "allotted_bags")
        if allotted is not None and allotted > entry_bags:
            chk.add(f"'allotted_bags' cannot exceed the entry's {entry_bags} bags")

    chk.raise_if_errors()
    return {"supervisor_id": supervisor_id, "allotted_bags": allotted}


def validate_trip(data, allotment) -> Dict[str, Any]:
    """
    One more lorry for the lot. Earlier trips need not be finished, but the
    lot must be open and the bags must fit in what is still allotted.
    """
    if allotment.is_closed:
        raise InvalidTransition(
            "lot is closed; no further trips can be recorded",
            {"lot_allotment_id": allotment.id},
        )

    chk = FieldChecker()
    values = {
        "trip_date": chk.date(data.trip_date, "trip_date"),
        "lorry_number": normalize_lorry_number(chk.required_text(data.lorry_number, "lorry_number")),
        "bags": chk.positive_int(data.bags, "bags"),
        "cutting_1": chk.percentage(data.cutting_1, "cutting_1", required=True),
        "cutting_2": chk.percentage(data.cutting_2, "cutting_2", required=True),
        "bend": chk.percentage(data.bend, "bend", required=True),
        "remarks": (data.remarks or "").strip() or None,
    }

    remaining = allotment.remaining_bags
    if values["bags"] is not None and values["bags"] > remaining:
        chk.add(f"cannot deliver {values['bags']} bags; only {remaining} bags remaining")

    chk.raise_if_errors()
    return values


def validate_weight(data) -> Dict[str, Any]:
    chk = FieldChecker()
    gross = chk.decimal(data.gross_weight, "gross_weight", required=True, positive=True)
    tare = chk.decimal(data.tare_weight, "tare_weight", required=True, min_value=0)
    kind = chk.choice(data.storage_kind, StorageKind, "storage_kind")

    values = {
        "wb_number": chk.required_text(data.wb_number, "wb_number"),
        "moisture": chk.percentage(data.moisture, "moisture"),
        "storage_kind": kind,
        "storage_target_id": None,
    }
    if data.storage_target_id not in (None, ""):
        values["storage_target_id"] = chk.positive_int(data.storage_target_id, "storage_target_id")

    if gross is not None and tare is not None and tare >= gross:
        chk.add("'tare_weight' must be less than 'gross_weight'")

    chk.raise_if_errors()

    values["gross_weight"] = money(gross)
    values["tare_weight"] = money(tare)
    values["net_weight"] = money(gross - tare)
    return values


def delivery_progress(allotment) -> Dict[str, Any]:
    allotted = allotment.allotted_bags
    delivered = allotment.delivered_bags
    return {
        "lot_allotment_id": allotment.id,
        "supervisor_id": allotment.supervisor_id,
        "allotted_bags": allotted,
        "delivered_bags": delivered,
        "remaining_bags": allotment.remaining_bags,
        "progress_pct": round(delivered / allotted * 100, 2) if allotted else 0,
        "trips": len(allotment.trips),
        "closed": allotment.is_closed,
        "trip_stages": {t.id: trip_stage(t).value for t in allotment.trips},
    }
