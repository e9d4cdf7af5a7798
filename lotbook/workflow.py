# lotbook/workflow.py

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Dict, FrozenSet, List, Optional

from sqlalchemy.orm.exc import StaleDataError

from lotbook.enums import Role, WorkflowStatus
from lotbook.errors import (
    ConcurrentModification,
    IncompleteDelegation,
    InvalidTransition,
    NotFound,
    Unauthorized,
    WorkflowError,
)
from lotbook.extensions import db
from lotbook.models import (
    CookingResult,
    DeliveryTrip,
    Entry,
    GradingResult,
    LotAllotment,
    PricingOffer,
    Settlement,
    WeightRecord,
)
from lotbook.schemas import (
    AssignInput,
    Caller,
    CloseLotInput,
    CookingInput,
    EntryInput,
    FillMissingInput,
    GradingInput,
    ManagerSettlementInput,
    OfferInput,
    OwnerSettlementInput,
    TripInput,
    WeightInput,
)
from lotbook.services.audit import record_audit
from lotbook.services.delivery import (
    delivery_progress,
    entry_delivery_status,
    validate_assignment,
    validate_trip,
    validate_weight,
)
from lotbook.services.grading import validate_cooking, validate_grading
from lotbook.services.intake import validate_entry
from lotbook.services.lookups import check_storage_target
from lotbook.services.lot_decision import decide as decide_next, next_status_after_cooking, parse_decision
from lotbook.services.pricing import apply_fill_missing, apply_offer, is_complete, missing_fields
from lotbook.services.settlement import (
    compute_manager_phase,
    compute_owner_phase,
    resolve_manager_terms,
    resolve_owner_terms,
    review_summary as summarize_settlements,
)
from lotbook.utils.logging import get_logger

logger = get_logger("workflow")

S = WorkflowStatus

# Entry states in which at least one trip exists
_DELIVERY_STATES = frozenset({S.DELIVERING, S.WEIGHED, S.OWNER_SETTLED, S.MANAGER_SETTLED, S.REVIEW})

ROLE_ALLOWLIST: Dict[str, FrozenSet[Role]] = {
    "create_entry": frozenset({Role.STAFF, Role.MANAGER, Role.ADMIN}),
    "attach_grading": frozenset({Role.SUPERVISOR, Role.MANAGER, Role.ADMIN}),
    "update_grading": frozenset({Role.SUPERVISOR, Role.MANAGER, Role.ADMIN}),
    "decide": frozenset({Role.OWNER, Role.ADMIN}),
    "attach_cooking": frozenset({Role.OWNER, Role.ADMIN, Role.MANAGER}),
    "set_offer": frozenset({Role.ADMIN, Role.OWNER}),
    "fill_missing": frozenset({Role.MANAGER}),
    "assign_supervisor": frozenset({Role.MANAGER, Role.ADMIN}),
    "record_trip": frozenset({Role.SUPERVISOR, Role.ADMIN}),
    "record_weight": frozenset({Role.STAFF, Role.MANAGER, Role.ADMIN}),
    "close_lot": frozenset({Role.MANAGER, Role.ADMIN}),
    "settle_owner": frozenset({Role.OWNER, Role.ADMIN}),
    "settle_manager": frozenset({Role.MANAGER, Role.ADMIN}),
    "approve_review": frozenset({Role.ADMIN, Role.OWNER}),
}

# States the entry must be in for the operation to run.
# From ALLOTTED on, the entry state is the lowest stage over its trips, so
# per-trip operations accept every aggregate state that trip can sit under.
SOURCE_STATES: Dict[str, FrozenSet[WorkflowStatus]] = {
    "attach_grading": frozenset({S.INTAKE}),
    "update_grading": frozenset({S.GRADED}),
    "decide": frozenset({S.GRADED}),
    "attach_cooking": frozenset({S.COOKING}),
    "set_offer": frozenset({S.PRICING}),
    "fill_missing": frozenset({S.PRICING}),
    "assign_supervisor": frozenset({S.PRICING}),
    "record_trip": frozenset({S.ALLOTTED}) | _DELIVERY_STATES,
    "record_weight": frozenset({S.DELIVERING}),
    "close_lot": _DELIVERY_STATES,
    "settle_owner": frozenset({S.DELIVERING, S.WEIGHED}),
    "settle_manager": frozenset({S.DELIVERING, S.WEIGHED, S.OWNER_SETTLED}),
    "approve_review": frozenset({S.REVIEW}),
}


# ----------------------------
# guards
# ----------------------------

def _authorize(operation: str, caller: Caller) -> None:
    if caller.role not in ROLE_ALLOWLIST[operation]:
        raise Unauthorized(
            f"role '{caller.role.value}' may not call {operation}",
            {"operation": operation, "role": caller.role.value},
        )


def _check_state(operation: str, entry: Entry) -> None:
    if entry.status not in SOURCE_STATES[operation]:
        raise InvalidTransition(
            f"{operation} is not allowed while the entry is {entry.workflow_status}",
            {"operation": operation, "entry_id": entry.id, "status": entry.workflow_status},
        )


def _check_version(entry: Entry, expected_version) -> None:
    if expected_version is not None and int(expected_version) != entry.version:
        raise ConcurrentModification(
            f"entry {entry.id} is at version {entry.version}, caller expected {expected_version}",
            {"entry_id": entry.id, "version": entry.version, "expected_version": expected_version},
        )


def _lock_entry(entry_id: int) -> Entry:
    entry = db.session.get(Entry, entry_id, with_for_update=True, populate_existing=True)
    if entry is None:
        raise NotFound(f"entry {entry_id} does not exist", {"entry_id": entry_id})
    return entry


def _get(model, row_id, label: str):
    row = db.session.get(model, row_id)
    if row is None:
        raise NotFound(f"{label} {row_id} does not exist", {f"{label}_id": row_id})
    return row


def _lock_row(model, row_id, label: str):
    """
    Child rows are re-read under the entry lock; a copy loaded before the
    lock may predate a write that committed while we waited.
    """
    row = db.session.get(model, row_id, with_for_update=True, populate_existing=True)
    if row is None:
        raise NotFound(f"{label} {row_id} does not exist", {f"{label}_id": row_id})
    return row


@contextmanager
def _transaction(operation: str, caller: Caller, ref):
    """
    One operation = one transaction. Any failure rolls everything back;
    caller errors are logged as rejections, anything else with a traceback.
    """
    try:
        yield
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        logger.warning(
            f"{operation} rejected ref={ref} user={caller.user_id} role={caller.role.value}: {e.code} {e.message}"
        )
        raise
    except StaleDataError as e:
        db.session.rollback()
        logger.warning(f"{operation} lost a concurrent update ref={ref} user={caller.user_id}")
        raise ConcurrentModification(
            "the entry was modified by another request; reload and retry", {"ref": ref}
        ) from e
    except Exception:
        db.session.rollback()
        logger.exception(f"{operation} failed ref={ref} user={caller.user_id}")
        raise


def _run(
    operation: str,
    caller: Caller,
    entry_id: int,
    apply: Callable[[Entry], None],
    payload=None,
    expected_version=None,
) -> Entry:
    """
    Lock -> role -> state -> version -> mutate -> audit -> commit.
    A rejected check leaves the entry untouched.
    """
    with _transaction(operation, caller, entry_id):
        entry = _lock_entry(entry_id)
        _authorize(operation, caller)
        _check_state(operation, entry)
        _check_version(entry, expected_version)

        before = entry.status
        apply(entry)
        entry.touch()
        record_audit(entry, caller, operation, before, payload)

    logger.info(
        f"{operation} entry={entry.id} {before.value} -> {entry.workflow_status} "
        f"user={caller.user_id} role={caller.role.value}"
    )
    return entry


def _refresh_status(entry: Entry) -> None:
    entry.move_to(entry_delivery_status(entry.allotment))


# ----------------------------
# intake / grading / decision
# ----------------------------

def create_entry(caller: Caller, data: EntryInput) -> Entry:
    with _transaction("create_entry", caller, None):
        _authorize("create_entry", caller)
        values = validate_entry(data)

        entry = Entry(created_by_user_id=caller.user_id, workflow_status=S.INTAKE.value, **values)
        db.session.add(entry)
        db.session.flush()
        record_audit(entry, caller, "create_entry", None, data)

    logger.info(f"create_entry entry={entry.id} variety={entry.variety} bags={entry.bags} user={caller.user_id}")
    return entry


def attach_grading(caller: Caller, entry_id: int, data: GradingInput, expected_version=None) -> Entry:
    def apply(entry: Entry):
        values = validate_grading(data)
        db.session.add(GradingResult(entry=entry, reported_by_user_id=caller.user_id, **values))
        entry.move_to(S.GRADED)

    return _run("attach_grading", caller, entry_id, apply, data, expected_version)


def update_grading(caller: Caller, entry_id: int, data: GradingInput, expected_version=None) -> Entry:
    def apply(entry: Entry):
        values = validate_grading(data)
        grading = entry.grading
        for k, v in values.items():
            setattr(grading, k, v)
        grading.reported_by_user_id = caller.user_id
        grading.updated_at = datetime.utcnow()

    return _run("update_grading", caller, entry_id, apply, data, expected_version)


def decide(caller: Caller, entry_id: int, decision, expected_version=None) -> Entry:
    def apply(entry: Entry):
        d = parse_decision(decision)
        next_status = decide_next(entry, d)
        entry.lot_decision = d.value
        entry.move_to(next_status)

    return _run("decide", caller, entry_id, apply, {"decision": decision}, expected_version)


def attach_cooking(caller: Caller, entry_id: int, data: CookingInput, expected_version=None) -> Entry:
    def apply(entry: Entry):
        values = validate_cooking(data)
        cooking = entry.cooking
        if cooking is None:
            db.session.add(CookingResult(entry=entry, reviewed_by_user_id=caller.user_id, **values))
        else:
            # a RECHECK report is replaced by the next one
            cooking.status = values["status"]
            cooking.remarks = values["remarks"]
            cooking.reviewed_by_user_id = caller.user_id
        entry.move_to(next_status_after_cooking(values["status"]))

    return _run("attach_cooking", caller, entry_id, apply, data, expected_version)


# ----------------------------
# pricing
# ----------------------------

def set_offer(caller: Caller, entry_id: int, data: OfferInput, expected_version=None) -> Entry:
    def apply(entry: Entry):
        offer = entry.offer
        if offer is None:
            offer = PricingOffer(entry_id=entry.id)
            apply_offer(offer, data, caller.user_id)
            offer.entry = entry
            db.session.add(offer)
        else:
            apply_offer(offer, data, caller.user_id)
            offer.updated_at = datetime.utcnow()

    return _run("set_offer", caller, entry_id, apply, data, expected_version)


def fill_missing(caller: Caller, entry_id: int, data: FillMissingInput, expected_version=None) -> Entry:
    def apply(entry: Entry):
        offer = entry.offer
        if offer is None:
            raise InvalidTransition("no pricing offer to fill yet", {"entry_id": entry.id})
        apply_fill_missing(offer, data, caller.user_id)
        offer.updated_at = datetime.utcnow()

    return _run("fill_missing", caller, entry_id, apply, data, expected_version)


def assign_supervisor(caller: Caller, entry_id: int, data: AssignInput, expected_version=None) -> Entry:
    def apply(entry: Entry):
        if not is_complete(entry.offer):
            missing = missing_fields(entry.offer)
            raise IncompleteDelegation(
                f"pricing still waits on manager values: {', '.join(missing)}",
                {"entry_id": entry.id, "missing_fields": missing},
            )

        values = validate_assignment(data, entry.bags)
        allotment = entry.allotment
        if allotment is None:
            allotment = LotAllotment(entry=entry, allotted_by_user_id=caller.user_id, **values)
            db.session.add(allotment)
        elif allotment.is_closed:
            raise InvalidTransition("lot is closed", {"lot_allotment_id": allotment.id})
        else:
            allotment.supervisor_id = values["supervisor_id"]
            allotment.allotted_bags = values["allotted_bags"]
            allotment.allotted_by_user_id = caller.user_id
        entry.move_to(S.ALLOTTED)

    return _run("assign_supervisor", caller, entry_id, apply, data, expected_version)


# ----------------------------
# delivery fan-out
# ----------------------------

def record_trip(caller: Caller, lot_allotment_id: int, data: TripInput, expected_version=None) -> Entry:
    entry_id = _get(LotAllotment, lot_allotment_id, "lot_allotment").entry_id

    def apply(entry: Entry):
        allotment = _lock_row(LotAllotment, lot_allotment_id, "lot_allotment")
        if caller.role == Role.SUPERVISOR and allotment.supervisor_id != caller.user_id:
            raise Unauthorized(
                "only the allotted supervisor may record trips for this lot",
                {"lot_allotment_id": allotment.id, "supervisor_id": allotment.supervisor_id},
            )
        values = validate_trip(data, allotment)
        db.session.add(DeliveryTrip(allotment=allotment, reported_by_user_id=caller.user_id, **values))
        _refresh_status(entry)

    return _run("record_trip", caller, entry_id, apply, data, expected_version)


def record_weight(caller: Caller, trip_id: int, data: WeightInput, expected_version=None) -> Entry:
    entry_id = _get(DeliveryTrip, trip_id, "trip").allotment.entry_id

    def apply(entry: Entry):
        trip = _lock_row(DeliveryTrip, trip_id, "trip")
        if trip.weight is not None:
            raise InvalidTransition(f"trip {trip.id} is already weighed", {"trip_id": trip.id})

        values = validate_weight(data)
        target = check_storage_target(values["storage_kind"], values["storage_target_id"], entry.variety)
        values["storage_kind"] = values["storage_kind"].value
        values["storage_target_id"] = target.id if target is not None else None

        db.session.add(WeightRecord(trip=trip, recorded_by_user_id=caller.user_id, **values))
        _refresh_status(entry)

    return _run("record_weight", caller, entry_id, apply, data, expected_version)


def close_lot(caller: Caller, lot_allotment_id: int, data: Optional[CloseLotInput] = None, expected_version=None) -> Entry:
    entry_id = _get(LotAllotment, lot_allotment_id, "lot_allotment").entry_id
    data = data or CloseLotInput()

    def apply(entry: Entry):
        allotment = _lock_row(LotAllotment, lot_allotment_id, "lot_allotment")
        if allotment.is_closed:
            raise InvalidTransition("lot is already closed", {"lot_allotment_id": allotment.id})
        if not allotment.trips:
            raise InvalidTransition("a lot without trips cannot be closed", {"lot_allotment_id": allotment.id})
        allotment.close(caller.user_id, (data.reason or "").strip() or None)
        _refresh_status(entry)

    return _run("close_lot", caller, entry_id, apply, data, expected_version)


# ----------------------------
# settlement
# ----------------------------

def settle_owner(caller: Caller, weight_record_id: int, data: OwnerSettlementInput, expected_version=None) -> Entry:
    entry_id = _get(WeightRecord, weight_record_id, "weight_record").trip.allotment.entry_id

    def apply(entry: Entry):
        weight = _lock_row(WeightRecord, weight_record_id, "weight_record")
        if weight.settlement is not None:
            raise InvalidTransition(
                f"weight record {weight.id} already has an owner settlement", {"weight_record_id": weight.id}
            )

        terms = resolve_owner_terms(data, entry.offer)
        result = compute_owner_phase(weight.bags, weight.net_weight, terms)

        db.session.add(
            Settlement(
                weight_record=weight,
                sute_rate=terms.sute_rate,
                sute_unit=terms.sute_unit.value,
                base_rate_type=terms.base_rate_type.value,
                base_rate_unit=terms.base_rate_unit.value,
                base_rate_value=terms.base_rate_value,
                custom_divisor=terms.custom_divisor,
                brokerage_rate=terms.brokerage_rate,
                brokerage_unit=terms.brokerage_unit.value,
                egb_rate=terms.egb_rate,
                total_sute=result.total_sute,
                sute_net_weight=result.sute_net_weight,
                base_rate_total=result.base_rate_total,
                brokerage_total=result.brokerage_total,
                egb_total=result.egb_total,
                owner_total=result.owner_total,
                owner_calculated_by=caller.user_id,
                owner_calculated_at=datetime.utcnow(),
                total_amount=result.owner_total,
                average=result.average,
            )
        )
        _refresh_status(entry)

    return _run("settle_owner", caller, entry_id, apply, data, expected_version)


def settle_manager(caller: Caller, settlement_id: int, data: ManagerSettlementInput, expected_version=None) -> Entry:
    entry_id = _get(Settlement, settlement_id, "settlement").weight_record.trip.allotment.entry_id

    def apply(entry: Entry):
        settlement = _lock_row(Settlement, settlement_id, "settlement")
        if settlement.has_manager_phase:
            raise InvalidTransition(
                f"settlement {settlement.id} already has a manager phase", {"settlement_id": settlement.id}
            )

        weight = settlement.weight_record
        terms = resolve_manager_terms(data, entry.offer)
        result = compute_manager_phase(
            weight.bags, weight.net_weight, settlement.owner_total, settlement.sute_net_weight, terms
        )

        settlement.lf_rate = terms.lf_rate
        settlement.lf_unit = terms.lf_unit.value
        settlement.hamali_rate = terms.hamali_rate
        settlement.hamali_unit = terms.hamali_unit.value
        settlement.lf_total = result.lf_total
        settlement.hamali_total = result.hamali_total
        settlement.total_amount = result.grand_total
        settlement.average = result.average
        settlement.manager_calculated_by = caller.user_id
        settlement.manager_calculated_at = datetime.utcnow()
        _refresh_status(entry)

    return _run("settle_manager", caller, entry_id, apply, data, expected_version)


def approve_review(caller: Caller, entry_id: int, expected_version=None) -> Entry:
    def apply(entry: Entry):
        if not entry.allotment.is_closed:
            entry.allotment.close(caller.user_id, "approved at review")
        entry.move_to(S.DONE)

    return _run("approve_review", caller, entry_id, apply, None, expected_version)


# ----------------------------
# reads
# ----------------------------

def get_entry(entry_id: int) -> Entry:
    return _get(Entry, entry_id, "entry")


def allowed_operations(entry: Entry, role) -> List[str]:
    """Operations the role may call from the entry's current state."""
    role = Role(role)
    return [
        op for op, states in SOURCE_STATES.items()
        if entry.status in states and role in ROLE_ALLOWLIST[op]
    ]


def review_summary(entry: Entry) -> dict:
    settlements = [
        t.weight.settlement for t in entry.trips
        if t.weight is not None and t.weight.settlement is not None
    ]
    summary = summarize_settlements(settlements)
    summary["entry_id"] = entry.id
    summary["status"] = entry.workflow_status
    summary["delivery"] = delivery_progress(entry.allotment) if entry.allotment else None
    return summary
