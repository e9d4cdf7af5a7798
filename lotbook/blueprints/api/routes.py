# lotbook/blueprints/api/routes.py

from flask import Blueprint, current_app, jsonify, request

from lotbook import workflow
from lotbook.enums import Role
from lotbook.errors import Unauthorized, ValidationError, WorkflowError
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
    payload_from_dict,
)
from lotbook.serializers import entry_view
from lotbook.services.lookups import import_storage_targets, import_storage_targets_file
from lotbook.services.storage import save_upload
from lotbook.utils.logging import get_logger

api_bp = Blueprint("api", __name__)

logger = get_logger("api")


@api_bp.errorhandler(WorkflowError)
def workflow_error(e: WorkflowError):
    return jsonify(e.to_dict()), e.http_status


def _caller() -> Caller:
    """
    Identity comes from the host's auth layer as two headers.
    """
    user_id = request.headers.get("X-User-Id", "").strip()
    role = request.headers.get("X-User-Role", "").strip().lower()
    if not user_id or not role:
        raise Unauthorized("missing X-User-Id / X-User-Role headers")
    try:
        return Caller(user_id=int(user_id), role=role)
    except ValueError:
        raise Unauthorized(f"unknown caller identity: user={user_id!r} role={role!r}")


def _body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("request body must be a JSON object")
    return data


def _payload(cls):
    body = _body()
    try:
        return payload_from_dict(cls, body), body.get("expected_version")
    except TypeError:
        # missing required keys of the payload dataclass
        raise ValidationError(f"missing fields for {cls.__name__}")


def _entry_response(entry, status=200):
    d = entry_view(entry)
    d["allowed_operations"] = workflow.allowed_operations(entry, _caller().role)
    return jsonify(d), status


@api_bp.route("/ping")
def ping():
    return jsonify({"status": "ok"})


# ----------------------------
# entries
# ----------------------------

@api_bp.route("/entries", methods=["POST"])
def create_entry():
    caller = _caller()
    data, _ = _payload(EntryInput)
    entry = workflow.create_entry(caller, data)
    return _entry_response(entry, 201)


@api_bp.route("/entries/<int:entry_id>", methods=["GET"])
def get_entry(entry_id):
    return _entry_response(workflow.get_entry(entry_id))


@api_bp.route("/entries/<int:entry_id>/grading", methods=["POST", "PUT"])
def grading(entry_id):
    caller = _caller()
    data, version = _payload(GradingInput)
    op = workflow.attach_grading if request.method == "POST" else workflow.update_grading
    return _entry_response(op(caller, entry_id, data, version))


@api_bp.route("/entries/<int:entry_id>/decision", methods=["POST"])
def decide(entry_id):
    caller = _caller()
    body = _body()
    entry = workflow.decide(caller, entry_id, body.get("decision"), body.get("expected_version"))
    return _entry_response(entry)


@api_bp.route("/entries/<int:entry_id>/cooking", methods=["POST"])
def cooking(entry_id):
    caller = _caller()
    data, version = _payload(CookingInput)
    return _entry_response(workflow.attach_cooking(caller, entry_id, data, version))


@api_bp.route("/entries/<int:entry_id>/offer", methods=["POST"])
def set_offer(entry_id):
    caller = _caller()
    data, version = _payload(OfferInput)
    return _entry_response(workflow.set_offer(caller, entry_id, data, version))


@api_bp.route("/entries/<int:entry_id>/offer/fill", methods=["POST"])
def fill_missing(entry_id):
    caller = _caller()
    data, version = _payload(FillMissingInput)
    return _entry_response(workflow.fill_missing(caller, entry_id, data, version))


@api_bp.route("/entries/<int:entry_id>/allotment", methods=["POST"])
def assign_supervisor(entry_id):
    caller = _caller()
    data, version = _payload(AssignInput)
    return _entry_response(workflow.assign_supervisor(caller, entry_id, data, version))


@api_bp.route("/entries/<int:entry_id>/approve", methods=["POST"])
def approve_review(entry_id):
    caller = _caller()
    body = _body()
    return _entry_response(workflow.approve_review(caller, entry_id, body.get("expected_version")))


@api_bp.route("/entries/<int:entry_id>/review", methods=["GET"])
def review(entry_id):
    return jsonify(workflow.review_summary(workflow.get_entry(entry_id)))


# ----------------------------
# delivery / settlement (child rows)
# ----------------------------

@api_bp.route("/allotments/<int:allotment_id>/trips", methods=["POST"])
def record_trip(allotment_id):
    caller = _caller()
    data, version = _payload(TripInput)
    return _entry_response(workflow.record_trip(caller, allotment_id, data, version), 201)


@api_bp.route("/allotments/<int:allotment_id>/close", methods=["POST"])
def close_lot(allotment_id):
    caller = _caller()
    data, version = _payload(CloseLotInput)
    return _entry_response(workflow.close_lot(caller, allotment_id, data, version))


@api_bp.route("/trips/<int:trip_id>/weight", methods=["POST"])
def record_weight(trip_id):
    caller = _caller()
    data, version = _payload(WeightInput)
    return _entry_response(workflow.record_weight(caller, trip_id, data, version), 201)


@api_bp.route("/weights/<int:weight_record_id>/settlement", methods=["POST"])
def settle_owner(weight_record_id):
    caller = _caller()
    data, version = _payload(OwnerSettlementInput)
    return _entry_response(workflow.settle_owner(caller, weight_record_id, data, version), 201)


@api_bp.route("/settlements/<int:settlement_id>/manager", methods=["POST"])
def settle_manager(settlement_id):
    caller = _caller()
    data, version = _payload(ManagerSettlementInput)
    return _entry_response(workflow.settle_manager(caller, settlement_id, data, version))


# ----------------------------
# lookups
# ----------------------------

@api_bp.route("/storage-targets", methods=["POST"])
def storage_targets():
    caller = _caller()
    if caller.role not in (Role.ADMIN, Role.MANAGER):
        raise Unauthorized(f"role '{caller.role.value}' may not import storage targets")

    if "file" in request.files:
        # multipart upload of the master workbook
        saved = save_upload(request.files["file"], current_app.config["UPLOAD_FOLDER"], "storage_targets")
        result = import_storage_targets_file(saved["stored_path"])
        result["file_hash"] = saved["file_hash"]
    else:
        body = _body()
        rows = body.get("rows")
        if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
            raise ValidationError("'rows' must be a list of objects, or upload the workbook as 'file'")
        result = import_storage_targets(rows)

    logger.info(f"storage targets imported by user={caller.user_id}: {result}")
    return jsonify(result)
