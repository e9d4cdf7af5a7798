# lotbook/serializers.py

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict

from sqlalchemy import Boolean, Date, DateTime, Integer, Numeric

from lotbook.services.delivery import delivery_progress, trip_stage
from lotbook.services.pricing import DELEGATED_FIELDS, missing_fields


def jsonable(value: Any) -> Any:
    """Decimal -> str, date/datetime -> ISO, Enum -> value; recurses into dicts, lists and dataclasses."""
    if value is None:
        return None
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if is_dataclass(value) and not isinstance(value, type):
        return jsonable(asdict(value))
    if isinstance(value, dict):
        return {str(k): jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [jsonable(v) for v in value]
    return value


def to_dict(obj) -> Dict[str, Any]:
    """Column values of a model row, JSON-ready."""
    return {c.key: jsonable(getattr(obj, c.key)) for c in obj.__table__.columns}


def _from_json(column, value):
    if value is None:
        return None
    t = column.type
    if isinstance(t, DateTime):
        return value if isinstance(value, datetime) else datetime.fromisoformat(value)
    if isinstance(t, Date):
        return value if isinstance(value, date) else date.fromisoformat(value)
    if isinstance(t, Numeric):
        return Decimal(str(value))
    if isinstance(t, Boolean):
        return bool(value)
    if isinstance(t, Integer):
        return int(value)
    return value


def from_dict(model_cls, data: Dict[str, Any]):
    """
    Inverse of to_dict: builds a transient instance of model_cls.
    Keys that are not columns are ignored.
    """
    columns = {c.key: c for c in model_cls.__table__.columns}
    kwargs = {k: _from_json(columns[k], v) for k, v in (data or {}).items() if k in columns}
    return model_cls(**kwargs)


def offer_view(offer) -> Dict[str, Any]:
    d = to_dict(offer)
    for name in DELEGATED_FIELDS:
        d[f"{name}_enabled"] = getattr(offer, f"{name}_enabled")
    d["missing_fields"] = missing_fields(offer)
    return d


def trip_view(trip) -> Dict[str, Any]:
    d = to_dict(trip)
    d["stage"] = trip_stage(trip).value
    weight = trip.weight
    d["weight"] = to_dict(weight) if weight is not None else None
    if weight is not None and weight.settlement is not None:
        d["weight"]["settlement"] = to_dict(weight.settlement)
    return d


def entry_view(entry) -> Dict[str, Any]:
    """Entry with its owned rows, as returned by the API."""
    d = to_dict(entry)
    d["grading"] = to_dict(entry.grading) if entry.grading is not None else None
    d["cooking"] = to_dict(entry.cooking) if entry.cooking is not None else None
    d["offer"] = offer_view(entry.offer) if entry.offer is not None else None

    allotment = entry.allotment
    if allotment is None:
        d["allotment"] = None
    else:
        d["allotment"] = to_dict(allotment)
        d["allotment"]["progress"] = delivery_progress(allotment)
        d["allotment"]["trips"] = [trip_view(t) for t in allotment.trips]
    return d
