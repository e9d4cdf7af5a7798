# lotbook/services/audit.py

from lotbook.extensions import db
from lotbook.models import AuditLog
from lotbook.serializers import jsonable


def record_audit(entry, caller, operation: str, from_status, payload=None) -> AuditLog:
    """Appends one row for a successful operation; committed with the operation itself."""
    row = AuditLog(
        entry_id=entry.id,
        user_id=caller.user_id,
        role=caller.role.value,
        operation=operation,
        from_status=from_status.value if from_status is not None else None,
        to_status=entry.workflow_status,
        payload=jsonable(payload),
    )
    db.session.add(row)
    return row
