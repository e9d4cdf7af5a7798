# lotbook/models/audit_log.py

from datetime import datetime
from lotbook.extensions import db


class AuditLog(db.Model):
    __tablename__ = "sample_entry_audit_logs"

    id = db.Column(db.Integer, primary_key=True)

    entry_id = db.Column(
        db.Integer,
        db.ForeignKey("sample_entries.id"),
        nullable=False,
        index=True,
    )

    user_id = db.Column(db.Integer, nullable=False)
    role = db.Column(db.String(20), nullable=False)
    operation = db.Column(db.String(40), nullable=False)

    from_status = db.Column(db.String(30))
    to_status = db.Column(db.String(30), nullable=False)

    payload = db.Column(db.JSON)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
