# lotbook/models/cooking_result.py

from datetime import datetime
from lotbook.extensions import db
from lotbook.enums import CookingStatus


class CookingResult(db.Model):
    __tablename__ = "cooking_reports"

    id = db.Column(db.Integer, primary_key=True)

    entry_id = db.Column(
        db.Integer,
        db.ForeignKey("sample_entries.id"),
        nullable=False,
        unique=True,
    )

    status = db.Column(db.String(20), nullable=False)  # PASS / FAIL / RECHECK / MEDIUM
    remarks = db.Column(db.Text)

    reviewed_by_user_id = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    entry = db.relationship("Entry", backref=db.backref("cooking", uselist=False, lazy=True))

    @property
    def effective_status(self) -> CookingStatus:
        # MEDIUM counts as PASS
        st = CookingStatus(self.status)
        return CookingStatus.PASS if st == CookingStatus.MEDIUM else st
