# lotbook/models/lot_allotment.py

from datetime import datetime
from lotbook.extensions import db


class LotAllotment(db.Model):
    __tablename__ = "lot_allotments"

    id = db.Column(db.Integer, primary_key=True)

    entry_id = db.Column(
        db.Integer,
        db.ForeignKey("sample_entries.id"),
        nullable=False,
        unique=True,
    )

    supervisor_id = db.Column(db.Integer, nullable=False, index=True)
    allotted_by_user_id = db.Column(db.Integer, nullable=False)
    allotted_bags = db.Column(db.Integer, nullable=False)

    # short-delivery termination
    closed_at = db.Column(db.DateTime)
    closed_by_user_id = db.Column(db.Integer)
    close_reason = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    entry = db.relationship("Entry", backref=db.backref("allotment", uselist=False, lazy=True))

    @property
    def is_closed(self) -> bool:
        return self.closed_at is not None

    @property
    def delivered_bags(self) -> int:
        return sum(t.bags or 0 for t in self.trips)

    @property
    def remaining_bags(self) -> int:
        return max(self.allotted_bags - self.delivered_bags, 0)

    def close(self, user_id: int, reason: str = None):
        self.closed_at = datetime.utcnow()
        self.closed_by_user_id = user_id
        self.close_reason = reason
