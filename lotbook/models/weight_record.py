# lotbook/models/weight_record.py

from datetime import datetime
from lotbook.extensions import db


class WeightRecord(db.Model):
    __tablename__ = "inventory_data"

    id = db.Column(db.Integer, primary_key=True)

    trip_id = db.Column(
        db.Integer,
        db.ForeignKey("physical_inspections.id"),
        nullable=False,
        unique=True,
    )

    wb_number = db.Column(db.String(50), nullable=False)  # weighbridge slip
    moisture = db.Column(db.Numeric(5, 2))

    gross_weight = db.Column(db.Numeric(12, 2), nullable=False)  # kg
    tare_weight = db.Column(db.Numeric(12, 2), nullable=False)
    net_weight = db.Column(db.Numeric(12, 2), nullable=False)

    storage_kind = db.Column(db.String(30), nullable=False)  # WAREHOUSE / DIRECT_KUNCHINITTU / DIRECT_OUTTURN
    storage_target_id = db.Column(db.Integer, db.ForeignKey("storage_targets.id"))

    recorded_by_user_id = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    trip = db.relationship("DeliveryTrip", backref=db.backref("weight", uselist=False, lazy=True))
    storage_target = db.relationship("StorageTarget")

    @property
    def bags(self) -> int:
        return self.trip.bags
