# lotbook/models/delivery_trip.py

from datetime import datetime
from lotbook.extensions import db


class DeliveryTrip(db.Model):
    __tablename__ = "physical_inspections"

    id = db.Column(db.Integer, primary_key=True)

    lot_allotment_id = db.Column(
        db.Integer,
        db.ForeignKey("lot_allotments.id"),
        nullable=False,
        index=True,
    )

    trip_date = db.Column(db.Date, nullable=False)
    lorry_number = db.Column(db.String(20), nullable=False, index=True)
    bags = db.Column(db.Integer, nullable=False)

    cutting_1 = db.Column(db.Numeric(5, 2), nullable=False)
    cutting_2 = db.Column(db.Numeric(5, 2), nullable=False)
    bend = db.Column(db.Numeric(5, 2), nullable=False)
    remarks = db.Column(db.Text)

    reported_by_user_id = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    allotment = db.relationship(
        "LotAllotment",
        backref=db.backref("trips", lazy=True, order_by="DeliveryTrip.id"),
    )
