# lotbook/models/settlement.py

from lotbook.extensions import db


class Settlement(db.Model):
    __tablename__ = "financial_calculations"

    id = db.Column(db.Integer, primary_key=True)

    weight_record_id = db.Column(
        db.Integer,
        db.ForeignKey("inventory_data.id"),
        nullable=False,
        unique=True,
    )

    # ----------------------------
    # owner phase inputs
    # ----------------------------
    sute_rate = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    sute_unit = db.Column(db.String(20), nullable=False)  # PER_BAG / PER_TON
    base_rate_type = db.Column(db.String(20), nullable=False)
    base_rate_unit = db.Column(db.String(20), nullable=False)
    base_rate_value = db.Column(db.Numeric(12, 2), nullable=False)
    custom_divisor = db.Column(db.Numeric(12, 2))
    brokerage_rate = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    brokerage_unit = db.Column(db.String(20), nullable=False)
    egb_rate = db.Column(db.Numeric(12, 2))

    # owner phase results
    total_sute = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    sute_net_weight = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    base_rate_total = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    brokerage_total = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    egb_total = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    owner_total = db.Column(db.Numeric(14, 2), nullable=False, default=0)

    owner_calculated_by = db.Column(db.Integer, nullable=False)
    owner_calculated_at = db.Column(db.DateTime, nullable=False)

    # ----------------------------
    # manager phase (LF / hamali)
    # ----------------------------
    lf_rate = db.Column(db.Numeric(12, 2))
    lf_unit = db.Column(db.String(20))
    hamali_rate = db.Column(db.Numeric(12, 2))
    hamali_unit = db.Column(db.String(20))
    lf_total = db.Column(db.Numeric(14, 2))
    hamali_total = db.Column(db.Numeric(14, 2))

    manager_calculated_by = db.Column(db.Integer)
    manager_calculated_at = db.Column(db.DateTime)

    # final figures; after the owner phase they hold the owner-only totals
    total_amount = db.Column(db.Numeric(14, 2), nullable=False, default=0)
    average = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    weight_record = db.relationship(
        "WeightRecord", backref=db.backref("settlement", uselist=False, lazy=True)
    )

    @property
    def has_manager_phase(self) -> bool:
        return self.manager_calculated_at is not None
