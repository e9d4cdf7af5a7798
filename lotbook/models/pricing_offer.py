# lotbook/models/pricing_offer.py

from datetime import datetime
from lotbook.extensions import db
from lotbook.enums import FieldOwner
from lotbook.services.pricing import DELEGATED_FIELDS, UNIT_FIELDS, DelegatedField


class PricingOffer(db.Model):
    __tablename__ = "sample_entry_offerings"

    id = db.Column(db.Integer, primary_key=True)

    entry_id = db.Column(
        db.Integer,
        db.ForeignKey("sample_entries.id"),
        nullable=False,
        unique=True,
    )

    offer_rate = db.Column(db.Numeric(12, 2))
    base_rate_type = db.Column(db.String(20), nullable=False)  # PD_LOOSE / PD_WB / MD_LOOSE / MD_WB
    base_rate_unit = db.Column(db.String(20), nullable=False)  # PER_BAG / PER_QUINTAL
    offer_base_rate_value = db.Column(db.Numeric(12, 2), nullable=False)
    custom_divisor = db.Column(db.Numeric(12, 2))  # MD_LOOSE only
    egb_value = db.Column(db.Numeric(12, 2))  # LOOSE only

    # delegated fields: value + who finalises it (ADMIN / MANAGER)
    sute_value = db.Column(db.Numeric(12, 2))
    sute_owner = db.Column(db.String(10), nullable=False, default=FieldOwner.ADMIN.value)
    sute_unit = db.Column(db.String(20))  # PER_BAG / PER_TON

    moisture_value = db.Column(db.Numeric(12, 2))
    moisture_owner = db.Column(db.String(10), nullable=False, default=FieldOwner.ADMIN.value)

    hamali_value = db.Column(db.Numeric(12, 2))
    hamali_owner = db.Column(db.String(10), nullable=False, default=FieldOwner.ADMIN.value)
    hamali_unit = db.Column(db.String(20))

    brokerage_value = db.Column(db.Numeric(12, 2))
    brokerage_owner = db.Column(db.String(10), nullable=False, default=FieldOwner.ADMIN.value)
    brokerage_unit = db.Column(db.String(20))

    lf_value = db.Column(db.Numeric(12, 2))
    lf_owner = db.Column(db.String(10), nullable=False, default=FieldOwner.ADMIN.value)
    lf_unit = db.Column(db.String(20))

    remarks = db.Column(db.Text)

    set_by_user_id = db.Column(db.Integer, nullable=False)
    filled_by_user_id = db.Column(db.Integer)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime)

    entry = db.relationship("Entry", backref=db.backref("offer", uselist=False, lazy=True))

    def field(self, name: str) -> DelegatedField:
        if name not in DELEGATED_FIELDS:
            raise KeyError(name)
        owner = getattr(self, f"{name}_owner") or FieldOwner.ADMIN.value
        unit = getattr(self, f"{name}_unit") if name in UNIT_FIELDS else None
        return DelegatedField(
            value=getattr(self, f"{name}_value"),
            owned_by=FieldOwner(owner),
            unit=unit,
        )

    def set_field(self, name: str, f: DelegatedField):
        if name not in DELEGATED_FIELDS:
            raise KeyError(name)
        setattr(self, f"{name}_value", f.value)
        setattr(self, f"{name}_owner", FieldOwner(f.owned_by).value)
        if name in UNIT_FIELDS:
            setattr(self, f"{name}_unit", f.unit)

    # flag view used by the host screens
    @property
    def sute_enabled(self) -> bool:
        return self.field("sute").enabled

    @property
    def moisture_enabled(self) -> bool:
        return self.field("moisture").enabled

    @property
    def hamali_enabled(self) -> bool:
        return self.field("hamali").enabled

    @property
    def brokerage_enabled(self) -> bool:
        return self.field("brokerage").enabled

    @property
    def lf_enabled(self) -> bool:
        return self.field("lf").enabled
