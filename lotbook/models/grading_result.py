# lotbook/models/grading_result.py

from datetime import datetime
from lotbook.extensions import db


class GradingResult(db.Model):
    __tablename__ = "quality_parameters"

    id = db.Column(db.Integer, primary_key=True)

    entry_id = db.Column(
        db.Integer,
        db.ForeignKey("sample_entries.id"),
        nullable=False,
        unique=True,
    )

    moisture = db.Column(db.Numeric(5, 2), nullable=False)

    # paired cut/bend readings
    cutting_1 = db.Column(db.Numeric(5, 2), nullable=False)
    cutting_2 = db.Column(db.Numeric(5, 2), nullable=False)
    bend_1 = db.Column(db.Numeric(5, 2), nullable=False)
    bend_2 = db.Column(db.Numeric(5, 2), nullable=False)

    # optional mix / defect percentages
    mix = db.Column(db.Numeric(5, 2))
    mix_s = db.Column(db.Numeric(5, 2))
    mix_l = db.Column(db.Numeric(5, 2))
    kandu = db.Column(db.Numeric(5, 2))
    oil = db.Column(db.Numeric(5, 2))
    sk = db.Column(db.Numeric(5, 2))
    grains_count = db.Column(db.Integer)
    wb_r = db.Column(db.Numeric(5, 2))
    wb_bk = db.Column(db.Numeric(5, 2))
    wb_t = db.Column(db.Numeric(5, 2))
    paddy_wb = db.Column(db.Numeric(5, 2))

    reported_by = db.Column(db.String(100), nullable=False)  # grader name, free text
    reported_by_user_id = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime)

    entry = db.relationship("Entry", backref=db.backref("grading", uselist=False, lazy=True))
