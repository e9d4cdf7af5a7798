# lotbook/models/storage_target.py

from lotbook.extensions import db


class StorageTarget(db.Model):
    """
    Kunchinittu / outturn masters, read only by the core (variety check).
    """
    __tablename__ = "storage_targets"
    __table_args__ = (db.UniqueConstraint("kind", "code"),)

    id = db.Column(db.Integer, primary_key=True)

    kind = db.Column(db.String(20), nullable=False)  # KUNCHINITTU / OUTTURN
    code = db.Column(db.String(50), nullable=False)
    variety = db.Column(db.String(100), nullable=False)
    active = db.Column(db.Boolean, nullable=False, default=True)
