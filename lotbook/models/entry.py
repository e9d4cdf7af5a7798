# lotbook/models/entry.py

from datetime import datetime
from lotbook.extensions import db
from lotbook.enums import WorkflowStatus


class Entry(db.Model):
    __tablename__ = "sample_entries"

    id = db.Column(db.Integer, primary_key=True)

    entry_date = db.Column(db.Date, nullable=False)
    entry_type = db.Column(db.String(30), nullable=False)  # NEW_SAMPLE / READY_LORRY / LOCATION_SAMPLE
    bags = db.Column(db.Integer, nullable=False)
    packaging = db.Column(db.String(10), nullable=False)  # 75kg / 40kg

    variety = db.Column(db.String(100), nullable=False, index=True)
    party_name = db.Column(db.String(200), nullable=False)
    broker_name = db.Column(db.String(200), nullable=False)
    location = db.Column(db.String(200), nullable=False)

    workflow_status = db.Column(
        db.String(30), nullable=False, default=WorkflowStatus.INTAKE.value, index=True
    )
    lot_decision = db.Column(db.String(30))  # PASS_NO_COOK / PASS_WITH_COOK / FAIL

    created_by_user_id = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow)

    # optimistic lock: bumped on every UPDATE of the row
    version = db.Column(db.Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    @property
    def status(self) -> WorkflowStatus:
        return WorkflowStatus(self.workflow_status)

    def move_to(self, status: WorkflowStatus):
        self.workflow_status = WorkflowStatus(status).value

    def touch(self):
        # every operation rewrites the row so the version always moves
        self.updated_at = datetime.utcnow()

    @property
    def trips(self):
        return list(self.allotment.trips) if self.allotment else []
