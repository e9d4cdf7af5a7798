# scripts/seed_dev.py

from datetime import date

from lotbook import create_app, workflow
from lotbook.extensions import db
from lotbook.schemas import Caller, EntryInput
from lotbook.services.lookups import import_storage_targets

app = create_app()

with app.app_context():
    db.create_all()

    import_storage_targets([
        {"kind": "KUNCHINITTU", "code": "K1", "variety": "Sona Masoori"},
        {"kind": "OUTTURN", "code": "OT1", "variety": "Sona Masoori"},
    ])

    e = workflow.create_entry(
        Caller(user_id=1, role="staff"),
        EntryInput(
            entry_date=date.today(),
            entry_type="NEW_SAMPLE",
            bags=100,
            packaging="75kg",
            variety="Sona Masoori",
            party_name="Sri Lakshmi Traders",
            broker_name="Ramesh",
            location="Miryalaguda",
        ),
    )
    print("Entry created:", e.id, e.workflow_status)
