# tests/conftest.py

import pytest

from lotbook import create_app, workflow
from lotbook.config import TestConfig
from lotbook.extensions import db
from lotbook.models import StorageTarget
from lotbook.schemas import (
    AssignInput,
    Caller,
    EntryInput,
    GradingInput,
    ManagerSettlementInput,
    OfferInput,
    OwnerSettlementInput,
    TripInput,
    WeightInput,
)
from lotbook.services.lookups import import_storage_targets

SUPERVISOR_ID = 20


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def staff():
    return Caller(user_id=10, role="staff")


@pytest.fixture
def supervisor():
    return Caller(user_id=SUPERVISOR_ID, role="supervisor")


@pytest.fixture
def manager():
    return Caller(user_id=30, role="manager")


@pytest.fixture
def admin():
    return Caller(user_id=40, role="admin")


@pytest.fixture
def owner():
    return Caller(user_id=50, role="owner")


def entry_input(**overrides):
    data = dict(
        entry_date="2026-10-01",
        entry_type="NEW_SAMPLE",
        bags=100,
        packaging="75kg",
        variety="Sona Masoori",
        party_name="Sri Lakshmi Traders",
        broker_name="Ramesh",
        location="Miryalaguda",
    )
    data.update(overrides)
    return EntryInput(**data)


def grading_input(**overrides):
    data = dict(
        moisture="14.5", cutting_1="1.5", cutting_2="2", bend_1="1", bend_2="1.25", reported_by="Venkat"
    )
    data.update(overrides)
    return GradingInput(**data)


def offer_input(**overrides):
    data = dict(
        base_rate_type="PD_LOOSE",
        base_rate_unit="PER_QUINTAL",
        offer_base_rate_value="2000",
        egb_value="1",
        sute_value="2",
        sute_unit="PER_BAG",
        moisture_value="15",
        hamali_value="4",
        hamali_unit="PER_BAG",
        brokerage_value="5",
        brokerage_unit="PER_BAG",
        lf_value="3",
        lf_unit="PER_BAG",
    )
    data.update(overrides)
    return OfferInput(**data)


def trip_input(**overrides):
    data = dict(
        trip_date="2026-10-05", lorry_number="ts 09 ab 1234", bags=100, cutting_1="1", cutting_2="1.5", bend="1"
    )
    data.update(overrides)
    return TripInput(**data)


def weight_input(**overrides):
    data = dict(wb_number="WB-001", gross_weight="12500", tare_weight="5000", storage_kind="WAREHOUSE")
    data.update(overrides)
    return WeightInput(**data)


class Pipeline:
    """Drives one entry through the operations with valid payloads."""

    def __init__(self, staff, supervisor, manager, admin, owner):
        self.staff = staff
        self.supervisor = supervisor
        self.manager = manager
        self.admin = admin
        self.owner = owner

    def created(self, **overrides):
        return workflow.create_entry(self.staff, entry_input(**overrides))

    def graded(self, **overrides):
        e = self.created(**overrides)
        return workflow.attach_grading(self.supervisor, e.id, grading_input())

    def priced(self, **overrides):
        e = self.graded(**overrides)
        e = workflow.decide(self.owner, e.id, "PASS_NO_COOK")
        return workflow.set_offer(self.admin, e.id, offer_input())

    def allotted(self, allotted_bags=None, **overrides):
        e = self.priced(**overrides)
        return workflow.assign_supervisor(
            self.manager, e.id, AssignInput(supervisor_id=SUPERVISOR_ID, allotted_bags=allotted_bags)
        )

    def trip(self, entry, **overrides):
        e = workflow.record_trip(self.supervisor, entry.allotment.id, trip_input(**overrides))
        return e, e.allotment.trips[-1]

    def weigh(self, trip, **overrides):
        return workflow.record_weight(self.staff, trip.id, weight_input(**overrides))

    def settle(self, trip):
        workflow.settle_owner(self.owner, trip.weight.id, OwnerSettlementInput())
        return workflow.settle_manager(self.manager, trip.weight.settlement.id, ManagerSettlementInput())

    def in_review(self):
        e = self.allotted()
        e, t = self.trip(e)
        self.weigh(t)
        return self.settle(t)


@pytest.fixture
def pipeline(app, staff, supervisor, manager, admin, owner):
    return Pipeline(staff, supervisor, manager, admin, owner)


@pytest.fixture
def targets(app):
    import_storage_targets([
        {"kind": "KUNCHINITTU", "code": "K1", "variety": "SONA-MASOORI"},
        {"kind": "KUNCHINITTU", "code": "K2", "variety": "BPT 5204"},
        {"kind": "OUTTURN", "code": "OT1", "variety": "Sona Masoori"},
    ])
    return {t.code: t for t in StorageTarget.query.all()}
