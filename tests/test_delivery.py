# tests/test_delivery.py

from decimal import Decimal
from types import SimpleNamespace

import pytest

from lotbook.enums import StorageKind, WorkflowStatus as S
from lotbook.errors import InvalidTransition, ValidationError, VarietyMismatch
from lotbook.services.delivery import aggregate_status, trip_stage, validate_trip, validate_weight
from lotbook.services.lookups import check_storage_target, varieties_match

from conftest import trip_input, weight_input


def _trip(weight=None):
    return SimpleNamespace(weight=weight)


def _weight(settlement=None):
    return SimpleNamespace(settlement=settlement)


def test_trip_stage_follows_child_rows():
    assert trip_stage(_trip()) == S.DELIVERING
    assert trip_stage(_trip(_weight())) == S.WEIGHED
    assert trip_stage(_trip(_weight(SimpleNamespace(has_manager_phase=False)))) == S.OWNER_SETTLED
    assert trip_stage(_trip(_weight(SimpleNamespace(has_manager_phase=True)))) == S.MANAGER_SETTLED


def test_aggregate_status_is_lowest_stage():
    assert aggregate_status([]) == S.ALLOTTED
    assert aggregate_status([S.MANAGER_SETTLED, S.WEIGHED, S.OWNER_SETTLED]) == S.WEIGHED
    assert aggregate_status([S.MANAGER_SETTLED, S.DELIVERING]) == S.DELIVERING
    assert aggregate_status([S.MANAGER_SETTLED, S.MANAGER_SETTLED]) == S.REVIEW


def _allotment(remaining=100, closed=False):
    return SimpleNamespace(id=1, remaining_bags=remaining, is_closed=closed)


def test_validate_trip_normalises_lorry_number():
    values = validate_trip(trip_input(lorry_number="ts-09 ab 1234"), _allotment())
    assert values["lorry_number"] == "TS09AB1234"
    assert values["bags"] == 100


def test_validate_trip_rejects_more_than_remaining():
    with pytest.raises(ValidationError) as exc:
        validate_trip(trip_input(bags=60), _allotment(remaining=40))
    assert any("40 bags remaining" in m for m in exc.value.errors)


def test_validate_trip_on_closed_lot():
    with pytest.raises(InvalidTransition):
        validate_trip(trip_input(), _allotment(closed=True))


@pytest.mark.parametrize("bags", [0, -5, "abc", None, 2.5])
def test_validate_trip_bags_must_be_positive_int(bags):
    with pytest.raises(ValidationError):
        validate_trip(trip_input(bags=bags), _allotment())


def test_validate_weight_net():
    values = validate_weight(weight_input(gross_weight="12,500.50", tare_weight="5000"))
    assert values["net_weight"] == Decimal("7500.50")
    assert values["storage_kind"] == StorageKind.WAREHOUSE
    assert values["storage_target_id"] is None


@pytest.mark.parametrize(
    "gross,tare",
    [("0", "0"), ("5000", "5000"), ("5000", "6000"), ("5000", "-1"), (None, "10")],
)
def test_validate_weight_rejects_bad_pairs(gross, tare):
    with pytest.raises(ValidationError):
        validate_weight(weight_input(gross_weight=gross, tare_weight=tare))


def test_varieties_match_ignores_case_and_separators():
    assert varieties_match("Sona Masoori", "SONA-MASOORI")
    assert varieties_match(" sona  masoori ", "Sona_Masoori")
    assert not varieties_match("Sona Masoori", "BPT 5204")


def test_check_storage_target(targets):
    assert check_storage_target(StorageKind.WAREHOUSE, None, "Sona Masoori") is None

    t = check_storage_target(StorageKind.DIRECT_KUNCHINITTU, targets["K1"].id, "Sona Masoori")
    assert t.code == "K1"

    with pytest.raises(VarietyMismatch):
        check_storage_target(StorageKind.DIRECT_KUNCHINITTU, targets["K2"].id, "Sona Masoori")

    # an outturn id is not a kunchinittu
    with pytest.raises(ValidationError):
        check_storage_target(StorageKind.DIRECT_KUNCHINITTU, targets["OT1"].id, "Sona Masoori")

    with pytest.raises(ValidationError):
        check_storage_target(StorageKind.DIRECT_OUTTURN, None, "Sona Masoori")

    with pytest.raises(ValidationError):
        check_storage_target(StorageKind.WAREHOUSE, targets["K1"].id, "Sona Masoori")
