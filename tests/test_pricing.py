# tests/test_pricing.py

from decimal import Decimal

import pytest

from lotbook.enums import FieldOwner
from lotbook.errors import FieldOwnershipViolation, ValidationError
from lotbook.models import PricingOffer
from lotbook.schemas import FillMissingInput
from lotbook.services.pricing import (
    DELEGATED_FIELDS,
    DelegatedField,
    apply_fill_missing,
    apply_offer,
    is_complete,
    missing_fields,
)

from conftest import offer_input


def _offer(**overrides):
    offer = PricingOffer(entry_id=1)
    apply_offer(offer, offer_input(**overrides), user_id=40)
    return offer


def test_delegated_field_satisfied():
    assert DelegatedField(value=None, owned_by=FieldOwner.ADMIN).satisfied
    assert DelegatedField(value=Decimal("1"), owned_by=FieldOwner.MANAGER).satisfied
    assert not DelegatedField(value=None, owned_by=FieldOwner.MANAGER).satisfied


def test_all_admin_owned_offer_is_complete(app):
    offer = _offer()
    assert is_complete(offer)
    assert missing_fields(offer) == []
    assert all(offer.field(n).enabled for n in DELEGATED_FIELDS)


def test_no_offer_is_incomplete():
    assert not is_complete(None)
    assert missing_fields(None) == list(DELEGATED_FIELDS)


def test_completeness_is_per_field(app):
    offer = _offer(hamali_enabled=False, hamali_value=None, lf_enabled=False, lf_value=None)
    assert missing_fields(offer) == ["hamali", "lf"]
    assert not offer.hamali_enabled
    assert offer.sute_enabled

    apply_fill_missing(offer, FillMissingInput(values={"hamali": "4"}), user_id=30)
    assert missing_fields(offer) == ["lf"]
    assert not is_complete(offer)

    apply_fill_missing(offer, FillMissingInput(values={"lf": "3"}, units={"lf": "PER_QUINTAL"}), user_id=30)
    assert is_complete(offer)
    assert offer.lf_unit == "PER_QUINTAL"
    assert offer.field("lf").owned_by == FieldOwner.MANAGER


def test_admin_cannot_fill_a_manager_field(app):
    with pytest.raises(FieldOwnershipViolation):
        _offer(sute_enabled=False, sute_value="2")


def test_fill_missing_rejects_admin_field_even_unchanged(app):
    offer = _offer(moisture_enabled=False, moisture_value=None)
    with pytest.raises(FieldOwnershipViolation):
        apply_fill_missing(offer, FillMissingInput(values={"moisture": "15", "sute": "2"}), user_id=30)
    # nothing written
    assert offer.moisture_value is None


def test_fill_missing_second_writer_is_rejected(app):
    offer = _offer(sute_enabled=False, sute_value=None)
    apply_fill_missing(offer, FillMissingInput(values={"sute": "2"}), user_id=30)
    with pytest.raises(FieldOwnershipViolation):
        apply_fill_missing(offer, FillMissingInput(values={"sute": "3"}), user_id=31)
    assert offer.sute_value == Decimal("2")


def test_fill_missing_input_checks(app):
    offer = _offer(lf_enabled=False, lf_value=None)
    with pytest.raises(ValidationError):
        apply_fill_missing(offer, FillMissingInput(values={}), user_id=30)
    with pytest.raises(ValidationError):
        apply_fill_missing(offer, FillMissingInput(values={"freight": "1"}), user_id=30)
    with pytest.raises(ValidationError):
        apply_fill_missing(offer, FillMissingInput(values={"lf": "-1"}), user_id=30)


def test_egb_only_with_loose_types(app):
    with pytest.raises(ValidationError) as exc:
        _offer(base_rate_type="PD_WB", egb_value="1")
    assert any("egb_value" in m for m in exc.value.errors)


def test_custom_divisor_rules(app):
    with pytest.raises(ValidationError):
        _offer(base_rate_type="MD_LOOSE")
    with pytest.raises(ValidationError):
        _offer(base_rate_type="PD_LOOSE", custom_divisor="50")
    with pytest.raises(ValidationError):
        _offer(base_rate_type="MD_LOOSE", custom_divisor="1001")

    offer = _offer(base_rate_type="MD_LOOSE", custom_divisor="50")
    assert offer.custom_divisor == Decimal("50")


def test_invalid_unit_is_reported(app):
    with pytest.raises(ValidationError) as exc:
        _offer(sute_unit="PER_QUINTAL")
    assert any("sute_unit" in m for m in exc.value.errors)


def test_fill_missing_body_must_be_objects(app):
    offer = _offer(lf_enabled=False, lf_value=None)
    with pytest.raises(ValidationError):
        apply_fill_missing(offer, FillMissingInput(values=["lf", "3"]), user_id=30)
    with pytest.raises(ValidationError):
        apply_fill_missing(offer, FillMissingInput(values={"lf": "3"}, units="PER_BAG"), user_id=30)
    assert offer.lf_value is None


def test_offer_rejects_extra_decimal_places(app):
    with pytest.raises(ValidationError) as exc:
        _offer(offer_base_rate_value="2000.555")
    assert any("decimal places" in m for m in exc.value.errors)

    offer = _offer(offer_base_rate_value="2000.500")
    assert offer.offer_base_rate_value == Decimal("2000.5")
