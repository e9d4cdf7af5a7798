# tests/test_settlement.py

from decimal import Decimal
from types import SimpleNamespace

import pytest

from lotbook.enums import BaseRateType, RateUnit, SuteUnit
from lotbook.errors import ValidationError
from lotbook.schemas import ManagerSettlementInput, OwnerSettlementInput
from lotbook.services.settlement import (
    ManagerTerms,
    OwnerTerms,
    compute_manager_phase,
    compute_owner_phase,
    resolve_manager_terms,
    resolve_owner_terms,
    review_summary,
)


def _owner_terms(**overrides):
    data = dict(
        sute_rate=Decimal("2"),
        sute_unit=SuteUnit.PER_BAG,
        base_rate_type=BaseRateType.PD_LOOSE,
        base_rate_unit=RateUnit.PER_QUINTAL,
        base_rate_value=Decimal("2000"),
        custom_divisor=None,
        brokerage_rate=Decimal("5"),
        brokerage_unit=RateUnit.PER_BAG,
        egb_rate=Decimal("1"),
    )
    data.update(overrides)
    return OwnerTerms(**data)


def test_owner_and_manager_phase_worked_example():
    owner = compute_owner_phase(100, Decimal("7500"), _owner_terms())

    assert owner.total_sute == Decimal("200.00")
    assert owner.sute_net_weight == Decimal("7300.00")
    assert owner.divisor == Decimal("100")
    assert owner.base_rate_total == Decimal("146000.00")
    assert owner.brokerage_total == Decimal("500.00")
    assert owner.egb_total == Decimal("100.00")
    assert owner.owner_total == Decimal("146600.00")

    manager = compute_manager_phase(
        100,
        Decimal("7500"),
        owner.owner_total,
        owner.sute_net_weight,
        ManagerTerms(
            lf_rate=Decimal("3"), lf_unit=RateUnit.PER_BAG, hamali_rate=Decimal("4"), hamali_unit=RateUnit.PER_BAG
        ),
    )
    assert manager.lf_total == Decimal("300.00")
    assert manager.hamali_total == Decimal("400.00")
    assert manager.grand_total == Decimal("147300.00")
    assert manager.average == Decimal("20.18")


def test_sute_is_never_part_of_the_money_total():
    with_sute = compute_owner_phase(100, Decimal("7500"), _owner_terms())
    no_sute = compute_owner_phase(100, Decimal("7500"), _owner_terms(sute_rate=Decimal("0")))

    # sute only shrinks the weight the base rate applies to
    assert no_sute.base_rate_total - with_sute.base_rate_total == Decimal("4000.00")
    assert with_sute.owner_total == with_sute.base_rate_total + with_sute.brokerage_total + with_sute.egb_total


def test_sute_per_ton_uses_net_weight():
    r = compute_owner_phase(100, Decimal("7500"), _owner_terms(sute_unit=SuteUnit.PER_TON, sute_rate=Decimal("10")))
    # 7500 kg = 7.5 t
    assert r.total_sute == Decimal("75.00")
    assert r.sute_net_weight == Decimal("7425.00")


def test_wb_rate_type_gets_no_egb_and_per_bag_divisor():
    r = compute_owner_phase(
        100,
        Decimal("7500"),
        _owner_terms(base_rate_type=BaseRateType.PD_WB, base_rate_unit=RateUnit.PER_BAG, egb_rate=None),
    )
    assert r.divisor == Decimal("75")
    assert r.egb_total == Decimal("0.00")
    # 7300 / 75 * 2000
    assert r.base_rate_total == Decimal("194666.67")


def test_md_loose_uses_custom_divisor_for_base_and_brokerage():
    r = compute_owner_phase(
        100,
        Decimal("7500"),
        _owner_terms(
            base_rate_type=BaseRateType.MD_LOOSE,
            custom_divisor=Decimal("50"),
            brokerage_unit=RateUnit.PER_QUINTAL,
        ),
    )
    assert r.divisor == Decimal("50")
    assert r.base_rate_total == Decimal("292000.00")
    # brokerage on the full net weight: 7500 / 50 * 5
    assert r.brokerage_total == Decimal("750.00")


def test_md_loose_without_divisor_is_rejected():
    with pytest.raises(ValidationError):
        compute_owner_phase(100, Decimal("7500"), _owner_terms(base_rate_type=BaseRateType.MD_LOOSE))


def test_sute_larger_than_net_weight_is_rejected():
    with pytest.raises(ValidationError):
        compute_owner_phase(100, Decimal("150"), _owner_terms(sute_rate=Decimal("2")))


def test_average_is_zero_without_sute_net_weight():
    r = compute_manager_phase(
        10,
        Decimal("0"),
        Decimal("0"),
        Decimal("0"),
        ManagerTerms(lf_rate=Decimal("1"), lf_unit=RateUnit.PER_QUINTAL, hamali_rate=Decimal("0"), hamali_unit=RateUnit.PER_BAG),
    )
    assert r.average == Decimal("0.00")


def _offer(**overrides):
    data = dict(
        base_rate_type="PD_LOOSE",
        base_rate_unit="PER_QUINTAL",
        offer_base_rate_value=Decimal("2000"),
        custom_divisor=None,
        egb_value=Decimal("1"),
        sute_value=Decimal("2"),
        sute_unit="PER_BAG",
        brokerage_value=Decimal("5"),
        brokerage_unit="PER_BAG",
        lf_value=Decimal("3"),
        lf_unit="PER_BAG",
        hamali_value=Decimal("4"),
        hamali_unit="PER_BAG",
    )
    data.update(overrides)
    return SimpleNamespace(**data)


def test_owner_terms_default_from_offer_and_input_wins():
    terms = resolve_owner_terms(OwnerSettlementInput(brokerage_rate="6"), _offer())
    assert terms.base_rate_type == BaseRateType.PD_LOOSE
    assert terms.base_rate_value == Decimal("2000")
    assert terms.sute_rate == Decimal("2")
    assert terms.brokerage_rate == Decimal("6")
    assert terms.egb_rate == Decimal("1")


def test_owner_terms_reject_egb_for_wb_types():
    with pytest.raises(ValidationError) as exc:
        resolve_owner_terms(OwnerSettlementInput(base_rate_type="MD_WB", egb_rate="1"), _offer())
    assert any("egb_rate" in m for m in exc.value.errors)


def test_owner_terms_without_offer_need_base_rate():
    with pytest.raises(ValidationError) as exc:
        resolve_owner_terms(OwnerSettlementInput(), None)
    joined = " ".join(exc.value.errors)
    assert "base_rate_type" in joined
    assert "base_rate_value" in joined


def test_manager_terms_default_from_offer():
    terms = resolve_manager_terms(ManagerSettlementInput(hamali_unit="PER_QUINTAL"), _offer())
    assert terms.lf_rate == Decimal("3")
    assert terms.hamali_rate == Decimal("4")
    assert terms.hamali_unit == RateUnit.PER_QUINTAL


def test_review_summary_uses_sute_net_weight_scale():
    rows = [
        SimpleNamespace(
            weight_record=SimpleNamespace(bags=100, net_weight=Decimal("7500")),
            sute_net_weight=Decimal("7300"),
            total_amount=Decimal("147300"),
        ),
        SimpleNamespace(
            weight_record=SimpleNamespace(bags=50, net_weight=Decimal("3750")),
            sute_net_weight=Decimal("3650"),
            total_amount=Decimal("73650"),
        ),
    ]
    s = review_summary(rows)
    assert s["trips"] == 2
    assert s["total_bags"] == 150
    assert s["total_amount"] == "220950.00"
    assert s["average"] == "20.18"
