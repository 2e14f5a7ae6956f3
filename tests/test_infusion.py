import pytest

from mmeengine.infusion import prepare_csci, prepare_iv_infusion, stock_units, tdd_from_rate
from mmeengine.types import CSCIError, CSCIResult


def test_tdd_from_rate():
    """100 mg in 50 ml at 2 ml/hr -> 2 mg/ml * 2 * 24 = 96 mg/day."""
    assert tdd_from_rate(100, 50, 2) == 96


def test_tdd_from_rate_blank_inputs():
    assert tdd_from_rate(0, 50, 2) == 0
    assert tdd_from_rate(100, 0, 2) == 0
    assert tdd_from_rate(100, 50, None) == 0


def test_csci_morphine():
    """30 mg at 10 mg/ml = 3 ml stock + 12 ml NSS in 15 ml, 0.625 ml/hr, BD 20 ml barrel 88 mm."""
    res = prepare_csci("morphine_csci", 30, 20, 15)
    assert isinstance(res, CSCIResult)
    assert res.drug_volume == 3
    assert res.diluent_volume == 12
    assert res.rate_ml_per_hr == 0.63
    assert res.rate_mm_per_hr == 3.67
    assert res.concentration == 10
    assert res.total_volume == 15
    assert res.syringe_size == 20
    assert res.order_text == "Morphine 30mg + NSS 12ml in 15ml syringe, infuse at 0.63ml/hr via CSCI pump"


def test_csci_fentanyl_uses_mcg():
    res = prepare_csci("fentanyl_csci", 600, 50, 20)
    assert res.drug_volume == 12
    assert res.diluent_volume == 8
    assert res.rate_ml_per_hr == 0.83
    assert res.rate_mm_per_hr == 5.13  # 123 mm / 24
    assert res.order_text.startswith("Fentanyl 600mcg + NSS 8ml in 20ml syringe")


def test_csci_overflow_is_a_result_not_an_exception():
    res = prepare_csci("morphine_csci", 200, 20, 15)  # needs 20 ml of stock
    assert isinstance(res, CSCIError)
    assert res.drug_volume == 20
    assert res.error
    assert not hasattr(res, "diluent_volume")


def test_csci_unknown_syringe_size_gives_zero_mm_rate():
    res = prepare_csci("morphine_csci", 30, 10, 15)
    assert res.rate_mm_per_hr == 0


def test_csci_needs_a_stock_solution():
    assert prepare_csci("morphine_sr", 30, 20, 15) is None
    assert prepare_csci("nope", 30, 20, 15) is None


def test_iv_infusion_morphine():
    res = prepare_iv_infusion("morphine_iv_infusion", 30, 100)
    assert res.drug_volume == 3
    assert res.concentration == 0.3
    assert res.concentration_unit == "mg/ml in 100ml"
    assert res.dose_per_hour == 1.25
    assert res.dose_unit == "mg/hr"
    assert res.fluid_volume == 100
    assert res.order_text == "Morphine 30mg in 100ml NSS (concentration: 0.3mg/ml), infuse continuously"


def test_iv_infusion_fentanyl():
    res = prepare_iv_infusion("fentanyl_iv_infusion", 1200, 100)
    assert res.drug_volume == 24
    assert res.concentration == 12
    assert res.dose_per_hour == 50
    assert res.dose_unit == "mcg/hr"
    assert res.concentration_unit == "mcg/ml in 100ml"


def test_iv_infusion_not_applicable():
    assert prepare_iv_infusion("fentanyl_patch", 30, 100) is None
    assert prepare_iv_infusion("morphine_iv_infusion", 30, 0) is None


def test_unknown_stock_unit():
    with pytest.raises(ValueError):
        stock_units("mmol/ml")
