import math
import numpy as np
import pytest

from mmeengine.conversion import mme_of, dose_from_mme
from mmeengine.registry import DEFAULT_REGISTRY, DrugRegistry
from mmeengine.types import DrugDefinition


def test_fentanyl_patch_mme():
    """25 mcg/hr / 2.4 = 10.416... -> 10.42"""
    assert mme_of("fentanyl_patch", 25) == 10.42


def test_tablet_strength_mme():
    """3 tabs of MST 10mg = 30 MME (dose is a count when strength is set)."""
    assert mme_of("mst_10", 3) == 30


def test_unknown_drug_and_blank_dose_give_zero():
    assert mme_of("invalid_drug", 25) == 0
    assert mme_of(None, 25) == 0
    assert mme_of("fentanyl_patch", 0) == 0
    assert mme_of("fentanyl_patch", None) == 0
    assert mme_of("fentanyl_patch", float("nan")) == 0


def test_negative_dose_is_not_treated_as_blank():
    """Only zero/None/NaN short-circuit; negatives go through the arithmetic."""
    assert mme_of("morphine_iv_sc", -3) == -1.0


def test_rotation_table_is_searched_too():
    assert mme_of("morphine_sr", 60) == 60


def test_mme_is_homogeneous():
    """Doubling the dose doubles the MME for drugs without rung snapping."""
    for key, dose in [("morphine_syrup", 7.3), ("morphine_iv_sc", 13), ("fentanyl_iv_sc", 250)]:
        assert np.isclose(mme_of(key, 2 * dose), 2 * mme_of(key, dose), atol=0.01)


def test_dose_round_trip_through_inverse():
    """dose -> MME -> dose recovers the dose for a drug with no step or rungs."""
    syrup = DEFAULT_REGISTRY.lookup("morphine_syrup")
    for dose in (2.5, 7.5, 12.25):
        back = dose_from_mme(syrup, mme_of("morphine_syrup", dose))
        assert math.isclose(back, dose, abs_tol=0.01)


def test_custom_registry_is_used():
    reg = DrugRegistry(
        drugs={"oxycodone_po": DrugDefinition(name="Oxycodone", factor=1 / 1.5, unit="mg/day")},
        rotation_drugs={},
        syringes={},
    )
    assert mme_of("oxycodone_po", 20, registry=reg) == 30
    assert mme_of("fentanyl_patch", 25, registry=reg) == 0


def test_non_positive_factor_is_rejected():
    with pytest.raises(ValueError):
        DrugDefinition(name="Broken", factor=0, unit="mg/day")
