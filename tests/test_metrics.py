import numpy as np

from mmeengine.metrics import aggregate, breakthrough_ratio
from mmeengine.types import MedicationEntry as E, MMEBreakdown


def test_empty_regimen():
    assert aggregate([], [], []) == MMEBreakdown(basal=0, breakthrough=0, total=0, breakthrough_ratio=0)


def test_basal_only():
    """Patch 25 (10.42) + MST 10mg x3 (30) = 40.42 basal."""
    res = aggregate([E("fentanyl_patch", 25), E("mst_10", 3)], [])
    assert res.basal == 40.42
    assert res.breakthrough == 0
    assert res.total == 40.42
    assert res.breakthrough_ratio == 0


def test_breakthrough_is_kept_separate():
    res = aggregate([E("fentanyl_patch", 25)], [E("morphine_ir_tab_10", 2)])
    assert res.basal == 10.42
    assert res.breakthrough == 20
    assert res.total == 30.42
    assert res.breakthrough_ratio == 66  # 20 / 30.42 = 65.7%
    assert np.isclose(res.total, res.basal + res.breakthrough)


def test_rotation_basal_counts_as_basal():
    res = aggregate([E("mst_30", 2)], [], [E("morphine_sr", 60)])
    assert res.basal == 120
    assert res.breakthrough == 0


def test_incomplete_rows_are_ignored():
    res = aggregate(
        [E(None, 10), E("mst_10"), E("not_a_drug", 5), E("mst_10", 0), E("mst_10", 1)],
        [E("morphine_syrup", None)],
    )
    assert res == MMEBreakdown(basal=10, breakthrough=0, total=10, breakthrough_ratio=0)


def test_ratio_bounds():
    assert aggregate([], [E("morphine_ir_tab_10", 3)]).breakthrough_ratio == 100
    assert breakthrough_ratio(5, 0) == 0
    for basal_tabs in range(1, 10):
        r = aggregate([E("mst_10", basal_tabs)], [E("morphine_syrup", 5)]).breakthrough_ratio
        assert 0 <= r <= 100
