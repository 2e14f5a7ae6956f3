# src/mmeengine/metrics.py
from __future__ import annotations

from typing import Iterable

from .conversion import mme_of
from .helpers import is_usable, round_half_away
from .registry import DEFAULT_REGISTRY, DrugRegistry
from .types import MedicationEntry, MMEBreakdown


def sum_mme(entries: Iterable[MedicationEntry], registry: DrugRegistry = DEFAULT_REGISTRY) -> float:
    """Unrounded sum of per-entry MME. Rows without a drug or dose add nothing."""
    total = 0.0
    for e in entries:
        if e.key and is_usable(e.dose):
            total += mme_of(e.key, e.dose, registry)
    return total


def breakthrough_ratio(breakthrough_mme: float, total_mme: float) -> int:
    """PRN share of the total, as a whole percent. 0 when there is no total."""
    if total_mme <= 0:
        return 0
    return int(round_half_away(100.0 * breakthrough_mme / total_mme, 0))


def aggregate(basal_entries: Iterable[MedicationEntry],
              breakthrough_entries: Iterable[MedicationEntry],
              rotation_basal_entries: Iterable[MedicationEntry] = (),
              registry: DrugRegistry = DEFAULT_REGISTRY) -> MMEBreakdown:
    """
    Total daily MME split into basal and breakthrough.

    Rotation-basal rows (the regimen a patient is being switched *from*) count
    as basal. Sums are taken first and each figure rounded once at the end.
    """
    basal = sum_mme(basal_entries, registry) + sum_mme(rotation_basal_entries, registry)
    breakthrough = sum_mme(breakthrough_entries, registry)
    total = basal + breakthrough

    return MMEBreakdown(
        basal=round_half_away(basal, 2),
        breakthrough=round_half_away(breakthrough, 2),
        total=round_half_away(total, 2),
        breakthrough_ratio=breakthrough_ratio(breakthrough, total),
    )
