# src/mmeengine/dosing.py
from __future__ import annotations

import logging
from typing import Optional

from .conversion import dose_from_mme
from .helpers import is_usable, nearest_allowed_dose, round_dose, round_half_away
from .registry import CLINICAL_PEARLS, DEFAULT_REGISTRY, DrugRegistry
from .types import BreakthroughRecommendation, DrugDefinition, RotationResult

logger = logging.getLogger(__name__)


def recommend_breakthrough(total_mme: float, drug_key: Optional[str],
                           percent: float = CLINICAL_PEARLS.prn_percent_default,
                           registry: DrugRegistry = DEFAULT_REGISTRY) -> Optional[BreakthroughRecommendation]:
    """
    Suggest a PRN dose worth `percent` % of the total daily MME.

    Example: 100 MME/day, Morphine IR 10mg, 15% -> 15 MME -> 1.5 tab -> 2 tab (step 1).

    Returns None while there is nothing to recommend (no MME yet, no drug
    chosen, or the drug is not a breakthrough drug).
    """
    if not (is_usable(total_mme) and total_mme > 0):
        return None
    drug = registry.drug(drug_key)
    if drug is None or not drug.is_breakthrough:
        logger.debug("recommend_breakthrough: %r is not a breakthrough drug", drug_key)
        return None

    target_mme = total_mme * percent / 100.0
    dose = round_dose(dose_from_mme(drug, target_mme), drug)

    return BreakthroughRecommendation(
        drug=drug.name,
        dose=dose,
        unit=drug.unit,
        target_mme=round_half_away(target_mme, 2),
        percent=percent,
    )


def rotate(target_drug_key: Optional[str], current_mme: float,
           reduction_percent: float = CLINICAL_PEARLS.rotation_reduction_standard,
           registry: DrugRegistry = DEFAULT_REGISTRY) -> Optional[RotationResult]:
    """
    Switch to another opioid/route at an equianalgesic dose, less a safety reduction
    for incomplete cross-tolerance (25% by default).

    current_mme       : MME the patient is on now
    reduction_percent : % taken off before converting (e.g., 25 or 50)

    The rounded reduced MME is only reported; the dose is derived from the unrounded value.
    """
    if not is_usable(current_mme):
        return None
    target = registry.rotation_target(target_drug_key)
    if target is None:
        logger.debug("rotate: unknown rotation target %r", target_drug_key)
        return None

    reduced_mme = current_mme * (1.0 - reduction_percent / 100.0)
    dose = _round_rotation_dose(dose_from_mme(target, reduced_mme), target)

    return RotationResult(
        drug=target.name,
        dose=dose,
        unit=target.unit,
        original_mme=current_mme,
        reduced_mme=round_half_away(reduced_mme, 2),
        reduction_percent=reduction_percent,
        helper=target.helper,
        drug_info=target.drug_info,
    )


def _round_rotation_dose(dose: float, target: DrugDefinition) -> float:
    # Rungs first (patch sizes), then 0.1 for high-potency drugs, else whole units.
    if target.allowed_doses:
        return nearest_allowed_dose(dose, target.allowed_doses)
    if target.factor < 1:
        return round_half_away(dose, 1)
    return round_half_away(dose, 0)
