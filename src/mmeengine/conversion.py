# src/mmeengine/conversion.py
from __future__ import annotations

import logging
from typing import Optional

from .helpers import is_usable, round_half_away
from .registry import DEFAULT_REGISTRY, DrugRegistry
from .types import DrugDefinition

logger = logging.getLogger(__name__)


def mme_of(drug_key: Optional[str], dose: Optional[float],
           registry: DrugRegistry = DEFAULT_REGISTRY) -> float:
    """
    Convert a daily dose of one drug into oral morphine milligram equivalents.

      strength set : MME = dose * strength / factor   (dose is a tablet/mL count)
      otherwise    : MME = dose / factor

    Unknown drugs and blank doses give 0 rather than an error: the user may
    still be filling in the row. Result is rounded to 2 decimals.
    """
    drug = registry.lookup(drug_key)
    if drug is None:
        logger.debug("mme_of: unknown drug %r, contributing 0", drug_key)
        return 0.0
    if not is_usable(dose):
        return 0.0

    if drug.strength:
        mme = (float(dose) * drug.strength) / drug.factor
    else:
        mme = float(dose) / drug.factor
    return round_half_away(mme, 2)


def dose_from_mme(drug: DrugDefinition, mme: float) -> float:
    """
    Inverse of mme_of for a known drug, unrounded. Callers apply their own rounding policy.
    """
    if drug.strength:
        return (mme * drug.factor) / drug.strength
    return mme * drug.factor
