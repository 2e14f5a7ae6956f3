# src/mmeengine/titration.py
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Collection, Optional, Sequence

from .conversion import dose_from_mme, mme_of
from .helpers import is_usable, round_dose
from .registry import CLINICAL_PEARLS, DEFAULT_REGISTRY, DrugRegistry
from .types import MedicationEntry

logger = logging.getLogger(__name__)


def _scaled(entry: MedicationEntry, multiplier: float, registry: DrugRegistry) -> MedicationEntry:
    new_dose = round_dose(float(entry.dose) * multiplier, registry.lookup(entry.key))
    return replace(entry, dose=new_dose)


def adjust_by_percentage(entries: Sequence[MedicationEntry], percent: float,
                         locked_keys: Collection[str] = (),
                         registry: DrugRegistry = DEFAULT_REGISTRY) -> list[MedicationEntry]:
    """
    Scale every unlocked basal dose by `percent` (e.g., +25 or -10).
    Locked rows and rows without a dose come back unchanged. Returns a new list.
    """
    multiplier = 1.0 + percent / 100.0
    out: list[MedicationEntry] = []
    for e in entries:
        if e.key and is_usable(e.dose) and e.key not in locked_keys:
            out.append(_scaled(e, multiplier, registry))
        else:
            out.append(e)
    return out


def adjust_balance(entries: Sequence[MedicationEntry], decrease_key: Optional[str],
                   increase_key: Optional[str], percent: float,
                   registry: DrugRegistry = DEFAULT_REGISTRY) -> list[MedicationEntry]:
    """
    Shift load from one drug to another: decrease_key goes down by |percent| %,
    increase_key goes up by |percent| %. The sign of percent is ignored.
    """
    step = abs(percent) / 100.0
    out: list[MedicationEntry] = []
    for e in entries:
        if e.key and is_usable(e.dose) and e.key == decrease_key:
            out.append(_scaled(e, 1.0 - step, registry))
        elif e.key and is_usable(e.dose) and e.key == increase_key:
            out.append(_scaled(e, 1.0 + step, registry))
        else:
            out.append(e)
    return out


def titrate_from_prn(basal_entries: Sequence[MedicationEntry],
                     breakthrough_entries: Sequence[MedicationEntry],
                     pinned_key: Optional[str] = None,
                     fraction: float = CLINICAL_PEARLS.prn_basal_increase_fraction,
                     registry: DrugRegistry = DEFAULT_REGISTRY) -> list[MedicationEntry]:
    """
    Move part of yesterday's PRN use into the basal regimen.

    The increase is `fraction` of the PRN MME (half by default). With a pinned
    drug the whole increase goes to that drug's rows; otherwise it is split
    evenly across basal rows that are in use.
    """
    prn_mme = sum(
        mme_of(e.key, e.dose, registry)
        for e in breakthrough_entries
        if registry.drug(e.key) is not None and is_usable(e.dose) and e.dose > 0
    )
    if prn_mme <= 0:
        return list(basal_entries)

    increase = prn_mme * fraction
    if pinned_key:
        targets = [i for i, e in enumerate(basal_entries) if e.key == pinned_key]
        per_target = increase
    else:
        targets = [
            i for i, e in enumerate(basal_entries)
            if is_usable(e.dose) and e.dose > 0
            and registry.drug(e.key) is not None and registry.drug(e.key).is_basal
        ]
        per_target = increase / len(targets) if targets else 0.0

    if not targets:
        logger.debug("titrate_from_prn: no basal rows to receive %.2f MME", increase)
        return list(basal_entries)

    out = list(basal_entries)
    for i in targets:
        e = out[i]
        drug = registry.drug(e.key)
        if drug is None:
            continue
        current = float(e.dose) if is_usable(e.dose) else 0.0
        out[i] = replace(e, dose=round_dose(current + dose_from_mme(drug, per_target), drug))
    return out
