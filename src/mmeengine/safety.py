# src/mmeengine/safety.py
from __future__ import annotations

from collections import Counter
from typing import Iterable, Sequence

from .helpers import format_number
from .metrics import aggregate
from .registry import CLINICAL_PEARLS, DEFAULT_REGISTRY, ClinicalPearls, DrugRegistry
from .types import MedicationEntry, SafetyReport


def validate_safety(basal_entries: Sequence[MedicationEntry],
                    breakthrough_entries: Sequence[MedicationEntry] = (),
                    rotation_basal_entries: Sequence[MedicationEntry] = (),
                    registry: DrugRegistry = DEFAULT_REGISTRY,
                    pearls: ClinicalPearls = CLINICAL_PEARLS) -> SafetyReport:
    """
    Review a regimen for combinations a prescriber should double-check:
      - more than one drug of the same dosage form (e.g., two oral opioids)
      - total MME above pearls.high_mme_threshold
      - PRN share above pearls.high_prn_ratio_percent (basal probably too low)
    """
    warnings: list[str] = []

    duplicated = _duplicated_forms(basal_entries, registry)
    if duplicated:
        warnings.append(f"More than one drug of the same form: {', '.join(duplicated)}")

    breakdown = aggregate(basal_entries, breakthrough_entries, rotation_basal_entries, registry)
    if breakdown.total > pearls.high_mme_threshold:
        warnings.append(
            f"Total MME is very high (> {format_number(pearls.high_mme_threshold)} mg), use extra caution"
        )
    if breakdown.breakthrough_ratio > pearls.high_prn_ratio_percent:
        warnings.append(
            f"PRN ratio is too high (> {format_number(pearls.high_prn_ratio_percent)}%), consider increasing basal"
        )

    return SafetyReport(warnings=tuple(warnings), errors=())


def _duplicated_forms(entries: Iterable[MedicationEntry], registry: DrugRegistry) -> list[str]:
    forms = Counter()
    for e in entries:
        drug = registry.drug(e.key)
        if drug is not None and drug.form:
            forms[drug.form] += 1
    return sorted(form for form, n in forms.items() if n > 1)
