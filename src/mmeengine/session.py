# src/mmeengine/session.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .dosing import recommend_breakthrough, rotate
from .metrics import aggregate
from .registry import CLINICAL_PEARLS, DEFAULT_REGISTRY, DrugRegistry
from .safety import validate_safety
from .titration import adjust_balance, adjust_by_percentage, titrate_from_prn
from .types import (BalancePair, BreakthroughRecommendation, MedicationEntry,
                    MMEBreakdown, RotationResult, SafetyReport)


@dataclass
class CalculationSession:
    """
    Convenience wrapper holding the entry lists a form is currently showing.

    Nothing here is authoritative: every method recomputes from the cached
    lists through the pure functions. Callers replace the lists whenever the
    inputs change and serialize their own mutations.
    """
    basal: list[MedicationEntry] = field(default_factory=list)
    breakthrough: list[MedicationEntry] = field(default_factory=list)
    rotation_basal: list[MedicationEntry] = field(default_factory=list)
    locked_keys: set[str] = field(default_factory=set)
    balance_pair: BalancePair = field(default_factory=BalancePair)
    percent_adjustment: float = 0.0
    registry: DrugRegistry = DEFAULT_REGISTRY

    def total(self) -> MMEBreakdown:
        return aggregate(self.basal, self.breakthrough, self.rotation_basal, self.registry)

    def recommend_breakthrough(self, drug_key: str,
                               percent: float = CLINICAL_PEARLS.prn_percent_default) -> Optional[BreakthroughRecommendation]:
        return recommend_breakthrough(self.total().total, drug_key, percent, self.registry)

    def rotate(self, target_drug_key: str,
               reduction_percent: float = CLINICAL_PEARLS.rotation_reduction_standard) -> Optional[RotationResult]:
        return rotate(target_drug_key, self.total().total, reduction_percent, self.registry)

    def lock(self, key: str) -> None:
        self.locked_keys.add(key)

    def unlock(self, key: str) -> None:
        self.locked_keys.discard(key)

    def apply_percentage(self, percent: float) -> list[MedicationEntry]:
        self.percent_adjustment = percent
        self.basal = adjust_by_percentage(self.basal, percent, self.locked_keys, self.registry)
        return self.basal

    def apply_balance(self, decrease_key: str, increase_key: str, percent: float) -> list[MedicationEntry]:
        self.balance_pair = BalancePair(decrease_key, increase_key)
        self.basal = adjust_balance(self.basal, decrease_key, increase_key, percent, self.registry)
        return self.basal

    def apply_prn_titration(self, pinned_key: Optional[str] = None) -> list[MedicationEntry]:
        self.basal = titrate_from_prn(self.basal, self.breakthrough, pinned_key,
                                      registry=self.registry)
        return self.basal

    def validate(self) -> SafetyReport:
        return validate_safety(self.basal, self.breakthrough, self.rotation_basal, self.registry)

    def reset_titration(self) -> None:
        self.percent_adjustment = 0.0
        self.balance_pair = BalancePair()
