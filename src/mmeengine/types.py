# src/mmeengine/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional, Sequence

# All potencies are expressed in MME (oral morphine mg per day) internally.
Helper = Literal["csci", "iv_infusion"]
Form = Literal["patch", "oral", "injectable"]


@dataclass(frozen=True)
class DrugInfo:
    """
    Stock solution used when preparing an infusion.

    name          : generic name printed on orders (e.g., "Morphine")
    concentration : amount of drug per mL of stock (e.g., 10 for 10 mg/ml)
    unit          : unit of the concentration ("mg/ml" or "mcg/ml")
    """
    name: str
    concentration: float
    unit: str

    def __post_init__(self):
        if not (self.concentration > 0):
            raise ValueError(f"concentration must be > 0 (got {self.concentration}).")


@dataclass(frozen=True)
class DrugDefinition:
    """
    Potency conversion entry for one drug in the registry.

    name            : display label
    factor          : conversion divisor; MME = dose * strength / factor (or dose / factor)
    unit            : display unit for the dose
    strength        : potency of one dosing unit (tablet, mL). When set, dose is a unit count.
    step            : smallest dose increment; None means "round to 2 decimals"
    is_basal        : usable as scheduled background dosing
    is_breakthrough : usable as as-needed (PRN) dosing
    allowed_doses   : discrete manufactured strengths (e.g., patch sizes), in ascending order
    drug_info       : stock solution for infusion workflows
    helper          : which infusion workflow applies to this rotation target
    form            : dosage form category (patch / oral / injectable)
    """
    name: str
    factor: float
    unit: str
    strength: Optional[float] = None
    step: Optional[float] = None
    is_basal: bool = False
    is_breakthrough: bool = False
    allowed_doses: Optional[tuple[float, ...]] = None
    drug_info: Optional[DrugInfo] = None
    helper: Optional[Helper] = None
    form: Optional[Form] = None

    def __post_init__(self):
        if not (self.factor > 0):
            raise ValueError(f"factor must be > 0 (got {self.factor}).")
        if self.step is not None and not (self.step > 0):
            raise ValueError(f"step must be > 0 (got {self.step}).")
        if self.allowed_doses is not None and len(self.allowed_doses) == 0:
            raise ValueError("allowed_doses must not be empty when given.")


@dataclass(frozen=True)
class MedicationEntry:
    """
    One row the caller entered: which drug, and how much per day.

    key  : registry identifier; may be empty or unknown while the user is still choosing
    dose : daily dose in the drug's own unit; None while the field is blank
    """
    key: Optional[str]
    dose: Optional[float] = None


@dataclass(frozen=True)
class MMEBreakdown:
    basal: float
    breakthrough: float
    total: float
    breakthrough_ratio: int


@dataclass(frozen=True)
class BalancePair:
    """
    Two drugs to trade off against each other. Both keys set, or neither.
    """
    decrease_key: Optional[str] = None
    increase_key: Optional[str] = None

    def __post_init__(self):
        if (self.decrease_key is None) != (self.increase_key is None):
            raise ValueError("decrease_key and increase_key must both be set or both be None.")
        if self.decrease_key is not None and self.decrease_key == self.increase_key:
            raise ValueError(f"decrease_key and increase_key must differ (got {self.decrease_key!r}).")

    @property
    def is_set(self) -> bool:
        return self.decrease_key is not None


@dataclass(frozen=True)
class BreakthroughRecommendation:
    drug: str
    dose: float
    unit: str
    target_mme: float
    percent: float


@dataclass(frozen=True)
class RotationResult:
    """
    Outcome of switching to a new opioid/route.

    original_mme      : the MME the patient is on now
    reduced_mme       : MME after the cross-tolerance reduction (rounded for display)
    reduction_percent : reduction applied, in percent
    helper/drug_info  : copied from the registry so callers can open the right infusion workflow
    """
    drug: str
    dose: float
    unit: str
    original_mme: float
    reduced_mme: float
    reduction_percent: float
    helper: Optional[Helper] = None
    drug_info: Optional[DrugInfo] = None


@dataclass(frozen=True)
class CSCIResult:
    drug_volume: float
    diluent_volume: float
    rate_ml_per_hr: float
    rate_mm_per_hr: float
    concentration: float
    total_volume: float
    syringe_size: float
    order_text: str


@dataclass(frozen=True)
class CSCIError:
    """
    The requested dose does not fit in the chosen total volume at the stock concentration.
    drug_volume is reported so the caller can suggest a larger volume.
    """
    error: str
    drug_volume: float


@dataclass(frozen=True)
class IVResult:
    drug_volume: float
    concentration: float
    concentration_unit: str
    dose_per_hour: float
    dose_unit: str
    fluid_volume: float
    order_text: str


@dataclass(frozen=True)
class SafetyReport:
    warnings: Sequence[str] = field(default_factory=tuple)
    errors: Sequence[str] = field(default_factory=tuple)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0
