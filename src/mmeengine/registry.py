# src/mmeengine/registry.py
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from .types import DrugDefinition, DrugInfo


@dataclass(frozen=True)
class ClinicalPearls:
    """
    Clinical defaults the engine falls back to when the caller does not pass a value.

    prn_percent_min/max/default  : breakthrough dose as % of total daily MME
    rotation_reduction_standard  : cross-tolerance reduction for a routine switch (%)
    rotation_reduction_conservative : reduction for frail / uncertain patients (%)
    high_mme_threshold           : total MME above which a safety warning is raised
    high_prn_ratio_percent       : PRN share of total MME above which basal should be reviewed
    prn_basal_increase_fraction  : share of yesterday's PRN MME moved into basal when titrating
    """
    prn_percent_min: float = 10.0
    prn_percent_max: float = 15.0
    prn_percent_default: float = 10.0
    rotation_reduction_standard: float = 25.0
    rotation_reduction_conservative: float = 50.0
    high_mme_threshold: float = 200.0
    high_prn_ratio_percent: float = 20.0
    prn_basal_increase_fraction: float = 0.5


CLINICAL_PEARLS = ClinicalPearls()


class DrugRegistry:
    """
    Read-only lookup over the reference tables.

    drugs          : basal / breakthrough drugs a patient may currently be on
    rotation_drugs : targets an opioid rotation may switch to
    syringes       : brand -> {size_ml: barrel length in mm}
    """

    def __init__(self, drugs: Mapping[str, DrugDefinition],
                 rotation_drugs: Mapping[str, DrugDefinition],
                 syringes: Mapping[str, Mapping[float, float]]):
        self._drugs = MappingProxyType(dict(drugs))
        self._rotation_drugs = MappingProxyType(dict(rotation_drugs))
        self._syringes = MappingProxyType({
            brand: MappingProxyType(dict(sizes)) for brand, sizes in syringes.items()
        })

    @property
    def drugs(self) -> Mapping[str, DrugDefinition]:
        return self._drugs

    @property
    def rotation_drugs(self) -> Mapping[str, DrugDefinition]:
        return self._rotation_drugs

    @property
    def syringes(self) -> Mapping[str, Mapping[float, float]]:
        return self._syringes

    def lookup(self, key: Optional[str]) -> Optional[DrugDefinition]:
        """Find a drug in either table; the current-drug table wins on shared keys."""
        if not key:
            return None
        return self._drugs.get(key) or self._rotation_drugs.get(key)

    def drug(self, key: Optional[str]) -> Optional[DrugDefinition]:
        return self._drugs.get(key) if key else None

    def rotation_target(self, key: Optional[str]) -> Optional[DrugDefinition]:
        return self._rotation_drugs.get(key) if key else None

    def syringe_length(self, size_ml: float, brand: str = "BD") -> Optional[float]:
        return self._syringes.get(brand, {}).get(size_ml)

    def basal_drugs(self) -> list[str]:
        return [k for k, d in self._drugs.items() if d.is_basal]

    def breakthrough_drugs(self) -> list[str]:
        return [k for k, d in self._drugs.items() if d.is_breakthrough]


# --------------------------
# Reference data
# --------------------------
MORPHINE_STOCK = DrugInfo(name="Morphine", concentration=10.0, unit="mg/ml")
FENTANYL_STOCK = DrugInfo(name="Fentanyl", concentration=50.0, unit="mcg/ml")

DRUG_CONFIG: dict[str, DrugDefinition] = {
    "fentanyl_patch": DrugDefinition(name="Fentanyl Patch", factor=2.4, unit="mcg/hr",
                                     form="patch", is_basal=True, step=12.5),
    "mst_10": DrugDefinition(name="MST 10mg", factor=1.0, unit="tab/day", form="oral",
                             is_basal=True, strength=10.0, step=1.0),
    "mst_30": DrugDefinition(name="MST 30mg", factor=1.0, unit="tab/day", form="oral",
                             is_basal=True, strength=30.0, step=1.0),
    "kapanol_20": DrugDefinition(name="Kapanol 20mg", factor=1.0, unit="cap/day", form="oral",
                                 is_basal=True, strength=20.0, step=1.0),
    "morphine_iv_sc": DrugDefinition(name="Morphine IV/SC", factor=3.0, unit="mg/day",
                                     form="injectable", is_basal=True, is_breakthrough=True),
    "fentanyl_iv_sc": DrugDefinition(name="Fentanyl IV/SC", factor=0.3, unit="mcg/day",
                                     form="injectable", is_basal=True, is_breakthrough=True),
    "morphine_ir_tab_10": DrugDefinition(name="Morphine IR 10mg", factor=1.0, unit="tab/day",
                                         form="oral", is_breakthrough=True, strength=10.0, step=1.0),
    "morphine_syrup": DrugDefinition(name="Morphine Syrup 2mg/ml", factor=1.0, unit="mL/day",
                                     form="oral", is_breakthrough=True, strength=2.0),
}

ROTATION_DRUGS: dict[str, DrugDefinition] = {
    "fentanyl_patch": DrugDefinition(name="Fentanyl Patch", factor=2.4, unit="mcg/hr", form="patch",
                                     allowed_doses=(12.5, 25.0, 50.0, 75.0, 100.0)),
    "morphine_sr": DrugDefinition(name="Morphine SR", factor=1.0, unit="mg/day", form="oral"),
    "morphine_iv_infusion": DrugDefinition(name="Morphine (IV Infusion)", factor=3.0, unit="mg/day",
                                           form="injectable", helper="iv_infusion",
                                           drug_info=MORPHINE_STOCK),
    "fentanyl_iv_infusion": DrugDefinition(name="Fentanyl (IV Infusion)", factor=0.3, unit="mcg/day",
                                           form="injectable", helper="iv_infusion",
                                           drug_info=FENTANYL_STOCK),
    "morphine_csci": DrugDefinition(name="Morphine (CSCI)", factor=3.0, unit="mg/day",
                                    form="injectable", helper="csci", drug_info=MORPHINE_STOCK),
    "fentanyl_csci": DrugDefinition(name="Fentanyl (CSCI)", factor=0.3, unit="mcg/day",
                                    form="injectable", helper="csci", drug_info=FENTANYL_STOCK),
}

# Plunger travel for a full barrel (mm), used by pumps set in mm/hr.
SYRINGE_DATA: dict[str, dict[float, float]] = {
    "BD": {20: 88.0, 30: 87.5, 50: 123.0},
}

# Quick-reference conversion factors (MME = dose / factor). None = not linear (methadone).
MME_REFERENCE: dict[str, dict[str, Optional[float]]] = {
    "morphine": {"oral": 1.0, "iv": 3.0, "sc": 3.0},
    "fentanyl": {"patch": 2.4, "iv": 0.3, "sc": 0.3},
    "oxycodone": {"oral": 1.5},
    "hydromorphone": {"oral": 4.0, "iv": 20.0},
    "methadone": {"oral": None},
}

DEFAULT_REGISTRY = DrugRegistry(DRUG_CONFIG, ROTATION_DRUGS, SYRINGE_DATA)
