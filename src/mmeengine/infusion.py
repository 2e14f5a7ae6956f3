# src/mmeengine/infusion.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from .helpers import format_number, is_usable, round_half_away
from .registry import DEFAULT_REGISTRY, DrugRegistry
from .types import CSCIError, CSCIResult, IVResult

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 24.0


@dataclass(frozen=True)
class StockUnits:
    """
    Display units derived from a stock concentration unit.
    amount : unit of a dose of drug   (mg)
    hourly : unit of an hourly rate  (mg/hr)
    """
    amount: str
    hourly: str


UNIT_TABLE: dict[str, StockUnits] = {
    "mg/ml": StockUnits(amount="mg", hourly="mg/hr"),
    "mcg/ml": StockUnits(amount="mcg", hourly="mcg/hr"),
}


def stock_units(unit: str) -> StockUnits:
    try:
        return UNIT_TABLE[unit]
    except KeyError:
        raise ValueError(f"unit must be one of {sorted(UNIT_TABLE)} (got {unit!r}).") from None


def tdd_from_rate(drug_amount: float, fluid_volume: float, rate_ml_per_hr: float) -> float:
    """
    Total daily dose delivered by a running infusion.

    Example: 100 mg in 50 ml at 2 ml/hr -> 2 mg/ml * 2 ml/hr * 24 h = 96 mg/day.
    Returns 0 while any field is blank.
    """
    if not (is_usable(drug_amount) and is_usable(fluid_volume) and is_usable(rate_ml_per_hr)):
        return 0.0
    concentration = drug_amount / fluid_volume
    return round_half_away(concentration * rate_ml_per_hr * HOURS_PER_DAY, 2)


def prepare_csci(drug_key: Optional[str], total_dose: float, syringe_size_ml: float,
                 total_volume_ml: float, brand: str = "BD",
                 registry: DrugRegistry = DEFAULT_REGISTRY) -> Optional[Union[CSCIResult, CSCIError]]:
    """
    Fill a syringe driver with 24 hours of drug for continuous subcutaneous infusion.

    drug_key        : rotation target with a stock solution (e.g., "morphine_csci")
    total_dose      : dose for 24 h, in the stock's amount unit
    syringe_size_ml : nominal syringe size, selects the barrel length for mm/hr pumps
    total_volume_ml : final volume after adding diluent (NSS)

    If the stock alone would overflow total_volume_ml a CSCIError is returned,
    carrying the drug volume so the caller can ask for a larger volume.
    """
    target = registry.rotation_target(drug_key)
    if target is None or target.drug_info is None:
        logger.debug("prepare_csci: %r has no stock solution", drug_key)
        return None

    info = target.drug_info
    drug_volume = total_dose / info.concentration
    diluent_volume = total_volume_ml - drug_volume

    if diluent_volume < 0:
        logger.warning("prepare_csci: %.2f ml of %s exceeds total volume %.2f ml",
                       drug_volume, info.name, total_volume_ml)
        return CSCIError(error="Drug volume exceeds total volume",
                         drug_volume=round_half_away(drug_volume, 2))

    rate_ml_per_hr = total_volume_ml / HOURS_PER_DAY
    length_mm = registry.syringe_length(syringe_size_ml, brand)
    if length_mm is None:
        logger.warning("prepare_csci: no barrel length for %s %s ml syringe, mm/hr rate set to 0",
                       brand, syringe_size_ml)
        length_mm = 0.0
    rate_mm_per_hr = length_mm / HOURS_PER_DAY

    units = stock_units(info.unit)
    order_text = (
        f"{info.name} {format_number(total_dose)}{units.amount} + NSS "
        f"{format_number(round_half_away(diluent_volume, 2))}ml "
        f"in {format_number(total_volume_ml)}ml syringe, "
        f"infuse at {format_number(round_half_away(rate_ml_per_hr, 2))}ml/hr via CSCI pump"
    )

    return CSCIResult(
        drug_volume=round_half_away(drug_volume, 2),
        diluent_volume=round_half_away(diluent_volume, 2),
        rate_ml_per_hr=round_half_away(rate_ml_per_hr, 2),
        rate_mm_per_hr=round_half_away(rate_mm_per_hr, 2),
        concentration=info.concentration,
        total_volume=total_volume_ml,
        syringe_size=syringe_size_ml,
        order_text=order_text,
    )


def prepare_iv_infusion(drug_key: Optional[str], total_dose: float, fluid_volume_ml: float,
                        registry: DrugRegistry = DEFAULT_REGISTRY) -> Optional[IVResult]:
    """
    Mix 24 hours of drug into a bag of NSS for continuous IV infusion.

    Example: Morphine 30 mg in 100 ml -> 3 ml of 10 mg/ml stock,
    0.3 mg/ml in the bag, 1.25 mg/hr.
    """
    target = registry.rotation_target(drug_key)
    if target is None or target.drug_info is None:
        logger.debug("prepare_iv_infusion: %r has no stock solution", drug_key)
        return None
    if not is_usable(fluid_volume_ml):
        return None

    info = target.drug_info
    units = stock_units(info.unit)
    drug_volume = total_dose / info.concentration
    final_concentration = round_half_away(total_dose / fluid_volume_ml, 2)
    dose_per_hour = total_dose / HOURS_PER_DAY

    order_text = (
        f"{info.name} {format_number(total_dose)}{units.amount} "
        f"in {format_number(fluid_volume_ml)}ml NSS "
        f"(concentration: {format_number(final_concentration)}{info.unit}), infuse continuously"
    )

    return IVResult(
        drug_volume=round_half_away(drug_volume, 2),
        concentration=final_concentration,
        concentration_unit=f"{info.unit} in {format_number(fluid_volume_ml)}ml",
        dose_per_hour=round_half_away(dose_per_hour, 2),
        dose_unit=units.hourly,
        fluid_volume=fluid_volume_ml,
        order_text=order_text,
    )
