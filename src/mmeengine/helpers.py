# src/mmeengine/helpers.py
from __future__ import annotations

import math
from typing import Optional, Sequence

import numpy as np

from .types import DrugDefinition


def is_usable(value: Optional[float]) -> bool:
    """
    True when a number can take part in a calculation.
    Zero, None and NaN count as "not entered yet". Negative values are usable;
    rejecting them is the input layer's job.
    """
    if value is None:
        return False
    value = float(value)
    return not math.isnan(value) and value != 0.0


def round_half_away(x: float, decimals: int = 2) -> float:
    """
    Round to `decimals` places with halves going away from zero (2.345 -> 2.35, -0.5 -> -1).
    Python's round() and np.round() round halves to even, which clinicians do not expect.
    """
    scale = 10.0 ** decimals
    return float(np.sign(x) * np.floor(abs(x) * scale + 0.5) / scale)


def round_to_step(x: float, step: float) -> float:
    """Snap to the nearest multiple of step, e.g. 37 -> 37.5 for step 12.5."""
    return round_half_away(round_half_away(x / step, 0) * step, 6)


def round_dose(x: float, drug: Optional[DrugDefinition]) -> float:
    """Step grid when the drug declares one, otherwise 2 decimals."""
    if drug is not None and drug.step:
        return round_to_step(x, drug.step)
    return round_half_away(x, 2)


def nearest_allowed_dose(dose: float, allowed: Sequence[float]) -> float:
    """
    Closest rung by absolute difference. On an exact tie the earlier rung wins,
    which is what np.argmin does (first index of the minimum).
    """
    rungs = np.asarray(allowed, dtype=float)
    return float(rungs[int(np.argmin(np.abs(rungs - dose)))])


def format_number(x: float) -> str:
    """Render 30.0 as '30' and 2.50 as '2.5' for order text."""
    return f"{x:.2f}".rstrip("0").rstrip(".")
