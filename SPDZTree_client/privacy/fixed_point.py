"""
fixed_point.py

Fixed-point encoding of real values for field inputs: x -> round(x * 2**F).
Rounding is half away from zero, matching the engines' C round().
"""

import math
from .. import constants


def _precision(precision):
    if precision is None:
        return constants.DEFAULTS["SPDZ_FIXED_PRECISION"]
    return precision


def encode_fixed(x: float, precision: int = None) -> int:
    x = float(x)
    if not math.isfinite(x):
        raise ValueError(f"Cannot fixed-point encode non-finite value {x}")
    scaled = x * (2 ** _precision(precision))
    return int(math.copysign(math.floor(abs(scaled) + 0.5), scaled))


def decode_fixed(v: int, precision: int = None) -> float:
    return float(v) * 2.0 ** (-_precision(precision))
