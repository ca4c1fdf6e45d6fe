"""
splits.py

Quantile split computation for one locally held feature column.

A feature with at least MAX_SPLIT_NUM + 1 distinct values is continuous: the sorted
samples are cut into MAX_SPLIT_NUM + 1 equal-size bins and each boundary threshold is
the midpoint of the two samples straddling it. With 2..MAX_SPLIT_NUM distinct values the
feature is categorical and the distinct values themselves are the split values. A single
distinct value (or an empty column) is degenerate and only logged.

The engines expect a fixed vector of MAX_SPLIT_NUM + 1 floats:
    [split_count, v_0, ..., v_{MAX_SPLIT_NUM - 1}]
with unused slots set to SPLIT_SENTINEL.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from . import constants, logger

CONTINUOUS = "continuous"
CATEGORICAL = "categorical"
DEGENERATE = "degenerate"


@dataclass(frozen=True)
class SplitParameters:
    kind: str
    split_count: int
    values: Tuple[float, ...]  # thresholds or distinct values, no sentinels

    def to_vector(self, max_split_num: int = None) -> np.ndarray:
        if max_split_num is None:
            max_split_num = constants.DEFAULTS["MAX_SPLIT_NUM"]
        vec = np.full(max_split_num + 1, constants.DEFAULTS["SPLIT_SENTINEL"], dtype=np.float64)
        vec[0] = self.split_count
        vec[1:1 + len(self.values)] = self.values
        return vec

    @classmethod
    def from_vector(cls, vec: Sequence[float]) -> "SplitParameters":
        vec = np.asarray(vec, dtype=np.float64)
        max_split_num = vec.size - 1
        count = int(vec[0])
        if count == 0:
            return cls(DEGENERATE, 0, ())
        if count >= max_split_num:
            return cls(CONTINUOUS, count, tuple(float(v) for v in vec[1:1 + count]))
        # categorical vectors carry count + 1 distinct values
        return cls(CATEGORICAL, count, tuple(float(v) for v in vec[1:2 + count]))


def sort_indexes(values: Sequence[float]) -> np.ndarray:
    """Indexes that sort values ascending; ties keep original order."""
    return np.argsort(np.asarray(values, dtype=np.float64), kind="stable")


def compute_distinct_values(values: Sequence[float], sorted_indexes: np.ndarray) -> np.ndarray:
    sorted_values = np.asarray(values, dtype=np.float64)[sorted_indexes]
    if sorted_values.size == 0:
        return sorted_values
    keep = np.empty(sorted_values.size, dtype=bool)
    keep[0] = True
    keep[1:] = sorted_values[1:] != sorted_values[:-1]
    return sorted_values[keep]


def compute_split_params(values: Sequence[float], max_split_num: int = None) -> SplitParameters:
    if max_split_num is None:
        max_split_num = constants.DEFAULTS["MAX_SPLIT_NUM"]
    values = np.asarray(values, dtype=np.float64)
    idx = sort_indexes(values)
    distinct = compute_distinct_values(values, idx)
    n = values.size

    if distinct.size >= max_split_num + 1:
        sorted_values = values[idx]
        per_bin = n // (max_split_num + 1)
        thresholds = []
        for i in range(max_split_num):
            lo = (i + 1) * per_bin
            hi = min(lo + 1, n - 1)
            thresholds.append(float((sorted_values[lo] + sorted_values[hi]) / 2))
        return SplitParameters(CONTINUOUS, max_split_num, tuple(thresholds))

    if distinct.size > 1:
        return SplitParameters(CATEGORICAL, int(distinct.size) - 1, tuple(float(v) for v in distinct))

    logger.secure_log("warning", "Feature has at most one distinct value, please check the dataset",
                      samples=n, distinct=int(distinct.size))
    return SplitParameters(DEGENERATE, 0, ())


def compute_splits(values: Sequence[float], max_split_num: int = None) -> np.ndarray:
    return compute_split_params(values, max_split_num).to_vector(max_split_num)
