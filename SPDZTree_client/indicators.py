"""
indicators.py

Binary indicator vectors (IVs) sent to the engines as private inputs.

- compute_feature_split_ivs: for every slot of a split parameter vector, a left IV
  (value <= threshold) and the complementary right IV. Sentinel slots are encoded
  as well so every feature contributes the same number of rows.
- compute_label_class_ivs: one IV per label class, classes in first-occurrence order.
"""

from typing import Sequence, Tuple

import numpy as np

from . import logger


def compute_feature_split_ivs(values: Sequence[float], split_params: Sequence[float]) -> Tuple[np.ndarray, np.ndarray]:
    values = np.asarray(values, dtype=np.float64)
    thresholds = np.asarray(split_params, dtype=np.float64)[1:]
    left = (values[np.newaxis, :] <= thresholds[:, np.newaxis]).astype(np.int64)
    right = 1 - left
    logger.secure_log("debug", "Computed split IVs", split_num=int(thresholds.size), samples=int(values.size))
    return left, right


def label_classes(labels: Sequence[float]) -> np.ndarray:
    labels = np.asarray(labels, dtype=np.float64)
    _, first = np.unique(labels, return_index=True)
    return labels[np.sort(first)]


def compute_label_class_ivs(labels: Sequence[float]) -> np.ndarray:
    labels = np.asarray(labels, dtype=np.float64)
    classes = label_classes(labels)
    return (labels[np.newaxis, :] == classes[:, np.newaxis]).astype(np.int64)
