"""
data_loader.py

Local dataset loading. A client's file holds one sample per line as comma separated
floats; the label holder's last column is the class label.
"""

import os
from typing import Optional, Tuple

import numpy as np
import pandas as pd

from . import constants, logger
from .errors import ConfigurationError
from .privacy.field import FieldConfig
from .privacy.fixed_point import encode_fixed


def dataset_path(data_dir: str, dataset_name: str, client_id: int) -> str:
    return os.path.join(data_dir, dataset_name, f"client_{client_id}.txt")


def read_training_data(path: str) -> np.ndarray:
    """
    Read a headerless CSV of floats into a (samples, columns) array.
    Missing file, non-numeric or non-finite cells and ragged rows are configuration errors.
    """
    if not os.path.isfile(path):
        raise ConfigurationError(f"Dataset file not found: {path}")
    try:
        frame = pd.read_csv(path, header=None, dtype=np.float64, skip_blank_lines=True)
    except pd.errors.EmptyDataError:
        logger.secure_log("warning", "Dataset file is empty", path=path)
        return np.empty((0, 0), dtype=np.float64)
    except (ValueError, pd.errors.ParserError) as e:
        raise ConfigurationError(f"Malformed dataset file {path}: {e}") from e

    data = frame.to_numpy(dtype=np.float64)
    if not np.isfinite(data).all():
        raise ConfigurationError(f"Malformed dataset file {path}: missing, ragged or non-finite values")
    logger.secure_log("info", "Loaded dataset", path=path, sample_num=data.shape[0], feature_num=data.shape[1])
    return data


def prepare_training_data(local_data: np.ndarray, client_id: int,
                          split_percentage: float = None) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    """
    Keep the leading split_percentage of samples for training. The label holder's
    last column is split off as labels; other clients get labels=None.
    """
    if split_percentage is None:
        split_percentage = constants.DEFAULTS["SPLIT_PERCENTAGE"]
    local_data = np.asarray(local_data, dtype=np.float64)
    if local_data.ndim != 2:
        raise ConfigurationError(f"Expected a 2-D dataset, got shape {local_data.shape}")

    training_data_num = int(local_data.shape[0] * split_percentage)
    rows = local_data[:training_data_num]
    logger.secure_log("info", "Prepared training rows", training_data_num=training_data_num)

    if client_id != constants.DEFAULTS["LABEL_HOLDER_ID"]:
        return rows, None
    if local_data.shape[1] == 0:
        logger.secure_log("warning", "Label holder dataset has no columns")
        return rows, np.empty(0, dtype=np.float64)
    return rows[:, :-1], rows[:, -1].copy()


def check_fits_field(values: np.ndarray, field_config: FieldConfig, precision: int = None) -> None:
    """
    Raise ConfigurationError unless every value stays within the field's signed range once
    fixed-point encoded. Split thresholds are drawn from the column values, so checking the
    training data and labels covers them too.
    """
    values = np.asarray(values, dtype=np.float64)
    if values.size == 0:
        return
    try:
        peak = encode_fixed(float(np.abs(values).max()), precision)
    except (ValueError, OverflowError) as e:
        raise ConfigurationError("Dataset holds a value that cannot be fixed-point encoded") from e
    if peak > field_config.prime // 2:
        raise ConfigurationError(
            f"Dataset holds a value outside the {field_config.prime.bit_length()}-bit field once fixed-point encoded"
        )
