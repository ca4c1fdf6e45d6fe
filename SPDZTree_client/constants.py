"""
constants.py

Centralized constants for SPDZTree_client. Protocol widths and split limits
must agree with the SPDZ engines running the decision-tree program.
"""

from typing import Dict, Any

DEFAULTS: Dict[str, Any] = {
    # Fixed-point encoding: real values are scaled by 2**SPDZ_FIXED_PRECISION
    "SPDZ_FIXED_PRECISION": 8,

    # Quantile splits: at most MAX_SPLIT_NUM thresholds -> MAX_SPLIT_NUM + 1 bins
    "MAX_SPLIT_NUM": 8,
    # Wire sentinel for an unused split slot
    "SPLIT_SENTINEL": -1.0,

    # Only the leading fraction of local samples is used for training
    "SPLIT_PERCENTAGE": 0.8,
    # Client holding the label column (last column of its dataset)
    "LABEL_HOLDER_ID": 0,

    # Networking / defaults
    "DEFAULT_PORT_BASE": 20000,
    "DEFAULT_HOST": "127.0.0.1",
    "CLIENT_ID_BYTES": 4,
    "FRAME_LENGTH_BYTES": 8,

    # Field parameters produced by the engines' offline setup
    "PREP_DIR": "Player-Data",
    "PRIME_BITS": 128,
    "GF2N_DEGREE": 40,
    "PARAMS_FILE_NAME": "Params-Data",

    # Dataset layout: <DATA_DIR>/<dataset>/client_<id>.txt
    "DATA_DIR": "data",
    "DEFAULT_DATASET": "bank_marketing_data",

    # Public tree parameters sent ahead of training (0 = classification)
    "TREE_TYPE_CLASSIFICATION": 0,
    "TREE_TYPE_REGRESSION": 1,
}

# convenience accessors
SPDZ_FIXED_PRECISION = DEFAULTS["SPDZ_FIXED_PRECISION"]
MAX_SPLIT_NUM = DEFAULTS["MAX_SPLIT_NUM"]
SPLIT_SENTINEL = DEFAULTS["SPLIT_SENTINEL"]


def update_from_dict(d):
    DEFAULTS.update(d)
    # update convenience names
    globals()["SPDZ_FIXED_PRECISION"] = DEFAULTS["SPDZ_FIXED_PRECISION"]
    globals()["MAX_SPLIT_NUM"] = DEFAULTS["MAX_SPLIT_NUM"]
    globals()["SPLIT_SENTINEL"] = DEFAULTS["SPLIT_SENTINEL"]
