import logging

import numpy as np
from SPDZTree_client.splits import (
    CATEGORICAL,
    CONTINUOUS,
    DEGENERATE,
    SplitParameters,
    compute_distinct_values,
    compute_split_params,
    compute_splits,
    sort_indexes,
)


def test_sort_indexes_is_stable():
    assert sort_indexes([3.0, 1.0, 3.0, 1.0]).tolist() == [1, 3, 0, 2]


def test_distinct_values_collapse_duplicates():
    values = [5.0, 1.0, 3.0, 3.0, 1.0]
    assert compute_distinct_values(values, sort_indexes(values)).tolist() == [1.0, 3.0, 5.0]


def test_continuous_feature_reports_eight_monotone_thresholds():
    vec = compute_splits([5, 1, 3, 3, 9, 2, 7, 8, 4, 6])
    assert vec.shape == (9,)
    assert vec[0] == 8
    assert vec[1:].tolist() == [2.5, 3.0, 3.5, 4.5, 5.5, 6.5, 7.5, 8.5]
    assert np.all(np.diff(vec[1:]) >= 0)


def test_continuous_thresholds_are_bin_boundary_midpoints():
    values = np.arange(27, dtype=np.float64)[::-1]
    vec = compute_splits(values)
    # 3 samples per bin: boundaries at sorted positions 3, 6, ..., 24
    expected = [((i + 1) * 3 + (i + 1) * 3 + 1) / 2 for i in range(8)]
    assert vec[1:].tolist() == expected


def test_last_boundary_index_is_clamped():
    # n = 9, bin size 1: the last boundary reads positions 8 and 9 -> clamped to 8
    values = np.arange(9, dtype=np.float64)
    vec = compute_splits(values)
    assert vec[0] == 8
    assert vec[-1] == 8.0


def test_categorical_example():
    assert compute_splits([1, 1, 2, 2, 3]).tolist() == [2, 1, 2, 3, -1, -1, -1, -1, -1]


def test_eight_distinct_values_is_still_categorical():
    vec = compute_splits(list(range(8)) * 2)
    assert vec[0] == 7
    assert vec[1:].tolist() == [float(v) for v in range(8)]


def test_degenerate_feature_warns_and_is_not_fatal(caplog):
    with caplog.at_level(logging.WARNING):
        vec = compute_splits([4, 4, 4, 4])
    assert vec.tolist() == [0, -1, -1, -1, -1, -1, -1, -1, -1]
    assert any(r.levelno == logging.WARNING and "distinct" in r.getMessage() for r in caplog.records)


def test_empty_column_is_degenerate():
    assert compute_split_params([]).kind == DEGENERATE


def test_vector_parsing_uses_count_not_sentinel():
    params = compute_split_params([-1, 0, 0, 2])
    assert params.kind == CATEGORICAL
    assert params.values == (-1.0, 0.0, 2.0)
    assert SplitParameters.from_vector(params.to_vector()) == params

    cont = compute_split_params(range(20))
    assert cont.kind == CONTINUOUS
    assert SplitParameters.from_vector(cont.to_vector()) == cont
    assert SplitParameters.from_vector(compute_splits([1, 1])).kind == DEGENERATE
