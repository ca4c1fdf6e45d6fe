import numpy as np
import pytest
from SPDZTree_client.data_loader import check_fits_field, dataset_path, prepare_training_data, read_training_data
from SPDZTree_client.errors import ConfigurationError
from SPDZTree_client.privacy.field import FieldConfig


def test_read_training_data(tmp_path):
    path = tmp_path / "client_0.txt"
    path.write_text("1.0,2.0,0\n3.5,4.0,1\n")
    data = read_training_data(str(path))
    assert data.shape == (2, 3)
    assert data[1].tolist() == [3.5, 4.0, 1.0]


def test_missing_and_malformed_files_are_configuration_errors(tmp_path):
    with pytest.raises(ConfigurationError):
        read_training_data(str(tmp_path / "nope.txt"))

    bad = tmp_path / "bad.txt"
    bad.write_text("1.0,abc\n2.0,3.0\n")
    with pytest.raises(ConfigurationError):
        read_training_data(str(bad))

    short = tmp_path / "short.txt"
    short.write_text("1.0,2.0\n3.0\n")
    with pytest.raises(ConfigurationError):
        read_training_data(str(short))


def test_empty_file_is_only_a_warning(tmp_path):
    path = tmp_path / "empty.txt"
    path.write_text("")
    assert read_training_data(str(path)).shape == (0, 0)


def test_prepare_training_data_label_holder_and_others():
    local = np.arange(30, dtype=np.float64).reshape(10, 3)

    data, labels = prepare_training_data(local, client_id=0)
    assert data.shape == (8, 2)
    assert labels.tolist() == [2.0, 5.0, 8.0, 11.0, 14.0, 17.0, 20.0, 23.0]

    data, labels = prepare_training_data(local, client_id=1)
    assert data.shape == (8, 3)
    assert labels is None


def test_dataset_path_layout():
    assert dataset_path("data", "bank", 2).replace("\\", "/") == "data/bank/client_2.txt"


@pytest.mark.parametrize("cell", ["inf", "-inf"])
def test_non_finite_cells_are_configuration_errors(tmp_path, cell):
    path = tmp_path / "client_1.txt"
    path.write_text(f"1.0,{cell}\n2.0,3.0\n")
    with pytest.raises(ConfigurationError):
        read_training_data(str(path))


def test_values_must_fit_the_field_once_encoded():
    field_config = FieldConfig(prime=(1 << 127) - 1)
    check_fits_field(np.array([[1.0, -2.5], [1e30, 0.0]]), field_config)
    check_fits_field(np.empty((0, 0)), field_config)

    with pytest.raises(ConfigurationError):
        check_fits_field(np.array([[1.0, 1e40], [2.0, 3.0]]), field_config)
    with pytest.raises(ConfigurationError):
        check_fits_field(np.array([-1e40]), field_config)
    with pytest.raises(ConfigurationError):
        check_fits_field(np.array([1e308]), field_config)
