import numpy as np
import pytest

from data_set import DataSet, ScalingDataset, inverse_variance_weights
from errors import DuplicateSizeError, ShapeMismatchError


def test_scaling_dataset_converts_to_float_arrays():
    ds = ScalingDataset(4, [1, 2, 3], [4, 5, 6])
    assert ds.x.dtype == float
    assert ds.err is None
    assert len(ds) == 3


def test_scaling_dataset_rejects_length_mismatch():
    with pytest.raises(ShapeMismatchError):
        ScalingDataset(4, [1.0, 2.0, 3.0], [1.0, 2.0])
    with pytest.raises(ShapeMismatchError):
        ScalingDataset(4, [1.0, 2.0], [1.0, 2.0], err=[0.1])


def test_scaling_dataset_rejects_bad_size_and_negative_errors():
    with pytest.raises(ValueError):
        ScalingDataset(0, [1.0], [1.0])
    with pytest.raises(ValueError):
        ScalingDataset(4, [1.0, 2.0], [1.0, 2.0], err=[0.1, -0.1])


def test_dataset_keeps_order_and_rejects_duplicate_sizes():
    a = ScalingDataset(8, [1.0], [1.0])
    b = ScalingDataset(4, [1.0], [1.0])
    assert DataSet(a, b).system_size_list == [8, 4]
    assert DataSet([a, b]).system_size_list == [8, 4]

    with pytest.raises(DuplicateSizeError) as excinfo:
        DataSet(a, b, ScalingDataset(8, [2.0], [2.0]))
    assert excinfo.value.dataset_index == 2


def test_dataset_from_arrays():
    domain = np.linspace(0.0, 1.0, 4)
    ranges = np.arange(8.0).reshape(2, 4)
    errors = np.full((2, 4), 0.5)
    data = DataSet.from_arrays([10, 20], domain, ranges, errors)

    assert data.system_size_list == [10, 20]
    np.testing.assert_array_equal(data[1].y, ranges[1])
    np.testing.assert_array_equal(data[0].err, errors[0])

    with pytest.raises(ShapeMismatchError):
        DataSet.from_arrays([10, 20], domain[:3], ranges)
    with pytest.raises(ShapeMismatchError):
        DataSet.from_arrays([10], domain, ranges)


def test_validate_weights(dataset):
    weights = [np.ones(len(ds)) for ds in dataset]
    assert len(dataset.validate_weights(weights)) == len(dataset)
    assert dataset.validate_weights(None) is None

    with pytest.raises(ShapeMismatchError):
        dataset.validate_weights(weights[:-1])

    weights[3] = np.ones(len(dataset[3]) + 1)
    with pytest.raises(ShapeMismatchError) as excinfo:
        dataset.validate_weights(weights)
    assert excinfo.value.dataset_index == 3


def test_inverse_variance_weights(dataset, dataset_no_errors):
    weights = inverse_variance_weights(dataset)
    np.testing.assert_allclose(weights[0], 1.0 / dataset[0].err**2)

    with pytest.raises(ValueError):
        inverse_variance_weights(dataset_no_errors)
