import numpy as np
import pytest

from data_set import DataSet, ScalingDataset

SIZES = [4, 6, 8, 10, 12]
TC = 6.1
EXPONENT = 1.75
U = np.linspace(-3.0, 3.0, 15)


def scaling_curve(u):
    # quartic, so a degree 4 fit collapses the data exactly at (TC, EXPONENT)
    return 3.0 + 0.5 * u + 0.2 * u**2 - 0.02 * u**3 + 0.01 * u**4


def make_dataset(sizes=SIZES, tc=TC, exponent=EXPONENT, with_errors=True, relative_error=0.02):
    datasets = []
    for L in sizes:
        x = tc + U / L
        y = L**exponent * scaling_curve(U)
        err = relative_error * y if with_errors else None
        datasets.append(ScalingDataset(L, x, y, err))
    return DataSet(*datasets)


@pytest.fixture
def dataset():
    return make_dataset()


@pytest.fixture
def dataset_no_errors():
    return make_dataset(with_errors=False)


def x_scale_one(x, L, v1):
    return (x - v1) * L


def y_scale_one(y, L, v1):
    return y * L**(-7 / 4)


def x_scale_two(x, L, v1, v2):
    return (x - v1) * L


def y_scale_two(y, L, v1, v2):
    return y * L**(-v2)
