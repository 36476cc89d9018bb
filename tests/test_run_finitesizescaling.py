import json

import numpy as np
import pytest

from conftest import SIZES, TC, EXPONENT, make_dataset
from run_finitesizescaling import load_dataset, load_parameters, run


def _write_data(folder, with_errors=True):
    folder.mkdir()
    for ds in make_dataset(with_errors=with_errors):
        rows = [ds.x, ds.y] + ([ds.err] if with_errors else [])
        np.save(folder / f"chi_L={ds.L}.npy", np.vstack(rows))


def _parameters(**overrides):
    parameters = {
        "system_size_list": SIZES,
        "data_file": "data/chi_L={L}.npy",
        "scaling_form": "critical_point",
        "form_parameters": {"nu": 1.0, "y_exponent": EXPONENT},
        "v1_initial": 5.0,
        "v1_final": 7.0,
        "n1": 41,
        "poly_order": 4,
    }
    parameters.update(overrides)
    return parameters


def test_load_dataset(tmp_path):
    _write_data(tmp_path / "data")
    dataset = load_dataset(SIZES, "data/chi_L={L}.npy", tmp_path)
    assert dataset.system_size_list == SIZES
    assert dataset[0].err is not None

    np.save(tmp_path / "bad.npy", np.zeros((4, 3)))
    with pytest.raises(ValueError):
        load_dataset([1], "bad.npy", tmp_path)


def test_run_one_var_writes_results(tmp_path):
    _write_data(tmp_path / "data", with_errors=False)
    result = run(_parameters(output_file="optimal.json"), base_dir=tmp_path)

    assert abs(result.best_v1 - TC) < 0.05
    with open(tmp_path / "optimal.json") as f:
        saved = json.load(f)
    assert saved == result.summary()
    assert np.load(tmp_path / "optimal_residuals.npy").shape == (41,)


def test_run_two_var_with_weights(tmp_path):
    _write_data(tmp_path / "data")
    parameters = _parameters(scaling_form="critical_point_exponent", form_parameters={"nu": 1.0},
                             v2_initial=1.0, v2_final=2.0, n2=21, normalize=True,
                             inverse_variance_weights=True)
    result = run(parameters, base_dir=tmp_path)

    assert result.residuals.shape == (21, 41)
    assert abs(result.best_v1 - TC) < 0.05
    assert abs(result.best_v2 - EXPONENT) < 0.05


def test_load_parameters(tmp_path):
    filename = tmp_path / "parameters.json"
    with open(filename, "w") as f:
        json.dump(_parameters(), f)
    assert load_parameters(filename)["n1"] == 41

    parameters = _parameters()
    del parameters["scaling_form"]
    with open(filename, "w") as f:
        json.dump(parameters, f)
    with pytest.raises(KeyError):
        load_parameters(filename)
