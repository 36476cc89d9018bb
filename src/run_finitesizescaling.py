import json
import logging
import os
import sys
from pathlib import Path
import numpy as np
from data_set import ScalingDataset, DataSet, inverse_variance_weights
from finitesizescaling import FSS
from utilities import UnaryScaling, scaling_form

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("system_size_list", "data_file", "scaling_form", "v1_initial", "v1_final", "n1")


def load_parameters(parameters_filename):
    with open(parameters_filename, 'r') as openfile:
        parameters = json.load(openfile)
    missing = [key for key in REQUIRED_KEYS if key not in parameters]
    if missing:
        raise KeyError(f"Missing parameters in {parameters_filename}: {missing}")
    return parameters


def load_dataset(system_size_list, data_file, base_dir="."):
    """
    Load one .npy file per system size.

    Each file holds a 2D array whose rows are x, y and optionally the error of y.
    `data_file` is a path template containing {L}, relative to base_dir.
    """
    datasets = []
    for L in system_size_list:
        filename = Path(base_dir) / data_file.format(L=L)
        data = np.load(filename)
        if data.ndim != 2 or data.shape[0] not in (2, 3):
            raise ValueError(f"{filename} must hold rows x, y[, err], got shape {data.shape}.")
        err = data[2] if data.shape[0] == 3 else None
        datasets.append(ScalingDataset(L, data[0], data[1], err))
        logger.debug("Loaded %d points for L=%s from %s", data.shape[1], L, filename)
    return DataSet(*datasets)


def run(parameters, base_dir="."):

    """
    Run the one- or two-parameter search described by a parameter dictionary.

    The scaling form decides which search is run. Results are written to `output_file` as JSON
    (optimal parameters and smallest residual) together with the residual surface as .npy.

    Returns:
        SearchResult
    """

    dataset = load_dataset(parameters['system_size_list'], parameters['data_file'], base_dir)
    scaling = scaling_form(parameters['scaling_form'], **parameters.get('form_parameters', {}))

    weights = None
    if parameters.get('inverse_variance_weights', False):
        weights = inverse_variance_weights(dataset)

    fss = FSS(dataset,
              poly_order=parameters.get('poly_order', 4),
              weights=weights,
              normalize=parameters.get('normalize', False),
              scaling_window=parameters.get('scaling_window'))

    if isinstance(scaling, UnaryScaling):
        result = fss.one_var(scaling, parameters['v1_initial'], parameters['v1_final'], parameters['n1'])
    else:
        result = fss.two_var(scaling, parameters['v1_initial'], parameters['v1_final'], parameters['n1'],
                             parameters['v2_initial'], parameters['v2_final'], parameters['n2'])

    output_file = parameters.get('output_file')
    if output_file:
        output_path = Path(base_dir) / output_file
        with open(output_path, 'w') as f:
            json.dump(result.summary(), f, indent=4)
        np.save(output_path.with_name(output_path.stem + "_residuals.npy"), result.residuals)
        logger.info("Wrote optimal parameters to %s", output_path)

    return result


if __name__ == "__main__":

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    wd = os.getcwd()
    if len(sys.argv) > 1:
        parameters_filename = Path(sys.argv[1])
    else:
        parameters_filename = Path(wd + "/input_files/fss_parameters.json")

    parameters = load_parameters(parameters_filename)
    result = run(parameters, base_dir=parameters_filename.parent)

    print(result.best_params)
    print(result.min_residual)
