import numpy as np
from errors import ShapeMismatchError, DuplicateSizeError


class ScalingDataset:
    """
    Simple container for the data of one system size.
    """
    def __init__(self, system_size,
                 x: np.ndarray,
                 y: np.ndarray,
                 err: np.ndarray = None):
        """
        Parameters:
            system_size: characteristic size L of the lattice
            x: array of independent variable values (e.g., temperatures)
            y: array of dependent variable values (e.g., susceptibility)
            err: optional array of uncertainties for y
        """
        if not system_size > 0:
            raise ValueError(f"System size must be positive, got {system_size}.")
        self.L = system_size
        self.x = np.array(x, dtype=float)
        self.y = np.array(y, dtype=float)
        self.err = None if err is None else np.array(err, dtype=float)
        self.validate()

    def __len__(self):
        return len(self.x)

    def __repr__(self):
        return f"ScalingDataset(L={self.L}, points={len(self)}, err={self.err is not None})"

    def validate(self):
        if self.x.ndim != 1 or self.y.ndim != 1:
            raise ShapeMismatchError(f"x and y of L={self.L} must be one-dimensional.")
        if len(self.x) != len(self.y):
            raise ShapeMismatchError(
                f"Length of x ({len(self.x)}) and y ({len(self.y)}) must match for L={self.L}.")
        if self.err is not None:
            if self.err.shape != self.x.shape:
                raise ShapeMismatchError(
                    f"Length of err ({len(self.err)}) must match x ({len(self.x)}) for L={self.L}.")
            if np.any(self.err < 0):
                raise ValueError(f"Errors of L={self.L} must be non-negative.")


class DataSet:
    """
    Ordered collection of ScalingDataset objects, one per system size.

    The order is kept everywhere: it is the order in which the rescaled data
    of each size is pooled and the order of the scaled result.
    """

    def __init__(self, *datasets):
        if len(datasets) == 1 and not isinstance(datasets[0], ScalingDataset):
            datasets = tuple(datasets[0])
        self.datasets = datasets
        self.validate()

    @classmethod
    def from_arrays(cls, system_size_list, domain_list, range_list, error_list=None):
        """
        Build a dataset from a shared domain and a 2D range array.

        Args:
            system_size_list (1D array): The size L of every system.
            domain_list (1D array): Temperature or control parameter values shared by every size.
            range_list (2D array): Measured observable values, one row per system size.
            error_list (2D array): Optional uncertainties of range_list, same shape.
        """
        range_list = np.asarray(range_list, dtype=float)
        if range_list.ndim != 2 or range_list.shape[0] != len(system_size_list):
            raise ShapeMismatchError("range_list must have one row per system size.")
        if len(domain_list) != range_list.shape[1]:
            raise ShapeMismatchError("Length of domain and range must match.")
        if error_list is not None:
            error_list = np.asarray(error_list, dtype=float)
            if error_list.shape != range_list.shape:
                raise ShapeMismatchError("error_list must have the same shape as range_list.")

        datasets = []
        for L_index, L in enumerate(system_size_list):
            err = None if error_list is None else error_list[L_index, :]
            datasets.append(ScalingDataset(L, domain_list, range_list[L_index, :], err))
        return cls(*datasets)

    def __len__(self):
        return len(self.datasets)

    def __iter__(self):
        return iter(self.datasets)

    def __getitem__(self, index):
        return self.datasets[index]

    @property
    def system_size_list(self):
        return [ds.L for ds in self.datasets]

    def validate(self):
        if len(self.datasets) == 0:
            raise ValueError("DataSet needs at least one system size.")
        for index, ds in enumerate(self.datasets):
            if not isinstance(ds, ScalingDataset):
                raise TypeError(f"Element {index} is not a ScalingDataset.")
        seen = set()
        for index, L in enumerate(self.system_size_list):
            if L in seen:
                raise DuplicateSizeError(f"System size L={L} appears more than once.", dataset_index=index)
            seen.add(L)

    def validate_weights(self, weights):
        """
        Check a weight set against the collection and return it as float arrays.

        Parameters:
            weights (list of 1D arrays or None): One weight array per system size.

        Returns:
            list of numpy.ndarray or None.
        """
        if weights is None:
            return None
        if len(weights) != len(self.datasets):
            raise ShapeMismatchError(
                f"Got {len(weights)} weight arrays for {len(self.datasets)} system sizes.")
        checked = []
        for index, (w, ds) in enumerate(zip(weights, self.datasets)):
            w = np.asarray(w, dtype=float)
            if w.shape != ds.x.shape:
                raise ShapeMismatchError(
                    f"Weights of L={ds.L} have length {w.size}, expected {len(ds)}.", dataset_index=index)
            if np.any(w < 0):
                raise ValueError(f"Weights of L={ds.L} must be non-negative.")
            checked.append(w)
        return checked


def inverse_variance_weights(dataset):
    """
    Weights 1/err^2 for every system size of a DataSet, as used for weighted least-squares.
    """
    weights = []
    for ds in dataset:
        if ds.err is None:
            raise ValueError(f"L={ds.L} carries no errors, cannot build inverse-variance weights.")
        if np.any(ds.err == 0):
            raise ValueError(f"L={ds.L} has zero errors, inverse-variance weight is undefined.")
        weights.append(1.0 / ds.err**2)
    return weights
