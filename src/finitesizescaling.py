import logging
import numpy as np
from sklearn.base import BaseEstimator, RegressorMixin
from data_set import DataSet, ScalingDataset, inverse_variance_weights
from errors import FSSError, DivisionByZeroError, InvalidRangeError
from objective_function import WeightedPolynomialFit, residual
from utilities import UnaryScaling, BinaryScaling, parameter_grid, slice_limits

logger = logging.getLogger(__name__)


class SearchResult:
    """
    Outcome of a one- or two-parameter grid search.

    Attributes:
        scaled_data (DataSet): Every system size rescaled at the optimal parameters.
        residuals (numpy.ndarray): Residual of every grid point. Shape (n1,) for the one-parameter
                                   search, (n2, n1) for the two-parameter search (v2 along rows).
        min_residual (float): The smallest residual found.
        best_v1 (float): Optimal value of v1.
        best_v2 (float): Optimal value of v2, None for the one-parameter search.
        v1_values, v2_values (numpy.ndarray): The searched grids (v2_values is None for one parameter).
    """

    def __init__(self, scaled_data, residuals, min_residual, best_v1, v1_values, best_v2=None, v2_values=None):
        self.scaled_data = scaled_data
        self.residuals = residuals
        self.min_residual = min_residual
        self.best_v1 = best_v1
        self.best_v2 = best_v2
        self.v1_values = v1_values
        self.v2_values = v2_values

    @property
    def best_params(self):
        if self.best_v2 is None:
            return (self.best_v1,)
        return (self.best_v1, self.best_v2)

    def summary(self):
        summary = {"best_v1": float(self.best_v1), "min_residual": float(self.min_residual)}
        if self.best_v2 is not None:
            summary["best_v2"] = float(self.best_v2)
        return summary


class FSS:

    """
    Brute force search for the scaling parameters giving the best data collapse.

    At every grid point the data of every system size is rescaled, pooled in collection order
    and fitted by a weighted polynomial; the residual of the fit scores the collapse.

    Parameters:
        dataset (DataSet or list of ScalingDataset): The data, one entry per system size.
        poly_order (int): Degree of the fitted polynomial.
        weights (list of arrays): Optional weights, one array per system size. Uniform if None.
        normalize (bool): Divide every residual by its rescaled y value before squaring.
        scaling_window (tuple): Optional (lower, upper) limits on the rescaled x of the points entering the fit.
    """

    def __init__(self, dataset, poly_order=4, weights=None, normalize=False, scaling_window=None):

        self.dataset = dataset if isinstance(dataset, DataSet) else DataSet(*dataset)
        if poly_order < 0:
            raise InvalidRangeError(f"Polynomial degree must be non-negative, got {poly_order}.")
        if scaling_window is not None and scaling_window[0] > scaling_window[1]:
            raise InvalidRangeError(f"Invalid scaling window {tuple(scaling_window)}.")
        self.poly_order = poly_order
        self.weights = self.dataset.validate_weights(weights)
        self.normalize = normalize
        self.scaling_window = scaling_window

    def rescaled_combined_data(self, scaling, params):

        X_fin, Y_fin, W_fin, L_fin = [], [], [], []

        for L_index, ds in enumerate(self.dataset):
            X_rescale, Y_rescale = scaling.rescale(ds, params, dataset_index=L_index)
            X_fin.append(X_rescale)
            Y_fin.append(Y_rescale)
            W_fin.append(np.ones(len(ds)) if self.weights is None else self.weights[L_index])
            L_fin.append(np.full(len(ds), L_index))

        X_fin = np.concatenate(X_fin)
        Y_fin = np.concatenate(Y_fin)
        W_fin = np.concatenate(W_fin)
        L_fin = np.concatenate(L_fin)

        if self.scaling_window is not None:
            cut = slice_limits(X_fin, self.scaling_window[0], self.scaling_window[1])
            X_fin, Y_fin, W_fin, L_fin = X_fin[cut], Y_fin[cut], W_fin[cut], L_fin[cut]

        return X_fin, Y_fin, W_fin, L_fin

    def collapse_curve(self, scaling, params):
        X_fin, Y_fin, W_fin, _ = self.rescaled_combined_data(scaling, params)
        return WeightedPolynomialFit(X_fin, Y_fin, self.poly_order, weights=W_fin)

    def objective_function(self, scaling, params):
        X_fin, Y_fin, W_fin, L_fin = self.rescaled_combined_data(scaling, params)
        f = WeightedPolynomialFit(X_fin, Y_fin, self.poly_order, weights=W_fin)
        return residual(f(X_fin), Y_fin, normalize=self.normalize, lattice_index=L_fin)

    def _evaluate(self, scaling, params, grid_index):
        try:
            return self.objective_function(scaling, params)
        except FSSError as err:
            err.grid_index = grid_index
            raise

    def scaled_data(self, scaling, params):

        """
        Rescale every system size at the given parameters.

        Errors are carried along as err * |y_scaled / y|, which treats the vertical scaling as a
        local multiplicative factor on every point. For scalings that shift y additively this is
        only an approximation.

        Returns:
            DataSet: The rescaled data, in the order of the input.
        """

        scaled = []
        for L_index, ds in enumerate(self.dataset):
            X_best, Y_best = scaling.rescale(ds, params, dataset_index=L_index)
            err = None
            if ds.err is not None:
                zeros = np.flatnonzero(ds.y == 0)
                if zeros.size:
                    raise DivisionByZeroError(
                        f"Cannot rescale the error of point {zeros[0]} of L={ds.L}, its y value is 0.",
                        dataset_index=L_index)
                err = ds.err * np.abs(Y_best / ds.y)
            scaled.append(ScalingDataset(ds.L, X_best, Y_best, err))
        return DataSet(*scaled)

    def one_var(self, scaling, v1_initial, v1_final, n1):

        """
        Finite size scaling with one optimized parameter v1.

        Parameters:
            scaling (UnaryScaling): Scaling functions x_scale(x, L, v1) and y_scale(y, L, v1).
            v1_initial (float): Initial value of v1 used in the search.
            v1_final (float): Final value of v1 used in the search.
            n1 (int): Number of v1 values used in the search.

        Returns:
            SearchResult: residuals has shape (n1,). On exact ties the lowest v1 wins.
        """

        if not isinstance(scaling, UnaryScaling):
            raise TypeError("one_var needs a UnaryScaling.")
        v1_vals = parameter_grid(v1_initial, v1_final, n1, "v1")
        logger.debug("Scanning %d values of v1 in [%s, %s]", len(v1_vals), v1_initial, v1_final)

        residuals = np.empty(len(v1_vals))
        for index1, v1 in enumerate(v1_vals):
            residuals[index1] = self._evaluate(scaling, (v1,), index1)

        min_res_index = int(np.argmin(residuals))
        min_res = float(residuals[min_res_index])
        best_v1 = float(v1_vals[min_res_index])
        scaled_data_array = self.scaled_data(scaling, (best_v1,))

        logger.info("Optimal v1 value: %s, smallest residual: %s", best_v1, min_res)
        return SearchResult(scaled_data_array, residuals, min_res, best_v1, v1_vals)

    def two_var(self, scaling, v1_initial, v1_final, n1, v2_initial, v2_final, n2):

        """
        Finite size scaling with two optimized parameters v1 and v2.

        Parameters:
            scaling (BinaryScaling): Scaling functions x_scale(x, L, v1, v2) and y_scale(y, L, v1, v2).
            v1_initial, v1_final (float): Range of v1 used in the search.
            n1 (int): Number of v1 values.
            v2_initial, v2_final (float): Range of v2 used in the search.
            n2 (int): Number of v2 values.

        Returns:
            SearchResult: residuals has shape (n2, n1), row j holding the curve over v1 at the j-th v2.
                          On exact ties the lowest v2 wins, then the lowest v1.
        """

        if not isinstance(scaling, BinaryScaling):
            raise TypeError("two_var needs a BinaryScaling.")
        v1_vals = parameter_grid(v1_initial, v1_final, n1, "v1")
        v2_vals = parameter_grid(v2_initial, v2_final, n2, "v2")
        logger.debug("Scanning %d x %d grid of (v1, v2) in [%s, %s] x [%s, %s]",
                     len(v1_vals), len(v2_vals), v1_initial, v1_final, v2_initial, v2_final)

        residuals = np.empty((len(v2_vals), len(v1_vals)))
        for index2, v2 in enumerate(v2_vals):
            for index1, v1 in enumerate(v1_vals):
                residuals[index2, index1] = self._evaluate(scaling, (v1, v2), (index2, index1))

        min_res_index2, min_res_index1 = np.unravel_index(np.argmin(residuals), residuals.shape)
        min_res = float(residuals[min_res_index2, min_res_index1])
        best_v1 = float(v1_vals[min_res_index1])
        best_v2 = float(v2_vals[min_res_index2])
        scaled_data_array = self.scaled_data(scaling, (best_v1, best_v2))

        logger.info("Optimal v1 value: %s, optimal v2 value: %s, smallest residual: %s", best_v1, best_v2, min_res)
        return SearchResult(scaled_data_array, residuals, min_res, best_v1, v1_vals, best_v2, v2_vals)


def fss_one_var(data, x_scale, y_scale, v1_initial, v1_final, n1, degree, weights=None, normalize=False,
                scaling_window=None):
    fss = FSS(data, poly_order=degree, weights=weights, normalize=normalize, scaling_window=scaling_window)
    return fss.one_var(UnaryScaling(x_scale, y_scale), v1_initial, v1_final, n1)


def fss_two_var(data, x_scale, y_scale, v1_initial, v1_final, n1, v2_initial, v2_final, n2, degree,
                weights=None, normalize=False, scaling_window=None):
    fss = FSS(data, poly_order=degree, weights=weights, normalize=normalize, scaling_window=scaling_window)
    return fss.two_var(BinaryScaling(x_scale, y_scale), v1_initial, v1_final, n1, v2_initial, v2_final, n2)


class FSS_Estimator(RegressorMixin, BaseEstimator):
    """Scikit-learn compatible wrapper around the grid search."""
    def __init__(self, scaling=None, v1_initial=0.0, v1_final=1.0, n1=10, v2_initial=0.0, v2_final=1.0, n2=10,
                 poly_order=4, normalize=False, scaling_window=None, use_errors=False):
        self.scaling = scaling
        self.v1_initial = v1_initial
        self.v1_final = v1_final
        self.n1 = n1
        self.v2_initial = v2_initial
        self.v2_final = v2_final
        self.n2 = n2
        self.poly_order = poly_order
        self.normalize = normalize
        self.scaling_window = scaling_window
        self.use_errors = use_errors

    def fit(self, X, y=None):
        # X is a list of ScalingDataset objects
        weights = inverse_variance_weights(X) if self.use_errors else None
        self.fss_ = FSS(X, poly_order=self.poly_order, weights=weights,
                        normalize=self.normalize, scaling_window=self.scaling_window)
        if isinstance(self.scaling, BinaryScaling):
            self.result_ = self.fss_.two_var(self.scaling, self.v1_initial, self.v1_final, self.n1,
                                             self.v2_initial, self.v2_final, self.n2)
        else:
            self.result_ = self.fss_.one_var(self.scaling, self.v1_initial, self.v1_final, self.n1)
        self.collapse_curve_ = self.fss_.collapse_curve(self.scaling, self.result_.best_params)
        return self

    def predict(self, X):
        """
        Evaluate the collapse curve at rescaled x values.
        """
        if not hasattr(self, 'result_'):
            raise RuntimeError('Call fit() before predict().')
        return self.collapse_curve_(np.asarray(X, dtype=float))

    def score(self, X, y=None):
        # Negative residual, so higher is better for scikit-learn model selection
        if not hasattr(self, 'result_'):
            raise RuntimeError('Call fit() before score().')
        return -self.result_.min_residual
