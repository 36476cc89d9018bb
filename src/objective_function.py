import numpy as np
from errors import DegenerateFitError, DivisionByZeroError, InvalidRangeError, ShapeMismatchError


class WeightedPolynomialFit:

  """
  Weighted least-squares polynomial through a set of pooled, rescaled points.

  The polynomial of degree `poly_order` minimizes sum_i W_i (poly(X_i) - Y_i)^2.
  np.polyfit solves it as a least-squares problem on the column scaled Vandermonde
  matrix (SVD), each row multiplied by sqrt(W_i).

  Attributes:
    poly_order (int): Degree of the polynomial.
    coefficients (numpy.ndarray): Polynomial coefficients, highest power first.
    rank (int): Effective rank of the weighted design matrix.
    singular_values (numpy.ndarray): Singular values of the scaled design matrix.
  """

  def __init__(self, X, Y, poly_order, weights=None):

    X = np.asarray(X, dtype=float)
    Y = np.asarray(Y, dtype=float)
    if X.shape != Y.shape or X.ndim != 1:
      raise ShapeMismatchError(f"X and Y must be 1D arrays of equal length, got {X.shape} and {Y.shape}.")
    if weights is None:
      weights = np.ones_like(X)
    weights = np.asarray(weights, dtype=float)
    if weights.shape != X.shape:
      raise ShapeMismatchError(f"Got {weights.size} weights for {X.size} points.")
    if poly_order < 0:
      raise InvalidRangeError(f"Polynomial degree must be non-negative, got {poly_order}.")
    if X.size <= poly_order:
      raise DegenerateFitError(f"Degree {poly_order} polynomial is underdetermined by {X.size} points.")
    if not (np.all(np.isfinite(X)) and np.all(np.isfinite(Y)) and np.all(np.isfinite(weights))):
      raise DegenerateFitError("Rescaled data or weights contain non-finite values.")

    self.poly_order = poly_order
    try:
      z = np.polyfit(X, Y, poly_order, w=np.sqrt(weights), full=True)
    except np.linalg.LinAlgError as err:
      raise DegenerateFitError(f"Least-squares solve failed: {err}") from err

    self.coefficients, _, self.rank, self.singular_values, _ = z
    if self.rank < poly_order + 1:
      raise DegenerateFitError(
        f"Weighted design matrix has rank {self.rank}, degree {poly_order} needs {poly_order + 1}.")
    if not np.all(np.isfinite(self.coefficients)):
      raise DegenerateFitError("Polynomial fit overflowed.")

  def __call__(self, x):
    return np.polyval(self.coefficients, x)


def residual(fitted, actual, normalize=False, lattice_index=None):

  """
  Sum of squared residuals between the fitted curve and the rescaled data.

  Parameters:
    fitted (array): Polynomial evaluated at the pooled x values.
    actual (array): Pooled rescaled y values.
    normalize (bool): If True, every residual is divided by its y value first. Use it when the
                      searched parameters change the vertical scale of the data.
    lattice_index (array): Optional dataset index of every pooled point, reported on errors.

  Returns:
    float: The residual.
  """

  fitted = np.asarray(fitted, dtype=float)
  actual = np.asarray(actual, dtype=float)

  if normalize:
    zeros = np.flatnonzero(actual == 0)
    if zeros.size:
      dataset_index = None if lattice_index is None else int(lattice_index[zeros[0]])
      raise DivisionByZeroError(f"Normalized residual divides by y = 0 at pooled point {zeros[0]}.",
                                dataset_index=dataset_index)
    res = np.sum(((fitted - actual) / actual)**2)
  else:
    res = np.sum((fitted - actual)**2)

  if not np.isfinite(res):
    raise DegenerateFitError(f"Residual is not finite ({res}).")
  return float(res)
