import numpy as np
from errors import ShapeMismatchError, InvalidRangeError


class UnaryScaling:
  """
  Pair of scaling functions depending on one parameter v1.

  Attributes:
    x_scale (callable): x_scale(x, L, v1) -> rescaled x, element-wise over x.
    y_scale (callable): y_scale(y, L, v1) -> rescaled y, element-wise over y.
  """

  n_params = 1

  def __init__(self, x_scale, y_scale):
    self.x_scale = x_scale
    self.y_scale = y_scale

  def rescale(self, dataset, params, dataset_index=None):
    return _apply(self.x_scale, self.y_scale, dataset, params[:1], dataset_index)


class BinaryScaling:
  """
  Pair of scaling functions depending on two parameters v1 and v2.

  Attributes:
    x_scale (callable): x_scale(x, L, v1, v2) -> rescaled x, element-wise over x.
    y_scale (callable): y_scale(y, L, v1, v2) -> rescaled y, element-wise over y.
  """

  n_params = 2

  def __init__(self, x_scale, y_scale):
    self.x_scale = x_scale
    self.y_scale = y_scale

  def rescale(self, dataset, params, dataset_index=None):
    return _apply(self.x_scale, self.y_scale, dataset, params[:2], dataset_index)


def _apply(x_scale, y_scale, dataset, params, dataset_index):
  X_rescale = np.asarray(x_scale(dataset.x, dataset.L, *params), dtype=float)
  Y_rescale = np.asarray(y_scale(dataset.y, dataset.L, *params), dtype=float)
  if X_rescale.shape != dataset.x.shape or Y_rescale.shape != dataset.y.shape:
    raise ShapeMismatchError(
      f"Scaling functions returned shapes {X_rescale.shape} and {Y_rescale.shape} "
      f"for {len(dataset)} points of L={dataset.L}", dataset_index=dataset_index)
  return X_rescale, Y_rescale


def parameter_grid(initial, final, num, name="v"):

  """
  Evenly spaced candidate values over [initial, final], both ends included.

  Parameters:
    initial (float): First value of the grid.
    final (float): Last value of the grid.
    num (int): Number of values. With num == 1 only `initial` is evaluated.
    name (str): Parameter name used in error messages.

  Returns:
    numpy.ndarray: The grid values.
  """

  if int(num) != num or num < 1:
    raise InvalidRangeError(f"Number of {name} values must be a positive integer, got {num}.")
  if num > 1 and initial > final:
    raise InvalidRangeError(f"{name}_initial={initial} is larger than {name}_final={final}.")
  return np.linspace(initial, final, int(num))


def slice_limits(X, lower, upper):

  """
  Boolean mask of the points of X lying inside the scaling window [lower, upper].
  """

  if lower > upper:
    raise InvalidRangeError(f"Scaling window lower limit {lower} is above the upper limit {upper}.")
  return (X >= lower) & (X <= upper)


def critical_point(nu=1.0, y_exponent=0.0):

  """
  One parameter form with v1 = Tc:  x' = (x - Tc) L^(1/nu),  y' = y L^(-y_exponent).
  """

  return UnaryScaling(
    lambda x, L, Tc: (x - Tc) * L**(1.0 / nu),
    lambda y, L, Tc: y * L**(-y_exponent))


def critical_point_exponent(nu=1.0):

  """
  Two parameter form with v1 = Tc, v2 = y_exponent:  x' = (x - Tc) L^(1/nu),  y' = y L^(-y_exponent).
  """

  return BinaryScaling(
    lambda x, L, Tc, a: (x - Tc) * L**(1.0 / nu),
    lambda y, L, Tc, a: y * L**(-a))


def critical_point_nu(y_exponent=0.0):

  """
  Two parameter form with v1 = Tc, v2 = nu:  x' = (x - Tc) L^(1/nu),  y' = y L^(-y_exponent).
  """

  return BinaryScaling(
    lambda x, L, Tc, nu: (x - Tc) * L**(1.0 / nu),
    lambda y, L, Tc, nu: y * L**(-y_exponent))


SCALING_FORMS = {
  "critical_point": critical_point,
  "critical_point_exponent": critical_point_exponent,
  "critical_point_nu": critical_point_nu,
}


def scaling_form(name, **form_parameters):
  if name not in SCALING_FORMS:
    raise ValueError(f"Unknown scaling form '{name}', expected one of {sorted(SCALING_FORMS)}.")
  return SCALING_FORMS[name](**form_parameters)
