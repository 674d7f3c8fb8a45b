"""
Provides regression metrics.
"""

import numpy as np

from tno.sgd.linear_learning.exceptions import DimensionalityError
from tno.sgd.linear_learning.utils import NumpyFloatArray, NumpyOrVector
from tno.sgd.linear_learning.utils import util_matrix_vec as la


def _residuals(y_real: NumpyOrVector, y_pred: NumpyOrVector) -> NumpyFloatArray:
    y_real_np = la.as_vector(y_real)
    y_pred_np = la.as_vector(y_pred)
    la.check_dimensions(len(y_real_np), len(y_pred_np), what="prediction vector")
    if len(y_real_np) == 0:
        raise DimensionalityError("Cannot compute a metric without real values.")
    return y_real_np - y_pred_np


def mean_squared_error(y_real: NumpyOrVector, y_pred: NumpyOrVector) -> float:
    """
    Computes the mean squared error of the predicted values.

    :param y_real: Real values
    :param y_pred: Predicted values
    :return: Mean squared error
    """
    residuals = _residuals(y_real, y_pred)
    return la.dot(residuals, residuals) / len(residuals)


def mean_absolute_error(y_real: NumpyOrVector, y_pred: NumpyOrVector) -> float:
    """
    Computes the mean absolute error of the predicted values.

    :param y_real: Real values
    :param y_pred: Predicted values
    :return: Mean absolute error
    """
    return float(np.mean(np.abs(_residuals(y_real, y_pred))))


def r2_score(y_real: NumpyOrVector, y_pred: NumpyOrVector) -> float:
    r"""
    Computes the coefficient of determination of the predicted values:
    $$R^2 = 1 - \frac{\sum_i (y_i - \hat{y}_i)^2}{\sum_i (y_i - \bar{y})^2}.$$

    If all real values are equal, the score is 1 for a perfect prediction
    and 0 otherwise.

    :param y_real: Real values
    :param y_pred: Predicted values
    :return: Coefficient of determination
    """
    residuals = _residuals(y_real, y_pred)
    y_real_np = la.as_vector(y_real)
    deviations = y_real_np - np.mean(y_real_np)
    residual_sum_of_squares = la.dot(residuals, residuals)
    total_sum_of_squares = la.dot(deviations, deviations)
    if total_sum_of_squares == 0:
        return 1.0 if residual_sum_of_squares == 0 else 0.0
    return 1 - residual_sum_of_squares / total_sum_of_squares
