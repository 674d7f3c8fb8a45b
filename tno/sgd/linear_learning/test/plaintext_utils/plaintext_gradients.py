"""
Gradient functions on plaintext data
"""
import numpy as np

from tno.sgd.linear_learning.utils import (
    NumpyNumberArray,
    NumpyOrMatrix,
    NumpyOrVector,
)


def plain_least_squares_gradient(
    X: NumpyOrMatrix,
    y: NumpyOrVector,
    coef_: NumpyOrVector,
    grad_per_sample: bool,
) -> NumpyNumberArray:
    r"""
    Summed gradient of the least squares loss
    $$\frac{1}{2} \times ||y - X_times_w||^2_2.$$

    The gradient is given by
    $$g(X, y, w) = X^T \times (X_times_w - y).$$

    :param X: Independent variables.
    :param y: Dependent variables.
    :param coef_: Current coefficient vector.
    :param grad_per_sample: Return a 2D-array with gradient per sample
        instead of aggregated (summed) 1D-gradient.

    :return: Gradient for least squares regression as specified in above
        docstring, evaluated from the provided parameters.
    """
    X = np.asarray(X)
    y = np.asarray(y)
    coef_ = np.asarray(coef_)

    resulting_array: NumpyNumberArray
    if not grad_per_sample:
        resulting_array = np.dot(X.T, (np.dot(X, coef_) - y))
    else:
        resulting_array = np.asarray(
            [
                plain_least_squares_gradient(
                    X[[i], :], [y_sample], coef_, grad_per_sample=False
                )
                for (i, y_sample) in enumerate(y)
            ]
        )
    return resulting_array


def plain_least_squares_loss(
    X: NumpyOrMatrix, y: NumpyOrVector, coef_: NumpyOrVector
) -> float:
    r"""
    Summed least squares loss $\frac{1}{2} \times ||y - X_times_w||^2_2$.

    :param X: Independent variables.
    :param y: Dependent variables.
    :param coef_: Current coefficient vector.
    :return: Summed loss.
    """
    residuals = np.dot(np.asarray(X), np.asarray(coef_)) - np.asarray(y)
    return 0.5 * float(np.dot(residuals, residuals))
