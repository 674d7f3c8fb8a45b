"""
Provides classes for computing the gradient of objective functions
"""
from typing import Callable, Tuple, overload

import numpy as np
from typing_extensions import Literal, Protocol

from tno.sgd.linear_learning.utils import NumpyFloatArray, NumpyOrMatrix, NumpyOrVector
from tno.sgd.linear_learning.utils import util_matrix_vec as la


class GradientFunction(Protocol):
    """
    Class for objective function gradients.
    """

    def compute(
        self, features: NumpyOrVector, label: float, coef_: NumpyOrVector
    ) -> Tuple[NumpyFloatArray, float]:
        ...

    @overload
    def __call__(
        self,
        X: NumpyOrMatrix,
        y: NumpyOrVector,
        coef_: NumpyOrVector,
        grad_per_sample: Literal[False] = ...,
    ) -> NumpyFloatArray:
        ...

    @overload
    def __call__(
        self,
        X: NumpyOrMatrix,
        y: NumpyOrVector,
        coef_: NumpyOrVector,
        grad_per_sample: Literal[True],
    ) -> NumpyFloatArray:
        ...

    def __call__(
        self,
        X: NumpyOrMatrix,
        y: NumpyOrVector,
        coef_: NumpyOrVector,
        grad_per_sample: bool = False,
    ) -> NumpyFloatArray:
        ...

    def evaluate(
        self, X: NumpyOrMatrix, y: NumpyOrVector, coef_: NumpyOrVector
    ) -> Tuple[NumpyFloatArray, float]:
        ...


class WeightedDifferencesGradient:
    """
    Class for computing the gradient of objective functions. The gradient
    is assumed to have the following form:
    $$g(X, y, w) = X^T (f(X, w) - y)$$

    We refer to $f$ as the predictive function.
    """

    def __init__(
        self,
        predictive_func: Callable[[NumpyFloatArray, NumpyFloatArray], NumpyFloatArray],
    ) -> None:
        """
        Constructor method.

        :param predictive_func: Function that predicts the dependent variable
            from the independent data and the model coefficients
        """
        self.predictive_func = predictive_func

    def prediction_error(
        self, X: NumpyOrMatrix, y: NumpyOrVector, coef_: NumpyOrVector
    ) -> NumpyFloatArray:
        """
        Difference between the predicted and the real labels.

        :param X: Independent variables
        :param y: Dependent variables
        :param coef_: Current coefficients vector
        :raise DimensionalityError: Number of features differs from the
            length of the coefficients vector, or number of samples differs
            from the number of labels
        :return: Vector $f(X, w) - y$
        """
        X_np = np.asarray(X, dtype=np.float64)
        y_np = np.asarray(y, dtype=np.float64)
        coef_np = np.asarray(coef_, dtype=np.float64)
        if X_np.ndim == 2:
            la.check_dimensions(len(coef_np), X_np.shape[1])
        la.check_dimensions(len(X_np), len(y_np), what="label vector")
        return self.predictive_func(X_np, coef_np) - y_np

    @overload
    def __call__(
        self,
        X: NumpyOrMatrix,
        y: NumpyOrVector,
        coef_: NumpyOrVector,
        grad_per_sample: Literal[False] = ...,
    ) -> NumpyFloatArray:
        ...

    @overload
    def __call__(
        self,
        X: NumpyOrMatrix,
        y: NumpyOrVector,
        coef_: NumpyOrVector,
        grad_per_sample: Literal[True],
    ) -> NumpyFloatArray:
        ...

    def __call__(
        self,
        X: NumpyOrMatrix,
        y: NumpyOrVector,
        coef_: NumpyOrVector,
        grad_per_sample: bool = False,
    ) -> NumpyFloatArray:
        """
        Evaluate the gradient from the given parameters.

        Note that this function returns the sum of the gradients of the
        individual samples. It does not divide by the number of samples.

        :param X: Independent variables
        :param y: Dependent variables
        :param coef_: Current coefficients vector
        :param grad_per_sample: Return a matrix with the gradient per sample
            (row-wise) instead of the aggregated (summed) gradient
        :return: Gradient of objective function as specified in class
            docstring, evaluated from the provided parameters
        """
        X_np = la.as_matrix(X)
        prediction_error = self.prediction_error(X_np, y, coef_)
        if not grad_per_sample:
            return la.mat_vec_mult(X_np, prediction_error, transpose=True)
        return prediction_error[:, np.newaxis] * X_np


class LeastSquaresGradient(WeightedDifferencesGradient):
    r"""
    Gradient of the least squares loss of a linear predictor. The loss of a
    single sample $(x, y)$ equals
    $$L(w; x, y) = \frac{1}{2} (x^T w - y)^2$$
    and its gradient is given by
    $$g(w; x, y) = (x^T w - y) x.$$
    """

    def __init__(self) -> None:
        super().__init__(la.mat_vec_mult)

    def compute(
        self, features: NumpyOrVector, label: float, coef_: NumpyOrVector
    ) -> Tuple[NumpyFloatArray, float]:
        """
        Evaluate gradient and loss for a single sample.

        :param features: Feature vector of the sample
        :param label: Label of the sample
        :param coef_: Current coefficients vector
        :raise DimensionalityError: Feature vector and coefficients vector
            differ in length
        :return: Gradient and loss of the sample
        """
        diff = la.dot(coef_, features) - label
        return la.scale_vector(diff, features), 0.5 * diff * diff

    def loss_sum(self, X: NumpyOrMatrix, y: NumpyOrVector, coef_: NumpyOrVector) -> float:
        """
        Sum of the losses of all samples.

        :param X: Independent variables
        :param y: Dependent variables
        :param coef_: Current coefficients vector
        :return: $\\frac{1}{2} ||Xw - y||^2_2$
        """
        prediction_error = self.prediction_error(la.as_matrix(X), y, coef_)
        return 0.5 * float(np.dot(prediction_error, prediction_error))

    def evaluate(
        self, X: NumpyOrMatrix, y: NumpyOrVector, coef_: NumpyOrVector
    ) -> Tuple[NumpyFloatArray, float]:
        """
        Summed gradient and summed loss of a batch, sharing the prediction
        error between both.

        :param X: Independent variables
        :param y: Dependent variables
        :param coef_: Current coefficients vector
        :return: Summed gradient and summed loss
        """
        X_np = la.as_matrix(X)
        prediction_error = self.prediction_error(X_np, y, coef_)
        return (
            la.mat_vec_mult(X_np, prediction_error, transpose=True),
            0.5 * float(np.dot(prediction_error, prediction_error)),
        )
