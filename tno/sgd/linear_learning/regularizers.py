"""
Contains the updaters that turn an averaged gradient into the next
coefficient vector, including the regularization of that vector.
"""
import math
from abc import ABC, abstractmethod
from typing import Tuple

from tno.sgd.linear_learning.exceptions import InvalidConfigurationError
from tno.sgd.linear_learning.utils import NumpyFloatArray, NumpyOrVector
from tno.sgd.linear_learning.utils import util_matrix_vec as la


class BaseUpdater(ABC):
    """
    Base class for updaters.

    All updaters share a diminishing step size schedule: in iteration $t$
    the learning rate equals $\\eta_t = \\frac{\\eta_0}{\\sqrt{t}}$.
    """

    @staticmethod
    def learning_rate(step_size: float, iteration: int) -> float:
        """
        Learning rate of the given iteration.

        :param step_size: Initial step size $\\eta_0$
        :param iteration: Iteration index, starting at 1
        :raise InvalidConfigurationError: Iteration index is not positive
        :return: Learning rate $\\eta_0 / \\sqrt{t}$
        """
        if iteration < 1:
            raise InvalidConfigurationError(
                f"Iteration index must be at least 1, but received {iteration}."
            )
        return step_size / math.sqrt(iteration)

    @abstractmethod
    def regularization_value(self, weights: NumpyOrVector, reg_param: float) -> float:
        """
        Evaluate the penalty of the given weights.

        :param weights: Weight vector (without intercept)
        :param reg_param: Regularization parameter
        :return: Value of the regularization term
        """

    @abstractmethod
    def __call__(
        self,
        weights_old: NumpyOrVector,
        gradient: NumpyOrVector,
        iteration: int,
        step_size: float,
        reg_param: float,
    ) -> Tuple[NumpyFloatArray, float]:
        """
        Compute the next weight vector.

        :param weights_old: Weight vector of the previous iteration (without
            intercept)
        :param gradient: Gradient averaged over the mini-batch
        :param iteration: Iteration index, starting at 1
        :param step_size: Initial step size
        :param reg_param: Regularization parameter
        :return: New weight vector and the value of the regularization term
            evaluated at the new weight vector
        """


class SimpleUpdater(BaseUpdater):
    """
    Plain gradient step without regularization.
    """

    def regularization_value(self, weights: NumpyOrVector, reg_param: float) -> float:
        return 0.0

    def __call__(
        self,
        weights_old: NumpyOrVector,
        gradient: NumpyOrVector,
        iteration: int,
        step_size: float,
        reg_param: float,
    ) -> Tuple[NumpyFloatArray, float]:
        eta = self.learning_rate(step_size, iteration)
        return la.axpy(-eta, gradient, weights_old), 0.0


class SquaredL2Updater(BaseUpdater):
    r"""
    Updater for L2 regularization:
    $$f(w) = \frac{\alpha}{2} \times ||w||^2_2.$$

    The subgradient of the penalty is $\alpha w$, so a gradient step on the
    regularized objective amounts to shrinking the weights by a factor
    $(1 - \eta_t \alpha)$ before taking the gradient step on the loss:
    $$w_{t} = (1 - \eta_t \alpha) w_{t-1} - \eta_t g.$$
    """

    def regularization_value(self, weights: NumpyOrVector, reg_param: float) -> float:
        """
        Evaluate the L2 penalty.

        :param weights: Weight vector (without intercept)
        :param reg_param: Regularization parameter
        :return: $\\frac{\\alpha}{2} ||w||^2_2$
        """
        weights_norm = la.norm(weights)
        return 0.5 * reg_param * weights_norm * weights_norm

    def __call__(
        self,
        weights_old: NumpyOrVector,
        gradient: NumpyOrVector,
        iteration: int,
        step_size: float,
        reg_param: float,
    ) -> Tuple[NumpyFloatArray, float]:
        """
        Apply the shrinkage and the gradient step.

        :param weights_old: Weight vector of the previous iteration (without
            intercept)
        :param gradient: Gradient averaged over the mini-batch
        :param iteration: Iteration index, starting at 1
        :param step_size: Initial step size
        :param reg_param: Regularization parameter
        :return: New weight vector and $\\frac{\\alpha}{2} ||w_t||^2_2$
        """
        eta = self.learning_rate(step_size, iteration)
        shrunk_weights = la.scale_vector(1.0 - eta * reg_param, weights_old)
        weights_new = la.axpy(-eta, gradient, shrunk_weights)
        return weights_new, self.regularization_value(weights_new, reg_param)
