"""
Hyperparameters of the stochastic gradient descent solvers.
"""
from dataclasses import dataclass
from numbers import Integral

from tno.sgd.linear_learning.exceptions import InvalidConfigurationError
from tno.sgd.linear_learning.utils.mini_batch_sampler import DEFAULT_SEED

DEFAULT_STEP_SIZE = 1.0
DEFAULT_NUM_ITERATIONS = 100
DEFAULT_REG_PARAM = 0.01
DEFAULT_MINI_BATCH_FRACTION = 1.0
DEFAULT_CONVERGENCE_TOL = 0.0


@dataclass(frozen=True)
class SGDParameters:
    """
    Configuration of a training run. Fixed before training starts and
    never changed during training.

    :param step_size: Initial step size, the learning rate of iteration $t$
        equals `step_size / sqrt(t)`
    :param num_iterations: Number of iterations
    :param reg_param: Regularization parameter
    :param mini_batch_fraction: Expected fraction of the data used in every
        iteration
    :param convergence_tol: Training stops early when the relative change of
        the coefficients drops below this value; 0 disables the check
    :param fit_intercept: Learn an (unregularized) intercept
    :param seed: Seed of the mini-batch sampling
    """

    step_size: float = DEFAULT_STEP_SIZE
    num_iterations: int = DEFAULT_NUM_ITERATIONS
    reg_param: float = DEFAULT_REG_PARAM
    mini_batch_fraction: float = DEFAULT_MINI_BATCH_FRACTION
    convergence_tol: float = DEFAULT_CONVERGENCE_TOL
    fit_intercept: bool = False
    seed: int = DEFAULT_SEED

    def __post_init__(self) -> None:
        """
        Validate the hyperparameters.

        :raise InvalidConfigurationError: A hyperparameter is out of range
        """
        if isinstance(self.num_iterations, bool) or not isinstance(
            self.num_iterations, Integral
        ):
            raise InvalidConfigurationError(
                f"Number of iterations must be an integer, but received {self.num_iterations!r}."
            )
        if self.num_iterations < 1:
            raise InvalidConfigurationError(
                f"Number of iterations must be at least 1, but received {self.num_iterations}."
            )
        if not self.step_size > 0:
            raise InvalidConfigurationError(
                f"Step size must be positive, but received {self.step_size}."
            )
        if not self.reg_param >= 0:
            raise InvalidConfigurationError(
                f"Regularization parameter must be non-negative, but received {self.reg_param}."
            )
        if not 0 < self.mini_batch_fraction <= 1:
            raise InvalidConfigurationError(
                f"Mini-batch fraction must lie in (0, 1], but received {self.mini_batch_fraction}."
            )
        if not 0 <= self.convergence_tol <= 1:
            raise InvalidConfigurationError(
                f"Convergence tolerance must lie in [0, 1], but received {self.convergence_tol}."
            )
        if isinstance(self.seed, bool) or not isinstance(self.seed, Integral):
            raise InvalidConfigurationError(
                f"Seed must be an integer, but received {self.seed!r}."
            )
        if self.seed < 0:
            raise InvalidConfigurationError(
                f"Seed must be non-negative, but received {self.seed}."
            )
