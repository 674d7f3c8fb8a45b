"""
Class for a solver, which can then be used to define
other solvers such as mini-batch gradient descent.
"""
import logging
import warnings
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

import tno.sgd.linear_learning.utils.util_matrix_vec as la
from tno.sgd.linear_learning.exceptions import (
    MissingFunctionError,
    UninitializedSolverError,
)
from tno.sgd.linear_learning.models.common_gradient_forms import GradientFunction
from tno.sgd.linear_learning.parameters import SGDParameters
from tno.sgd.linear_learning.regularizers import BaseUpdater
from tno.sgd.linear_learning.utils import (
    MiniBatchSampler,
    NumpyFloatArray,
    NumpyOrVector,
    Partition,
    PartitionedDataset,
)


@dataclass(frozen=True)
class PartialAggregate:
    """
    Sum of the gradients and losses of a number of samples. Partial
    aggregates of disjoint sets of samples are combined by addition, which
    is associative and commutative.

    :param gradient_sum: Sum of the per-sample gradients
    :param loss_sum: Sum of the per-sample losses
    :param count: Number of samples
    """

    gradient_sum: NumpyFloatArray
    loss_sum: float
    count: int

    @classmethod
    def zero(cls, num_coefficients: int) -> "PartialAggregate":
        """
        Neutral element of the addition.

        :param num_coefficients: Length of the gradient
        :return: Aggregate of zero samples
        """
        return cls(np.zeros(num_coefficients), 0.0, 0)

    def __add__(self, other: "PartialAggregate") -> "PartialAggregate":
        return PartialAggregate(
            gradient_sum=la.axpy(1.0, other.gradient_sum, self.gradient_sum),
            loss_sum=self.loss_sum + other.loss_sum,
            count=self.count + other.count,
        )


class Solver(ABC):
    """
    Abstract class for a solver, which can then be used to define
    other solvers such as mini-batch gradient descent.

    The coefficient vector that the solver iterates on contains the
    intercept as its first element if an intercept is fitted, followed by
    the weights.
    """

    name: str = ""

    def __init__(self) -> None:
        """
        Constructor method.

        Notice that the relevant class variables are instantiated through `init_solver`.
        """
        self._gradient_function: Optional[GradientFunction] = None
        self._updater: Optional[BaseUpdater] = None

        self.parameters: Optional[SGDParameters] = None
        self.sampler: Optional[MiniBatchSampler] = None
        self.coef_init: Optional[NumpyFloatArray] = None
        self.loss_history: List[float] = []
        self.nr_epochs: Optional[int] = None
        self.rel_update_diff: Optional[float] = None

    def __str__(self) -> str:
        """
        Returns solver name

        :return: Solver name
        """
        return self.name

    @property
    def params(self) -> SGDParameters:
        """
        Return the hyperparameters of the solver.

        :raise UninitializedSolverError: Occurs when a solver has
            not been fully initialised
        :return: Hyperparameters
        """
        if self.parameters is None:
            raise UninitializedSolverError(
                "Solver has not been fully initialized, parameters have not been set."
            )
        return self.parameters

    @property
    def gradient_function(self) -> GradientFunction:
        """
        Gradient function that is used by the solver.

        :raise MissingFunctionError: No gradient function was initialized
        :return: Gradient function
        """
        if self._gradient_function is None:
            raise MissingFunctionError("Gradient function has not been initialized.")
        return self._gradient_function

    @property
    def updater(self) -> BaseUpdater:
        """
        Updater that is used by the solver.

        :raise MissingFunctionError: No updater was initialized
        :return: Updater
        """
        if self._updater is None:
            raise MissingFunctionError("Updater has not been initialized.")
        return self._updater

    def set_gradient_function(self, function: GradientFunction) -> None:
        """
        Set the gradient function that is used by the solver.

        :param function: Gradient function
        """
        self._gradient_function = function

    def set_updater(self, updater: BaseUpdater) -> None:
        """
        Set the updater that is used by the solver.

        :param updater: Updater
        """
        self._updater = updater

    @staticmethod
    def _initialize_or_verify_initial_coef_(
        weights_init: Optional[NumpyOrVector],
        num_features: int,
        fit_intercept: bool,
    ) -> NumpyFloatArray:
        """
        Parses and verifies initial weights and turns them into the initial
        coefficients vector (possibly including intercept).

        Initializes the weights as a vector of zeros if None was given. The
        intercept always starts at zero.

        :param weights_init: Initial weights vector. If None is passed, then
            initialize the weights as a vector of zeros
        :param num_features: Number of features
        :param fit_intercept: Prepend an intercept to the coefficients vector
        :raise DimensionalityError: Provided weights vector is of the wrong
            length
        :return: Verified initial coefficients vector
        """
        if weights_init is None:
            weights = np.zeros(num_features)
        else:
            weights = la.as_vector(weights_init)
            la.check_dimensions(num_features, len(weights), what="initial weights")
        if fit_intercept:
            return np.concatenate(([0.0], weights))
        return weights

    def init_solver(
        self,
        parameters: SGDParameters,
        num_features: int,
        weights_init: Optional[NumpyOrVector] = None,
    ) -> None:
        """
        Pass configuration to the solver.

        :param parameters: Hyperparameters of the training run
        :param num_features: Number of features in the training data
        :param weights_init: Initial weights vector. If None is passed, then
            initialize the weights as a vector of zeros
        """
        self.parameters = parameters
        self.sampler = MiniBatchSampler(
            parameters.mini_batch_fraction, seed=parameters.seed
        )
        self.coef_init = self._initialize_or_verify_initial_coef_(
            weights_init,
            num_features=num_features,
            fit_intercept=parameters.fit_intercept,
        )
        self.loss_history = []
        self.nr_epochs = None
        self.rel_update_diff = None

    def split_coefficients(
        self, coef_: NumpyOrVector
    ) -> Tuple[float, NumpyFloatArray]:
        """
        Split a coefficients vector into intercept and weights.

        :param coef_: Coefficients vector
        :return: Intercept and weights vector
        """
        coef_np = la.as_vector(coef_)
        if self.params.fit_intercept:
            return float(coef_np[0]), coef_np[1:]
        return 0.0, coef_np

    def regularization_value(self, coef_: NumpyOrVector) -> float:
        """
        Evaluate the penalty of a coefficients vector. The intercept is
        never penalized.

        :param coef_: Coefficients vector
        :return: Value of the regularization term
        """
        _, weights = self.split_coefficients(coef_)
        return self.updater.regularization_value(weights, self.params.reg_param)

    def evaluate_gradient_function_for_minibatch(
        self,
        dataset: PartitionedDataset,
        coef_: NumpyFloatArray,
        iteration: int,
    ) -> PartialAggregate:
        """
        Sample the mini-batch of the given iteration and aggregate the
        gradients and losses of its samples over all partitions.

        All partitions evaluate the gradient at the same coefficients vector.

        :param dataset: Training data
        :param coef_: Coefficients vector at the start of the iteration
        :param iteration: Iteration index
        :return: Aggregated gradient, loss and number of samples
        """
        assert self.sampler is not None
        sampler = self.sampler
        gradient_function = self.gradient_function
        coef_fixed = coef_.copy()
        coef_fixed.setflags(write=False)

        def partial_aggregate(partition: Partition) -> PartialAggregate:
            batch = sampler.sample(partition, iteration)
            if not len(batch):
                return PartialAggregate.zero(len(coef_fixed))
            gradient_sum, loss_sum = gradient_function.evaluate(
                batch.X, batch.y, coef_fixed
            )
            return PartialAggregate(gradient_sum, loss_sum, len(batch))

        return dataset.aggregate(
            PartialAggregate.zero(len(coef_fixed)),
            partial_aggregate,
            lambda left, right: left + right,
        )

    def update_coefficients(
        self,
        coef_old: NumpyFloatArray,
        gradient: NumpyFloatArray,
        iteration: int,
    ) -> Tuple[NumpyFloatArray, float]:
        """
        Apply the updater to the weights and take a plain gradient step
        on the intercept.

        :param coef_old: Coefficients vector of the previous iteration
        :param gradient: Averaged gradient
        :param iteration: Iteration index
        :return: New coefficients vector and the regularization value at the
            new coefficients
        """
        params = self.params
        if not params.fit_intercept:
            return self.updater(
                coef_old, gradient, iteration, params.step_size, params.reg_param
            )
        weights_new, reg_value = self.updater(
            coef_old[1:], gradient[1:], iteration, params.step_size, params.reg_param
        )
        eta = self.updater.learning_rate(params.step_size, iteration)
        intercept_new = coef_old[0] - eta * gradient[0]
        return np.concatenate(([intercept_new], weights_new)), reg_value

    @abstractmethod
    def preprocessing(self, dataset: PartitionedDataset) -> PartitionedDataset:
        """
        Preprocess obtained data.

        :param dataset: Training data
        :return: Preprocessed training data
        """

    @abstractmethod
    def inner_loop_calculation(
        self,
        dataset: PartitionedDataset,
        coef_old: NumpyFloatArray,
        iteration: int,
    ) -> Optional[NumpyFloatArray]:
        """
        Performs one iteration of the solver.

        :param dataset: Training data
        :param coef_old: Current iterative solution
        :param iteration: Iteration index, starting at 1
        :return: Updated iterative solution, or None if the iteration was
            skipped
        """

    def is_converged(
        self, coef_old: NumpyFloatArray, coef_new: NumpyFloatArray
    ) -> bool:
        """
        Check whether two subsequent iterates are close enough to stop.

        The solution has converged if
        $||w_t - w_{t-1}|| < \\textrm{tol} \\times \\max(||w_t||, 1)$.

        :param coef_old: Previous iterate
        :param coef_new: Current iterate
        :return: True if the solution has converged, False otherwise
        """
        update_diff = la.norm(la.axpy(-1.0, coef_old, coef_new))
        self.rel_update_diff = update_diff / max(la.norm(coef_new), 1.0)
        return self.rel_update_diff < self.params.convergence_tol

    ###
    # Model training with gradient descent
    ###

    def _get_coefficients(
        self,
        dataset: PartitionedDataset,
        print_progress: bool = False,
    ) -> NumpyFloatArray:
        """
        Compute the model coefficients.
        Only solver-independent calculations are explicitly defined (and
        called "outer loop").

        :param dataset: Training data
        :param print_progress: Print progress (iteration number) to standard output
        :return: Coefficients vector computed by the solver
        """
        assert self.coef_init is not None
        params = self.params
        num_examples = len(dataset)

        if num_examples == 0:
            logging.warning(
                "%s returning initial weights, no data found.", self.name
            )
            self.nr_epochs = 0
            return self.coef_init.copy()

        if num_examples * params.mini_batch_fraction < 1:
            logging.warning(
                "The mini-batch fraction is too small: the expected mini-batch size is %s.",
                num_examples * params.mini_batch_fraction,
            )

        ###
        # Solver-specific pre-processing
        ###
        dataset = self.preprocessing(dataset)

        coef_old = self.coef_init.copy()
        has_converged = False

        ###
        # Gradient descent outer loop (solver-independent)
        ###
        iteration = 0
        for iteration in range(1, params.num_iterations + 1):
            if print_progress and iteration % 10 == 1:
                print(f"Iteration {iteration}...")

            coef_new = self.inner_loop_calculation(dataset, coef_old, iteration)
            if coef_new is None:
                continue

            # Check for convergence
            has_converged = params.convergence_tol > 0 and self.is_converged(
                coef_old, coef_new
            )
            coef_old = coef_new
            if has_converged:
                break

        if params.convergence_tol > 0 and not has_converged:
            warnings.warn(
                "ConvergenceWarning: The maximum number of iterations was reached which means the coef_ did not converge. Standardizing input data, adjusting step-size, lowering tolerance, or increasing the number of iterations may help."
            )

        self.nr_epochs = iteration
        logging.info(
            "%s finished. Last %d losses: %s",
            self.name,
            min(10, len(self.loss_history)),
            ", ".join(str(_) for _ in self.loss_history[-10:]),
        )

        ###
        # Solver-specific post-processing
        ###
        return self.postprocessing(coef_old)

    @staticmethod
    def postprocessing(coef_predict: NumpyFloatArray) -> NumpyFloatArray:
        """
        Postprocess the predicted coefficients.

        :param coef_predict: Predicted coefficient vector
        :return: Postprocessed coefficient vector
        """
        return coef_predict
