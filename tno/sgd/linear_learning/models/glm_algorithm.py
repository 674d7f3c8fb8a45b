"""
Abstract class for algorithms that train generalized linear models.
"""
import logging
from abc import ABC, abstractmethod
from concurrent.futures import Executor
from enum import Enum, auto
from time import time
from typing import Generic, Iterable, List, Optional, Tuple, TypeVar, Union

import numpy as np
from sklearn.model_selection import KFold

from tno.sgd.linear_learning import regularizers
from tno.sgd.linear_learning.exceptions import (
    DimensionalityError,
    UninitializedSolverError,
    UnknownPenaltyError,
)
from tno.sgd.linear_learning.models.common_gradient_forms import GradientFunction
from tno.sgd.linear_learning.models.linear_model import GeneralizedLinearModel
from tno.sgd.linear_learning.parameters import SGDParameters
from tno.sgd.linear_learning.solvers import GD
from tno.sgd.linear_learning.solvers.solver import Solver
from tno.sgd.linear_learning.utils import (
    NumpyFloatArray,
    NumpyOrMatrix,
    NumpyOrVector,
    PartitionedDataset,
)
from tno.sgd.linear_learning.utils.dataset import DEFAULT_NUM_PARTITIONS, ExampleType

ModelTV = TypeVar("ModelTV", bound=GeneralizedLinearModel)

DatasetType = Union[PartitionedDataset, Iterable[ExampleType]]


class SolverTypes(Enum):
    """
    The possible solver types associated to training algorithms.
    """

    GD = auto()


class PenaltyTypes(Enum):
    """
    The possible penalty types associated to training algorithms.
    """

    NONE = auto()
    L2 = auto()


class GeneralizedLinearAlgorithm(ABC, Generic[ModelTV]):
    """
    Abstract training algorithm for generalized linear models. Wires a
    gradient function and an updater into a solver, runs the solver and
    wraps the resulting coefficients in a model.
    """

    name = ""

    def __init__(
        self,
        parameters: SGDParameters,
        solver_type: SolverTypes = SolverTypes.GD,
        penalty: PenaltyTypes = PenaltyTypes.NONE,
    ) -> None:
        """
        Constructor method.

        :param parameters: Hyperparameters of the training run, validated on
            construction
        :param solver_type: Solver type to use (e.g. Gradient Descent aka GD)
        :param penalty: Penalty function (none or l2)
        """
        self.parameters = parameters
        self._solver: Optional[Solver] = None
        self.initialize_solver(solver_type, penalty)

    def __str__(self) -> str:
        """
        String representation of the algorithm

        :return: human readable name of the algorithm
        """
        return self.name

    @property
    def solver(self) -> Solver:
        """
        Return solver used by current algorithm.

        :raise UninitializedSolverError: raised when solver is not yet initiated
        :return: Solver used by current algorithm.
        """
        if self._solver is None:
            raise UninitializedSolverError("Solver not initiated.")
        return self._solver

    @property
    def loss_history(self) -> List[float]:
        """
        Objective value per iteration of the most recent training run.

        :return: Loss history
        """
        return list(self.solver.loss_history)

    def initialize_solver(self, solver_type: SolverTypes, penalty: PenaltyTypes) -> None:
        """
        Initialize solver.

        :param solver_type: Type of the requested solver.
        :param penalty: Type of penalty
        """
        self._pick_solver(solver_type)
        self._pass_gradient_function_to_solver()
        self._add_penalty(penalty)

    def _pick_solver(self, solver_type: SolverTypes) -> None:
        """
        Initialize solver of correct type.

        :param solver_type: Type of the requested solver.
        """
        solver: Solver
        if solver_type == SolverTypes.GD:
            solver = GD()
        self._solver = solver

    def _pass_gradient_function_to_solver(self) -> None:
        """
        Initializes solver with gradient function of the model.
        """
        self.solver.set_gradient_function(self.gradient_function)

    def _add_penalty(self, penalty: PenaltyTypes) -> None:
        """
        Sets the updater that belongs to the given penalty.

        :param penalty: the type of penalty given (none or l2)
        :raise UnknownPenaltyError: if an unknown penalty type is given
        """
        if penalty == PenaltyTypes.NONE:
            self.solver.set_updater(regularizers.SimpleUpdater())
        elif penalty == PenaltyTypes.L2:
            self.solver.set_updater(regularizers.SquaredL2Updater())
        else:
            raise UnknownPenaltyError(f"Received unknown penalty type: {penalty}")

    @property
    @abstractmethod
    def gradient_function(self) -> GradientFunction:
        """
        Gradient function of the objective.

        :return: Gradient function
        """

    @abstractmethod
    def create_model(self, weights: NumpyFloatArray, intercept: float) -> ModelTV:
        """
        Wrap trained coefficients in a model.

        :param weights: Weights vector
        :param intercept: Intercept
        :return: Model
        """

    @staticmethod
    def _to_partitioned_dataset(
        dataset: DatasetType,
        num_partitions: int,
        executor: Optional[Executor],
    ) -> PartitionedDataset:
        if isinstance(dataset, PartitionedDataset):
            return dataset
        return PartitionedDataset.from_points(
            dataset, num_partitions=num_partitions, executor=executor
        )

    def run(
        self,
        dataset: DatasetType,
        initial_weights: Optional[NumpyOrVector] = None,
        num_partitions: int = DEFAULT_NUM_PARTITIONS,
        executor: Optional[Executor] = None,
        print_progress: bool = False,
    ) -> ModelTV:
        """
        Train the model on the given data.

        The caller's data is never modified.

        :param dataset: Partitioned dataset, or labeled points / (features,
            label) tuples that are partitioned first
        :param initial_weights: Initial weights vector. Defaults to a vector
            of zeros
        :param num_partitions: Number of partitions if the dataset still
            needs to be partitioned
        :param executor: Executor used to process the partitions in parallel
            if the dataset still needs to be partitioned
        :param print_progress: Set to True to print progress every few iterations
        :raise DimensionalityError: The number of features cannot be
            determined or the initial weights have the wrong length
        :return: Trained model
        """
        start_time = time()
        partitioned_dataset = self._to_partitioned_dataset(
            dataset, num_partitions, executor
        )

        num_features = partitioned_dataset.num_features
        if num_features is None:
            if initial_weights is None:
                raise DimensionalityError(
                    "Cannot determine the number of features of an empty dataset without initial weights."
                )
            num_features = len(initial_weights)

        self.solver.init_solver(
            self.parameters, num_features=num_features, weights_init=initial_weights
        )
        coef_ = self.solver._get_coefficients(
            partitioned_dataset, print_progress=print_progress
        )
        intercept, weights = self.solver.split_coefficients(coef_)

        timing = str(time() - start_time)
        logging.info("Timing " + self.name + ": " + timing + " seconds")
        logging.info(
            "Number of iterations: "
            + str(self.solver.nr_epochs)
            + "; Relative update difference: "
            + str(self.solver.rel_update_diff)
        )
        return self.create_model(weights, intercept)

    def cross_validate(
        self,
        X: NumpyOrMatrix,
        y: NumpyOrVector,
        folds: Union[int, List[Tuple[List[int], List[int]]]] = 5,
        random_state: Optional[int] = None,
        shuffle: bool = False,
        initial_weights: Optional[NumpyOrVector] = None,
        num_partitions: int = DEFAULT_NUM_PARTITIONS,
    ) -> List[float]:
        r"""
        Evaluate the $R^2$ score of the trained model using CV.

        :param X: Train data.
        :param y: Target variable for X
        :param folds:
            Folding sets.
            If set to $k$ (integer) then a KFold (from sklearn.model_selection) is used.
            It also possible to pass custom folds as a list of tuples of train and test indexes:
            e.g. $[([2, 3], [0, 1, 4]), ([0, 1, 3], [2, 4]), ([0, 1, 2], [3, 4])]$ is a 3-fold of an array of five elements
        :param random_state: parameters that control the randomness of each fold. Pass a value to obtain the same fold each time for reproducibility purposes.
        :param shuffle: Whether to shuffle the data or not before splitting into batches.
        :param initial_weights: Initial weights vector of every training run
        :param num_partitions: Number of partitions of the training data of every fold
        :return: List of scores of the model prediction, one per fold.
        """
        X_np = np.asarray(X, dtype=np.float64)
        y_np = np.asarray(y, dtype=np.float64)
        results = []

        if isinstance(folds, int):
            if not shuffle and random_state is not None:
                random_state = None
            kfold = KFold(n_splits=folds, shuffle=shuffle, random_state=random_state)
            folds = [
                (train_index.tolist(), test_index.tolist())
                for train_index, test_index in kfold.split(X_np)
            ]

        for train_index, test_index in folds:
            train_data = PartitionedDataset.from_arrays(
                X_np[train_index], y_np[train_index], num_partitions=num_partitions
            )
            model = self.run(train_data, initial_weights=initial_weights)
            results.append(self.score(model, X_np[test_index], y_np[test_index]))
        return results

    @staticmethod
    @abstractmethod
    def score(model: ModelTV, X: NumpyOrMatrix, y: NumpyOrVector) -> float:
        """
        Compute the model score.

        :param model: Trained model
        :param X: Test data.
        :param y: True value for $X$.
        :return: Score of the model prediction.
        """
