"""
Implementation of Ridge regression trained with stochastic gradient descent.
"""
from concurrent.futures import Executor
from typing import Any, Callable, Dict, Optional, Tuple

from tno.sgd.linear_learning import metrics
from tno.sgd.linear_learning.exceptions import UnsupportedFormatError
from tno.sgd.linear_learning.models import persistence, pmml_export
from tno.sgd.linear_learning.models.common_gradient_forms import (
    GradientFunction,
    LeastSquaresGradient,
)
from tno.sgd.linear_learning.models.glm_algorithm import (
    DatasetType,
    GeneralizedLinearAlgorithm,
    PenaltyTypes,
    SolverTypes,
)
from tno.sgd.linear_learning.models.linear_model import GeneralizedLinearModel
from tno.sgd.linear_learning.parameters import (
    DEFAULT_CONVERGENCE_TOL,
    DEFAULT_MINI_BATCH_FRACTION,
    DEFAULT_NUM_ITERATIONS,
    DEFAULT_REG_PARAM,
    DEFAULT_STEP_SIZE,
    SGDParameters,
)
from tno.sgd.linear_learning.utils import NumpyFloatArray, NumpyOrMatrix, NumpyOrVector
from tno.sgd.linear_learning.utils import util_matrix_vec as la
from tno.sgd.linear_learning.utils.dataset import DEFAULT_NUM_PARTITIONS
from tno.sgd.linear_learning.utils.mini_batch_sampler import DEFAULT_SEED

# Hard-coded class name, so that renaming the class does not break loading
# of stored models.
CLASS_NAME_V1_0 = "tno.sgd.linear_learning.models.RidgeRegressionModel"


class RidgeRegressionModel(GeneralizedLinearModel):
    """
    Regression model trained using ridge regression.

    :param weights: Weights computed for every feature
    :param intercept: Intercept computed for this model
    """

    def score(self, X: NumpyOrMatrix, y: NumpyOrVector) -> float:
        """
        Compute the coefficient of determination $R^2$ of the prediction.

        :param X: Test data.
        :param y: True value for $X$.
        :return: Score of the model prediction.
        """
        return metrics.r2_score(y, self._predict_matrix(la.as_matrix(X)))

    def save(self, path: str) -> None:
        """
        Store the model in the given directory.

        :param path: Model directory, created if it does not exist
        """
        persistence.GLMRegressionSaveLoadV1_0.save(
            path, CLASS_NAME_V1_0, self.weights, self.intercept
        )

    def to_pmml(self) -> str:
        """
        Export the model to PMML.

        :return: PMML document
        """
        return pmml_export.to_pmml(self, description="ridge regression")

    @classmethod
    def load(cls, path: str) -> "RidgeRegressionModel":
        """
        Restore a model from the given directory.

        :param path: Model directory
        :raise UnsupportedFormatError: The stored (class, version) combination
            is not supported
        :return: Restored model
        """
        loaded_class_name, version, metadata = persistence.load_metadata(path)
        loader = SUPPORTED_FORMATS.get((loaded_class_name, version))
        if loader is None:
            supported = "\n".join(
                f"  ({class_name}, {format_version})"
                for class_name, format_version in SUPPORTED_FORMATS
            )
            raise UnsupportedFormatError(
                f"RidgeRegressionModel.load did not recognize model with (className, format version):"
                f"({loaded_class_name}, {version}).  Supported:\n{supported}"
            )
        return loader(path, metadata)


def _load_v1_0(path: str, metadata: Dict[str, Any]) -> RidgeRegressionModel:
    num_features = persistence.get_num_features(metadata)
    weights, intercept = persistence.GLMRegressionSaveLoadV1_0.load_data(
        path, CLASS_NAME_V1_0, num_features
    )
    return RidgeRegressionModel(weights, intercept)


SUPPORTED_FORMATS: Dict[
    Tuple[str, str], Callable[[str, Dict[str, Any]], RidgeRegressionModel]
] = {
    (CLASS_NAME_V1_0, persistence.GLMRegressionSaveLoadV1_0.version): _load_v1_0,
}


class RidgeRegressionWithSGD(GeneralizedLinearAlgorithm[RidgeRegressionModel]):
    r"""
    Train a regression model with L2-regularization using stochastic
    gradient descent. This solves the L2-regularized least squares
    regression formulation
    $$f(w) = \frac{1}{2n} ||Xw - y||^2_2 + \frac{\alpha}{2} ||w||^2_2.$$

    The intercept, if fitted, is not regularized.
    """

    name = "Ridge regression with SGD"

    def __init__(
        self,
        step_size: float = DEFAULT_STEP_SIZE,
        num_iterations: int = DEFAULT_NUM_ITERATIONS,
        reg_param: float = DEFAULT_REG_PARAM,
        mini_batch_fraction: float = DEFAULT_MINI_BATCH_FRACTION,
        convergence_tol: float = DEFAULT_CONVERGENCE_TOL,
        fit_intercept: bool = False,
        seed: int = DEFAULT_SEED,
        solver_type: SolverTypes = SolverTypes.GD,
    ) -> None:
        """
        Constructor method.

        :param step_size: Initial step size of gradient descent
        :param num_iterations: Number of iterations of gradient descent
        :param reg_param: Regularization parameter $\alpha$
        :param mini_batch_fraction: Expected fraction of the data used in
            every iteration
        :param convergence_tol: Relative change of the coefficients below
            which training stops early; 0 disables early stopping
        :param fit_intercept: Learn an (unregularized) intercept
        :param seed: Seed of the mini-batch sampling
        :param solver_type: Solver type to use (e.g. Gradient Descent aka GD)
        :raise InvalidConfigurationError: A hyperparameter is out of range
        """
        self._gradient = LeastSquaresGradient()
        super().__init__(
            SGDParameters(
                step_size=step_size,
                num_iterations=num_iterations,
                reg_param=reg_param,
                mini_batch_fraction=mini_batch_fraction,
                convergence_tol=convergence_tol,
                fit_intercept=fit_intercept,
                seed=seed,
            ),
            solver_type=solver_type,
            penalty=PenaltyTypes.L2,
        )

    @property
    def gradient_function(self) -> GradientFunction:
        return self._gradient

    def create_model(
        self, weights: NumpyFloatArray, intercept: float
    ) -> RidgeRegressionModel:
        return RidgeRegressionModel(weights, intercept)

    @staticmethod
    def score(
        model: RidgeRegressionModel, X: NumpyOrMatrix, y: NumpyOrVector
    ) -> float:
        """
        Compute the coefficient of determination $R^2$ of the prediction.

        :param model: Trained model
        :param X: Test data.
        :param y: True value for $X$.
        :return: Score of the model prediction.
        """
        return model.score(X, y)


def train(
    dataset: DatasetType,
    num_iterations: int,
    step_size: float = DEFAULT_STEP_SIZE,
    reg_param: float = DEFAULT_REG_PARAM,
    mini_batch_fraction: float = DEFAULT_MINI_BATCH_FRACTION,
    initial_weights: Optional[NumpyOrVector] = None,
    fit_intercept: bool = False,
    convergence_tol: float = DEFAULT_CONVERGENCE_TOL,
    seed: int = DEFAULT_SEED,
    num_partitions: int = DEFAULT_NUM_PARTITIONS,
    executor: Optional[Executor] = None,
) -> RidgeRegressionModel:
    """
    Train a ridge regression model with stochastic gradient descent.

    :param dataset: Partitioned dataset, or labeled points / (features,
        label) tuples
    :param num_iterations: Number of iterations of gradient descent
    :param step_size: Initial step size of gradient descent
    :param reg_param: Regularization parameter
    :param mini_batch_fraction: Expected fraction of the data used in every
        iteration
    :param initial_weights: Initial weights vector. Defaults to zeros
    :param fit_intercept: Learn an (unregularized) intercept
    :param convergence_tol: Relative change of the coefficients below which
        training stops early; 0 disables early stopping
    :param seed: Seed of the mini-batch sampling
    :param num_partitions: Number of partitions if the dataset still needs to
        be partitioned
    :param executor: Executor used to process the partitions in parallel if
        the dataset still needs to be partitioned
    :raise InvalidConfigurationError: A hyperparameter is out of range
    :raise DimensionalityError: Initial weights do not match the data
    :return: Trained model
    """
    return RidgeRegressionWithSGD(
        step_size=step_size,
        num_iterations=num_iterations,
        reg_param=reg_param,
        mini_batch_fraction=mini_batch_fraction,
        convergence_tol=convergence_tol,
        fit_intercept=fit_intercept,
        seed=seed,
    ).run(
        dataset,
        initial_weights=initial_weights,
        num_partitions=num_partitions,
        executor=executor,
    )


def save(model: RidgeRegressionModel, path: str) -> None:
    """
    Store a model in the given directory.

    :param model: Model to store
    :param path: Model directory
    """
    model.save(path)


def load(path: str) -> RidgeRegressionModel:
    """
    Restore a model from the given directory.

    :param path: Model directory
    :raise UnsupportedFormatError: The stored (class, version) combination
        is not supported
    :return: Restored model
    """
    return RidgeRegressionModel.load(path)
