"""
Generalized linear models and the capabilities that a model may offer.
"""
from typing import Any, List, Union, overload

import numpy as np
from typing_extensions import Protocol, runtime_checkable

from tno.sgd.linear_learning.exceptions import DimensionalityError
from tno.sgd.linear_learning.utils import (
    NumpyFloatArray,
    NumpyOrMatrix,
    NumpyOrVector,
    PartitionedDataset,
)
from tno.sgd.linear_learning.utils import util_matrix_vec as la


@runtime_checkable
class Predictor(Protocol):
    """
    Model that maps feature vectors to predictions.
    """

    def predict(self, X: Any) -> Any:
        ...


@runtime_checkable
class Persistable(Protocol):
    """
    Model that can be written to and restored from storage.
    """

    def save(self, path: str) -> None:
        ...


@runtime_checkable
class Exportable(Protocol):
    """
    Model that can be exported to PMML.
    """

    def to_pmml(self) -> str:
        ...


def linear_predictor(
    features: NumpyFloatArray, weights: NumpyFloatArray, intercept: float
) -> float:
    """
    Scoring function of a linear model: $w^T x + b$.

    :param features: Feature vector
    :param weights: Weights vector
    :param intercept: Intercept
    :raise DimensionalityError: Feature vector and weights vector differ in
        length
    :return: Prediction
    """
    return la.dot(weights, features) + intercept


class GeneralizedLinearModel:
    """
    A trained linear model: weights vector, intercept and the scoring
    function that turns both into predictions. Instances are immutable.

    :param weights: Weights computed for every feature
    :param intercept: Intercept computed for this model
    """

    def __init__(self, weights: NumpyOrVector, intercept: float = 0.0) -> None:
        """
        Constructor method.
        """
        weights_np = la.as_vector(weights)
        weights_np.setflags(write=False)
        self._weights = weights_np
        self._intercept = float(intercept)

    @property
    def weights(self) -> NumpyFloatArray:
        """
        Weights vector (read-only).

        :return: Weights vector
        """
        return self._weights

    @property
    def intercept(self) -> float:
        return self._intercept

    @property
    def num_features(self) -> int:
        return len(self._weights)

    def predict_point(self, features: NumpyOrVector) -> float:
        """
        Predict the target value of a single feature vector.

        :param features: Feature vector
        :raise DimensionalityError: Feature vector has the wrong length
        :return: Prediction
        """
        return linear_predictor(la.as_vector(features), self._weights, self._intercept)

    def _predict_matrix(self, X: NumpyFloatArray) -> NumpyFloatArray:
        if len(X) == 0:
            return np.zeros(0)
        la.check_dimensions(self.num_features, X.shape[1])
        return la.mat_vec_mult(X, self._weights) + self._intercept

    @overload
    def predict(self, X: PartitionedDataset) -> List[NumpyFloatArray]:
        ...

    @overload
    def predict(self, X: NumpyOrMatrix) -> Union[float, NumpyFloatArray]:
        ...

    def predict(
        self, X: Union[PartitionedDataset, NumpyOrMatrix, NumpyOrVector]
    ) -> Union[float, NumpyFloatArray, List[NumpyFloatArray]]:
        """
        Predict target values.

        A single feature vector yields a single prediction. A matrix (one
        feature vector per row) yields a vector of predictions in the same
        order. A partitioned dataset yields the predictions per partition;
        partitions are processed independently, in parallel if the dataset
        has an executor.

        :param X: Feature vector, matrix or partitioned dataset
        :raise DimensionalityError: A feature vector has the wrong length
        :return: Prediction(s)
        """
        if isinstance(X, PartitionedDataset):
            return X.map_partitions(lambda partition: self._predict_matrix(partition.X))
        try:
            X_np = np.asarray(X, dtype=np.float64)
        except ValueError as error:
            raise DimensionalityError(
                "Feature vectors are not of equal length."
            ) from error
        if X_np.ndim == 1:
            return self.predict_point(X_np)
        return self._predict_matrix(la.as_matrix(X_np))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GeneralizedLinearModel):
            return NotImplemented
        return (
            type(self) is type(other)
            and self._intercept == other.intercept
            and np.array_equal(self._weights, other.weights)
        )

    def __hash__(self) -> int:
        return hash((type(self), self._intercept, tuple(self._weights.tolist())))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(weights={self._weights.tolist()!r}, intercept={self._intercept!r})"

    def __str__(self) -> str:
        """
        String representation of model

        :return: Class name, intercept and number of features
        """
        return f"{type(self).__module__}.{type(self).__name__}: intercept = {self._intercept}, numFeatures = {self.num_features}"
