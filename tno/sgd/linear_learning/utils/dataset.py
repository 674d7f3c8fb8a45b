"""
Contains the partitioned representation of a labeled dataset and the
reduction primitive that the solvers are built upon.
"""
from concurrent.futures import Executor
from dataclasses import dataclass
from functools import reduce
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, TypeVar, Union

import numpy as np

from tno.sgd.linear_learning.exceptions import (
    DimensionalityError,
    InvalidConfigurationError,
)
from tno.sgd.linear_learning.utils import util_matrix_vec as la
from tno.sgd.linear_learning.utils.types import (
    NumpyFloatArray,
    NumpyOrMatrix,
    NumpyOrVector,
)

ResultTV = TypeVar("ResultTV")

DEFAULT_NUM_PARTITIONS = 1


@dataclass(frozen=True, eq=False)
class LabeledPoint:
    """
    A single training example.

    :param features: Feature vector
    :param label: Label of the example
    """

    features: NumpyFloatArray
    label: float

    def __post_init__(self) -> None:
        features = la.as_vector(self.features)
        features.setflags(write=False)
        object.__setattr__(self, "features", features)
        object.__setattr__(self, "label", float(self.label))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LabeledPoint):
            return NotImplemented
        return self.label == other.label and np.array_equal(
            self.features, other.features
        )


ExampleType = Union[LabeledPoint, Tuple[NumpyOrVector, float]]


@dataclass(frozen=True)
class Partition:
    """
    A shard of the dataset. Holds the features of its examples row-wise and
    the corresponding labels.

    :param index: Position of the partition within the dataset
    :param X: Feature matrix of shape $n_p * r$
    :param y: Label vector of length $n_p$
    """

    index: int
    X: NumpyFloatArray
    y: NumpyFloatArray

    def __len__(self) -> int:
        return len(self.y)


class PartitionedDataset:
    """
    Dataset that is split row-wise into independent partitions.

    Computations are expressed as a function that is evaluated on every
    partition independently, followed by an associative and commutative
    combination of the partial results. The partitions may therefore be
    processed in parallel by passing an executor.

    :param partitions: The partitions of the dataset
    :param executor: Executor used to process partitions in parallel. If
        None, partitions are processed sequentially
    """

    def __init__(
        self,
        partitions: Sequence[Partition],
        executor: Optional[Executor] = None,
    ) -> None:
        """
        Constructor method.

        :raise DimensionalityError: Partitions do not share the number of features
        """
        self.partitions: List[Partition] = list(partitions)
        self.executor = executor
        widths = {
            partition.X.shape[1] for partition in self.partitions if len(partition)
        }
        if len(widths) > 1:
            raise DimensionalityError(
                f"All partitions must have the same number of features, but received {sorted(widths)}."
            )
        self._num_features: Optional[int] = widths.pop() if widths else None

    @classmethod
    def from_arrays(
        cls,
        X: NumpyOrMatrix,
        y: NumpyOrVector,
        num_partitions: int = DEFAULT_NUM_PARTITIONS,
        executor: Optional[Executor] = None,
    ) -> "PartitionedDataset":
        """
        Split a feature matrix and label vector into contiguous partitions.

        :param X: Feature matrix, one row per example
        :param y: Labels
        :param num_partitions: Number of partitions
        :param executor: Executor used to process partitions in parallel
        :raise InvalidConfigurationError: Number of partitions is not positive
        :raise DimensionalityError: Number of rows and labels differ
        :return: Partitioned dataset
        """
        if num_partitions < 1:
            raise InvalidConfigurationError(
                f"Number of partitions must be at least 1, but received {num_partitions}."
            )
        X_np = la.as_matrix(X)
        y_np = la.as_vector(y)
        la.check_dimensions(len(X_np), len(y_np), what="label vector")
        row_blocks = np.array_split(np.arange(len(y_np)), num_partitions)
        partitions = [
            Partition(index=index, X=X_np[rows], y=y_np[rows])
            for index, rows in enumerate(row_blocks)
        ]
        return cls(partitions, executor=executor)

    @classmethod
    def from_points(
        cls,
        points: Iterable[ExampleType],
        num_partitions: int = DEFAULT_NUM_PARTITIONS,
        executor: Optional[Executor] = None,
    ) -> "PartitionedDataset":
        """
        Build a partitioned dataset from labeled examples.

        :param points: Labeled points or (features, label) tuples
        :param num_partitions: Number of partitions
        :param executor: Executor used to process partitions in parallel
        :return: Partitioned dataset
        """
        examples = [
            _ if isinstance(_, LabeledPoint) else LabeledPoint(*_) for _ in points
        ]
        X = [example.features for example in examples]
        y = [example.label for example in examples]
        return cls.from_arrays(X, y, num_partitions=num_partitions, executor=executor)

    @property
    def num_features(self) -> Optional[int]:
        """
        Number of features of the examples, None if the dataset is empty.

        :return: Number of features
        """
        return self._num_features

    @property
    def num_partitions(self) -> int:
        return len(self.partitions)

    def __len__(self) -> int:
        return sum(len(partition) for partition in self.partitions)

    def map_partitions(
        self, func: Callable[[Partition], ResultTV]
    ) -> List[ResultTV]:
        """
        Evaluate a function on every partition.

        :param func: Function that is applied to a single partition
        :return: Results in partition order
        """
        if self.executor is None:
            return [func(partition) for partition in self.partitions]
        return list(self.executor.map(func, self.partitions))

    def aggregate(
        self,
        zero_value: ResultTV,
        seq_op: Callable[[Partition], ResultTV],
        comb_op: Callable[[ResultTV, ResultTV], ResultTV],
    ) -> ResultTV:
        """
        Compute a partial result per partition and combine the partial
        results.

        :param zero_value: Neutral element of `comb_op`
        :param seq_op: Function that computes the partial result of a partition
        :param comb_op: Associative and commutative combination of two partial
            results
        :return: Combined result
        """
        return reduce(comb_op, self.map_partitions(seq_op), zero_value)

    def transform(
        self, func: Callable[[Partition], Partition]
    ) -> "PartitionedDataset":
        """
        Create a new dataset by transforming every partition.

        :param func: Function that returns a new partition
        :return: New dataset with the same executor
        """
        return PartitionedDataset(self.map_partitions(func), executor=self.executor)

    def collect(self) -> Tuple[NumpyFloatArray, NumpyFloatArray]:
        """
        Gather all examples in partition order.

        :return: Feature matrix and label vector
        """
        if not len(self):
            return np.zeros((0, self._num_features or 0)), np.zeros(0)
        non_empty = [partition for partition in self.partitions if len(partition)]
        return (
            np.vstack([partition.X for partition in non_empty]),
            np.concatenate([partition.y for partition in non_empty]),
        )
