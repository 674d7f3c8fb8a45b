"""
Contains class used for drawing mini-batches
"""
import numpy as np

from tno.sgd.linear_learning.exceptions import InvalidConfigurationError
from tno.sgd.linear_learning.utils.dataset import Partition

DEFAULT_SEED = 42


class MiniBatchSampler:
    """
    Class for drawing mini-batches from the partitions of a dataset.

    Every example is included independently with probability
    `mini_batch_fraction`, so the expected size of a mini-batch equals
    `mini_batch_fraction` times the size of the dataset. The random stream
    of a partition in a given iteration only depends on the seed, the
    iteration and the partition index. Hence, sampling is reproducible and
    does not depend on the order in which partitions are processed.

    :param mini_batch_fraction: Probability that an example is included in
        the mini-batch, in $(0, 1]$
    :param seed: Base seed of the random streams
    """

    def __init__(self, mini_batch_fraction: float, seed: int = DEFAULT_SEED) -> None:
        """
        Constructor method.

        :raise InvalidConfigurationError: Fraction or seed is out of range
        """
        if not 0 < mini_batch_fraction <= 1:
            raise InvalidConfigurationError(
                f"Mini-batch fraction must lie in (0, 1], but received {mini_batch_fraction}."
            )
        if seed < 0:
            raise InvalidConfigurationError(
                f"Seed must be non-negative, but received {seed}."
            )
        self.mini_batch_fraction = mini_batch_fraction
        self.seed = seed

    @property
    def is_full_batch(self) -> bool:
        """
        Indicate whether every mini-batch equals the full dataset.

        :return: True if the fraction equals one, False otherwise
        """
        return self.mini_batch_fraction >= 1.0

    def sample(self, partition: Partition, iteration: int) -> Partition:
        """
        Draw the mini-batch of a partition for the given iteration.

        :param partition: Partition to sample from
        :param iteration: Iteration index
        :return: Partition that holds the sampled examples only
        """
        if self.is_full_batch:
            return partition
        rng = np.random.default_rng([self.seed + iteration, partition.index])
        mask = rng.random(len(partition)) < self.mini_batch_fraction
        return Partition(index=partition.index, X=partition.X[mask], y=partition.y[mask])
