"""
Class for the mini-batch gradient descent method
"""
import logging
from typing import Optional

from tno.sgd.linear_learning.solvers.solver import Solver
from tno.sgd.linear_learning.utils import NumpyFloatArray, Partition, PartitionedDataset
from tno.sgd.linear_learning.utils import util_matrix_vec as la


class GD(Solver):
    """
    Class for the mini-batch (stochastic) gradient descent method
    """

    name = "GD"

    def __init__(self) -> None:
        """
        Constructor method.
        """
        super().__init__()
        self._reg_value = 0.0

    def preprocessing(self, dataset: PartitionedDataset) -> PartitionedDataset:
        """
        Preprocess obtained data.

        Prepends a column of ones if an intercept is fitted. The caller's
        partitions are left untouched.

        :param dataset: Training data
        :return: Preprocessed training data
        """
        assert self.coef_init is not None
        self._reg_value = self.regularization_value(self.coef_init)
        if not self.params.fit_intercept:
            return dataset
        return dataset.transform(
            lambda partition: Partition(
                index=partition.index,
                X=la.prepend_intercept_column(partition.X),
                y=partition.y,
            )
        )

    def inner_loop_calculation(
        self,
        dataset: PartitionedDataset,
        coef_old: NumpyFloatArray,
        iteration: int,
    ) -> Optional[NumpyFloatArray]:
        """
        Performs one iteration of mini-batch gradient descent: sample a
        mini-batch, average its gradient and hand the result to the updater.

        The objective value that is recorded in the loss history is the
        average loss of the mini-batch plus the regularization value, both
        evaluated at `coef_old`.

        :param dataset: Training data
        :param coef_old: Current iterative solution
        :param iteration: Iteration index, starting at 1
        :return: Updated iterative solution, or None if the sampled
            mini-batch is empty
        """
        aggregate = self.evaluate_gradient_function_for_minibatch(
            dataset, coef_old, iteration
        )
        if aggregate.count == 0:
            logging.warning(
                "Iteration (%d/%d). The size of sampled batch is zero.",
                iteration,
                self.params.num_iterations,
            )
            return None

        gradient = la.scale_vector(1 / aggregate.count, aggregate.gradient_sum)
        coef_new, reg_value = self.update_coefficients(coef_old, gradient, iteration)

        self.loss_history.append(aggregate.loss_sum / aggregate.count + self._reg_value)
        self._reg_value = reg_value
        return coef_new
