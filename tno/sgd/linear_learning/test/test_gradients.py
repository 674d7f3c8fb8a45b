"""
Tests for the gradient module. Purpose is to identify deviations from a
straightforward numpy computation of the least squares gradient, as they may
indicate bugs in the code.
"""
import numpy as np
import pytest

from tno.sgd.linear_learning import RidgeRegressionWithSGD
from tno.sgd.linear_learning.exceptions import DimensionalityError
from tno.sgd.linear_learning.models import LeastSquaresGradient
from tno.sgd.linear_learning.test.plaintext_utils.plaintext_gradients import (
    plain_least_squares_gradient,
    plain_least_squares_loss,
)
from tno.sgd.linear_learning.utils import Matrix, Vector

TOLERABLE_REL_ERROR = 1e-9
TOLERABLE_ABS_ERROR = 1e-9

# test data
DATA_LIST = (
    list(list(i + _ for _ in range(-10, 11)) for i in range(-20, 21)),
    list(
        list((-1) ** i * (2 * i + _) % 19 for _ in range(-20, 21))
        for i in range(-20, 21)
    ),
    list(list(0.01 * (i + _) for _ in range(-30, 31)) for i in range(-20, 21)),
)
COEF_LIST = (
    list(_ / 10 for _ in range(-10, 11)),
    list(-2 * _ for _ in range(-20, 21)),
    list(_ / 60 for _ in range(-30, 31)),
)
REGRESSION_LABELS_LIST = (
    list(_ / 10 for _ in range(-20, 21)),
    list(-_ / 6 for _ in range(-20, 21)),
    list(2 * _ for _ in range(-20, 21)),
)

PYTEST_MARK_PARAMETRIZE_REGRESSION = pytest.mark.parametrize(
    "data, coef_, labels",
    list(
        zipped_input
        for zipped_input in zip(DATA_LIST, COEF_LIST, REGRESSION_LABELS_LIST)
    ),
)


@PYTEST_MARK_PARAMETRIZE_REGRESSION
class TestLeastSquaresGradient:
    """
    Test for computing the gradient of the least squares loss.
    """

    gradient = LeastSquaresGradient()

    def test_correctness_per_sample(
        self,
        data: Matrix[float],
        coef_: Vector[float],
        labels: Vector[float],
    ) -> None:
        """
        Test for validating the accuracy of the gradient if it is computed
        per sample.

        :param data: Independent input data
        :param coef_: Coefficients vector
        :param labels: Real labels corresponding to independent input data
        """
        plain_gradient = plain_least_squares_gradient(
            X=data, y=labels, coef_=coef_, grad_per_sample=True
        )
        result = self.gradient(X=data, y=labels, coef_=coef_, grad_per_sample=True)
        assert all(
            res == pytest.approx(plain_res, abs=TOLERABLE_ABS_ERROR, rel=TOLERABLE_REL_ERROR)
            for (res, plain_res) in zip(result, plain_gradient)
        )

    def test_correctness_per_batch(
        self,
        data: Matrix[float],
        coef_: Vector[float],
        labels: Vector[float],
    ) -> None:
        """
        Test for validating the accuracy of the gradient if it is computed
        for the full input data (batch).

        :param data: Independent input data
        :param coef_: Coefficients vector
        :param labels: Real labels corresponding to independent input data
        """
        plain_gradient = plain_least_squares_gradient(
            X=data, y=labels, coef_=coef_, grad_per_sample=False
        )
        result = self.gradient(X=data, y=labels, coef_=coef_, grad_per_sample=False)
        assert result == pytest.approx(
            plain_gradient, abs=TOLERABLE_ABS_ERROR, rel=TOLERABLE_REL_ERROR
        )

    def test_consistency_per_sample_or_batch(
        self,
        data: Matrix[float],
        coef_: Vector[float],
        labels: Vector[float],
    ) -> None:
        """
        Test for validating the that computing the gradient per batch is
        equivalent to aggregating the gradients that are computed per sample.

        :param data: Independent input data
        :param coef_: Coefficients vector
        :param labels: Real labels corresponding to independent input data
        """
        result_per_sample = self.gradient(
            X=data, y=labels, coef_=coef_, grad_per_sample=True
        )
        result_per_batch = self.gradient(
            X=data, y=labels, coef_=coef_, grad_per_sample=False
        )
        assert np.asarray(result_per_sample).sum(axis=0) == pytest.approx(
            result_per_batch, abs=TOLERABLE_ABS_ERROR, rel=TOLERABLE_REL_ERROR
        )

    def test_compute_matches_batch_evaluation(
        self,
        data: Matrix[float],
        coef_: Vector[float],
        labels: Vector[float],
    ) -> None:
        """
        Test that summing the single-sample gradients and losses yields the
        batch gradient and loss.

        :param data: Independent input data
        :param coef_: Coefficients vector
        :param labels: Real labels corresponding to independent input data
        """
        per_sample = [
            self.gradient.compute(features, label, coef_)
            for features, label in zip(data, labels)
        ]
        gradient_sum, loss_sum = self.gradient.evaluate(data, labels, coef_)

        assert np.sum([_[0] for _ in per_sample], axis=0) == pytest.approx(
            gradient_sum, abs=TOLERABLE_ABS_ERROR, rel=TOLERABLE_REL_ERROR
        )
        assert sum(_[1] for _ in per_sample) == pytest.approx(
            loss_sum, abs=TOLERABLE_ABS_ERROR, rel=TOLERABLE_REL_ERROR
        )
        assert loss_sum == pytest.approx(
            plain_least_squares_loss(data, labels, coef_),
            abs=TOLERABLE_ABS_ERROR,
            rel=TOLERABLE_REL_ERROR,
        )


def test_compute_single_sample() -> None:
    """
    Test gradient and loss of a single sample against a hand computation.
    """
    gradient, loss = LeastSquaresGradient().compute([1.0, 2.0], 3.0, [0.5, 0.5])
    # prediction 1.5, difference -1.5
    assert gradient == pytest.approx([-1.5, -3.0])
    assert loss == pytest.approx(1.125)


def test_compute_dimension_mismatch() -> None:
    """
    Test that a feature vector of the wrong length is rejected.
    """
    with pytest.raises(DimensionalityError):
        LeastSquaresGradient().compute([1.0, 2.0, 3.0], 1.0, [0.5, 0.5])


def test_batch_dimension_mismatch() -> None:
    """
    Test that a batch with the wrong number of features is rejected.
    """
    with pytest.raises(DimensionalityError):
        LeastSquaresGradient()([[1.0, 2.0, 3.0]], [1.0], [0.5, 0.5])


def test_algorithm_exposes_least_squares_gradient() -> None:
    """
    Test that ridge regression optimizes the least squares loss.
    """
    assert isinstance(RidgeRegressionWithSGD().gradient_function, LeastSquaresGradient)
