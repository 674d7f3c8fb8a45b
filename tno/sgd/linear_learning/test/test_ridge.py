"""
Tests for training ridge regression models with stochastic gradient descent.
The trained models are compared to closed-form solutions and to the sklearn
implementation of ridge regression.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict

import numpy as np
import pytest
from sklearn.linear_model import Ridge as SklearnRidge

from tno.sgd.linear_learning import (
    LabeledPoint,
    PartitionedDataset,
    RidgeRegressionModel,
    RidgeRegressionWithSGD,
    train,
)
from tno.sgd.linear_learning.exceptions import (
    DimensionalityError,
    InvalidConfigurationError,
    MissingFunctionError,
    UninitializedSolverError,
    UnknownPenaltyError,
)
from tno.sgd.linear_learning.solvers import GD
from tno.sgd.linear_learning.test.plaintext_utils.plaintext_objective_functions import (
    closed_form_ridge,
    regression_prediction,
    ridge_objective,
)

TOLERABLE_REL_ERROR = 1e-5

# Columns are orthogonal and X^T X / n equals the identity matrix
ORTHOGONAL_X = np.array(
    [[1.0, 1.0], [1.0, -1.0], [-1.0, 1.0], [-1.0, -1.0]] * 5,
)
ORTHOGONAL_COEF = np.array([1.5, -2.0])
ORTHOGONAL_Y = ORTHOGONAL_X @ ORTHOGONAL_COEF


def random_regression_data(seed: int = 0, n_samples: int = 200) -> Any:
    """
    Generate regression data with three standard normal features and small
    noise.

    :param seed: Seed of the random generator
    :param n_samples: Number of samples
    :return: Feature matrix and target values
    """
    rng = np.random.default_rng(seed)
    X = rng.standard_normal((n_samples, 3))
    y = X @ np.array([0.5, -1.0, 2.0]) + 0.1 * rng.standard_normal(n_samples)
    return X, y


def test_single_example_converges() -> None:
    """
    Test that an unregularized fit of a single example reaches the exact
    solution.
    """
    model = train(
        [([1.0], 2.0)], num_iterations=1000, step_size=0.5, reg_param=0.0
    )
    assert model.weights == pytest.approx([2.0], abs=1e-8)
    assert model.intercept == 0.0


def test_single_example_early_stopping() -> None:
    """
    Test that training stops once the coefficients no longer change.
    """
    algorithm = RidgeRegressionWithSGD(
        step_size=1.0, num_iterations=100, reg_param=0.0, convergence_tol=1e-3
    )
    model = algorithm.run([LabeledPoint([1.0], 2.0)])
    assert model.weights == pytest.approx([2.0])
    # the first step lands on the solution, the second step does not move
    assert algorithm.solver.nr_epochs == 2
    assert algorithm.loss_history == pytest.approx([2.0, 0.0])


def test_convergence_warning() -> None:
    """
    Test that a warning is raised if the tolerance is not met.
    """
    X, y = random_regression_data()
    algorithm = RidgeRegressionWithSGD(
        step_size=0.1, num_iterations=3, convergence_tol=1e-12
    )
    with pytest.warns(UserWarning, match="ConvergenceWarning"):
        algorithm.run(PartitionedDataset.from_arrays(X, y))


@pytest.mark.parametrize("reg_param", [0.0, 0.1, 0.5, 1.0])
def test_orthogonal_design_matches_closed_form(reg_param: float) -> None:
    """
    Test that the trained weights equal the minimizer of the ridge objective.

    :param reg_param: Regularization parameter
    """
    model = train(
        PartitionedDataset.from_arrays(ORTHOGONAL_X, ORTHOGONAL_Y, num_partitions=3),
        num_iterations=1000,
        step_size=0.5,
        reg_param=reg_param,
    )
    expected = ORTHOGONAL_COEF / (1 + reg_param)
    assert model.weights == pytest.approx(expected, rel=TOLERABLE_REL_ERROR)
    assert model.weights == pytest.approx(
        closed_form_ridge(ORTHOGONAL_X, ORTHOGONAL_Y, reg_param),
        rel=TOLERABLE_REL_ERROR,
    )


@pytest.mark.parametrize("reg_param", [0.01, 0.1, 1.0])
def test_matches_sklearn(reg_param: float) -> None:
    """
    Test that the trained weights equal those of sklearn. Sklearn minimizes
    $||y - Xw||^2_2 + \\alpha ||w||^2_2$, which equals our objective up to
    a factor $2n$ if $\\alpha = n \\times$ reg_param.

    :param reg_param: Regularization parameter
    """
    X, y = random_regression_data()
    model = train(
        PartitionedDataset.from_arrays(X, y, num_partitions=4),
        num_iterations=2000,
        step_size=0.5,
        reg_param=reg_param,
    )
    sklearn_model = SklearnRidge(alpha=len(y) * reg_param, fit_intercept=False).fit(
        X, y
    )
    assert model.weights == pytest.approx(sklearn_model.coef_, rel=TOLERABLE_REL_ERROR)


def test_regularization_shrinks_weights() -> None:
    """
    Test that a larger regularization parameter yields a smaller weights
    vector.
    """
    X, y = random_regression_data()
    dataset = PartitionedDataset.from_arrays(X, y, num_partitions=2)
    norms = [
        np.linalg.norm(
            train(
                dataset, num_iterations=500, step_size=0.5, reg_param=reg_param
            ).weights
        )
        for reg_param in [0.0, 0.05, 0.2, 1.0]
    ]
    assert all(smaller < larger for larger, smaller in zip(norms, norms[1:]))


@pytest.mark.parametrize("reg_param", [0.0, 0.5])
def test_intercept_is_not_regularized(reg_param: float) -> None:
    """
    Test that the intercept is fitted without shrinkage.

    :param reg_param: Regularization parameter
    """
    y = ORTHOGONAL_Y + 3.0
    model = RidgeRegressionWithSGD(
        step_size=0.5, num_iterations=1000, reg_param=reg_param, fit_intercept=True
    ).run(PartitionedDataset.from_arrays(ORTHOGONAL_X, y))
    assert model.intercept == pytest.approx(3.0, rel=TOLERABLE_REL_ERROR)
    assert model.weights == pytest.approx(
        ORTHOGONAL_COEF / (1 + reg_param), rel=TOLERABLE_REL_ERROR
    )

    sklearn_model = SklearnRidge(alpha=len(y) * reg_param).fit(ORTHOGONAL_X, y)
    assert model.intercept == pytest.approx(
        sklearn_model.intercept_, rel=TOLERABLE_REL_ERROR
    )


def test_full_batch_is_reproducible() -> None:
    """
    Test that two runs on the full dataset have equal trajectories.
    """
    X, y = random_regression_data()
    first = RidgeRegressionWithSGD(num_iterations=50, step_size=0.1)
    second = RidgeRegressionWithSGD(num_iterations=50, step_size=0.1, seed=7)
    first_model = first.run(
        PartitionedDataset.from_arrays(X, y), initial_weights=[1.0, 1.0, 1.0]
    )
    second_model = second.run(
        PartitionedDataset.from_arrays(X, y), initial_weights=[1.0, 1.0, 1.0]
    )
    assert first_model == second_model
    assert first.loss_history == second.loss_history


def test_mini_batch_is_reproducible_and_parallelizable() -> None:
    """
    Test that mini-batches only depend on the seed, such that sequential and
    parallel processing of the partitions give the same model.
    """
    X, y = random_regression_data()
    algorithm = RidgeRegressionWithSGD(
        num_iterations=50, step_size=0.1, mini_batch_fraction=0.3, seed=11
    )
    sequential = algorithm.run(PartitionedDataset.from_arrays(X, y, num_partitions=4))
    sequential_losses = algorithm.loss_history
    with ThreadPoolExecutor(max_workers=4) as executor:
        parallel = algorithm.run(
            PartitionedDataset.from_arrays(
                X, y, num_partitions=4, executor=executor
            )
        )
    assert parallel.weights == pytest.approx(sequential.weights)
    assert algorithm.loss_history == pytest.approx(sequential_losses)

    other_seed = RidgeRegressionWithSGD(
        num_iterations=50, step_size=0.1, mini_batch_fraction=0.3, seed=12
    ).run(PartitionedDataset.from_arrays(X, y, num_partitions=4))
    assert other_seed != sequential


def test_loss_history() -> None:
    """
    Test that the loss history holds the regularized objective at the
    coefficients at the start of every iteration.
    """
    X, y = random_regression_data(n_samples=50)
    algorithm = RidgeRegressionWithSGD(num_iterations=5, step_size=0.2, reg_param=0.1)
    initial_weights = [0.3, 0.2, 0.1]
    algorithm.run(PartitionedDataset.from_arrays(X, y), initial_weights=initial_weights)

    assert len(algorithm.loss_history) == 5
    assert algorithm.loss_history[0] == pytest.approx(
        ridge_objective(X, y, initial_weights, alpha=0.1)
    )
    assert algorithm.loss_history[-1] < algorithm.loss_history[0]


def test_partitioning_does_not_change_result() -> None:
    """
    Test that the number of partitions does not influence full-batch
    training.
    """
    X, y = random_regression_data()
    models = [
        train(
            PartitionedDataset.from_arrays(X, y, num_partitions=num_partitions),
            num_iterations=20,
            step_size=0.3,
        )
        for num_partitions in [1, 3, 7]
    ]
    for model in models[1:]:
        assert model.weights == pytest.approx(models[0].weights, rel=1e-9)


def test_training_does_not_modify_data() -> None:
    """
    Test that the caller's data and initial weights are left untouched.
    """
    X, y = random_regression_data(n_samples=20)
    X_copy, y_copy = X.copy(), y.copy()
    initial_weights = np.array([1.0, 2.0, 3.0])
    RidgeRegressionWithSGD(num_iterations=5, fit_intercept=True).run(
        PartitionedDataset.from_arrays(X, y), initial_weights=initial_weights
    )
    np.testing.assert_array_equal(X, X_copy)
    np.testing.assert_array_equal(y, y_copy)
    np.testing.assert_array_equal(initial_weights, [1.0, 2.0, 3.0])


def test_empty_batches_are_skipped(caplog: pytest.LogCaptureFixture) -> None:
    """
    Test that iterations with an empty mini-batch leave the weights unchanged.

    :param caplog: Captured log messages
    """
    algorithm = RidgeRegressionWithSGD(num_iterations=10, mini_batch_fraction=1e-9)
    with caplog.at_level(logging.WARNING):
        model = algorithm.run(
            [([1.0, 0.0], 1.0), ([0.0, 1.0], 2.0)], initial_weights=[0.5, 0.5]
        )
    assert model.weights == pytest.approx([0.5, 0.5])
    assert algorithm.loss_history == []
    assert "The size of sampled batch is zero." in caplog.text
    assert "mini-batch fraction is too small" in caplog.text


def test_empty_dataset_returns_initial_weights(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """
    Test that training on an empty dataset returns the initial weights.

    :param caplog: Captured log messages
    """
    with caplog.at_level(logging.WARNING):
        model = train([], num_iterations=10, initial_weights=[1.0, -1.0])
    assert model == RidgeRegressionModel([1.0, -1.0], 0.0)
    assert "no data found" in caplog.text


def test_empty_dataset_without_initial_weights() -> None:
    """
    Test that the number of features must be known to train a model.
    """
    with pytest.raises(DimensionalityError):
        train([], num_iterations=10)


def test_initial_weights_of_wrong_length() -> None:
    """
    Test that initial weights must match the number of features.
    """
    with pytest.raises(DimensionalityError):
        train([([1.0, 2.0], 1.0)], num_iterations=10, initial_weights=[1.0])


@pytest.mark.parametrize(
    "kwargs",
    [
        {"num_iterations": 0},
        {"num_iterations": 2.5},
        {"num_iterations": True},
        {"step_size": 0.0},
        {"step_size": -1.0},
        {"reg_param": -0.1},
        {"mini_batch_fraction": 0.0},
        {"mini_batch_fraction": 1.1},
        {"convergence_tol": -0.1},
        {"convergence_tol": 1.5},
        {"seed": -1},
        {"seed": 1.5},
        {"seed": True},
    ],
)
def test_invalid_configuration(kwargs: Dict[str, Any]) -> None:
    """
    Test that hyperparameters outside their admissible range are rejected
    before training starts.

    :param kwargs: Invalid hyperparameters
    """
    with pytest.raises(InvalidConfigurationError):
        RidgeRegressionWithSGD(**kwargs)
    with pytest.raises(ValueError):
        RidgeRegressionWithSGD(**kwargs)


def test_non_integer_seed_with_sampling() -> None:
    """
    Test that a seed that is not an integer is rejected before any
    mini-batch is sampled.
    """
    with pytest.raises(InvalidConfigurationError):
        train(
            [([1.0], 2.0), ([2.0], 1.0)],
            num_iterations=3,
            mini_batch_fraction=0.5,
            seed=1.5,
        )


def test_unknown_penalty() -> None:
    """
    Test that only known penalties can be attached to the solver.
    """
    with pytest.raises(UnknownPenaltyError):
        RidgeRegressionWithSGD()._add_penalty("l1")  # type: ignore[arg-type]


def test_uninitialized_solver() -> None:
    """
    Test that a solver refuses to work before it is configured.
    """
    solver = GD()
    with pytest.raises(UninitializedSolverError):
        _ = solver.params
    with pytest.raises(MissingFunctionError):
        _ = solver.gradient_function
    with pytest.raises(MissingFunctionError):
        _ = solver.updater


def test_cross_validate() -> None:
    """
    Test that cross-validation yields one good score per fold.
    """
    X, y = random_regression_data()
    algorithm = RidgeRegressionWithSGD(
        num_iterations=200, step_size=0.5, reg_param=0.001
    )
    scores = algorithm.cross_validate(X, y, folds=4, shuffle=True, random_state=0)
    assert len(scores) == 4
    assert all(score > 0.95 for score in scores)

    custom_scores = algorithm.cross_validate(
        X, y, folds=[(list(range(100)), list(range(100, 200)))]
    )
    assert len(custom_scores) == 1


def test_prediction_on_training_data() -> None:
    """
    Test that a trained model predicts close to the noiseless targets.
    """
    X, y = random_regression_data()
    model = train(
        PartitionedDataset.from_arrays(X, y),
        num_iterations=500,
        step_size=0.5,
        reg_param=0.0,
    )
    assert model.predict(X) == pytest.approx(
        regression_prediction(X, [0.5, -1.0, 2.0]), abs=0.5
    )
    assert model.score(X, y) > 0.95
