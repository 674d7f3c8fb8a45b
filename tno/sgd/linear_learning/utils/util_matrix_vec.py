"""
Contains utils for matrices and vectors such as inner products, scaled
additions and norms. All vector arithmetic of the package goes through
this module.
"""
import numpy as np

from tno.sgd.linear_learning.exceptions import DimensionalityError
from tno.sgd.linear_learning.utils.types import (
    NumpyFloatArray,
    NumpyOrMatrix,
    NumpyOrVector,
)


def as_vector(vector: NumpyOrVector) -> NumpyFloatArray:
    """
    Convert a sequence of numbers to a one-dimensional float array.

    A copy is made, such that the caller's data is never aliased.

    :param vector: Sequence of numbers
    :raise DimensionalityError: Input is not one-dimensional
    :return: Vector as float array
    """
    result = np.array(vector, dtype=np.float64)
    if result.ndim != 1:
        raise DimensionalityError(
            f"Expected a one-dimensional vector, but received an array with {result.ndim} dimensions."
        )
    return result


def as_matrix(matrix: NumpyOrMatrix) -> NumpyFloatArray:
    """
    Convert a sequence of rows to a two-dimensional float array.

    .. code-block:: python

        as_matrix([[1, 2], [3, 4]]).shape == (2, 2)
        as_matrix([]).shape == (0, 0)

    :param matrix: Sequence of equally long rows
    :raise DimensionalityError: Rows are not of equal length
    :return: Matrix as float array
    """
    try:
        result = np.array(matrix, dtype=np.float64)
    except ValueError as error:
        raise DimensionalityError(
            "Rows of the matrix are not of equal length."
        ) from error
    if result.ndim == 1 and result.size == 0:
        return result.reshape(0, 0)
    if result.ndim != 2:
        raise DimensionalityError(
            f"Expected a two-dimensional matrix, but received an array with {result.ndim} dimensions."
        )
    return result


def check_dimensions(
    expected: int, received: int, what: str = "feature vector"
) -> None:
    """
    Verify that a vector has the expected number of entries.

    :param expected: Expected length
    :param received: Actual length
    :param what: Description of the checked object, used in the error message
    :raise DimensionalityError: Lengths differ
    """
    if expected != received:
        raise DimensionalityError(
            f"Expected {what} of length {expected}, but received length {received}."
        )


def dot(x: NumpyOrVector, y: NumpyOrVector) -> float:
    """
    Compute the inner product of two vectors of equal length.

    :param x: First vector
    :param y: Second vector
    :raise DimensionalityError: Vectors are not of equal length
    :return: Inner product $x^T y$
    """
    x_np = np.asarray(x, dtype=np.float64)
    y_np = np.asarray(y, dtype=np.float64)
    check_dimensions(len(x_np), len(y_np), what="vector")
    return float(np.dot(x_np, y_np))


def axpy(alpha: float, x: NumpyOrVector, y: NumpyOrVector) -> NumpyFloatArray:
    """
    Compute the scaled addition $\\alpha x + y$.

    Contrary to the BLAS routine, the result is returned as a new vector and
    $y$ is left untouched.

    :param alpha: Scalar multiplier for $x$
    :param x: Vector to be scaled
    :param y: Vector to be added
    :raise DimensionalityError: Vectors are not of equal length
    :return: New vector $\\alpha x + y$
    """
    x_np = np.asarray(x, dtype=np.float64)
    y_np = np.asarray(y, dtype=np.float64)
    check_dimensions(len(y_np), len(x_np), what="vector")
    return alpha * x_np + y_np


def scale_vector(factor: float, x: NumpyOrVector) -> NumpyFloatArray:
    """
    Scale a vector by a given factor.

    :param factor: Factor to scale the vector
    :param x: Vector to be scaled
    :return: New, scaled vector
    """
    return factor * np.asarray(x, dtype=np.float64)


def norm(x: NumpyOrVector) -> float:
    """
    Euclidean norm of a vector.

    :param x: Vector
    :return: $||x||_2$
    """
    return float(np.linalg.norm(np.asarray(x, dtype=np.float64), ord=2))


def mat_vec_mult(
    matrix: NumpyOrMatrix, vector: NumpyOrVector, transpose: bool = False
) -> NumpyFloatArray:
    r"""
    Compute matrix-vector multiplication.

    :param matrix: Matrix input with dimensions $m * r$.
        Dimensions may be $r * m$ when combined with `transpose=True`
    :param vector: Vector input of length $r$, treated as a column vector
    :param transpose: If `True`, first transpose `matrix`
    :raise DimensionalityError: Inner dimensions do not agree
    :return: Vector with matrix-vector products
    """
    matrix_np = np.asarray(matrix, dtype=np.float64)
    vector_np = np.asarray(vector, dtype=np.float64)
    if transpose:
        matrix_np = matrix_np.T
    check_dimensions(matrix_np.shape[1], len(vector_np))
    return matrix_np @ vector_np


def prepend_intercept_column(
    matrix: NumpyFloatArray, value: float = 1.0
) -> NumpyFloatArray:
    """
    Prepend a constant column to a matrix, such that the first coefficient
    acts as the intercept.

    .. code-block:: python

        prepend_intercept_column(np.array([[2.0], [3.0]])) == [[1.0, 2.0], [1.0, 3.0]]

    :param matrix: Matrix of shape $n * r$
    :param value: Value of the constant column
    :return: New matrix of shape $n * (r + 1)$
    """
    return np.hstack((np.full((matrix.shape[0], 1), value), matrix))
