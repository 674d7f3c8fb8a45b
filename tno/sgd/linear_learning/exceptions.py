"""
Defines custom exceptions for the tno.sgd.linear_learning library.
"""


class BaseLinearLearnError(Exception):
    """
    Base class for custom exceptions in the tno.sgd.linear_learning library
    """


class MissingFunctionError(BaseLinearLearnError):
    """
    The function has not been initialized.
    """


class UninitializedSolverError(BaseLinearLearnError):
    """
    Solver has not been fully initialized.
    """


class DimensionalityError(BaseLinearLearnError, ValueError):
    """
    Length of a feature vector does not match the length of the weight vector.
    """


class InvalidConfigurationError(BaseLinearLearnError, ValueError):
    """
    Received hyperparameter with a value outside of its admissible range.
    """


class UnsupportedFormatError(BaseLinearLearnError):
    """
    Persisted model has an unrecognized (class, format version) combination.
    """


class UnknownPenaltyError(BaseLinearLearnError):
    """
    Penalty is not recognized.
    """
