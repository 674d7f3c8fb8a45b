"""
Initialization of the solvers
"""

# Explicit re-export of all functionalities, such that they can be imported properly. Following
# https://www.python.org/dev/peps/pep-0484/#stub-files and
# https://mypy.readthedocs.io/en/stable/command_line.html#cmdoption-mypy-no-implicit-reexport
from .gd_solver import GD as GD
from .solver import PartialAggregate as PartialAggregate
from .solver import Solver as Solver
