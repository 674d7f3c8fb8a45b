"""
Initialization of the machine learning models
"""

# Explicit re-export of all functionalities, such that they can be imported properly. Following
# https://www.python.org/dev/peps/pep-0484/#stub-files and
# https://mypy.readthedocs.io/en/stable/command_line.html#cmdoption-mypy-no-implicit-reexport
from .common_gradient_forms import GradientFunction as GradientFunction
from .common_gradient_forms import LeastSquaresGradient as LeastSquaresGradient
from .linear_model import Exportable as Exportable
from .linear_model import GeneralizedLinearModel as GeneralizedLinearModel
from .linear_model import Persistable as Persistable
from .linear_model import Predictor as Predictor
from .glm_algorithm import GeneralizedLinearAlgorithm as GeneralizedLinearAlgorithm
from .glm_algorithm import PenaltyTypes as PenaltyTypes
from .glm_algorithm import SolverTypes as SolverTypes
from .ridge import RidgeRegressionModel as RidgeRegressionModel
from .ridge import RidgeRegressionWithSGD as RidgeRegressionWithSGD
from .ridge import load as load
from .ridge import save as save
from .ridge import train as train
