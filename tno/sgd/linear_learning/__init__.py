"""
Initialization of the linear-learning package
"""

# Explicit re-export of all functionalities, such that they can be imported properly. Following
# https://www.python.org/dev/peps/pep-0484/#stub-files and
# https://mypy.readthedocs.io/en/stable/command_line.html#cmdoption-mypy-no-implicit-reexport
from .models import GeneralizedLinearModel as GeneralizedLinearModel
from .models import PenaltyTypes as PenaltyTypes
from .models import RidgeRegressionModel as RidgeRegressionModel
from .models import RidgeRegressionWithSGD as RidgeRegressionWithSGD
from .models import SolverTypes as SolverTypes
from .models import load as load
from .models import save as save
from .models import train as train
from .parameters import SGDParameters as SGDParameters
from .utils import LabeledPoint as LabeledPoint
from .utils import PartitionedDataset as PartitionedDataset

__version__ = "1.0.0"
