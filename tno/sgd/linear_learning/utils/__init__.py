"""
Initialization of the utilities
"""

# Explicit re-export of all functionalities, such that they can be imported properly. Following
# https://www.python.org/dev/peps/pep-0484/#stub-files and
# https://mypy.readthedocs.io/en/stable/command_line.html#cmdoption-mypy-no-implicit-reexport
from .types import Matrix as Matrix
from .types import NumpyFloatArray as NumpyFloatArray
from .types import NumpyIntegerArray as NumpyIntegerArray
from .types import NumpyNumberArray as NumpyNumberArray
from .types import NumpyOrMatrix as NumpyOrMatrix
from .types import NumpyOrVector as NumpyOrVector
from .types import SeqMatrix as SeqMatrix
from .types import SeqVector as SeqVector
from .types import TemplateType as TemplateType
from .types import Vector as Vector
from .dataset import LabeledPoint as LabeledPoint
from .dataset import Partition as Partition
from .dataset import PartitionedDataset as PartitionedDataset
from .mini_batch_sampler import MiniBatchSampler as MiniBatchSampler
