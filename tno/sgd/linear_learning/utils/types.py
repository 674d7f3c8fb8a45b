"""
Types to use for type hinting.
"""
from typing import List, Sequence, TypeVar, Union

import numpy as np
import numpy.typing as npt

TemplateType = TypeVar("TemplateType")

Vector = List[TemplateType]
Matrix = List[List[TemplateType]]
SeqVector = Sequence[TemplateType]
SeqMatrix = Sequence[Sequence[TemplateType]]
NumpyFloatArray = npt.NDArray[np.float64]
NumpyIntegerArray = npt.NDArray[np.int_]
NumpyNumberArray = Union[NumpyIntegerArray, NumpyFloatArray]
NumpyOrVector = Union[NumpyNumberArray, SeqVector[float]]
NumpyOrMatrix = Union[NumpyNumberArray, SeqMatrix[float]]
