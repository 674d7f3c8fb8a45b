"""
Storage format shared by the generalized linear regression models.

A model is stored as a directory that contains

- ``metadata.json``: format name, model class, format version and number
  of features;
- ``data.npz``: weights vector and intercept.
"""
import json
import os
from typing import Any, Dict, Tuple

import numpy as np

from tno.sgd.linear_learning.exceptions import UnsupportedFormatError
from tno.sgd.linear_learning.utils import NumpyFloatArray, NumpyOrVector
from tno.sgd.linear_learning.utils import util_matrix_vec as la

FORMAT_NAME = "tno.sgd.linear_learning"
METADATA_FILE = "metadata.json"
DATA_FILE = "data.npz"


def save_metadata(path: str, metadata: Dict[str, Any]) -> None:
    """
    Write the metadata of a model, creating the model directory if needed.

    :param path: Model directory
    :param metadata: Metadata, must contain the keys "class" and "version"
    """
    os.makedirs(path, exist_ok=True)
    with open(os.path.join(path, METADATA_FILE), "w", encoding="utf-8") as file:
        json.dump({"format": FORMAT_NAME, **metadata}, file, indent=2)


def load_metadata(path: str) -> Tuple[str, str, Dict[str, Any]]:
    """
    Read the metadata of a model.

    :param path: Model directory
    :raise UnsupportedFormatError: Metadata is not a record of this format
    :return: Class name, format version and complete metadata
    """
    with open(os.path.join(path, METADATA_FILE), encoding="utf-8") as file:
        try:
            metadata = json.load(file)
        except json.JSONDecodeError as error:
            raise UnsupportedFormatError(
                f"Model metadata in {path} is not valid JSON."
            ) from error
    if not isinstance(metadata, dict) or metadata.get("format") != FORMAT_NAME:
        raise UnsupportedFormatError(
            f"Model metadata in {path} is not of format {FORMAT_NAME}."
        )
    try:
        return str(metadata["class"]), str(metadata["version"]), metadata
    except KeyError as error:
        raise UnsupportedFormatError(
            f"Model metadata in {path} misses the field {error}."
        ) from error


def get_num_features(metadata: Dict[str, Any]) -> int:
    """
    Read the number of features from the metadata of a regression model.

    :param metadata: Metadata
    :raise UnsupportedFormatError: Number of features is missing or invalid
    :return: Number of features
    """
    num_features = metadata.get("numFeatures")
    if isinstance(num_features, bool) or not isinstance(num_features, int):
        raise UnsupportedFormatError(
            f"Expected an integer numFeatures in the model metadata, but received {num_features!r}."
        )
    return num_features


class GLMRegressionSaveLoadV1_0:
    """
    Version 1.0 of the storage format of generalized linear regression
    models.
    """

    version = "1.0"

    @classmethod
    def save(
        cls,
        path: str,
        model_class: str,
        weights: NumpyOrVector,
        intercept: float,
    ) -> None:
        """
        Write a model.

        :param path: Model directory
        :param model_class: Class name that is stored in the metadata
        :param weights: Weights vector
        :param intercept: Intercept
        """
        weights_np = la.as_vector(weights)
        save_metadata(
            path,
            {
                "class": model_class,
                "version": cls.version,
                "numFeatures": len(weights_np),
            },
        )
        np.savez(
            os.path.join(path, DATA_FILE),
            weights=weights_np,
            intercept=np.float64(intercept),
        )

    @staticmethod
    def load_data(
        path: str, model_class: str, num_features: int
    ) -> Tuple[NumpyFloatArray, float]:
        """
        Read the weights and intercept of a model.

        :param path: Model directory
        :param model_class: Class name of the model, used in error messages
        :param num_features: Number of features according to the metadata
        :raise UnsupportedFormatError: Stored data does not match the metadata
        :return: Weights vector and intercept
        """
        with np.load(os.path.join(path, DATA_FILE), allow_pickle=False) as data:
            if "weights" not in data or "intercept" not in data:
                raise UnsupportedFormatError(
                    f"{model_class} data in {path} misses weights or intercept."
                )
            weights = np.array(data["weights"], dtype=np.float64)
            if data["intercept"].ndim != 0:
                raise UnsupportedFormatError(
                    f"{model_class} data in {path} holds an intercept that is not a scalar."
                )
            try:
                intercept = float(data["intercept"])
            except (TypeError, ValueError) as error:
                raise UnsupportedFormatError(
                    f"{model_class} data in {path} holds an intercept that is not a number."
                ) from error
        if weights.ndim != 1 or len(weights) != num_features:
            raise UnsupportedFormatError(
                f"{model_class} data in {path} holds {weights.size} weights, but the metadata specifies {num_features} features."
            )
        return weights, intercept
