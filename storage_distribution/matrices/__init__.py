# pylint: disable=cyclic-import
# in DecisionMatrices.profiles it imports from matrices.profiles dynamically
import json
import logging
import os
from functools import reduce
from pathlib import Path
from typing import Dict
from typing import List
from typing import Optional
from typing import Union

from storage_distribution.documents import load_decision_matrix
from storage_distribution.documents import load_distribution_request
from storage_distribution.errors import InvalidDecisionMatrix
from storage_distribution.interface import DecisionMatrix
from storage_distribution.interface import DistributionRequest

logger = logging.getLogger(__name__)


def merge_matrices(
    existing: DecisionMatrix, override: DecisionMatrix
) -> DecisionMatrix:
    """Concatenate the rows of two matrices, existing rows first

    Named rows must be unique across files, two files defining the same
    row name is almost always a copy paste mistake.
    """
    existing_names = {r.name for r in existing.rows if r.name is not None}
    duplicates = sorted(
        r.name
        for r in override.rows
        if r.name is not None and r.name in existing_names
    )
    if duplicates:
        raise InvalidDecisionMatrix(
            [
                f"Duplicate row {name}! Only one file should contain a row"
                for name in duplicates
            ]
        )
    name = override.name if existing.name == "default" else existing.name
    return DecisionMatrix(name=name, rows=existing.rows + override.rows)


def load_matrix_from_disk(
    matrix_paths: Union[List[Path], Optional[str]] = os.environ.get(
        "DECISION_MATRIX_PATH"
    ),
) -> DecisionMatrix:
    if isinstance(matrix_paths, str):
        matrix_paths = [Path(p) for p in matrix_paths.split(os.pathsep) if p]
    if not matrix_paths:
        return DecisionMatrix()

    loaded = [DecisionMatrix()]
    for path in matrix_paths:
        logger.debug("Loading decision matrix from: %s", path)
        with open(path, encoding="utf-8") as fd:
            data = json.load(fd)
        name = Path(path).stem
        if isinstance(data, dict):
            name = data.get("name", name)
        loaded.append(load_decision_matrix(data, name=name))
    return reduce(merge_matrices, loaded)


def load_matrix_from_s3(bucket: str, path: str) -> DecisionMatrix:
    # boto is a heavy dependency so we only want to take it if
    # someone will be using it ...
    import boto3  # pylint: disable=import-outside-toplevel

    s3 = boto3.resource("s3")
    obj = s3.Object(bucket, path)
    data = json.loads(obj.get()["Body"].read().decode("utf-8"))
    return load_decision_matrix(data, name=Path(path).stem)


def load_request_from_disk(request_path: Union[Path, str]) -> DistributionRequest:
    logger.debug("Loading distribution request from: %s", request_path)
    with open(request_path, encoding="utf-8") as fd:
        return load_distribution_request(json.load(fd))


class DecisionMatrices:
    def __init__(self):
        self._matrices: Optional[Dict[str, DecisionMatrix]] = None

    def load(self, name: str, matrix: DecisionMatrix) -> None:
        self.profiles[name] = matrix

    def reset(self) -> None:
        self._matrices = None

    @property
    def profiles(self) -> Dict[str, DecisionMatrix]:
        if self._matrices is None:
            from storage_distribution.matrices.profiles import common_profiles

            self._matrices = dict(common_profiles)
        return self._matrices

    def matrix(self, name: str) -> DecisionMatrix:
        if name not in self.profiles:
            raise KeyError(
                f"Unknown decision matrix {name}. Try {sorted(self.profiles.keys())}"
            )
        return self.profiles[name]


matrices: DecisionMatrices = DecisionMatrices()
