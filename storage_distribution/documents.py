"""Translates human edited documents into the engine's models

Documents are row oriented dicts (usually parsed from JSON). The engine never
sees document conventions such as "*" meaning any instance type, those are
resolved here.
"""

import logging
from typing import Any
from typing import Dict
from typing import Optional

from pydantic import ValidationError

from storage_distribution.errors import InvalidDecisionMatrix
from storage_distribution.errors import InvalidRequest
from storage_distribution.interface import AnyValue
from storage_distribution.interface import CapacitySpec
from storage_distribution.interface import DecisionMatrix
from storage_distribution.interface import DecisionMatrixRow
from storage_distribution.interface import DistributionRequest
from storage_distribution.interface import Priority
from storage_distribution.interface import Scope
from storage_distribution.interface import SpecificValue

logger = logging.getLogger(__name__)

WILDCARD = "*"


def _scope(value: Optional[str], wildcards=(WILDCARD, "")) -> Scope:
    if value is None or value in wildcards:
        return AnyValue()
    return SpecificValue(value=value)


def parse_priority(label: Any) -> Priority:
    if isinstance(label, Priority):
        return label
    try:
        return Priority(str(label).strip().lower())
    except ValueError as exp:
        raise InvalidDecisionMatrix(
            [
                f"unknown priority {label!r}, expected one of "
                f"{[p.value for p in Priority]}"
            ]
        ) from exp


def _validation_problems(prefix: str, exp: ValidationError):
    return [
        f"{prefix}{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
        for err in exp.errors()
    ]


def load_matrix_row(row: Dict[str, Any], index: int = 0) -> DecisionMatrixRow:
    if not isinstance(row, dict):
        raise InvalidDecisionMatrix(
            [f"row {index}: expected an object, got {type(row).__name__}"]
        )
    data = dict(row)
    for field in ("instance_type", "region"):
        try:
            data[field] = _scope(data.get(field))
        except ValidationError as exp:
            raise InvalidDecisionMatrix(
                _validation_problems(f"row {index}: {field}.", exp)
            ) from exp
    if "priority" in data:
        data["priority"] = parse_priority(data["priority"])
    try:
        return DecisionMatrixRow(**data)
    except ValidationError as exp:
        raise InvalidDecisionMatrix(
            _validation_problems(f"row {index}: ", exp)
        ) from exp


def load_decision_matrix(
    matrix: Dict[str, Any], name: Optional[str] = None
) -> DecisionMatrix:
    if not isinstance(matrix, dict):
        raise InvalidDecisionMatrix(
            [f"decision matrix document must be an object, got {type(matrix).__name__}"]
        )
    rows = matrix.get("rows")
    if rows is None:
        raise InvalidDecisionMatrix(["decision matrix document has no rows"])
    if not isinstance(rows, list):
        raise InvalidDecisionMatrix(["decision matrix rows must be a list"])
    if not rows:
        logger.warning("Decision matrix %s has no rows", name or matrix.get("name"))
    loaded = tuple(load_matrix_row(row, i) for i, row in enumerate(rows))
    try:
        return DecisionMatrix(name=name or matrix.get("name", "default"), rows=loaded)
    except ValidationError as exp:
        raise InvalidDecisionMatrix(_validation_problems("", exp)) from exp


def load_distribution_request(request: Dict[str, Any]) -> DistributionRequest:
    if not isinstance(request, dict):
        raise InvalidRequest(
            [f"distribution request must be an object, got {type(request).__name__}"]
        )
    raw_specs = request.get("specs", [])
    if not isinstance(raw_specs, list):
        raise InvalidRequest(["specs must be a list of capacity specs"])

    problems = []
    specs = []
    for i, raw_spec in enumerate(raw_specs):
        if not isinstance(raw_spec, dict):
            problems.append(
                f"spec {i}: expected an object, got {type(raw_spec).__name__}"
            )
            continue
        try:
            specs.append(CapacitySpec(**raw_spec))
        except ValidationError as exp:
            problems.extend(_validation_problems(f"spec {i}: ", exp))
    if problems:
        raise InvalidRequest(problems)

    data = {k: v for k, v in request.items() if k != "specs"}
    # Documents use an empty region to mean "not region scoped"
    if data.get("region") == "":
        data["region"] = None
    try:
        return DistributionRequest(specs=tuple(specs), **data)
    except ValidationError as exp:
        raise InvalidRequest(_validation_problems("", exp)) from exp
