from __future__ import annotations

from enum import Enum
from typing import Any
from typing import List
from typing import NamedTuple
from typing import Optional
from typing import Tuple
from typing import Union

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import field_validator

GIB_IN_BYTES = 1024 * 1024 * 1024


class ExcludeUnsetModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    def model_dump(self, *args, **kwargs):
        if "exclude_unset" not in kwargs:
            kwargs["exclude_unset"] = True
        return super().model_dump(*args, **kwargs)

    def model_dump_json(self, *args, **kwargs):
        if "exclude_unset" not in kwargs:
            kwargs["exclude_unset"] = True
        return super().model_dump_json(*args, **kwargs)


###############################################################################
#              Models (structs) for how we scope matrix rows                  #
###############################################################################


class AnyValue(ExcludeUnsetModel):
    """Matches every value, including a request that has no value at all"""

    model_config = ConfigDict(frozen=True, extra="forbid")

    def matches(self, value: Optional[str]) -> bool:
        return True

    def __str__(self):
        return "*"


class SpecificValue(ExcludeUnsetModel):
    """Matches exactly one value. An empty string is a literal empty string."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    value: str

    def matches(self, value: Optional[str]) -> bool:
        return value == self.value

    def __str__(self):
        return self.value


Scope = Union[SpecificValue, AnyValue]


def _coerce_scope(value: Any) -> Any:
    # Plain strings are always literal, "*" is a document convention that
    # the loaders translate before a row is ever built
    if isinstance(value, str):
        return SpecificValue(value=value)
    if value is None:
        return AnyValue()
    return value


class Priority(str, Enum):
    """Ordinal preference of a matrix row, only used to rank valid rows"""

    low = "low"
    medium = "medium"
    high = "high"

    def __str__(self):
        return str(self.value)

    @property
    def weight(self) -> int:
        return _PRIORITY_WEIGHTS[self]


_PRIORITY_WEIGHTS = {Priority.low: 0, Priority.medium: 1, Priority.high: 2}


###############################################################################
#              Models (structs) for the decision matrix                       #
###############################################################################


class DecisionMatrixRow(ExcludeUnsetModel):
    """One provider supported drive configuration

    A row is valid for an instance type and region (either may be AnyValue)
    and promises at least `iops` from a drive of `drive_type` as long as the
    drive is between min_size_gib and max_size_gib and the instance stripes
    between min_drives_per_instance and max_drives_per_instance drives.
    """

    drive_type: str
    iops: int = 0
    instance_type: Scope = AnyValue()
    region: Scope = AnyValue()
    min_size_gib: int
    max_size_gib: int
    min_drives_per_instance: int = 1
    max_drives_per_instance: int = 1
    priority: Priority = Priority.medium
    thin_provisioning: bool = False
    # Optional human readable identifier, shows up in diagnostics
    name: Optional[str] = None

    @field_validator("instance_type", "region", mode="before")
    @classmethod
    def coerce_scope(cls, value: Any) -> Any:
        return _coerce_scope(value)

    @property
    def label(self) -> str:
        return self.name or self.drive_type

    @property
    def size_window_gib(self) -> int:
        return self.max_size_gib - self.min_size_gib


class DecisionMatrix(ExcludeUnsetModel):
    """Ordered, read-only collection of rows for one cloud provider"""

    name: str = "default"
    rows: Tuple[DecisionMatrixRow, ...] = ()


class Candidate(NamedTuple):
    # Position of the row in DecisionMatrix.rows, used as the row identifier
    index: int
    row: DecisionMatrixRow


###############################################################################
#              Models (structs) for requests and responses                    #
###############################################################################


class CapacitySpec(ExcludeUnsetModel):
    # Desired IOPS per drive
    iops: int = 0
    # Total logical capacity the whole cluster needs from this spec
    min_capacity_gib: int
    max_capacity_gib: int


class DistributionRequest(ExcludeUnsetModel):
    specs: Tuple[CapacitySpec, ...]
    instance_type: str
    # None means not region scoped, only region independent rows apply
    region: Optional[str] = None
    instances_per_zone: int = 1
    zone_count: int = 1

    @property
    def instance_count(self) -> int:
        return self.instances_per_zone * self.zone_count


class PoolSpec(ExcludeUnsetModel):
    """Per instance drive configuration satisfying one CapacitySpec"""

    drive_capacity_gib: int
    drive_type: str
    drive_count: int
    iops: int = 0
    thin_provisioning: bool = False

    @property
    def instance_capacity_gib(self) -> int:
        return self.drive_capacity_gib * self.drive_count


class RowAttempt(ExcludeUnsetModel):
    row_index: int
    row_label: str
    reason: str


class SpecExplanation(ExcludeUnsetModel):
    spec_index: int
    # Row indexes in the order they were tried
    ranked_rows: List[int] = []
    attempts: List[RowAttempt] = []
    chosen_row: int
    total_capacity_gib: int


class ResolutionExplanation(ExcludeUnsetModel):
    matrix: str
    specs: List[SpecExplanation] = []


class DistributionResponse(ExcludeUnsetModel):
    instance_storage: Tuple[PoolSpec, ...]
    instances_per_zone: int
    explanation: Optional[ResolutionExplanation] = None
