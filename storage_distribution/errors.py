from typing import Any
from typing import Dict
from typing import List
from typing import Optional
from typing import Sequence

from storage_distribution.interface import RowAttempt


class DistributionError(ValueError):
    """Base class for every failure of a single resolution call"""

    kind = "DistributionError"

    def details(self) -> Dict[str, Any]:
        return {"error": self.kind, "message": str(self)}


class InvalidRequest(DistributionError):
    kind = "InvalidRequest"

    def __init__(self, problems: Sequence[str]):
        self.problems: List[str] = list(problems)
        super().__init__("Invalid request: " + "; ".join(self.problems))

    def details(self) -> Dict[str, Any]:
        return {**super().details(), "problems": self.problems}


class InvalidDecisionMatrix(InvalidRequest):
    kind = "InvalidDecisionMatrix"


class NoMatchingRows(DistributionError):
    kind = "NoMatchingRows"

    def __init__(
        self,
        instance_type: str,
        region: Optional[str],
        iops: int,
        spec_index: Optional[int] = None,
    ):
        self.instance_type = instance_type
        self.region = region
        self.iops = iops
        self.spec_index = spec_index
        super().__init__(
            f"No matrix row applies to instance_type={instance_type} "
            f"region={region} iops>={iops}"
            + (f" (spec {spec_index})" if spec_index is not None else "")
        )

    def details(self) -> Dict[str, Any]:
        return {
            **super().details(),
            "spec_index": self.spec_index,
            "instance_type": self.instance_type,
            "region": self.region,
            "iops": self.iops,
        }


class CapacityUnsatisfiable(DistributionError):
    """A single row cannot hold the requested capacity within its bounds

    Only escapes the engine through NoFeasibleConfiguration.attempts
    """

    kind = "CapacityUnsatisfiable"

    def __init__(  # pylint: disable=too-many-positional-arguments
        self,
        row_index: int,
        row_label: str,
        reason: str,
        shortfall_gib: int = 0,
        excess_gib: int = 0,
    ):
        self.row_index = row_index
        self.row_label = row_label
        self.reason = reason
        self.shortfall_gib = shortfall_gib
        self.excess_gib = excess_gib
        super().__init__(f"row {row_index} ({row_label}): {reason}")

    def attempt(self) -> RowAttempt:
        return RowAttempt(
            row_index=self.row_index, row_label=self.row_label, reason=self.reason
        )

    def details(self) -> Dict[str, Any]:
        return {
            **super().details(),
            "row_index": self.row_index,
            "row_label": self.row_label,
            "shortfall_gib": self.shortfall_gib,
            "excess_gib": self.excess_gib,
        }


class NoFeasibleConfiguration(DistributionError):
    kind = "NoFeasibleConfiguration"

    def __init__(self, spec_index: int, attempts: Sequence[RowAttempt]):
        self.spec_index = spec_index
        self.attempts: List[RowAttempt] = list(attempts)
        tried = "; ".join(
            f"row {a.row_index} ({a.row_label}): {a.reason}" for a in self.attempts
        )
        super().__init__(
            f"No feasible configuration for spec {spec_index} after "
            f"{len(self.attempts)} rows: {tried}"
        )

    def details(self) -> Dict[str, Any]:
        return {
            **super().details(),
            "spec_index": self.spec_index,
            "attempts": [a.model_dump() for a in self.attempts],
        }
