from storage_distribution.distribution import planner
from storage_distribution.distribution import resolve
from storage_distribution.distribution import StorageDistributionPlanner
from storage_distribution.errors import CapacityUnsatisfiable
from storage_distribution.errors import DistributionError
from storage_distribution.errors import InvalidDecisionMatrix
from storage_distribution.errors import InvalidRequest
from storage_distribution.errors import NoFeasibleConfiguration
from storage_distribution.errors import NoMatchingRows
from storage_distribution.interface import AnyValue
from storage_distribution.interface import CapacitySpec
from storage_distribution.interface import DecisionMatrix
from storage_distribution.interface import DecisionMatrixRow
from storage_distribution.interface import DistributionRequest
from storage_distribution.interface import DistributionResponse
from storage_distribution.interface import PoolSpec
from storage_distribution.interface import Priority
from storage_distribution.interface import SpecificValue

__all__ = [
    "AnyValue",
    "CapacitySpec",
    "CapacityUnsatisfiable",
    "DecisionMatrix",
    "DecisionMatrixRow",
    "DistributionError",
    "DistributionRequest",
    "DistributionResponse",
    "InvalidDecisionMatrix",
    "InvalidRequest",
    "NoFeasibleConfiguration",
    "NoMatchingRows",
    "PoolSpec",
    "Priority",
    "SpecificValue",
    "StorageDistributionPlanner",
    "planner",
    "resolve",
]
