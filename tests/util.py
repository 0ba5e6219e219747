from typing import Sequence

from storage_distribution.allocation import total_capacity_gib
from storage_distribution.interface import CapacitySpec
from storage_distribution.interface import DecisionMatrix
from storage_distribution.interface import DecisionMatrixRow
from storage_distribution.interface import DistributionRequest
from storage_distribution.interface import DistributionResponse
from storage_distribution.interface import Priority


def simple_row(  # pylint: disable=too-many-positional-arguments
    drive_type: str = "gp3",
    iops: int = 1000,
    instance_type: str = "m5",
    min_size_gib: int = 100,
    max_size_gib: int = 500,
    min_drives: int = 1,
    max_drives: int = 4,
    priority: Priority = Priority.high,
    **kwargs,
) -> DecisionMatrixRow:
    """Create a matrix row for testing

    Defaults to the row used throughout the examples:
        {iops: 1000, instance_type: m5, drives: 1..4, size: 100..500, high}
    """
    return DecisionMatrixRow(
        drive_type=drive_type,
        iops=iops,
        instance_type=instance_type,
        min_size_gib=min_size_gib,
        max_size_gib=max_size_gib,
        min_drives_per_instance=min_drives,
        max_drives_per_instance=max_drives,
        priority=priority,
        **kwargs,
    )


def simple_matrix(*rows: DecisionMatrixRow) -> DecisionMatrix:
    return DecisionMatrix(name="test", rows=tuple(rows))


def simple_request(
    *specs: CapacitySpec,
    instance_type: str = "m5",
    instances_per_zone: int = 1,
    zone_count: int = 1,
    **kwargs,
) -> DistributionRequest:
    return DistributionRequest(
        specs=tuple(specs),
        instance_type=instance_type,
        instances_per_zone=instances_per_zone,
        zone_count=zone_count,
        **kwargs,
    )


def spec(min_gib: int, max_gib: int, iops: int = 800) -> CapacitySpec:
    return CapacitySpec(iops=iops, min_capacity_gib=min_gib, max_capacity_gib=max_gib)


def assert_capacity_bounds(
    response: DistributionResponse, request: DistributionRequest
) -> None:
    assert len(response.instance_storage) == len(request.specs)
    for pool, capacity_spec in zip(response.instance_storage, request.specs):
        total = total_capacity_gib(
            pool, request.instances_per_zone, request.zone_count
        )
        assert capacity_spec.min_capacity_gib <= total
        assert total <= capacity_spec.max_capacity_gib


def assert_row_bounds(
    response: DistributionResponse, matrix: DecisionMatrix, rows: Sequence[int]
) -> None:
    for pool, index in zip(response.instance_storage, rows):
        row = matrix.rows[index]
        assert row.min_size_gib <= pool.drive_capacity_gib <= row.max_size_gib
        assert (
            row.min_drives_per_instance
            <= pool.drive_count
            <= row.max_drives_per_instance
        )
        assert pool.drive_type == row.drive_type
