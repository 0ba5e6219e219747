import logging
from typing import Optional

from storage_distribution.errors import CapacityUnsatisfiable
from storage_distribution.errors import InvalidDecisionMatrix
from storage_distribution.errors import InvalidRequest
from storage_distribution.interface import Candidate
from storage_distribution.interface import CapacitySpec
from storage_distribution.interface import PoolSpec

logger = logging.getLogger(__name__)


def _ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def total_capacity_gib(
    pool: PoolSpec, instances_per_zone: int, zone_count: int
) -> int:
    return pool.drive_capacity_gib * pool.drive_count * instances_per_zone * zone_count


def allocate(
    candidate: Candidate,
    spec: CapacitySpec,
    instances_per_zone: int,
    zone_count: int,
) -> PoolSpec:
    """Picks the drive count and size for one row and one capacity spec

    We need
        min_capacity <= capacity * count * instances_per_zone * zone_count
        total <= max_capacity
    with count and capacity inside the row's bounds.

    Start with the fewest drives the row allows and the smallest capacity
    that reaches min_capacity. If that does not fit the row (too large a
    drive, or rounding overshoots max_capacity) add a drive and try again.
    The first fit therefore has the smallest count and, for that count,
    the smallest capacity.

    Raises InvalidRequest when there is not at least one instance and
    InvalidDecisionMatrix when the row allows no drive count.
    """
    row = candidate.row
    if instances_per_zone < 1 or zone_count < 1:
        raise InvalidRequest(
            [
                f"instances_per_zone={instances_per_zone} and "
                f"zone_count={zone_count} must both be at least 1"
            ]
        )
    if not 1 <= row.min_drives_per_instance <= row.max_drives_per_instance:
        raise InvalidDecisionMatrix(
            [
                f"row {candidate.index} ({row.label}): drives per instance must "
                "satisfy 1 <= min_drives_per_instance="
                f"{row.min_drives_per_instance} <= max_drives_per_instance="
                f"{row.max_drives_per_instance}"
            ]
        )
    instances = instances_per_zone * zone_count

    smallest_overshoot: Optional[int] = None
    for drive_count in range(
        row.min_drives_per_instance, row.max_drives_per_instance + 1
    ):
        drives = drive_count * instances
        capacity = max(row.min_size_gib, _ceil_div(spec.min_capacity_gib, drives))
        if capacity > row.max_size_gib:
            logger.debug(
                "Row %s: %s drives need %s GiB each, over max_size_gib=%s",
                candidate.index,
                drive_count,
                capacity,
                row.max_size_gib,
            )
            continue

        total = capacity * drives
        if total > spec.max_capacity_gib:
            logger.debug(
                "Row %s: %s drives of %s GiB give %s GiB, over max_capacity_gib=%s",
                candidate.index,
                drive_count,
                capacity,
                total,
                spec.max_capacity_gib,
            )
            if smallest_overshoot is None or total < smallest_overshoot:
                smallest_overshoot = total
            continue

        logger.debug(
            "Row %s: allocated %s x %s GiB %s per instance",
            candidate.index,
            drive_count,
            capacity,
            row.drive_type,
        )
        return PoolSpec(
            drive_capacity_gib=capacity,
            drive_type=row.drive_type,
            drive_count=drive_count,
            iops=row.iops,
            thin_provisioning=row.thin_provisioning,
        )

    largest = row.max_size_gib * row.max_drives_per_instance * instances
    if largest < spec.min_capacity_gib:
        shortfall = spec.min_capacity_gib - largest
        raise CapacityUnsatisfiable(
            row_index=candidate.index,
            row_label=row.label,
            reason=(
                f"at most {largest} GiB ({row.max_drives_per_instance} x "
                f"{row.max_size_gib} GiB on {instances} instances), "
                f"short {shortfall} GiB of min_capacity_gib={spec.min_capacity_gib}"
            ),
            shortfall_gib=shortfall,
        )

    excess = (smallest_overshoot or 0) - spec.max_capacity_gib
    raise CapacityUnsatisfiable(
        row_index=candidate.index,
        row_label=row.label,
        reason=(
            f"smallest layout reaching min_capacity_gib={spec.min_capacity_gib} "
            f"holds {smallest_overshoot} GiB on {instances} instances, "
            f"{excess} GiB over max_capacity_gib={spec.max_capacity_gib}"
        ),
        excess_gib=excess,
    )
