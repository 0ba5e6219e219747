# -*- coding: utf-8 -*-
import logging
from typing import List
from typing import Optional
from typing import Tuple

from storage_distribution.allocation import allocate
from storage_distribution.allocation import total_capacity_gib
from storage_distribution.errors import CapacityUnsatisfiable
from storage_distribution.errors import InvalidDecisionMatrix
from storage_distribution.errors import InvalidRequest
from storage_distribution.errors import NoFeasibleConfiguration
from storage_distribution.filtering import filter_rows
from storage_distribution.interface import CapacitySpec
from storage_distribution.interface import DecisionMatrix
from storage_distribution.interface import DistributionRequest
from storage_distribution.interface import DistributionResponse
from storage_distribution.interface import PoolSpec
from storage_distribution.interface import ResolutionExplanation
from storage_distribution.interface import RowAttempt
from storage_distribution.interface import SpecExplanation
from storage_distribution.ranking import default_ranking_strategy
from storage_distribution.ranking import RankingStrategy

logger = logging.getLogger(__name__)


def request_problems(request: DistributionRequest) -> List[str]:
    problems = []
    if not request.specs:
        problems.append("at least one capacity spec is required")
    if not request.instance_type:
        problems.append("instance_type must not be empty")
    if request.instances_per_zone < 1:
        problems.append(
            f"instances_per_zone={request.instances_per_zone} must be at least 1"
        )
    if request.zone_count < 1:
        problems.append(f"zone_count={request.zone_count} must be at least 1")

    for i, spec in enumerate(request.specs):
        if spec.iops < 0:
            problems.append(f"spec {i}: iops={spec.iops} must not be negative")
        if spec.min_capacity_gib < 0:
            problems.append(
                f"spec {i}: min_capacity_gib={spec.min_capacity_gib} "
                "must not be negative"
            )
        if spec.min_capacity_gib > spec.max_capacity_gib:
            problems.append(
                f"spec {i}: min_capacity_gib={spec.min_capacity_gib} > "
                f"max_capacity_gib={spec.max_capacity_gib}"
            )
    return problems


def matrix_problems(matrix: DecisionMatrix) -> List[str]:
    problems = []
    for i, row in enumerate(matrix.rows):
        if row.iops < 0:
            problems.append(f"row {i} ({row.label}): iops={row.iops} is negative")
        if row.min_size_gib < 1:
            problems.append(
                f"row {i} ({row.label}): min_size_gib={row.min_size_gib} "
                "must be at least 1"
            )
        if row.min_size_gib > row.max_size_gib:
            problems.append(
                f"row {i} ({row.label}): min_size_gib={row.min_size_gib} > "
                f"max_size_gib={row.max_size_gib}"
            )
        if row.min_drives_per_instance < 1:
            problems.append(
                f"row {i} ({row.label}): min_drives_per_instance="
                f"{row.min_drives_per_instance} must be at least 1"
            )
        if row.min_drives_per_instance > row.max_drives_per_instance:
            problems.append(
                f"row {i} ({row.label}): min_drives_per_instance="
                f"{row.min_drives_per_instance} > max_drives_per_instance="
                f"{row.max_drives_per_instance}"
            )
    return problems


class StorageDistributionPlanner:
    """Resolves cloud agnostic capacity specs into per instance drive pools

    Stateless between calls, the matrix is supplied on every call and never
    modified so a single planner can serve concurrent resolutions.
    """

    def __init__(self, ranking_strategy: RankingStrategy = default_ranking_strategy):
        self._ranking_strategy = ranking_strategy

    @property
    def ranking_strategy(self) -> RankingStrategy:
        return self._ranking_strategy

    def resolve(
        self,
        request: DistributionRequest,
        matrix: DecisionMatrix,
        explain: bool = False,
    ) -> DistributionResponse:
        problems = request_problems(request)
        if problems:
            raise InvalidRequest(problems)
        problems = matrix_problems(matrix)
        if problems:
            raise InvalidDecisionMatrix(problems)

        pools: List[PoolSpec] = []
        explanations: List[SpecExplanation] = []
        for spec_index, spec in enumerate(request.specs):
            pool, explanation = self._resolve_spec(spec_index, spec, request, matrix)
            pools.append(pool)
            explanations.append(explanation)

        if explain:
            return DistributionResponse(
                instance_storage=tuple(pools),
                instances_per_zone=request.instances_per_zone,
                explanation=ResolutionExplanation(
                    matrix=matrix.name, specs=explanations
                ),
            )
        return DistributionResponse(
            instance_storage=tuple(pools),
            instances_per_zone=request.instances_per_zone,
        )

    def _resolve_spec(
        self,
        spec_index: int,
        spec: CapacitySpec,
        request: DistributionRequest,
        matrix: DecisionMatrix,
    ) -> Tuple[PoolSpec, SpecExplanation]:
        candidates = filter_rows(
            matrix,
            instance_type=request.instance_type,
            region=request.region,
            desired_iops=spec.iops,
            spec_index=spec_index,
        )
        ranked = self._ranking_strategy.rank(candidates)
        logger.debug(
            "Spec %s ranked rows %s", spec_index, [c.index for c in ranked]
        )

        attempts: List[RowAttempt] = []
        pool: Optional[PoolSpec] = None
        chosen = -1
        for candidate in ranked:
            try:
                pool = allocate(
                    candidate,
                    spec,
                    instances_per_zone=request.instances_per_zone,
                    zone_count=request.zone_count,
                )
            except CapacityUnsatisfiable as exp:
                logger.debug("Spec %s falling through: %s", spec_index, exp)
                attempts.append(exp.attempt())
                continue
            chosen = candidate.index
            break

        if pool is None:
            raise NoFeasibleConfiguration(spec_index=spec_index, attempts=attempts)

        total = total_capacity_gib(pool, request.instances_per_zone, request.zone_count)
        logger.debug(
            "Spec %s resolved to row %s: %s x %s GiB %s (%s GiB total)",
            spec_index,
            chosen,
            pool.drive_count,
            pool.drive_capacity_gib,
            pool.drive_type,
            total,
        )
        return pool, SpecExplanation(
            spec_index=spec_index,
            ranked_rows=[c.index for c in ranked],
            attempts=attempts,
            chosen_row=chosen,
            total_capacity_gib=total,
        )


planner = StorageDistributionPlanner()


def resolve(
    request: DistributionRequest, matrix: DecisionMatrix, explain: bool = False
) -> DistributionResponse:
    return planner.resolve(request, matrix, explain=explain)
