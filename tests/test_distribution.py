from concurrent.futures import ThreadPoolExecutor

import pytest
from pydantic import ValidationError

from storage_distribution import distribution
from storage_distribution.distribution import resolve
from storage_distribution.distribution import StorageDistributionPlanner
from storage_distribution.errors import InvalidDecisionMatrix
from storage_distribution.errors import InvalidRequest
from storage_distribution.errors import NoFeasibleConfiguration
from storage_distribution.errors import NoMatchingRows
from storage_distribution.interface import CapacitySpec
from storage_distribution.interface import DecisionMatrixRow
from storage_distribution.interface import DistributionRequest
from storage_distribution.interface import Priority
from storage_distribution.ranking import MatrixOrderRankingStrategy
from tests.util import assert_capacity_bounds
from tests.util import assert_row_bounds
from tests.util import simple_matrix
from tests.util import simple_request
from tests.util import simple_row
from tests.util import spec

m5_matrix = simple_matrix(simple_row())

two_tier_matrix = simple_matrix(
    simple_row(name="gp3-small", min_drives=1, max_drives=2),
    simple_row(
        name="gp3-big",
        priority=Priority.medium,
        min_size_gib=1000,
        max_size_gib=4000,
        max_drives=1,
    ),
)


def test_single_spec():
    request = simple_request(spec(900, 1200))
    response = resolve(request, m5_matrix)

    assert len(response.instance_storage) == 1
    pool = response.instance_storage[0]
    assert (pool.drive_count, pool.drive_capacity_gib) == (2, 450)
    assert response.instances_per_zone == 1
    assert_capacity_bounds(response, request)
    assert_row_bounds(response, m5_matrix, [0])


def test_no_feasible_configuration():
    with pytest.raises(NoFeasibleConfiguration) as exc_info:
        resolve(simple_request(spec(2500, 3000)), m5_matrix)

    error = exc_info.value
    assert error.spec_index == 0
    assert [a.row_index for a in error.attempts] == [0]
    assert "500 GiB" in error.attempts[0].reason
    assert error.details()["attempts"][0]["row_label"] == "gp3"


def test_unknown_instance_type():
    with pytest.raises(NoMatchingRows) as exc_info:
        resolve(simple_request(spec(900, 1200), instance_type="i3en"), m5_matrix)
    assert exc_info.value.spec_index == 0
    assert exc_info.value.instance_type == "i3en"


def test_specs_keep_their_order():
    matrix = simple_matrix(
        simple_row(),
        simple_row(
            drive_type="io2",
            iops=5000,
            priority=Priority.medium,
            min_size_gib=50,
            max_size_gib=1000,
            max_drives=2,
        ),
    )
    request = simple_request(spec(900, 1200), spec(100, 200, iops=3000))
    response = resolve(request, matrix, explain=True)

    first, second = response.instance_storage
    assert (first.drive_type, first.drive_count, first.drive_capacity_gib) == (
        "gp3",
        2,
        450,
    )
    assert (second.drive_type, second.drive_count, second.drive_capacity_gib) == (
        "io2",
        1,
        100,
    )
    assert [s.chosen_row for s in response.explanation.specs] == [0, 1]
    assert_capacity_bounds(response, request)
    assert_row_bounds(response, matrix, [0, 1])

    reversed_response = resolve(
        simple_request(spec(100, 200, iops=3000), spec(900, 1200)), matrix
    )
    assert reversed_response.instance_storage == (second, first)


def test_identical_specs_are_not_merged():
    request = simple_request(spec(900, 1200), spec(900, 1200))
    response = resolve(request, m5_matrix)
    assert len(response.instance_storage) == 2
    assert response.instance_storage[0] == response.instance_storage[1]


def test_fallback_to_lower_ranked_row():
    request = simple_request(spec(2500, 3000))
    response = resolve(request, two_tier_matrix, explain=True)

    pool = response.instance_storage[0]
    assert (pool.drive_count, pool.drive_capacity_gib) == (1, 2500)

    explanation = response.explanation.specs[0]
    assert explanation.ranked_rows == [0, 1]
    assert [a.row_index for a in explanation.attempts] == [0]
    assert explanation.attempts[0].row_label == "gp3-small"
    assert explanation.chosen_row == 1
    assert explanation.total_capacity_gib == 2500
    assert_row_bounds(response, two_tier_matrix, [1])


def test_every_row_reported_when_all_fail():
    with pytest.raises(NoFeasibleConfiguration) as exc_info:
        resolve(simple_request(spec(100, 200), spec(9000, 9500)), two_tier_matrix)

    error = exc_info.value
    assert error.spec_index == 1
    assert [a.row_label for a in error.attempts] == ["gp3-small", "gp3-big"]
    assert "gp3-big" in str(error)


def test_top_row_used_when_it_fits():
    response = resolve(simple_request(spec(900, 1000)), two_tier_matrix)
    pool = response.instance_storage[0]
    assert (pool.drive_count, pool.drive_capacity_gib) == (2, 450)


def test_instances_per_zone_is_echoed():
    request = simple_request(spec(6000, 7000), instances_per_zone=3, zone_count=2)
    response = resolve(request, m5_matrix)
    assert response.instances_per_zone == 3
    assert_capacity_bounds(response, request)


def test_no_explanation_by_default():
    response = resolve(simple_request(spec(900, 1200)), m5_matrix)
    assert response.explanation is None
    assert "explanation" not in response.model_dump()


@pytest.mark.parametrize(
    "request_kwargs,problem",
    [
        ({"specs": (spec(1200, 900),)}, "min_capacity_gib=1200 > max_capacity_gib"),
        ({"instances_per_zone": 0}, "instances_per_zone=0"),
        ({"zone_count": 0}, "zone_count=0"),
        ({"specs": ()}, "at least one capacity spec"),
        ({"instance_type": ""}, "instance_type"),
        ({"specs": (spec(-5, 10),)}, "must not be negative"),
    ],
)
def test_invalid_request(request_kwargs, problem):
    kwargs = {
        "specs": (spec(900, 1200),),
        "instance_type": "m5",
        "instances_per_zone": 1,
        "zone_count": 1,
    }
    kwargs.update(request_kwargs)
    request = DistributionRequest(**kwargs)

    # Fails before any filtering, so an empty matrix does not matter
    with pytest.raises(InvalidRequest) as exc_info:
        resolve(request, simple_matrix())
    assert any(problem in p for p in exc_info.value.problems)


def test_invalid_matrix():
    matrix = simple_matrix(
        simple_row(),
        simple_row(name="backwards", min_size_gib=500, max_size_gib=100),
        simple_row(name="no-drives", min_drives=0),
    )
    with pytest.raises(InvalidDecisionMatrix) as exc_info:
        resolve(simple_request(spec(900, 1200)), matrix)

    problems = exc_info.value.problems
    assert len(problems) == 2
    assert problems[0].startswith("row 1 (backwards)")
    assert problems[1].startswith("row 2 (no-drives)")
    assert isinstance(exc_info.value, InvalidRequest)


def test_matrix_is_not_modified():
    before = two_tier_matrix.model_dump_json()
    resolve(simple_request(spec(2500, 3000)), two_tier_matrix)
    assert two_tier_matrix.model_dump_json() == before

    with pytest.raises(ValidationError):
        two_tier_matrix.rows[0].max_size_gib = 1


def test_concurrent_resolutions_share_a_matrix():
    request = simple_request(spec(900, 1200), spec(2500, 3000))
    expected = resolve(request, two_tier_matrix).model_dump_json()

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(
            pool.map(
                lambda _: resolve(request, two_tier_matrix).model_dump_json(),
                range(32),
            )
        )
    assert all(r == expected for r in results)


def test_planner_ranking_strategy():
    matrix = simple_matrix(
        simple_row(drive_type="wide", max_size_gib=16000),
        simple_row(drive_type="narrow", max_size_gib=500),
    )
    request = simple_request(spec(100, 200))

    assert resolve(request, matrix).instance_storage[0].drive_type == "narrow"

    in_order = StorageDistributionPlanner(
        ranking_strategy=MatrixOrderRankingStrategy()
    )
    assert in_order.resolve(request, matrix).instance_storage[0].drive_type == "wide"


def test_module_resolve_uses_global_planner(monkeypatch):
    in_order = StorageDistributionPlanner(
        ranking_strategy=MatrixOrderRankingStrategy()
    )
    monkeypatch.setattr(distribution, "planner", in_order)

    matrix = simple_matrix(
        simple_row(drive_type="wide", max_size_gib=16000),
        simple_row(drive_type="narrow", max_size_gib=500),
    )
    response = resolve(simple_request(spec(100, 200)), matrix)
    assert response.instance_storage[0].drive_type == "wide"


def test_region_scoped_rows():
    matrix = simple_matrix(
        DecisionMatrixRow(
            drive_type="premium",
            iops=8000,
            region="eastus",
            min_size_gib=64,
            max_size_gib=1024,
            priority=Priority.high,
        ),
        DecisionMatrixRow(
            drive_type="standard", iops=8000, min_size_gib=32, max_size_gib=1024
        ),
    )
    capacity_spec = CapacitySpec(iops=6000, min_capacity_gib=100, max_capacity_gib=200)
    east = resolve(simple_request(capacity_spec, region="eastus"), matrix)
    west = resolve(simple_request(capacity_spec, region="westus"), matrix)
    assert east.instance_storage[0].drive_type == "premium"
    assert west.instance_storage[0].drive_type == "standard"
