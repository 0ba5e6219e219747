import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import List
from typing import Optional
from typing import Sequence

from storage_distribution.distribution import resolve
from storage_distribution.documents import load_distribution_request
from storage_distribution.errors import DistributionError
from storage_distribution.errors import InvalidRequest
from storage_distribution.interface import CapacitySpec
from storage_distribution.interface import DecisionMatrix
from storage_distribution.interface import DistributionRequest
from storage_distribution.matrices import load_matrix_from_disk
from storage_distribution.matrices import load_request_from_disk
from storage_distribution.matrices import matrices


def parse_spec(inp: str) -> CapacitySpec:
    """Parses strings like 3000:900:1200 to CapacitySpec(iops=3000, ...)"""
    parts = [p.strip().replace(",", "") for p in inp.split(":")]
    if len(parts) != 3:
        raise argparse.ArgumentTypeError(
            "Capacity specs should be given in <iops>:<min GiB>:<max GiB> format. "
            "For example 3000:900:1200"
        )
    try:
        iops, min_gib, max_gib = (int(p) for p in parts)
    except ValueError as exp:
        raise argparse.ArgumentTypeError(f"Non integer capacity spec {inp}") from exp
    return CapacitySpec(iops=iops, min_capacity_gib=min_gib, max_capacity_gib=max_gib)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="resolve-distribution",
        description=(
            "Resolve capacity specs against a cloud decision matrix into the "
            "drive type, size and count each instance needs"
        ),
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    matrix_group = parser.add_mutually_exclusive_group()
    matrix_group.add_argument(
        "--matrix",
        type=Path,
        action="append",
        help=(
            "Decision matrix JSON file, repeat to concatenate rows from several "
            "files. Defaults to DECISION_MATRIX_PATH"
        ),
    )
    matrix_group.add_argument(
        "--profile",
        help="Name of a packaged decision matrix such as aws, gce or azure",
    )
    parser.add_argument(
        "--request",
        type=Path,
        help="Distribution request JSON file, overrides the inline options",
    )
    parser.add_argument("--instance-type")
    parser.add_argument("--region", default=None)
    parser.add_argument("--instances-per-zone", type=int, default=1)
    parser.add_argument("--zone-count", type=int, default=1)
    parser.add_argument(
        "--spec",
        dest="specs",
        type=parse_spec,
        action="append",
        default=[],
        metavar="IOPS:MIN_GIB:MAX_GIB",
        help="Capacity spec, repeat for multiple pools",
    )
    parser.add_argument(
        "--explain", action="store_true", help="Include which rows were tried"
    )
    parser.add_argument("--debug", action="store_true", help="Show verbose output")
    return parser


def _matrix(args: argparse.Namespace) -> DecisionMatrix:
    if args.profile is not None:
        if args.profile not in matrices.profiles:
            raise InvalidRequest(
                [
                    f"unknown decision matrix profile {args.profile}, try "
                    f"{sorted(matrices.profiles.keys())}"
                ]
            )
        return matrices.matrix(args.profile)
    paths: Optional[List[Path]] = args.matrix
    if paths is None:
        env_paths = os.environ.get("DECISION_MATRIX_PATH")
        if not env_paths:
            raise InvalidRequest(
                [
                    "no decision matrix given, use --matrix, --profile or "
                    "DECISION_MATRIX_PATH"
                ]
            )
        return load_matrix_from_disk(env_paths)
    return load_matrix_from_disk(paths)


def _request(args: argparse.Namespace) -> DistributionRequest:
    if args.request is not None:
        return load_request_from_disk(args.request)
    return load_distribution_request(
        {
            "specs": [s.model_dump() for s in args.specs],
            "instance_type": args.instance_type or "",
            "region": args.region,
            "instances_per_zone": args.instances_per_zone,
            "zone_count": args.zone_count,
        }
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.debug:
        logging.basicConfig(level=logging.DEBUG)

    try:
        matrix = _matrix(args)
        request = _request(args)
        response = resolve(request, matrix, explain=args.explain)
    except (OSError, json.JSONDecodeError) as exp:
        print(
            json.dumps({"error": type(exp).__name__, "message": str(exp)}, indent=2),
            file=sys.stderr,
        )
        return 2
    except InvalidRequest as exp:
        print(json.dumps(exp.details(), indent=2), file=sys.stderr)
        return 2
    except DistributionError as exp:
        print(json.dumps(exp.details(), indent=2), file=sys.stderr)
        return 1

    print(response.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
