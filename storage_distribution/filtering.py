import logging
from typing import List
from typing import Optional

from storage_distribution.errors import NoMatchingRows
from storage_distribution.interface import Candidate
from storage_distribution.interface import DecisionMatrix
from storage_distribution.interface import DecisionMatrixRow

logger = logging.getLogger(__name__)


def _allow_row(
    row: DecisionMatrixRow,
    instance_type: str,
    region: Optional[str],
    desired_iops: int,
) -> bool:
    if not row.instance_type.matches(instance_type):
        return False
    if not row.region.matches(region):
        return False
    # Rows promise a floor of IOPS, anything below what was asked is useless
    if row.iops < desired_iops:
        return False
    return True


def filter_rows(
    matrix: DecisionMatrix,
    instance_type: str,
    region: Optional[str],
    desired_iops: int,
    spec_index: Optional[int] = None,
) -> List[Candidate]:
    """Narrows the matrix to rows applicable to one capacity spec

    Rows keep their matrix position so later diagnostics can name them.
    Raises NoMatchingRows if nothing applies, the matrix is static so
    there is nothing to retry.
    """
    candidates = []
    for index, row in enumerate(matrix.rows):
        if _allow_row(row, instance_type, region, desired_iops):
            candidates.append(Candidate(index=index, row=row))
        else:
            logger.debug(
                "Row %s (%s) does not apply to instance_type=%s region=%s iops=%s",
                index,
                row.label,
                instance_type,
                region,
                desired_iops,
            )

    if not candidates:
        raise NoMatchingRows(
            instance_type=instance_type,
            region=region,
            iops=desired_iops,
            spec_index=spec_index,
        )
    return candidates
