from abc import ABC
from abc import abstractmethod
from typing import Iterable
from typing import List
from typing import Tuple

from storage_distribution.interface import Candidate
from storage_distribution.interface import DecisionMatrixRow


class RankingStrategy(ABC):
    """Orders candidate rows, best first

    Strategies only decide the sort key, matrix position always breaks the
    final tie so the order is total and identical inputs rank identically.
    """

    @abstractmethod
    def sort_key(self, row: DecisionMatrixRow) -> Tuple[int, ...]:
        pass

    def rank(self, candidates: Iterable[Candidate]) -> List[Candidate]:
        return sorted(candidates, key=lambda c: (self.sort_key(c.row), c.index))


class NarrowestWindowRankingStrategy(RankingStrategy):
    """
    Higher priority first. Among equal priorities prefer the most precisely
    scoped row (narrowest size window) to avoid over provisioning, then the
    row that starts with fewer drives since fewer, larger drives are simpler
    than striping when performance is equivalent.
    """

    def sort_key(self, row: DecisionMatrixRow) -> Tuple[int, ...]:
        return (
            -row.priority.weight,
            row.size_window_gib,
            row.min_drives_per_instance,
        )


class MatrixOrderRankingStrategy(RankingStrategy):
    """Higher priority first, then whatever order the operator wrote"""

    def sort_key(self, row: DecisionMatrixRow) -> Tuple[int, ...]:
        return (-row.priority.weight,)


default_ranking_strategy: RankingStrategy = NarrowestWindowRankingStrategy()


def rank_rows(
    candidates: Iterable[Candidate],
    strategy: RankingStrategy = default_ranking_strategy,
) -> List[Candidate]:
    return strategy.rank(candidates)
