"""Leaderboard ordering shared by every view that shows a contest rank.

Ranks are recomputed from the full result set on each read and are never
cached. Ties on (percentage, time taken) still get distinct sequential
ranks; submission time and id only fix which of the tied entries comes
first.
"""
import math
from typing import Iterable, List, Optional, Tuple, TypeVar

T = TypeVar("T")


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def ranking_key(result):
    return (-result.percentage, result.time_taken, result.submitted_at, str(result.id))


def rank_results(results: Iterable[T]) -> List[Tuple[int, T]]:
    ordered = sorted(results, key=ranking_key)
    return [(index + 1, result) for index, result in enumerate(ordered)]


def rank_of(results: Iterable, result_id) -> Optional[int]:
    for rank, result in rank_results(results):
        if result.id == result_id:
            return rank
    return None


def percentile(rank: int, total_participants: int) -> int:
    """Share of the field this rank outperformed, 0-100."""
    if total_participants <= 0:
        return 0
    return round_half_up((total_participants - rank) * 100 / total_participants)


def contest_percentage(correct_answers: int, total_questions: int) -> int:
    """Contest scores are rounded to whole percents."""
    if total_questions <= 0:
        return 0
    return round_half_up(correct_answers * 100 / total_questions)
