"""Result-screen ranking by final score."""

from typing import List, Tuple

# (exclusive lower bound, rank name), best first
RANKS: List[Tuple[int, str]] = [
    (5000, "LEGENDARY"),
    (2000, "MASTER"),
    (1000, "ELITE"),
    (300, "RACER"),
]
BASE_RANK = "NOVICE"

RANK_THRESHOLDS = (300, 1000, 2000)
TOP_THRESHOLD = 5000


def get_rank(score: int) -> str:
    for bound, name in RANKS:
        if score > bound:
            return name
    return BASE_RANK


def next_rank_threshold(score: int) -> int:
    """Score the progress bar fills toward."""
    for threshold in RANK_THRESHOLDS:
        if score < threshold:
            return threshold
    return TOP_THRESHOLD


def rank_progress(score: int) -> float:
    """Percent of the way to the next threshold, capped at 100."""
    return min(100.0, max(0, score) / next_rank_threshold(score) * 100)
