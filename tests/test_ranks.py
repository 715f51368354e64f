"""Tests for result-screen ranks."""

import pytest

from runforge.engine.ranks import get_rank, next_rank_threshold, rank_progress


@pytest.mark.parametrize(
    "score,rank",
    [
        (0, "NOVICE"),
        (300, "NOVICE"),
        (301, "RACER"),
        (1000, "RACER"),
        (1001, "ELITE"),
        (2001, "MASTER"),
        (5000, "MASTER"),
        (5001, "LEGENDARY"),
    ],
)
def test_rank_bands(score, rank):
    assert get_rank(score) == rank


@pytest.mark.parametrize(
    "score,threshold",
    [(0, 300), (299, 300), (300, 1000), (999, 1000), (1000, 2000), (2000, 5000), (9000, 5000)],
)
def test_next_threshold(score, threshold):
    assert next_rank_threshold(score) == threshold


def test_progress_is_capped():
    assert rank_progress(150) == pytest.approx(50.0)
    assert rank_progress(2500) == pytest.approx(50.0)
    assert rank_progress(12000) == 100.0
