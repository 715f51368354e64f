"""Endless-runner simulation, rendering and run control."""

from runforge.engine.engine import HudReadout, RunnerEngine
from runforge.engine.entities import Collectible, Obstacle, Particle, PlayerState, RunState
from runforge.engine.ranks import get_rank, next_rank_threshold, rank_progress
from runforge.engine.rules import Intent, Outcome, apply_intent, resolve_obstacle
from runforge.engine.step import TickReport, step

__all__ = [
    "RunnerEngine",
    "HudReadout",
    "RunState",
    "PlayerState",
    "Obstacle",
    "Collectible",
    "Particle",
    "Intent",
    "Outcome",
    "apply_intent",
    "resolve_obstacle",
    "TickReport",
    "step",
    "get_rank",
    "next_rank_threshold",
    "rank_progress",
]
