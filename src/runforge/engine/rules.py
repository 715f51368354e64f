"""Gameplay rules: player intents, arcs, spawn cadence and obstacle resolution."""

import math
from enum import Enum, auto

from runforge.engine.constants import (
    ARC_STEP,
    JUMP_CLEARANCE,
    JUMP_HEIGHT,
    LANE_COUNT,
    MIN_SPAWN_INTERVAL,
    MULTIPLIER_EVERY,
    SPAWN_BASE,
)
from runforge.engine.entities import PlayerState
from runforge.theme import Avoidance


class Intent(Enum):
    """Player intents, independent of the input device."""

    LANE_LEFT = auto()
    LANE_RIGHT = auto()
    JUMP = auto()
    SLIDE = auto()


class Outcome(Enum):
    """Result of overlapping an obstacle."""

    SAFE = auto()
    TERMINATING = auto()


def apply_intent(player: PlayerState, intent: Intent) -> bool:
    """Apply an intent to the player. Returns True if state changed."""
    if intent is Intent.LANE_LEFT:
        lane = max(0, player.lane - 1)
    elif intent is Intent.LANE_RIGHT:
        lane = min(LANE_COUNT - 1, player.lane + 1)
    elif intent is Intent.JUMP:
        if player.is_jumping or player.is_sliding:
            return False
        player.jump_phase = 0.0
        return True
    elif intent is Intent.SLIDE:
        if player.is_sliding:
            return False
        # A jump can be cancelled into a slide, never the other way around
        player.jump_phase = None
        player.slide_phase = 0.0
        return True
    else:
        raise ValueError(f"Unknown intent: {intent}")

    changed = lane != player.lane
    player.lane = lane
    return changed


def advance_arcs(player: PlayerState) -> None:
    """Advance active jump/slide phases by one tick."""
    if player.jump_phase is not None:
        player.jump_phase += ARC_STEP
        if player.jump_phase >= 1.0:
            player.jump_phase = None

    if player.slide_phase is not None:
        player.slide_phase += ARC_STEP
        if player.slide_phase >= 1.0:
            player.slide_phase = None


def jump_lift(player: PlayerState) -> float:
    """Vertical lift of the player on the half-sine jump curve."""
    if player.jump_phase is None:
        return 0.0
    return math.sin(player.jump_phase * math.pi) * JUMP_HEIGHT


def resolve_obstacle(avoidance: Avoidance, player: PlayerState) -> Outcome:
    """Decide whether overlapping an obstacle ends the run."""
    if avoidance is Avoidance.JUMP:
        return Outcome.SAFE if jump_lift(player) >= JUMP_CLEARANCE else Outcome.TERMINATING
    if avoidance is Avoidance.SLIDE:
        return Outcome.SAFE if player.is_sliding else Outcome.TERMINATING
    # Dodge and anything unknown: only lane choice avoids it
    return Outcome.TERMINATING


def spawn_interval(speed: float) -> int:
    """Ticks between spawn events at the given scroll speed."""
    return max(MIN_SPAWN_INTERVAL, math.floor(SPAWN_BASE / (speed / 5)))


def multiplier_at(frame: int) -> int:
    """Multiplier in effect after the given number of ticks."""
    return 1 + frame // MULTIPLIER_EVERY
