"""The fixed-tick simulation step.

`step()` advances one RunState by exactly one tick: clock and speed,
passive scoring, multiplier growth, spawning, motion, player arcs and
collision resolution, in that order. It never touches the display.
"""

import logging
from dataclasses import dataclass
from typing import MutableSequence, Optional, Protocol

from runforge.engine.constants import (
    COLLECTIBLE_THRESHOLD,
    COLLECTIBLE_WINDOW,
    CULL_Y,
    DOUBLE_LANE_THRESHOLD,
    GAME_WIDTH,
    LABEL_RISE,
    LANE_COUNT,
    LANE_WIDTH,
    MULTIPLIER_EVERY,
    OBSTACLE_WINDOW,
    PARTICLE_BURST,
    PARTICLE_DECAY,
    PARTICLE_SPREAD,
    PASSIVE_SCORE_EVERY,
    PLAYER_Y,
    SPAWN_Y,
    SPEED_INCREMENT,
)
from runforge.engine.entities import Collectible, Obstacle, Particle, RunState
from runforge.engine.rules import Outcome, advance_arcs, resolve_obstacle, spawn_interval
from runforge.theme import Theme

logger = logging.getLogger(__name__)

WHITE = (255, 255, 255)


class RandomSource(Protocol):
    """The subset of random.Random the simulation uses."""

    def random(self) -> float: ...

    def shuffle(self, x: MutableSequence) -> None: ...

    def randrange(self, stop: int) -> int: ...


@dataclass
class TickReport:
    """What changed during one tick, for the HUD and the host."""

    frame: int
    score_changed: bool = False
    coins_changed: bool = False
    multiplier_changed: bool = False
    game_over: bool = False
    spawned: int = 0
    collected: int = 0
    hit: Optional[Obstacle] = None


def lane_center(lane: int) -> float:
    return lane * LANE_WIDTH + LANE_WIDTH / 2


def step(state: RunState, theme: Theme, rng: RandomSource) -> TickReport:
    """Advance the run by one tick.

    A finished run is left untouched.
    """
    if state.over:
        return TickReport(frame=state.frame)

    state.frame += 1
    state.speed += SPEED_INCREMENT
    report = TickReport(frame=state.frame)

    # Distance scoring
    if state.frame % PASSIVE_SCORE_EVERY == 0:
        state.score += state.multiplier
        report.score_changed = True

    if state.frame % MULTIPLIER_EVERY == 0:
        state.multiplier += 1
        report.multiplier_changed = True
        _spawn_particles(state, rng, GAME_WIDTH / 2, 100, WHITE, f"X{state.multiplier} BOOST!")
        logger.debug(f"Multiplier up: x{state.multiplier} at frame {state.frame}")

    report.spawned = _spawn(state, theme, rng)
    _move(state)
    advance_arcs(state.player)

    if _resolve_obstacles(state, theme, report):
        return report

    _resolve_collectibles(state, theme, rng, report)
    _cull(state)
    return report


def _spawn(state: RunState, theme: Theme, rng: RandomSource) -> int:
    if state.frame - state.last_spawn_frame <= spawn_interval(state.speed):
        return 0

    state.last_spawn_frame = state.frame
    filled = 2 if rng.random() > DOUBLE_LANE_THRESHOLD else 1
    lanes = list(range(LANE_COUNT))
    rng.shuffle(lanes)

    for lane in lanes[:filled]:
        if rng.random() > COLLECTIBLE_THRESHOLD:
            state.collectibles.append(Collectible(
                lane=lane,
                y=SPAWN_Y,
                archetype=rng.randrange(len(theme.collectibles)),
            ))
        else:
            state.obstacles.append(Obstacle(
                lane=lane,
                y=SPAWN_Y,
                archetype=rng.randrange(len(theme.obstacles)),
            ))
    return filled


def _move(state: RunState) -> None:
    for obstacle in state.obstacles:
        obstacle.y += state.speed
    for collectible in state.collectibles:
        collectible.y += state.speed

    for particle in state.particles:
        particle.x += particle.vx
        particle.y += particle.vy
        particle.life -= PARTICLE_DECAY
    state.particles = [p for p in state.particles if p.alive]


def _resolve_obstacles(state: RunState, theme: Theme, report: TickReport) -> bool:
    """Returns True if the run ended this tick."""
    player = state.player

    for obstacle in state.obstacles:
        if obstacle.resolved or obstacle.lane != player.lane:
            continue
        if abs(obstacle.y - PLAYER_Y) >= OBSTACLE_WINDOW:
            continue

        avoidance = theme.obstacles[obstacle.archetype].avoidance
        if resolve_obstacle(avoidance, player) is Outcome.TERMINATING:
            obstacle.resolved = True
            state.over = True
            report.game_over = True
            report.hit = obstacle
            logger.info(
                f"Run over at frame {state.frame}: hit {avoidance.value} obstacle "
                f"in lane {obstacle.lane} (score {state.score}, coins {state.coins})"
            )
            return True

    return False


def _resolve_collectibles(
    state: RunState,
    theme: Theme,
    rng: RandomSource,
    report: TickReport,
) -> None:
    player = state.player
    accent = theme.colors.rgb("accent")

    for collectible in state.collectibles:
        if collectible.collected or collectible.lane != player.lane:
            continue
        if abs(collectible.y - PLAYER_Y) >= COLLECTIBLE_WINDOW:
            continue

        collectible.collected = True
        award = theme.collectibles[collectible.archetype].points * state.multiplier
        state.score += award
        state.coins += 1
        report.score_changed = True
        report.coins_changed = True
        report.collected += 1

        x = lane_center(player.lane)
        _spawn_particles(state, rng, x, collectible.y, accent, f"+{award}")
        _spawn_particles(state, rng, x, collectible.y, accent, count=PARTICLE_BURST)


def _cull(state: RunState) -> None:
    for obstacle in state.obstacles:
        # Scrolled below the player window without a hit
        if not obstacle.resolved and obstacle.y - PLAYER_Y >= OBSTACLE_WINDOW:
            obstacle.resolved = True

    state.obstacles = [o for o in state.obstacles if o.y <= CULL_Y]
    state.collectibles = [c for c in state.collectibles if c.y <= CULL_Y]


def _spawn_particles(
    state: RunState,
    rng: RandomSource,
    x: float,
    y: float,
    color,
    text: Optional[str] = None,
    count: int = 1,
) -> None:
    for _ in range(1 if text else count):
        if text:
            vx, vy = 0.0, LABEL_RISE
        else:
            vx = (rng.random() - 0.5) * PARTICLE_SPREAD
            vy = (rng.random() - 0.5) * PARTICLE_SPREAD
        state.particles.append(Particle(x=x, y=y, vx=vx, vy=vy, color=color, text=text))
