"""Run state for a single endless run."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from runforge.engine.constants import INITIAL_SPEED, START_LANE


@dataclass
class PlayerState:
    """Lane and arc state. Mutated by intents and by the tick."""

    lane: int = START_LANE
    jump_phase: Optional[float] = None   # None when not jumping
    slide_phase: Optional[float] = None  # None when not sliding

    @property
    def is_jumping(self) -> bool:
        return self.jump_phase is not None

    @property
    def is_sliding(self) -> bool:
        return self.slide_phase is not None


@dataclass
class Obstacle:
    """A live obstacle scrolling toward the player."""

    lane: int
    y: float
    archetype: int        # index into theme.obstacles
    resolved: bool = False  # hit or passed


@dataclass
class Collectible:
    """A live collectible scrolling toward the player."""

    lane: int
    y: float
    archetype: int        # index into theme.collectibles
    collected: bool = False


@dataclass
class Particle:
    """Cosmetic feedback. Never read by the simulation."""

    x: float
    y: float
    vx: float
    vy: float
    color: Tuple[int, int, int]
    life: float = 1.0
    text: Optional[str] = None

    @property
    def alive(self) -> bool:
        return self.life > 0


@dataclass
class RunState:
    """Everything one run owns. Created on start, dropped on game over."""

    player: PlayerState = field(default_factory=PlayerState)
    frame: int = 0
    speed: float = INITIAL_SPEED
    last_spawn_frame: int = 0
    obstacles: List[Obstacle] = field(default_factory=list)
    collectibles: List[Collectible] = field(default_factory=list)
    particles: List[Particle] = field(default_factory=list)
    score: int = 0
    coins: int = 0
    multiplier: int = 1
    over: bool = False
