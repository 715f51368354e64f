"""Runner engine: owns one run at a time and drives it tick by tick.

The host (window or test) starts a run with a theme, feeds intents,
and calls tick() at a fixed rate. The engine reports HUD changes and
the single game-over through callbacks and the event bus.
"""

import logging
import random
from dataclasses import dataclass
from typing import Callable, Optional

from runforge.core.events import Event, EventBus, EventType
from runforge.engine.constants import GAME_HEIGHT, GAME_WIDTH
from runforge.engine.entities import RunState
from runforge.engine.render import render_frame
from runforge.engine.rules import Intent, apply_intent
from runforge.engine.step import RandomSource, TickReport, step
from runforge.graphics.glyphs import GlyphSource
from runforge.graphics.primitives import Buffer, new_buffer
from runforge.theme import Theme

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HudReadout:
    """Score, coins and multiplier as shown to the player."""

    score: int
    coins: int
    multiplier: int


HudCallback = Callable[[HudReadout], None]
GameOverCallback = Callable[[int, int], None]


class RunnerEngine:
    """Simulates and renders a themed endless run.

    Lifecycle:
        1. start(theme) - fresh run state, HUD reset
        2. handle_intent(intent) / tick() - while running
        3. game over or stop() - run state released
    """

    def __init__(
        self,
        glyphs: Optional[GlyphSource] = None,
        event_bus: Optional[EventBus] = None,
        rng: Optional[RandomSource] = None,
        seed: Optional[int] = None,
    ) -> None:
        self._glyphs = glyphs
        self._event_bus = event_bus
        self._rng: RandomSource = rng if rng is not None else random.Random(seed)
        self._buffer: Buffer = new_buffer(GAME_WIDTH, GAME_HEIGHT)

        self._theme: Optional[Theme] = None
        self._state: Optional[RunState] = None
        self._running = False
        self._over_reported = False

        self._on_hud: Optional[HudCallback] = None
        self._on_game_over: Optional[GameOverCallback] = None

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def state(self) -> Optional[RunState]:
        return self._state

    @property
    def theme(self) -> Optional[Theme]:
        return self._theme

    @property
    def buffer(self) -> Buffer:
        """Last rendered frame."""
        return self._buffer

    @property
    def hud(self) -> HudReadout:
        if self._state is None:
            return HudReadout(score=0, coins=0, multiplier=1)
        return HudReadout(
            score=self._state.score,
            coins=self._state.coins,
            multiplier=self._state.multiplier,
        )

    def set_on_hud(self, callback: Optional[HudCallback]) -> None:
        self._on_hud = callback

    def set_on_game_over(self, callback: Optional[GameOverCallback]) -> None:
        self._on_game_over = callback

    def start(self, theme: Theme) -> None:
        """Begin a fresh run. Nothing from a previous run carries over."""
        if not theme.obstacles or not theme.collectibles:
            raise ValueError("Theme needs at least one obstacle and one collectible")

        self._theme = theme
        self._state = RunState()
        self._running = True
        self._over_reported = False

        logger.info(f"Run started in '{theme.world_name}' as {theme.character.name}")
        self._emit(EventType.RUN_STARTED, {"world": theme.world_name})
        self._publish_hud()
        self._render()

    def stop(self) -> None:
        """Abandon the current run without reporting a game over."""
        if self._state is None:
            return
        self._running = False
        self._state = None
        logger.info("Run stopped")
        self._emit(EventType.RUN_STOPPED)

    def handle_intent(self, intent: Intent) -> bool:
        """Apply an intent immediately. Ignored unless a run is live."""
        if not self._running or self._state is None:
            return False
        return apply_intent(self._state.player, intent)

    def tick(self) -> Optional[TickReport]:
        """Advance one tick and redraw. Returns None when idle."""
        if not self._running or self._state is None or self._theme is None:
            return None

        report = step(self._state, self._theme, self._rng)
        self._render()

        if report.score_changed or report.coins_changed or report.multiplier_changed:
            self._publish_hud()

        if report.game_over:
            self._finish()

        return report

    def _finish(self) -> None:
        if self._over_reported or self._state is None:
            return
        self._over_reported = True
        self._running = False

        score, coins = self._state.score, self._state.coins
        self._publish_hud()
        self._emit(EventType.GAME_OVER, {"score": score, "coins": coins})
        if self._on_game_over:
            self._on_game_over(score, coins)

    def _render(self) -> None:
        if self._glyphs is None or self._state is None or self._theme is None:
            return
        render_frame(self._buffer, self._state, self._theme, self._glyphs)

    def _publish_hud(self) -> None:
        readout = self.hud
        if self._on_hud:
            self._on_hud(readout)
        self._emit(EventType.HUD_UPDATE, {
            "score": readout.score,
            "coins": readout.coins,
            "multiplier": readout.multiplier,
        })

    def _emit(self, event_type: EventType, data: Optional[dict] = None) -> None:
        if self._event_bus is not None:
            self._event_bus.emit(Event(event_type, data=data or {}, source="engine"))
