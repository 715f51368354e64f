"""Game shell: lifecycle, theme requests and high-score bookkeeping.

The shell owns the state machine and is the only component that moves
between IDLE, GENERATING, READY, PLAYING and GAMEOVER. The window calls
into it; it never draws.
"""

import asyncio
import logging
from typing import Optional

from runforge.ai.theme_provider import ThemeGenerationError, ThemeProvider
from runforge.core.events import Event, EventBus, EventType
from runforge.core.state import State, StateContext, StateMachine
from runforge.engine.engine import RunnerEngine
from runforge.engine.ranks import get_rank, next_rank_threshold, rank_progress
from runforge.engine.rules import Intent
from runforge.storage.highscore import HighScoreStore
from runforge.theme import Theme

logger = logging.getLogger(__name__)

GENERATION_NOTICE = "Oops! The generator ran into a hurdle. Try again."

SUGGESTIONS = (
    "8-Bit Mushroom Kingdom",
    "Steampunk London Skies",
    "Inside a Computer Chip",
    "A Giant Candy Factory",
)

LOADING_MESSAGES = (
    "Painting the horizons...",
    "Sourcing exotic emojis...",
    "Architecting lane physics...",
    "The generator is thinking hard...",
    "Polishing the collectibles...",
    "Baking the world geometry...",
)
FIRST_LOADING_MESSAGE = "Dreaming up the world..."
LOADING_MESSAGE_PERIOD = 2.0  # seconds


def loading_message(elapsed: float) -> str:
    """Flavor text for the loading screen after `elapsed` seconds."""
    ticks = int(elapsed // LOADING_MESSAGE_PERIOD)
    if ticks == 0:
        return FIRST_LOADING_MESSAGE
    return LOADING_MESSAGES[(ticks - 1) % len(LOADING_MESSAGES)]


class GameShell:
    """Drives one player session through the run lifecycle."""

    def __init__(
        self,
        provider: ThemeProvider,
        engine: RunnerEngine,
        high_scores: HighScoreStore,
        event_bus: Optional[EventBus] = None,
        prompt: str = "",
    ) -> None:
        self.provider = provider
        self.engine = engine
        self.high_scores = high_scores
        self.event_bus = event_bus or EventBus()
        self.state_machine = StateMachine()
        self.prompt = prompt
        self._generation_task: Optional[asyncio.Task] = None

        self.engine.set_on_game_over(self._on_game_over)
        self.state_machine.add_listener(self._on_state_change)

    @property
    def state(self) -> State:
        return self.state_machine.state

    @property
    def context(self) -> StateContext:
        return self.state_machine.context

    @property
    def theme(self) -> Optional[Theme]:
        return self.context.theme

    @property
    def notice(self) -> Optional[str]:
        return self.context.notice

    @property
    def high_score(self) -> int:
        return self.high_scores.best

    def set_prompt(self, prompt: str) -> None:
        self.prompt = prompt

    def dismiss_notice(self) -> None:
        self.context.notice = None

    @property
    def generating(self) -> bool:
        """True while a background theme request is still running."""
        return self._generation_task is not None and not self._generation_task.done()

    def request_theme(self) -> Optional[asyncio.Task]:
        """Run generate() in the background on the current event loop.

        Returns the task, or None when a request is already running or
        the prompt is empty.
        """
        if self.generating or not self.prompt.strip():
            return None
        self._generation_task = asyncio.create_task(self.generate())
        return self._generation_task

    async def cancel_generation(self) -> None:
        """Cancel the background request, if any, and wait for it to stop."""
        task, self._generation_task = self._generation_task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def generate(self) -> bool:
        """Request a theme for the current prompt.

        Returns True when a theme is ready to play.
        """
        prompt = self.prompt.strip()
        if not prompt:
            logger.info("Ignoring generate request with empty prompt")
            return False
        if not self.state_machine.transition(State.GENERATING, prompt=prompt, notice=None):
            return False

        self._emit(EventType.THEME_REQUEST_START, {"prompt": prompt})
        try:
            theme = await self.provider.generate_theme(prompt)
        except ThemeGenerationError as e:
            return self._generation_failed(prompt, e.reason or str(e))
        except Exception as e:
            logger.exception(f"Theme provider raised unexpectedly: {e}")
            return self._generation_failed(prompt, str(e))

        # The player may have left the loading screen meanwhile
        if self.state is not State.GENERATING:
            logger.info("Discarding theme for abandoned request")
            return False

        self._emit(EventType.THEME_REQUEST_COMPLETE, {"world": theme.world_name})
        return self.state_machine.transition(State.READY, theme=theme)

    def load_theme(self, theme: Theme) -> bool:
        """Use a ready-made theme instead of generating one."""
        return self.state_machine.transition(State.READY, theme=theme, notice=None)

    def start(self) -> bool:
        """Start a run from READY, or restart one from GAMEOVER."""
        theme = self.theme
        if theme is None or not self.state_machine.can_transition(State.PLAYING):
            logger.warning(f"Cannot start a run from {self.state.name}")
            return False

        self.state_machine.transition(
            State.PLAYING,
            result_data={"score": 0, "coins": 0},
        )
        self.engine.start(theme)
        return True

    def restart(self) -> bool:
        if self.state is not State.GAMEOVER:
            return False
        return self.start()

    def change_prompt(self) -> bool:
        """Back to the menu from READY, keeping the prompt."""
        if self.state is not State.READY:
            return False
        return self.state_machine.transition(State.IDLE)

    def to_menu(self) -> bool:
        """Back to the menu, dropping the theme."""
        if self.state is State.PLAYING:
            self.engine.stop()
        if self.generating:
            self._generation_task.cancel()
            self._generation_task = None
        return self.state_machine.transition(State.IDLE, theme=None)

    def handle_intent(self, intent: Intent) -> bool:
        if self.state is not State.PLAYING:
            return False
        return self.engine.handle_intent(intent)

    def tick(self) -> None:
        if self.state is State.PLAYING:
            self.engine.tick()

    def _generation_failed(self, prompt: str, reason: str) -> bool:
        logger.error(f"Theme generation failed: {reason}")
        self._emit(EventType.THEME_REQUEST_ERROR, {"prompt": prompt, "reason": reason})
        self.state_machine.transition(State.IDLE, notice=GENERATION_NOTICE)
        return False

    def _on_game_over(self, score: int, coins: int) -> None:
        best = self.high_scores.record(score)
        self.state_machine.transition(
            State.GAMEOVER,
            result_data={
                "score": score,
                "coins": coins,
                "high_score": best,
                "rank": get_rank(score),
                "next_threshold": next_rank_threshold(score),
                "progress": rank_progress(score),
            },
        )

    def _on_state_change(self, old: State, new: State, context: StateContext) -> None:
        self._emit(EventType.STATE_CHANGED, {"from": old.name, "to": new.name})

    def _emit(self, event_type: EventType, data: dict) -> None:
        self.event_bus.emit(Event(event_type, data=data, source="shell"))
