"""
State machine for RUNFORGE application flow.

States:
    IDLE: Menu, waiting for a world prompt
    GENERATING: Theme generator request in flight
    READY: Theme loaded, waiting for the player to start
    PLAYING: A run is live
    GAMEOVER: Run ended, result screen shown
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable

logger = logging.getLogger(__name__)


class State(Enum):
    """Session states."""
    IDLE = auto()
    GENERATING = auto()
    READY = auto()
    PLAYING = auto()
    GAMEOVER = auto()


@dataclass
class StateContext:
    """Data carried across states: the prompt, the theme and the last result."""
    prompt: str | None = None
    theme: Any = None
    notice: str | None = None
    result_data: dict[str, Any] = field(default_factory=dict)


StateListener = Callable[[State, State, StateContext], None]


class StateMachine:
    """
    Session lifecycle with an explicit transition table.

    Refused transitions are logged and reported as False; they never
    raise. Listeners run after every accepted transition.
    """

    TRANSITIONS: dict[State, frozenset[State]] = {
        # Generate, or use a theme loaded from a file
        State.IDLE: frozenset({State.GENERATING, State.READY}),
        # Generator success or failure
        State.GENERATING: frozenset({State.READY, State.IDLE}),
        # Start, or change prompt
        State.READY: frozenset({State.PLAYING, State.IDLE}),
        # Terminating collision, or external stop
        State.PLAYING: frozenset({State.GAMEOVER, State.IDLE}),
        # Run again, or main menu
        State.GAMEOVER: frozenset({State.PLAYING, State.IDLE}),
    }

    def __init__(self, initial_state: State = State.IDLE) -> None:
        self._state = initial_state
        self._context = StateContext()
        self._listeners: list[StateListener] = []
        logger.info(f"StateMachine starting in {initial_state.name}")

    @property
    def state(self) -> State:
        return self._state

    @property
    def context(self) -> StateContext:
        return self._context

    def can_transition(self, to_state: State) -> bool:
        return to_state in self.TRANSITIONS.get(self._state, frozenset())

    def transition(self, to_state: State, **context_updates: Any) -> bool:
        """
        Move to `to_state` if the table allows it.

        Args:
            to_state: Target state
            **context_updates: StateContext fields to set; result_data is
                merged rather than replaced

        Returns:
            True if the transition happened
        """
        if not self.can_transition(to_state):
            logger.warning(f"Refused transition {self._state.name} -> {to_state.name}")
            return False

        previous, self._state = self._state, to_state

        for key, value in context_updates.items():
            if key == "result_data":
                self._context.result_data.update(value)
            elif hasattr(self._context, key):
                setattr(self._context, key, value)
            else:
                logger.debug(f"Ignoring unknown context field {key}")

        logger.info(f"State: {previous.name} -> {to_state.name}")
        self._notify(previous)
        return True

    def add_listener(self, callback: StateListener) -> None:
        self._listeners.append(callback)

    def _notify(self, previous: State) -> None:
        for listener in list(self._listeners):
            try:
                listener(previous, self._state, self._context)
            except Exception as e:
                logger.error(f"State listener failed: {e}")
