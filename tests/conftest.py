"""Shared fixtures for the RUNFORGE test suite."""

import copy
import json

import numpy as np
import pytest

from runforge.engine.engine import RunnerEngine
from runforge.theme import Theme, parse_theme

DESERT_PAYLOAD = {
    "worldName": "Dune Dash",
    "description": "Endless golden dunes under a blazing sun.",
    "colors": {
        "primary": "#d97706",
        "secondary": "#fcd34d",
        "background": "#fde68a",
        "accent": "#b45309",
    },
    "character": {"name": "Camel Courier", "emoji": "🐪", "description": "A speedy camel."},
    "obstacles": [
        {"name": "Cactus", "emoji": "🌵", "behavior": "static", "type": "jump"},
        {"name": "Vulture", "emoji": "🦅", "behavior": "moving", "type": "slide"},
        {"name": "Pillar", "emoji": "🗿", "behavior": "static", "type": "dodge"},
    ],
    "collectibles": [
        {"name": "Water Flask", "emoji": "💧", "points": 10},
        {"name": "Golden Scarab", "emoji": "🪲", "points": 50},
    ],
}


class StubRandom:
    """Deterministic stand-in for random.Random.

    random() always returns `value`, shuffle() reorders lanes to `order`
    and randrange() returns `index` clamped to the range.
    """

    def __init__(self, value: float = 0.5, order=(1, 0, 2), index: int = 0):
        self.value = value
        self.order = list(order)
        self.index = index

    def random(self) -> float:
        return self.value

    def shuffle(self, x) -> None:
        x[:] = [lane for lane in self.order if lane in x]

    def randrange(self, stop: int) -> int:
        return min(self.index, stop - 1)


class StubGlyphs:
    """Renders every glyph as a solid square with full alpha."""

    def __init__(self):
        self.calls = []

    def render(self, text, size, color, scale_x=1.0, scale_y=1.0, bold=False):
        self.calls.append((text, size, scale_x, scale_y, bold))
        w = max(1, int(size * scale_x))
        h = max(1, int(size * scale_y))
        image = np.zeros((h, w, 4), dtype=np.uint8)
        image[:, :, :3] = color
        image[:, :, 3] = 255
        return image


class FakeClient:
    """JSON generator that replays a canned response or raises."""

    def __init__(self, response=None, error: Exception | None = None):
        self.response = response
        self.error = error
        self.prompts = []

    async def generate_json(self, prompt, response_schema, category="json_generation"):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def desert_payload() -> dict:
    return copy.deepcopy(DESERT_PAYLOAD)


@pytest.fixture
def desert_json(desert_payload) -> str:
    return json.dumps(desert_payload)


@pytest.fixture
def desert_theme(desert_payload) -> Theme:
    return parse_theme(desert_payload)


@pytest.fixture
def stub_rng() -> StubRandom:
    return StubRandom()


@pytest.fixture
def stub_glyphs() -> StubGlyphs:
    return StubGlyphs()


@pytest.fixture
def engine(stub_rng) -> RunnerEngine:
    return RunnerEngine(rng=stub_rng)
