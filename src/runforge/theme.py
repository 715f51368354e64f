"""Theme data model shared by the generator and the engine.

A theme is the static configuration of one world: palette, hero glyph,
obstacle archetypes and collectible archetypes. Payloads arrive as JSON in
the generator's camelCase shape and are validated here; anything that does
not match the schema exactly is rejected.
"""

import json
import logging
import math
import re
from enum import Enum
from pathlib import Path
from typing import Any, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


class ThemeError(ValueError):
    """Raised when a theme payload cannot be used."""


class Avoidance(str, Enum):
    """How the player gets past an obstacle."""

    JUMP = "jump"     # low barrier, leap over it
    SLIDE = "slide"   # overhead bar, slide under it
    DODGE = "dodge"   # tall wall, change lanes


class Behavior(str, Enum):
    """Descriptive motion tag. Has no effect on the simulation."""

    STATIC = "static"
    MOVING = "moving"


def parse_hex_color(value: str) -> Color:
    """Convert '#rgb' or '#rrggbb' into an RGB tuple."""
    match = _HEX_COLOR.match(value.strip())
    if not match:
        raise ValueError(f"not a hex color: {value!r}")
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))


class _ThemeModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


class Palette(_ThemeModel):
    primary: str
    secondary: str
    background: str
    accent: str

    @field_validator("primary", "secondary", "background", "accent")
    @classmethod
    def _check_color(cls, value: str) -> str:
        parse_hex_color(value)
        return value.strip()

    def rgb(self, name: str) -> Color:
        """Get a palette entry as an RGB tuple."""
        return parse_hex_color(getattr(self, name))


class Character(_ThemeModel):
    name: str
    glyph: str = Field(alias="emoji", min_length=1)
    description: str


class ObstacleArchetype(_ThemeModel):
    name: str
    glyph: str = Field(alias="emoji", min_length=1)
    behavior: Behavior
    avoidance: Avoidance = Field(alias="type")


class CollectibleArchetype(_ThemeModel):
    name: str
    glyph: str = Field(alias="emoji", min_length=1)
    points: int = Field(ge=0)

    @field_validator("points", mode="before")
    @classmethod
    def _round_points(cls, value: Any) -> Any:
        # Generators emit JSON numbers; score stays integral
        if isinstance(value, float):
            if not math.isfinite(value):
                raise ValueError(f"points must be finite, got {value}")
            return int(round(value))
        return value


class Theme(_ThemeModel):
    """A complete generated world."""

    world_name: str = Field(alias="worldName")
    description: str
    colors: Palette
    character: Character
    obstacles: List[ObstacleArchetype] = Field(min_length=1)
    collectibles: List[CollectibleArchetype] = Field(min_length=1)


# JSON schema handed to the generator, in the wire shape
THEME_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "worldName": {"type": "STRING", "description": "A catchy name for the game world."},
        "description": {"type": "STRING", "description": "A brief description of the environment."},
        "colors": {
            "type": "OBJECT",
            "properties": {
                "primary": {"type": "STRING", "description": "Hex color for main elements."},
                "secondary": {"type": "STRING", "description": "Hex color for ground/paths."},
                "background": {"type": "STRING", "description": "Hex color for the sky/background."},
                "accent": {"type": "STRING", "description": "Vibrant accent hex color."},
            },
            "required": ["primary", "secondary", "background", "accent"],
        },
        "character": {
            "type": "OBJECT",
            "properties": {
                "name": {"type": "STRING"},
                "emoji": {"type": "STRING", "description": "A single emoji representing the player."},
                "description": {"type": "STRING"},
            },
            "required": ["name", "emoji", "description"],
        },
        "obstacles": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "name": {"type": "STRING"},
                    "emoji": {"type": "STRING"},
                    "behavior": {"type": "STRING", "enum": ["static", "moving"]},
                    "type": {
                        "type": "STRING",
                        "enum": ["jump", "slide", "dodge"],
                        "description": (
                            "jump means a low barrier, slide means a high overhead "
                            "obstacle, dodge means a tall wall."
                        ),
                    },
                },
                "required": ["name", "emoji", "behavior", "type"],
            },
        },
        "collectibles": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "name": {"type": "STRING"},
                    "emoji": {"type": "STRING"},
                    "points": {"type": "NUMBER"},
                },
                "required": ["name", "emoji", "points"],
            },
        },
    },
    "required": ["worldName", "description", "colors", "character", "obstacles", "collectibles"],
}


def parse_theme(payload: str | bytes | dict[str, Any]) -> Theme:
    """Validate a raw generator payload.

    Args:
        payload: JSON text or an already-decoded mapping

    Returns:
        Validated Theme

    Raises:
        ThemeError: If the payload is not JSON or does not match the schema
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as e:
            raise ThemeError(f"Theme payload is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise ThemeError(f"Theme payload must be an object, got {type(payload).__name__}")

    try:
        return Theme.model_validate(payload)
    except ValidationError as e:
        raise ThemeError(f"Theme payload does not match schema: {e.error_count()} error(s)") from e


def load_theme_file(path: str | Path) -> Theme:
    """Load a theme from a local JSON file in the generator's shape."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ThemeError(f"Cannot read theme file {path}: {e}") from e

    theme = parse_theme(text)
    logger.info(f"Loaded theme '{theme.world_name}' from {path}")
    return theme
