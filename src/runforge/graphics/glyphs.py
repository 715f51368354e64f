"""Glyph rasterization.

Theme art is single characters (usually emoji). A GlyphSource turns a
string into an RGBA numpy image that the primitives can blend. The pygame
implementation caches every rendered (text, size, color, scale) tuple.
"""

import logging
from typing import Dict, Optional, Protocol, Sequence, Tuple

import numpy as np
import pygame
from numpy.typing import NDArray

from runforge.graphics.primitives import Color

logger = logging.getLogger(__name__)

Image = NDArray[np.uint8]

# Tried in order; the first one installed on this machine wins
DEFAULT_FONT_CANDIDATES: Tuple[str, ...] = (
    "Segoe UI Emoji",
    "Apple Color Emoji",
    "Noto Emoji",
    "Symbola",
    "DejaVu Sans",
    "Noto Sans",
)


class GlyphSource(Protocol):
    """Rasterizes text into RGBA images."""

    def render(
        self,
        text: str,
        size: int,
        color: Color,
        scale_x: float = 1.0,
        scale_y: float = 1.0,
        bold: bool = False,
    ) -> Image:
        ...


class PygameGlyphSource:
    """GlyphSource backed by pygame.font with an in-memory cache."""

    def __init__(
        self,
        font_candidates: Sequence[str] = DEFAULT_FONT_CANDIDATES,
        cache_limit: int = 512,
    ) -> None:
        pygame.font.init()
        self._candidates = tuple(font_candidates)
        self._fonts: Dict[Tuple[int, bool], pygame.font.Font] = {}
        self._cache: Dict[tuple, Image] = {}
        self._cache_limit = cache_limit

    def _font(self, size: int, bold: bool) -> pygame.font.Font:
        key = (size, bold)
        font = self._fonts.get(key)
        if font is not None:
            return font

        for name in self._candidates:
            path = pygame.font.match_font(name, bold=bold)
            if path is None:
                logger.debug(f"Font {name} not installed")
                continue
            try:
                font = pygame.font.Font(path, size)
            except (OSError, pygame.error) as e:
                logger.debug(f"Font {name} unusable at {size}px: {e}")
                continue
            logger.debug(f"Using font {name} ({path}) at {size}px")
            break

        if font is None:
            font = pygame.font.Font(None, size)
            font.set_bold(bold)
            logger.warning(f"No preferred font available at {size}px, using default")

        self._fonts[key] = font
        return font

    def render(
        self,
        text: str,
        size: int,
        color: Color,
        scale_x: float = 1.0,
        scale_y: float = 1.0,
        bold: bool = False,
    ) -> Image:
        key = (text, size, tuple(color), round(scale_x, 3), round(scale_y, 3), bold)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        surface = self._font(size, bold).render(text, True, color)
        if scale_x != 1.0 or scale_y != 1.0:
            w, h = surface.get_size()
            surface = pygame.transform.smoothscale(
                surface,
                (max(1, int(w * scale_x)), max(1, int(h * scale_y))),
            )

        image = _surface_to_rgba(surface)

        if len(self._cache) >= self._cache_limit:
            self._cache.clear()
        self._cache[key] = image
        return image


def _surface_to_rgba(surface: pygame.Surface) -> Image:
    """Convert a per-pixel-alpha surface into an (h, w, 4) array."""
    rgb = pygame.surfarray.array3d(surface).swapaxes(0, 1)
    alpha = pygame.surfarray.array_alpha(surface).swapaxes(0, 1)
    return np.dstack([rgb, alpha]).astype(np.uint8)


_default_source: Optional[PygameGlyphSource] = None


def get_glyph_source() -> PygameGlyphSource:
    """Get the shared pygame glyph source."""
    global _default_source
    if _default_source is None:
        _default_source = PygameGlyphSource()
    return _default_source
