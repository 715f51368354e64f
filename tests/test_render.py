"""Smoke tests for frame rendering with a stub glyph source."""

import numpy as np

from runforge.engine.constants import GAME_HEIGHT, GAME_WIDTH, PLAYER_Y
from runforge.engine.engine import RunnerEngine
from runforge.engine.entities import Collectible, Obstacle, Particle, PlayerState, RunState
from runforge.engine.render import render_frame
from runforge.graphics.primitives import (
    draw_ellipse,
    draw_image,
    draw_rect,
    new_buffer,
)


def test_render_paints_track_and_player(desert_theme, stub_glyphs):
    buffer = new_buffer(GAME_WIDTH, GAME_HEIGHT)
    render_frame(buffer, RunState(), desert_theme, stub_glyphs)

    # Track colour reaches the top edge
    assert tuple(buffer[0, 60]) == desert_theme.colors.rgb("secondary")
    assert tuple(buffer[300, 60]) == desert_theme.colors.rgb("secondary")
    # Stub glyphs are solid white squares
    assert tuple(buffer[PLAYER_Y, 180]) == (255, 255, 255)


def test_render_draws_every_entity(desert_theme, stub_glyphs):
    state = RunState(player=PlayerState(slide_phase=0.3))
    state.obstacles = [
        Obstacle(lane=0, y=200, archetype=0),
        Obstacle(lane=1, y=200, archetype=1),
        Obstacle(lane=2, y=200, archetype=2),
    ]
    state.collectibles = [Collectible(lane=0, y=350, archetype=1)]
    state.particles = [
        Particle(x=100, y=100, vx=0, vy=-2, color=(255, 0, 0), text="+50"),
        Particle(x=50, y=50, vx=1, vy=1, color=(0, 255, 0), life=0.5),
    ]

    render_frame(new_buffer(GAME_WIDTH, GAME_HEIGHT), state, desert_theme, stub_glyphs)

    sizes = {(text, size) for text, size, *_ in stub_glyphs.calls}
    assert ("🌵", 40) in sizes
    assert ("🦅", 40) in sizes
    assert ("🗿", 50) in sizes
    assert ("🪲", 36) in sizes
    assert ("+50", 24) in sizes
    # Sliding player is squashed
    assert ("🐪", 32, 1.3, 0.6, False) in stub_glyphs.calls


def test_collected_items_are_not_drawn(desert_theme, stub_glyphs):
    state = RunState()
    state.collectibles = [Collectible(lane=0, y=350, archetype=0, collected=True)]
    render_frame(new_buffer(GAME_WIDTH, GAME_HEIGHT), state, desert_theme, stub_glyphs)
    assert all(text != "💧" for text, *_ in stub_glyphs.calls)


def test_engine_renders_into_its_buffer(desert_theme, stub_glyphs, stub_rng):
    engine = RunnerEngine(glyphs=stub_glyphs, rng=stub_rng)
    assert not engine.buffer.any()

    engine.start(desert_theme)
    engine.tick()
    assert engine.buffer.shape == (GAME_HEIGHT, GAME_WIDTH, 3)
    assert engine.buffer.any()


class TestPrimitives:
    def test_rect_clips_to_buffer(self):
        buffer = new_buffer(10, 10)
        draw_rect(buffer, -5, -5, 8, 8, (255, 0, 0))
        assert tuple(buffer[0, 0]) == (255, 0, 0)
        assert tuple(buffer[2, 2]) == (255, 0, 0)
        assert tuple(buffer[3, 3]) == (0, 0, 0)

    def test_rect_alpha_blends(self):
        buffer = new_buffer(4, 4)
        draw_rect(buffer, 0, 0, 4, 4, (200, 100, 0), alpha=0.5)
        assert tuple(buffer[1, 1]) == (100, 50, 0)

    def test_ellipse_with_no_radius_is_skipped(self):
        buffer = new_buffer(10, 10)
        draw_ellipse(buffer, 5, 5, 0, 3, (255, 255, 255))
        assert not buffer.any()

    def test_image_uses_per_pixel_alpha(self):
        buffer = new_buffer(4, 4)
        image = np.zeros((2, 2, 4), dtype=np.uint8)
        image[:, :, 0] = 255
        image[0, 0, 3] = 255
        draw_image(buffer, image, 1, 1)
        assert tuple(buffer[1, 1]) == (255, 0, 0)
        assert tuple(buffer[2, 2]) == (0, 0, 0)

    def test_image_off_buffer_is_ignored(self):
        buffer = new_buffer(4, 4)
        image = np.full((2, 2, 3), 255, dtype=np.uint8)
        draw_image(buffer, image, 10, 10)
        assert not buffer.any()
