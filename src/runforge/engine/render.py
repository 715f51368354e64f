"""Draw a RunState into a raster buffer.

Rendering is a pure read of the run state: nothing here mutates the
simulation. The buffer is the fixed GAME_WIDTH x GAME_HEIGHT canvas; the
window scales it to the display.
"""

from runforge.engine.constants import (
    GAME_HEIGHT,
    LANE_COUNT,
    LANE_WIDTH,
    PLAYER_Y,
    SLIDE_SCALE_X,
    SLIDE_SCALE_Y,
)
from runforge.engine.entities import RunState
from runforge.engine.rules import jump_lift
from runforge.engine.step import lane_center
from runforge.graphics.glyphs import GlyphSource
from runforge.graphics.primitives import (
    Buffer,
    draw_circle,
    draw_ellipse,
    draw_image_centered,
    draw_rect,
    fill,
)
from runforge.theme import Avoidance, Theme

BLACK = (0, 0, 0)

DIVIDER_WIDTH = 4
DIVIDER_ALPHA = 0x22 / 255
SLIDE_BAR_ALPHA = 0x44 / 255
SHADOW_ALPHA = 0.3

COLLECTIBLE_SIZE = 36
JUMP_OBSTACLE_SIZE = 40
SLIDE_OBSTACLE_SIZE = 40
DODGE_OBSTACLE_SIZE = 50
PLAYER_SIZE = 52
PLAYER_SLIDE_SIZE = 32
LABEL_SIZE = 24
DOT_RADIUS = 4


def render_frame(buffer: Buffer, state: RunState, theme: Theme, glyphs: GlyphSource) -> None:
    """Paint one frame of the run."""
    colors = theme.colors

    # The track fills the whole canvas
    fill(buffer, colors.rgb("secondary"))

    accent = colors.rgb("accent")
    for lane in range(1, LANE_COUNT):
        x = lane * LANE_WIDTH - DIVIDER_WIDTH // 2
        draw_rect(buffer, x, 0, DIVIDER_WIDTH, GAME_HEIGHT, accent, DIVIDER_ALPHA)

    _draw_collectibles(buffer, state, theme, glyphs)
    _draw_obstacles(buffer, state, theme, glyphs)
    _draw_particles(buffer, state, glyphs)
    _draw_player(buffer, state, theme, glyphs)


def _draw_collectibles(buffer: Buffer, state: RunState, theme: Theme, glyphs: GlyphSource) -> None:
    for collectible in state.collectibles:
        if collectible.collected:
            continue
        archetype = theme.collectibles[collectible.archetype]
        image = glyphs.render(archetype.glyph, COLLECTIBLE_SIZE, (255, 255, 255))
        draw_image_centered(buffer, image, lane_center(collectible.lane), collectible.y)


def _draw_obstacles(buffer: Buffer, state: RunState, theme: Theme, glyphs: GlyphSource) -> None:
    primary = theme.colors.rgb("primary")

    for obstacle in state.obstacles:
        archetype = theme.obstacles[obstacle.archetype]
        x = lane_center(obstacle.lane)

        if archetype.avoidance is Avoidance.SLIDE:
            # Overhead bar with the glyph hanging from it
            draw_rect(
                buffer,
                obstacle.lane * LANE_WIDTH + 10,
                obstacle.y - 80,
                LANE_WIDTH - 20,
                40,
                primary,
                SLIDE_BAR_ALPHA,
            )
            image = glyphs.render(archetype.glyph, SLIDE_OBSTACLE_SIZE, (255, 255, 255))
            draw_image_centered(buffer, image, x, obstacle.y - 60)
        elif archetype.avoidance is Avoidance.JUMP:
            image = glyphs.render(archetype.glyph, JUMP_OBSTACLE_SIZE, (255, 255, 255))
            draw_image_centered(buffer, image, x, obstacle.y)
        else:
            image = glyphs.render(archetype.glyph, DODGE_OBSTACLE_SIZE, (255, 255, 255))
            draw_image_centered(buffer, image, x, obstacle.y - 20)


def _draw_particles(buffer: Buffer, state: RunState, glyphs: GlyphSource) -> None:
    for particle in state.particles:
        alpha = max(0.0, min(1.0, particle.life))
        if particle.text:
            image = glyphs.render(particle.text, LABEL_SIZE, particle.color, bold=True)
            draw_image_centered(buffer, image, particle.x, particle.y, alpha)
        else:
            draw_circle(buffer, particle.x, particle.y, DOT_RADIUS, particle.color, alpha)


def _draw_player(buffer: Buffer, state: RunState, theme: Theme, glyphs: GlyphSource) -> None:
    player = state.player
    x = lane_center(player.lane)
    lift = jump_lift(player)

    # Shadow shrinks as the player rises
    draw_ellipse(buffer, x, PLAYER_Y + 10, 25 - lift / 5, 10 - lift / 10, BLACK, SHADOW_ALPHA)

    if player.is_sliding:
        image = glyphs.render(
            theme.character.glyph,
            PLAYER_SLIDE_SIZE,
            (255, 255, 255),
            scale_x=SLIDE_SCALE_X,
            scale_y=SLIDE_SCALE_Y,
        )
    else:
        image = glyphs.render(theme.character.glyph, PLAYER_SIZE, (255, 255, 255))
    draw_image_centered(buffer, image, x, PLAYER_Y - lift)
