"""Graphics module for RUNFORGE rendering pipeline."""

from runforge.graphics.primitives import (
    Buffer,
    Color,
    draw_circle,
    draw_ellipse,
    draw_image,
    draw_image_centered,
    draw_rect,
    fill,
    new_buffer,
)

__all__ = [
    # Types
    "Buffer",
    "Color",
    # Primitives
    "new_buffer",
    "fill",
    "draw_rect",
    "draw_ellipse",
    "draw_circle",
    "draw_image",
    "draw_image_centered",
]
