"""Drawing primitives for RUNFORGE raster buffers.

Buffers are numpy arrays of shape (height, width, 3), dtype uint8, the
same layout pygame.surfarray expects after a swapaxes. Every primitive
clips to the buffer and takes an optional opacity.
"""

from typing import Optional, Tuple

import numpy as np
from numpy.typing import NDArray

# Type aliases
Color = Tuple[int, int, int]
Buffer = NDArray[np.uint8]
Window = Tuple[slice, slice]


def new_buffer(width: int, height: int) -> Buffer:
    """Allocate a black buffer."""
    return np.zeros((height, width, 3), dtype=np.uint8)


def fill(buffer: Buffer, color: Color) -> None:
    buffer[:, :] = color


def _clip(buffer: Buffer, x: int, y: int, width: int, height: int) -> Optional[Tuple[Window, Window]]:
    """Intersect a rectangle with the buffer.

    Returns (buffer window, source window) as (rows, cols) slices, or None
    when nothing is visible.
    """
    buf_h, buf_w = buffer.shape[:2]
    x0, y0 = max(0, x), max(0, y)
    x1, y1 = min(buf_w, x + width), min(buf_h, y + height)
    if x1 <= x0 or y1 <= y0:
        return None
    dst = (slice(y0, y1), slice(x0, x1))
    src = (slice(y0 - y, y1 - y), slice(x0 - x, x1 - x))
    return dst, src


def _blend(region: Buffer, color: Color, alpha: float, mask=None) -> None:
    """Blend a solid color into a buffer region in place."""
    target = region if mask is None else region[mask]
    if alpha >= 1.0:
        blended = np.broadcast_to(np.asarray(color, dtype=np.uint8), target.shape)
    else:
        src = np.asarray(color, dtype=np.float32)
        blended = (src * alpha + target * (1 - alpha)).astype(np.uint8)

    if mask is None:
        region[:] = blended
    else:
        region[mask] = blended


def draw_rect(
    buffer: Buffer,
    x: float,
    y: float,
    width: float,
    height: float,
    color: Color,
    alpha: float = 1.0,
) -> None:
    """Draw a filled, optionally translucent rectangle.

    Args:
        buffer: Target (height, width, 3) array
        x, y: Top-left corner
        width, height: Size in pixels
        color: RGB tuple
        alpha: Opacity, 0.0 to 1.0
    """
    if alpha <= 0:
        return
    clipped = _clip(buffer, int(x), int(y), int(width), int(height))
    if clipped is None:
        return
    dst, _ = clipped
    _blend(buffer[dst], color, alpha)


def draw_ellipse(
    buffer: Buffer,
    cx: float,
    cy: float,
    rx: float,
    ry: float,
    color: Color,
    alpha: float = 1.0,
) -> None:
    """Draw a filled axis-aligned ellipse. Degenerate radii draw nothing."""
    if rx <= 0 or ry <= 0 or alpha <= 0:
        return

    left, top = int(cx - rx), int(cy - ry)
    clipped = _clip(buffer, left, top, int(cx + rx) + 1 - left, int(cy + ry) + 1 - top)
    if clipped is None:
        return
    dst, _ = clipped

    rows, cols = dst
    ys, xs = np.ogrid[rows, cols]
    mask = ((xs - cx) / rx) ** 2 + ((ys - cy) / ry) ** 2 <= 1.0
    _blend(buffer[dst], color, alpha, mask)


def draw_circle(
    buffer: Buffer,
    cx: float,
    cy: float,
    radius: float,
    color: Color,
    alpha: float = 1.0,
) -> None:
    draw_ellipse(buffer, cx, cy, radius, radius, color, alpha)


def draw_image(
    buffer: Buffer,
    image: NDArray[np.uint8],
    x: int,
    y: int,
    alpha: float = 1.0,
) -> None:
    """Composite an RGB or RGBA image with its top-left at (x, y).

    RGBA images blend per pixel; `alpha` scales the whole image.
    """
    if alpha <= 0:
        return

    img_h, img_w = image.shape[:2]
    clipped = _clip(buffer, int(x), int(y), img_w, img_h)
    if clipped is None:
        return
    dst, src = clipped

    source = image[src]
    if source.shape[2] == 3 and alpha >= 1.0:
        buffer[dst] = source
        return

    if source.shape[2] == 4:
        weight = source[:, :, 3:4] * (alpha / 255.0)
        source = source[:, :, :3]
    else:
        weight = alpha

    target = buffer[dst]
    buffer[dst] = (source * weight + target * (1 - weight)).astype(np.uint8)


def draw_image_centered(
    buffer: Buffer,
    image: NDArray[np.uint8],
    cx: float,
    cy: float,
    alpha: float = 1.0,
) -> None:
    """Composite an image centered on (cx, cy)."""
    img_h, img_w = image.shape[:2]
    draw_image(buffer, image, int(round(cx - img_w / 2)), int(round(cy - img_h / 2)), alpha)
