"""Framebuffer conversion for frontends and headless output."""

import jax.numpy as jnp
import numpy as np
from typing import List, Tuple

Color = Tuple[int, int, int]

# Named palettes as (lit pixel, dark pixel)
COLOR_SCHEMES = {
    "classic": ((0, 255, 0), (0, 0, 0)),
    "amber": ((255, 176, 0), (0, 0, 0)),
    "white": ((255, 255, 255), (0, 0, 0)),
    "blue": ((0, 255, 255), (0, 0, 64)),
    "retro": ((255, 255, 0), (64, 0, 64)),
}


def chip8_display_to_rgb(
    display: jnp.ndarray,
    scale: int = 8,
    on_color: Color = (0, 255, 0),
    off_color: Color = (0, 0, 0),
) -> np.ndarray:
    """Convert the ``[x, y]`` boolean framebuffer to a row-major RGB image.

    Args:
        display: Boolean array of shape (64, 32)
        scale: Integer nearest-neighbour upscaling factor
        on_color: RGB color of lit pixels
        off_color: RGB color of dark pixels

    Returns:
        uint8 array of shape (32 * scale, 64 * scale, 3)
    """
    if scale < 1:
        raise ValueError(f"Scale must be a positive integer, got {scale}")

    palette = np.array([off_color, on_color], dtype=np.uint8)
    rows = np.asarray(display, dtype=np.bool_).T
    if scale > 1:
        rows = np.kron(rows, np.ones((scale, scale), dtype=np.bool_))
    return palette[rows.astype(np.intp)]


def create_color_scheme(scheme: str = "classic") -> Tuple[Color, Color]:
    """Return the ``(on_color, off_color)`` pair of a named palette."""
    try:
        return COLOR_SCHEMES[scheme]
    except KeyError:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(COLOR_SCHEMES)}"
        ) from None


def display_to_text(display: jnp.ndarray, on_char: str = "#", off_char: str = ".") -> List[str]:
    """Render the display as one string per screen row, for headless output."""
    rows = np.asarray(display, dtype=np.bool_).T
    return ["".join(on_char if pixel else off_char for pixel in row) for row in rows]
