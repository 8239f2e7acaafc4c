"""Turn the CHIP-8 pixel grid into images and text.

These helpers only read ``state.display`` (or ``Chip8.display``); no
window or video output lives here.
"""

import os
from typing import Tuple, Union

import jax.numpy as jnp
import numpy as np
from PIL import Image

RGB = Tuple[int, int, int]

# (on, off) pairs; lavender is 0xDBCBD8 on 0x564787.
COLOR_SCHEMES = {
    "lavender": ((0xDB, 0xCB, 0xD8), (0x56, 0x47, 0x87)),
    "classic": ((0x00, 0xFF, 0x00), (0x00, 0x00, 0x00)),
    "amber": ((0xFF, 0xB0, 0x00), (0x00, 0x00, 0x00)),
    "white": ((0xFF, 0xFF, 0xFF), (0x00, 0x00, 0x00)),
    "blue": ((0x00, 0xFF, 0xFF), (0x00, 0x00, 0x40)),
    "retro": ((0xFF, 0xFF, 0x00), (0x40, 0x00, 0x40)),
}


def create_color_scheme(scheme: str = "lavender") -> Tuple[RGB, RGB]:
    """Return the ``(on_color, off_color)`` pair registered as ``scheme``."""
    try:
        return COLOR_SCHEMES[scheme]
    except KeyError:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(COLOR_SCHEMES)}"
        ) from None


def _rows(display: jnp.ndarray) -> np.ndarray:
    # display is indexed [x, y]; images and text want rows first.
    return np.asarray(display, dtype=np.bool_).T


def chip8_display_to_rgb(
    display: jnp.ndarray,
    scale: int = 8,
    on_color: RGB = COLOR_SCHEMES["lavender"][0],
    off_color: RGB = COLOR_SCHEMES["lavender"][1],
) -> np.ndarray:
    """Render the (64, 32) pixel grid as an RGB image.

    Args:
        display: Boolean pixel grid indexed [x, y]
        scale: Side length in image pixels of one CHIP-8 pixel
        on_color: RGB color for lit pixels
        off_color: RGB color for dark pixels

    Returns:
        uint8 array of shape (32 * scale, 64 * scale, 3)
    """
    pixels = _rows(display)
    if scale > 1:
        pixels = pixels.repeat(scale, axis=0).repeat(scale, axis=1)
    palette = np.array([off_color, on_color], dtype=np.uint8)
    return palette[pixels.astype(np.intp)]


def display_to_text(display: jnp.ndarray, on: str = "#", off: str = ".") -> str:
    """Render the display as 32 lines of 64 characters."""
    return "\n".join("".join(on if p else off for p in row) for row in _rows(display))


def save_screenshot(
    display: jnp.ndarray,
    filename: Union[str, os.PathLike],
    scale: int = 8,
    color_scheme: str = "lavender",
) -> None:
    """Save the display as an image file; format follows the extension."""
    on_color, off_color = create_color_scheme(color_scheme)
    frame = chip8_display_to_rgb(display, scale, on_color, off_color)
    Image.fromarray(frame).save(filename)
