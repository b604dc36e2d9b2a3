"""Image bytes to half-block terminal art."""

from __future__ import annotations

from io import BytesIO

import numpy as np
from PIL import Image, UnidentifiedImageError

UPPER_HALF = "▀"
LOWER_HALF = "▄"
RESET = "\x1b[0m"

MAX_HEIGHT = 1000


class RenderError(Exception):
    """Raised when image bytes cannot be decoded into pixel art."""


def _fg(rgb: np.ndarray) -> str:
    return f"\x1b[38;2;{rgb[0]};{rgb[1]};{rgb[2]}m"


def _bg(rgb: np.ndarray) -> str:
    return f"\x1b[48;2;{rgb[0]};{rgb[1]};{rgb[2]}m"


def decode_image(image_bytes: bytes) -> Image.Image:
    try:
        image = Image.open(BytesIO(image_bytes))
        image.load()
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        ValueError,
        SyntaxError,
    ) as exc:
        raise RenderError(f"cannot decode image: {exc}") from exc
    return image.convert("RGBA")


def fit_size(width: int, height: int, max_width: int, max_height: int = MAX_HEIGHT) -> tuple[int, int]:
    """Scale (width, height) to fit the bounds while keeping the aspect ratio."""
    if width <= 0 or height <= 0:
        raise RenderError("image has no pixels")
    scale = min(max_width / width, max_height / height)
    return max(1, round(width * scale)), max(1, round(height * scale))


def pixels_to_text(pixels: np.ndarray, alpha_threshold: int, pad_to: int = 0) -> str:
    """Map an (h, w, 4) RGBA array to lines of half blocks.

    Each output cell covers two pixel rows. Pixels with alpha below the
    threshold are transparent; an odd final row is paired with a
    transparent one.
    """
    height, width = pixels.shape[:2]
    visible = pixels[:, :, 3] >= alpha_threshold
    if height % 2:
        pixels = np.concatenate([pixels, np.zeros((1, width, 4), dtype=pixels.dtype)])
        visible = np.concatenate([visible, np.zeros((1, width), dtype=bool)])

    lines = []
    for y in range(0, pixels.shape[0], 2):
        cells = []
        for x in range(width):
            top = pixels[y, x] if visible[y, x] else None
            bottom = pixels[y + 1, x] if visible[y + 1, x] else None
            if top is not None and bottom is not None:
                cells.append(f"{_fg(top)}{_bg(bottom)}{UPPER_HALF}{RESET}")
            elif top is not None:
                cells.append(f"{_fg(top)}{UPPER_HALF}{RESET}")
            elif bottom is not None:
                cells.append(f"{_fg(bottom)}{LOWER_HALF}{RESET}")
            else:
                cells.append(" ")
        cells.append(" " * max(pad_to - width, 0))
        lines.append("".join(cells))
    return "\n".join(lines)


def render_image(image_bytes: bytes, max_width: int, alpha_threshold: int, aliasing: bool) -> str:
    image = decode_image(image_bytes)
    size = fit_size(image.width, image.height, max_width)
    resample = Image.Resampling.BICUBIC if aliasing else Image.Resampling.NEAREST
    if size != image.size:
        image = image.resize(size, resample=resample)
    pixels = np.asarray(image, dtype=np.uint8)
    return pixels_to_text(pixels, alpha_threshold, pad_to=max_width)
