"""
Image output: PNG export and bookmark thumbnails.

Colored frames are (height, width, 3) uint8 arrays from apply_palette.
Each computed pixel can be written as a scale x scale block, the same way
the viewer draws it.
"""

import io
import os

import numpy as np
from PIL import Image

from .util.logging_setup import get_logger

logger = get_logger("images")

THUMBNAIL_SIZE = 200  # Longest thumbnail side in pixels


def upscale(rgb, factor):
    """Repeat every pixel into a factor x factor block."""
    if factor < 1:
        raise ValueError(f"scale factor must be >= 1, got {factor}")
    if factor == 1:
        return rgb
    return np.repeat(np.repeat(rgb, factor, axis=0), factor, axis=1)


def thumbnail_array(rgb, size=THUMBNAIL_SIZE):
    """
    Shrink a frame so its longest side is `size`, keeping the aspect ratio.

    Uses nearest sampling; frames are small and blocky anyway.
    """
    height, width = rgb.shape[:2]
    step = max(width, height) / size
    thumb_w = max(1, int(round(width / step)))
    thumb_h = max(1, int(round(height / step)))
    cols = np.minimum((np.arange(thumb_w) * step).astype(int), width - 1)
    rows = np.minimum((np.arange(thumb_h) * step).astype(int), height - 1)
    return rgb[rows[:, None], cols[None, :]]


def _to_image(rgb):
    return Image.fromarray(np.ascontiguousarray(rgb, dtype=np.uint8))


def encode_png(rgb):
    buffer = io.BytesIO()
    _to_image(rgb).save(buffer, format="PNG")
    return buffer.getvalue()


def decode_png(data):
    """PNG bytes back to an RGB uint8 array."""
    with Image.open(io.BytesIO(data)) as img:
        return np.asarray(img.convert("RGB"))


def make_thumbnail(rgb, size=THUMBNAIL_SIZE):
    """Thumbnail of a frame as PNG bytes, ready to store with a bookmark."""
    return encode_png(thumbnail_array(rgb, size))


def save_png(rgb, path, scale=1):
    """
    Write a frame to a PNG file, creating parent directories.

    Args:
        rgb: (height, width, 3) uint8 frame
        path: Output file
        scale: Output pixels per computed pixel

    Returns:
        The path written
    """
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    img = _to_image(upscale(rgb, scale))
    img.save(path, format="PNG", optimize=True)
    logger.info("Saved %s (%dx%d)", path, img.width, img.height)
    return path
