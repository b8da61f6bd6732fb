import io
import logging
from enum import IntEnum
from typing import Dict, Tuple

import numpy as np
from PIL import Image

EXIF_ORIENTATION_TAG = 0x0112

logger = logging.getLogger(__name__)


class Orientation(IntEnum):
    """EXIF orientation codes (how the camera stored the pixels relative to the upright scene)"""

    NORMAL = 1
    MIRROR_HORIZONTAL = 2
    ROTATE_180 = 3
    MIRROR_VERTICAL = 4
    MIRROR_ROTATE_90_CW = 5
    ROTATE_90_CW = 6
    MIRROR_ROTATE_270_CW = 7
    ROTATE_270_CW = 8


# (mirror horizontally first, number of clockwise quarter turns afterwards)
ORIENTATION_TRANSFORMS: Dict[Orientation, Tuple[bool, int]] = {
    Orientation.NORMAL: (False, 0),
    Orientation.MIRROR_HORIZONTAL: (True, 0),
    Orientation.ROTATE_180: (False, 2),
    Orientation.MIRROR_VERTICAL: (True, 2),
    Orientation.MIRROR_ROTATE_90_CW: (True, 1),
    Orientation.ROTATE_90_CW: (False, 1),
    Orientation.MIRROR_ROTATE_270_CW: (True, 3),
    Orientation.ROTATE_270_CW: (False, 3),
}


def image_orientation(image: Image.Image) -> Orientation:
    """Orientation of an opened image, Orientation.NORMAL if the tag is missing, unreadable or out of range"""
    try:
        return Orientation(int(image.getexif().get(EXIF_ORIENTATION_TAG)))
    except Exception:  # pylint: disable=broad-except
        logger.debug("No usable EXIF orientation found, assuming %s", Orientation.NORMAL.name)
        return Orientation.NORMAL


def read_orientation(image_bytes: bytes) -> Orientation:
    """
    Read the EXIF orientation tag of an encoded image.
    Args:
        image_bytes: The encoded image

    Returns: The orientation, Orientation.NORMAL if the tag is missing, unreadable or out of range

    """
    try:
        with Image.open(io.BytesIO(image_bytes)) as image:
            return image_orientation(image)
    except Exception:  # pylint: disable=broad-except
        logger.debug("Could not open image, assuming %s", Orientation.NORMAL.name)
        return Orientation.NORMAL


def mirror_horizontal(pixels: np.ndarray) -> np.ndarray:
    """dst[y, x] = src[y, W - 1 - x]"""
    width = pixels.shape[1]
    columns = np.arange(width - 1, -1, -1)
    return pixels[:, columns]


def rotate_90_cw(pixels: np.ndarray) -> np.ndarray:
    """dst[x, H - 1 - y] = src[y, x], so width and height are swapped"""
    height, width = pixels.shape[:2]
    rows = np.arange(height - 1, -1, -1)[np.newaxis, :]
    columns = np.arange(width)[:, np.newaxis]
    return pixels[rows, columns]


def apply_orientation(pixels: np.ndarray, orientation: Orientation) -> np.ndarray:
    """
    Remap the stored pixels so that they show the upright scene.
    Args:
        pixels: Pixel array of shape (H, W) or (H, W, C)
        orientation: The EXIF orientation of the pixels

    Returns: A new pixel array (the input is not modified)

    """
    mirror, quarter_turns = ORIENTATION_TRANSFORMS[Orientation(orientation)]
    result = pixels
    if mirror:
        result = mirror_horizontal(result)
    for _ in range(quarter_turns):
        result = rotate_90_cw(result)
    if result is pixels:
        result = pixels.copy()
    return result


def invert_orientation(orientation: Orientation) -> Orientation:
    """Return the orientation whose transform undoes the transform of the given one"""
    mirror, quarter_turns = ORIENTATION_TRANSFORMS[Orientation(orientation)]
    if mirror:
        # a mirror followed by k turns is its own inverse
        return Orientation(orientation)
    inverse = (False, (4 - quarter_turns) % 4)
    for candidate, transform in ORIENTATION_TRANSFORMS.items():
        if transform == inverse:
            return candidate
    raise ValueError(f"No inverse for orientation {orientation}")
