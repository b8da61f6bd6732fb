import io
from typing import Optional, Tuple

import cv2
import numpy as np
from PIL import Image

from photo_rating.models.raw_upload import CANONICAL_FORMAT, PHOTOGRAPHIC_FORMATS, FormatClass

DEFAULT_CONTENT_TYPE = "application/octet-stream"
SNIFF_LENGTH = 512
JPEG_SIGNATURE = b"\xff\xd8\xff"

CONTENT_TYPE_SIGNATURES = [
    (JPEG_SIGNATURE, "image/jpeg"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"BM", "image/bmp"),
    (b"\x00\x00\x01\x00", "image/x-icon"),
    (b"II*\x00", "image/tiff"),
    (b"MM\x00*", "image/tiff"),
]


def bytes2pil(byte_arr: bytes) -> Image.Image:
    return Image.open(io.BytesIO(byte_arr))


def pil2bytes(image: Image.Image, quality: int = 80) -> bytes:
    img_byte_arr = io.BytesIO()
    image.save(img_byte_arr, format=CANONICAL_FORMAT, quality=quality)
    return img_byte_arr.getvalue()


def np2pil(array: np.ndarray) -> Image.Image:
    return Image.fromarray(array)


def pil2np(image: Image.Image) -> np.ndarray:
    return np.array(image)


def sniff_format(image_bytes: bytes) -> Tuple[FormatClass, Optional[str]]:
    """
    Classify an upload by its header (the file name and declared content type are ignored).
    Args:
        image_bytes: The uploaded bytes

    Returns: (format class, format name reported by the decoder or None if unrecognized)

    """
    try:
        with Image.open(io.BytesIO(image_bytes)) as image:
            format_name = image.format
    except Image.DecompressionBombError:
        # header was parsed but declares too many pixels, the decode stage has to reject it
        if image_bytes.startswith(JPEG_SIGNATURE):
            return FormatClass.PHOTOGRAPHIC, CANONICAL_FORMAT
        return FormatClass.UNKNOWN, None
    except Exception:  # pylint: disable=broad-except
        return FormatClass.UNKNOWN, None
    if format_name in PHOTOGRAPHIC_FORMATS:
        return FormatClass.PHOTOGRAPHIC, format_name
    if format_name:
        return FormatClass.OTHER_KNOWN, format_name
    return FormatClass.UNKNOWN, None


def sniff_content_type(image_bytes: bytes) -> str:
    """Best effort content type of stored bytes based on their first bytes"""
    head = image_bytes[:SNIFF_LENGTH]
    if head.startswith(b"RIFF") and head[8:12] == b"WEBP":
        return "image/webp"
    for signature, content_type in CONTENT_TYPE_SIGNATURES:
        if head.startswith(signature):
            return content_type
    return DEFAULT_CONTENT_TYPE


def fit_within(width: int, height: int, max_width: int, max_height: int) -> Tuple[int, int]:
    """
    Calculate the size of an image scaled uniformly to fit into a bounding box. Images are never upscaled.
    Args:
        width: The source width
        height: The source height
        max_width: The width of the bounding box
        max_height: The height of the bounding box

    Returns: (width, height) after scaling, the bounding box itself if the source size is not positive

    """
    if width <= 0 or height <= 0:
        return max_width, max_height
    scale = min(max_width / width, max_height / height)
    if scale >= 1:
        return width, height
    return int(width * scale), int(height * scale)


def resize_pixels(pixels: np.ndarray, size: Tuple[int, int]) -> np.ndarray:
    """Resample a pixel array to size=(width, height) using area interpolation"""
    height, width = pixels.shape[:2]
    if (width, height) == tuple(size):
        return pixels.copy()
    return cv2.resize(pixels, tuple(size), interpolation=cv2.INTER_AREA)
