import logging

from PIL import Image

from photo_rating.models.errors import ImageDecodeError, ImageEncodeError
from photo_rating.models.normalized_image import NormalizedImage, PipelineState
from photo_rating.models.raw_upload import CANONICAL_FORMAT, FormatClass, RawUpload
from photo_rating.utils.image_processing import (
    bytes2pil,
    fit_within,
    np2pil,
    pil2bytes,
    pil2np,
    resize_pixels,
    sniff_format,
)
from photo_rating.utils.orientation import apply_orientation, image_orientation

logger = logging.getLogger(__name__)


class ImageNormalizationService:
    """
    Service that turns uploaded photos into bytes suitable for storage.
    Photographic uploads (JPEG) are rotated upright, downscaled to fit the configured bounding box (never upscaled)
    and re-encoded as JPEG. Every other upload is passed through byte-identical.
    """

    def __init__(self, max_width: int = 512, max_height: int = 512, quality: int = 80):
        self.max_width = max_width
        self.max_height = max_height
        self.quality = quality

    @staticmethod
    def detect(image_bytes: bytes) -> RawUpload:
        format_class, format_name = sniff_format(image_bytes)
        return RawUpload(image_bytes=image_bytes, format_class=format_class, format_name=format_name)

    def normalize(self, image_bytes: bytes) -> NormalizedImage:
        """
        Run an upload through the normalization pipeline.
        Args:
            image_bytes: The uploaded bytes (not modified)

        Returns: The image to store

        Raises:
            ImageDecodeError: If a photographic upload can not be decoded
            ImageEncodeError: If the processed pixels can not be encoded

        """
        logger.debug("Pipeline state: %s (%d bytes)", PipelineState.RECEIVED.value, len(image_bytes))
        upload = self.detect(image_bytes)
        logger.debug(
            "Pipeline state: %s (%s, %s)",
            PipelineState.FORMAT_DETECTED.value,
            upload.format_class.value,
            upload.format_name,
        )

        if upload.format_class != FormatClass.PHOTOGRAPHIC:
            logger.info("Storing %s upload (%s) as uploaded", upload.format_class.value, upload.format_name)
            return NormalizedImage(
                image_bytes=image_bytes,
                image_format=upload.format_name,
                normalized=False,
                state=PipelineState.PASS_THROUGH,
            )
        return self._normalize_photographic(upload)

    def _normalize_photographic(self, upload: RawUpload) -> NormalizedImage:
        try:
            with bytes2pil(upload.image_bytes) as image:
                orientation = image_orientation(image)
                image.load()
                pixels = pil2np(image.convert("RGB"))
        except (OSError, ValueError, SyntaxError, EOFError, Image.DecompressionBombError) as exc:
            raise ImageDecodeError(f"Could not decode {upload.format_name} image: {exc}") from exc

        pixels = apply_orientation(pixels, orientation)
        logger.debug("Pipeline state: %s (orientation %d)", PipelineState.ORIENTATION_RESOLVED.value, orientation)

        src_height, src_width = pixels.shape[:2]
        width, height = fit_within(src_width, src_height, self.max_width, self.max_height)
        if width <= 0 or height <= 0:
            raise ImageEncodeError(f"Image of size {src_width}x{src_height} can not be scaled to {width}x{height}")
        pixels = resize_pixels(pixels, (width, height))
        logger.debug(
            "Pipeline state: %s (%dx%d -> %dx%d)", PipelineState.SCALED.value, src_width, src_height, width, height
        )

        try:
            image_bytes = pil2bytes(np2pil(pixels), quality=self.quality)
        except (OSError, ValueError) as exc:
            raise ImageEncodeError(f"Could not encode image as {CANONICAL_FORMAT}: {exc}") from exc
        logger.debug("Pipeline state: %s (%d bytes)", PipelineState.ENCODED.value, len(image_bytes))
        logger.info(
            "Normalized %s upload %dx%d (orientation %d) to %dx%d",
            upload.format_name,
            src_width,
            src_height,
            orientation,
            width,
            height,
        )
        return NormalizedImage(
            image_bytes=image_bytes,
            image_format=CANONICAL_FORMAT,
            normalized=True,
            orientation=int(orientation),
            width=width,
            height=height,
            state=PipelineState.ENCODED,
        )
