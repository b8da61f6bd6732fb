class ImageNormalizationError(Exception):
    """Base class for uploads that were classified as photographic but could not be normalized"""


class ImageDecodeError(ImageNormalizationError):
    pass


class ImageEncodeError(ImageNormalizationError):
    pass
