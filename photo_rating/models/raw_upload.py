from enum import Enum
from typing import Optional

from pydantic import BaseModel

PHOTOGRAPHIC_FORMATS = ("JPEG", "MPO")
CANONICAL_FORMAT = "JPEG"
CANONICAL_CONTENT_TYPE = "image/jpeg"


class FormatClass(str, Enum):
    PHOTOGRAPHIC = "photographic"
    OTHER_KNOWN = "other-known"
    UNKNOWN = "unknown"


class RawUpload(BaseModel):
    """Model for uploaded image bytes and the format sniffed from their header"""

    image_bytes: bytes
    format_class: FormatClass
    format_name: Optional[str] = None
