from enum import Enum
from typing import Optional

from pydantic import BaseModel


class PipelineState(str, Enum):
    RECEIVED = "received"
    FORMAT_DETECTED = "format_detected"
    PASS_THROUGH = "pass_through"
    ORIENTATION_RESOLVED = "orientation_resolved"
    SCALED = "scaled"
    ENCODED = "encoded"
    STORED = "stored"


class NormalizedImage(BaseModel):
    """
    Model for the bytes handed to persistence after an upload went through the normalization pipeline.
    For pass-through uploads image_bytes are the uploaded bytes and width/height are unknown.
    """

    image_bytes: bytes
    image_format: Optional[str] = None
    normalized: bool
    orientation: int = 1
    width: Optional[int] = None
    height: Optional[int] = None
    state: PipelineState
