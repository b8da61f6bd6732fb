from typing import Optional

from pydantic import BaseModel


class Person(BaseModel):
    """Model for a rated person (the photo itself is stored separately as a blob)"""

    id: int
    name: str
    image_format: Optional[str] = None
