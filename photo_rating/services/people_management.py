import logging
from typing import List, Tuple

from photo_rating.models.normalized_image import PipelineState
from photo_rating.models.person import Person
from photo_rating.models.raw_upload import CANONICAL_CONTENT_TYPE, CANONICAL_FORMAT
from photo_rating.services.image_normalization import ImageNormalizationService
from photo_rating.services.persistence import SQLitePersistenceService
from photo_rating.utils.image_processing import sniff_content_type

logger = logging.getLogger(__name__)


class PeopleManagementService:
    """Service for creation, deletion and retrieval of people and their photos"""

    def __init__(self, db: SQLitePersistenceService, normalizer: ImageNormalizationService):
        self.db = db
        self.normalizer = normalizer

    def create_person(self, name: str, image_bytes: bytes) -> int:
        """
        Normalize an uploaded photo and store it together with a new person.
        Args:
            name: The name of the person
            image_bytes: The uploaded photo

        Returns: The id of the new person

        """
        # normalization errors propagate before anything touches the db
        image = self.normalizer.normalize(image_bytes)
        try:
            person_id = self.db.insert_person(name, image.image_bytes, image.image_format)
            self.db.commit()
        except BaseException:
            self.db.rollback()
            raise
        logger.info("Person %d stored (%s, state %s)", person_id, image.image_format, PipelineState.STORED.value)
        return person_id

    def get_people(self) -> List[Person]:
        return self.db.read_people()

    def get_person(self, person_id: int) -> Person:
        return self.db.read_person(person_id)

    def delete_person(self, person_id: int):
        self.db.delete_person(person_id)
        self.db.commit()

    def get_person_image(self, person_id: int) -> Tuple[bytes, str]:
        """Return the stored photo and the content type it should be served with"""
        image_bytes, image_format = self.db.read_person_image(person_id)
        if image_format == CANONICAL_FORMAT:
            return image_bytes, CANONICAL_CONTENT_TYPE
        return image_bytes, sniff_content_type(image_bytes)
