from fastapi import HTTPException

from photo_rating.services.persistence import SQLitePersistenceService


def validate_person_id(person_id: str, db: SQLitePersistenceService) -> int:
    stripped_id = str(person_id).strip()
    if not person_id_format_is_valid(stripped_id):
        raise HTTPException(
            status_code=400,
            detail=f"person id ({person_id}) has to be a positive integer!",
        )
    if not db.person_exists(int(stripped_id)):
        raise HTTPException(status_code=404, detail=f"person id ({person_id}) does not exist.")
    return int(stripped_id)


def person_id_format_is_valid(id_string: str) -> bool:
    try:
        return int(id_string) > 0
    except ValueError:
        return False
