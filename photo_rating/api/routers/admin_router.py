import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse

from photo_rating.api.dependencies import admin_auth, get_db, get_people_service
from photo_rating.models.errors import ImageNormalizationError
from photo_rating.services.people_management import PeopleManagementService
from photo_rating.services.persistence import SQLitePersistenceService
from photo_rating.utils.request_validation import validate_person_id

router = APIRouter()


@router.post(
    "/admin/people",
    name="post_person",
    summary="Add a new person with a photo. JPEG photos are rotated upright according to their EXIF orientation, "
    "downscaled to fit the configured bounding box and re-encoded. Other formats are stored as uploaded.",
    status_code=201,
)
async def post_person(
    name: str = Form(..., description="The name of the person."),
    file: UploadFile = File(..., description="The photo of the person."),
    people_service: PeopleManagementService = Depends(get_people_service),
    key: str = Depends(admin_auth),
) -> JSONResponse:
    # pylint: disable=unused-argument
    image_bytes = await file.read()
    try:
        if not name.strip():
            raise HTTPException(status_code=400, detail="name must not be empty!")
        if len(image_bytes) == 0:
            raise HTTPException(status_code=400, detail="Image upload failed: the uploaded file is empty!")
        person_id = people_service.create_person(name.strip(), image_bytes)
        return JSONResponse(content={"msg": "Person created!"}, status_code=201, headers={"person_id": str(person_id)})
    except HTTPException:
        raise
    except ImageNormalizationError as exc:
        logging.warning("Rejected upload for %s: %s", name, exc)
        raise HTTPException(status_code=422, detail=f"Failed to process image: {exc}") from exc
    except BaseException as exc:
        logging.error("", exc_info=True)
        raise HTTPException(status_code=500, detail="An unknown server error occurred") from exc


@router.delete(
    "/admin/people/{person_id}",
    name="delete_person",
    summary="Remove a person and the stored photo. This can not be undone.",
)
async def delete_person(
    person_id: str,
    db: SQLitePersistenceService = Depends(get_db),
    people_service: PeopleManagementService = Depends(get_people_service),
    key: str = Depends(admin_auth),
) -> JSONResponse:
    # pylint: disable=unused-argument
    try:
        p_id = validate_person_id(person_id, db)
        people_service.delete_person(p_id)
        return JSONResponse(content={"msg": "Person deleted!"}, headers={"person_id": str(p_id)})
    except HTTPException:
        raise
    except BaseException as exc:
        logging.error("", exc_info=True)
        raise HTTPException(status_code=500, detail="An unknown server error occurred") from exc
