import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse, Response

from photo_rating.api.dependencies import get_app_config, get_db, get_people_service
from photo_rating.models.app_config import AppConfig
from photo_rating.services.people_management import PeopleManagementService
from photo_rating.services.persistence import SQLitePersistenceService
from photo_rating.utils.request_validation import validate_person_id

router = APIRouter()


def _person_json(person) -> dict:
    return {"id": person.id, "name": person.name, "image_url": f"/images/{person.id}"}


@router.get("/people", name="list_people", summary="List all people (ordered by name).")
async def list_people(people_service: PeopleManagementService = Depends(get_people_service)) -> JSONResponse:
    try:
        people = people_service.get_people()
        return JSONResponse(content={"people": [_person_json(p) for p in people]})
    except HTTPException:
        raise
    except BaseException as exc:
        logging.error("", exc_info=True)
        raise HTTPException(status_code=500, detail="An unknown server error occurred") from exc


@router.get("/people/{person_id}", name="get_person", summary="Get a single person as JSON.")
async def get_person(
    person_id: str,
    db: SQLitePersistenceService = Depends(get_db),
    people_service: PeopleManagementService = Depends(get_people_service),
) -> JSONResponse:
    try:
        p_id = validate_person_id(person_id, db)
        person = people_service.get_person(p_id)
        return JSONResponse(content=_person_json(person), headers={"person_id": str(p_id)})
    except HTTPException:
        raise
    except BaseException as exc:
        logging.error("", exc_info=True)
        raise HTTPException(status_code=500, detail="An unknown server error occurred") from exc


@router.get(
    "/images/{person_id}",
    name="get_person_image",
    summary="Get the photo of a person exactly as it is stored (normalized JPEG or the original upload).",
)
async def get_person_image(
    person_id: str,
    config: AppConfig = Depends(get_app_config),
    db: SQLitePersistenceService = Depends(get_db),
    people_service: PeopleManagementService = Depends(get_people_service),
) -> Response:
    try:
        p_id = validate_person_id(person_id, db)
        image_bytes, content_type = people_service.get_person_image(p_id)
        return Response(
            content=image_bytes,
            media_type=content_type,
            headers={"Cache-Control": f"public, max-age={config.image_cache_max_age}"},
        )
    except HTTPException:
        raise
    except BaseException as exc:
        logging.error("", exc_info=True)
        raise HTTPException(status_code=500, detail="An unknown server error occurred") from exc
