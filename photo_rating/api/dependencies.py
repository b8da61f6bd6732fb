from fastapi import Request, Security

from photo_rating.models.app_config import AppConfig
from photo_rating.services.auth import API_KEY, AuthService
from photo_rating.services.people_management import PeopleManagementService
from photo_rating.services.persistence import SQLitePersistenceService


def get_app_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_db(request: Request) -> SQLitePersistenceService:
    return request.app.state.db


def get_people_service(request: Request) -> PeopleManagementService:
    return request.app.state.people_service


async def admin_auth(request: Request, api_key: str = Security(API_KEY)) -> str:
    auth_service: AuthService = request.app.state.auth_service
    return await auth_service.admin_auth(api_key)
