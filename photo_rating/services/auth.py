import jwt
from fastapi import HTTPException, Security
from fastapi.security import APIKeyHeader
from starlette.status import HTTP_403_FORBIDDEN

from photo_rating.models.app_config import AppConfig

API_KEY = APIKeyHeader(name="api_key", auto_error=False)
ADMIN_ID = "photo-rating-admin"


class AuthService:
    def __init__(self, config: AppConfig):
        self.enable_auth = config.enable_auth
        self.jwt_secret = config.jwt_secret

    async def admin_auth(self, api_key: str = Security(API_KEY)):
        return await self._auth(api_key, ADMIN_ID)

    async def _auth(self, api_key_header: str, user_id: str) -> str:
        if self.enable_auth:
            try:
                if not api_key_header:
                    raise jwt.DecodeError()
                decoded_token = jwt.decode(api_key_header, self.jwt_secret, algorithms=["HS256"])
                if decoded_token.get("id") == user_id:
                    return api_key_header
                raise jwt.DecodeError()
            except jwt.PyJWTError as exc:
                raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="api_key header invalid or missing") from exc
        return ""
