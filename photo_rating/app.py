""" Main Server Script"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware import Middleware
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from photo_rating.api.api import api
from photo_rating.models.app_config import AppConfig, get_config
from photo_rating.services.auth import AuthService
from photo_rating.services.image_normalization import ImageNormalizationService
from photo_rating.services.people_management import PeopleManagementService
from photo_rating.services.persistence import SQLitePersistenceService
from photo_rating.utils.version import version

logger = logging.getLogger(__name__)


# Check and display important api settings
def check_config(config: AppConfig) -> Optional[str]:
    documentation_url = None
    if config.enable_documentation:
        documentation_url = "/documentation"
        logger.info("Documentation endpoint: ENABLED")
    else:
        logger.info("Documentation endpoint: DISABLED")

    if config.enable_auth:
        if not config.jwt_secret:
            raise ValueError("Please set JWT_SECRET via '.env' file or environment variable!")
        logger.info("Authentication for admin endpoints: ENABLED")
    else:
        logger.info("Authentication for admin endpoints: DISABLED")

    if not config.sql_lite_path:
        raise ValueError("Please set SQL_LITE_PATH via '.env' file or environment variable!")
    if config.image_max_width <= 0 or config.image_max_height <= 0:
        raise ValueError("IMAGE_MAX_WIDTH and IMAGE_MAX_HEIGHT have to be positive!")
    if not 0 < config.image_quality <= 100:
        raise ValueError("IMAGE_QUALITY has to be between 1 and 100!")
    logger.info(
        "Uploaded JPEGs will be normalized to at most %dx%d (quality %d)",
        config.image_max_width,
        config.image_max_height,
        config.image_quality,
    )
    return documentation_url


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    config = config or get_config()
    logging.basicConfig(level=config.log_level.upper())
    docs_url = check_config(config)

    # setup CORS middleware
    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["person_id"],
        )
    ]

    # services are built once per app from the given config
    db = SQLitePersistenceService(config.sql_lite_path)
    normalizer = ImageNormalizationService(
        max_width=config.image_max_width,
        max_height=config.image_max_height,
        quality=config.image_quality,
    )

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        logger.info("Running photo-rating service (v%s)...", version())
        db.connect()
        yield
        logger.info("Stopping photo-rating service...")
        db.disconnect()

    # setup api server
    app = FastAPI(
        lifespan=lifespan,
        title="Photo Rating API",
        version=version(),
        middleware=middleware,
        docs_url=docs_url,
        redoc_url=None,
    )
    app.include_router(router=api)
    Instrumentator().instrument(app).expose(app, include_in_schema=False)

    app.state.config = config
    app.state.db = db
    app.state.auth_service = AuthService(config)
    app.state.people_service = PeopleManagementService(db, normalizer)

    return app


if __name__ == "__main__":
    uvicorn.run(create_app(), host="0.0.0.0", port=8080, workers=1)
