from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    """Model holding the app configuration"""

    # api config
    enable_documentation: bool = False
    cors_origins: List[str] = []

    # auth config
    enable_auth: bool = True
    jwt_secret: str = ""

    # db config
    sql_lite_path: str = ""

    # image config
    image_max_width: int = 512
    image_max_height: int = 512
    image_quality: int = 80
    image_cache_max_age: int = 86400

    # logging config
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file="config/.env")


@lru_cache()
def get_config():
    return AppConfig()
