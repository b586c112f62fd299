from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_PROJECT_NAME = 'Notification Store API'
DEFAULT_API_V1_PREFIX = '/api/v1'
DEFAULT_OPENED_INDEX_LIMIT = 10


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', extra='ignore')

    PROJECT_NAME: str = DEFAULT_PROJECT_NAME
    API_V1_PREFIX: str = DEFAULT_API_V1_PREFIX
    ENV: str = 'development'
    DEBUG: bool = False

    DB_URL: str = 'sqlite:///./notifications.db'
    LOG_LEVEL: str = 'INFO'
    CORS_ORIGINS: Annotated[list[str], NoDecode] = ['*']
    AUTO_CREATE_TABLES: bool = False

    OPENED_INDEX_LIMIT: int = DEFAULT_OPENED_INDEX_LIMIT

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, value):  # type: ignore[override]
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return []
            if value == '*':
                return ['*']
            return [item.strip() for item in value.split(',') if item.strip()]
        return value

    @field_validator('OPENED_INDEX_LIMIT')
    @classmethod
    def check_opened_index_limit(cls, value: int) -> int:
        if value < 1:
            raise ValueError('OPENED_INDEX_LIMIT must be positive')
        return value


settings = Settings()
