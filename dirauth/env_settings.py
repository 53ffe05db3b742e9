from functools import lru_cache

from pydantic_settings import BaseSettings
from pydantic import Field


class EnvSettings(BaseSettings):
    database_url: str = Field("sqlite:///data/dirauth.db", alias="DIRAUTH_DATABASE_URL")

    log_level: str = Field("INFO", alias="DIRAUTH_LOG_LEVEL")
    log_dir: str = Field("", alias="DIRAUTH_LOG_DIR")
    log_retention_days: int = Field(30, alias="DIRAUTH_LOG_RETENTION_DAYS")

    class Config:
        populate_by_name = True


@lru_cache(maxsize=1)
def get_env() -> EnvSettings:
    return EnvSettings()
