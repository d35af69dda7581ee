from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATE_FORMAT = "%d-%m-%Y"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="MS_", extra="ignore")

    app_name: str = "MedStock"
    env: str = "dev"
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    database_url: str = "sqlite+pysqlite:///./medstock.db"
    test_database_url: str = "sqlite+pysqlite:///:memory:"

    date_format: str = Field(
        default=DEFAULT_DATE_FORMAT,
        description="strftime pattern used for expiry and dispense dates",
    )
    log_level: str = "INFO"
    log_format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper() or "INFO"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
