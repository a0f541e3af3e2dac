from __future__ import annotations
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "peachwood"
    PORT: int = 5000
    ENVIRONMENT: str = "development"
    # Used only outside development; development accepts any origin
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "https://your-site-name.netlify.app",
    ]
    LOG_LEVEL: str = "INFO"
    RESERVE_STOCK: bool = False

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    return Settings()
