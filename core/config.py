from pydantic_settings import BaseSettings
from typing import Literal


class Settings(BaseSettings):
    # Database — SQLite by default, point at the hosted PostgreSQL via env
    DATABASE_URL: str = "sqlite+aiosqlite:///./sieges.db"
    DATABASE_ECHO: bool = False

    # App
    APP_TITLE: str = "Siege Stats API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    CORS_ORIGINS: list[str] = ["*"]
    LOG_LEVEL: str = "INFO"

    # How kill/death rows are matched to a siege's player stats
    STATS_CHILD_FILTER: Literal["stat_ids", "siege_id"] = "stat_ids"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()


def get_settings() -> Settings:
    return settings
