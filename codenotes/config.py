import logging
from logging.config import dictConfig
from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    ENVIRONMENT: str = "local"

    # Bearer tokens are issued elsewhere; only verification happens here
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRY: int = 86400  # seconds

    DATABASE_URL: str = "sqlite+aiosqlite:///./codenotes.db"

    REDIS_HOST_PROD: str = "redis"
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: str = ""

    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_REQUESTS: int = 100
    RATE_LIMIT_WINDOW: int = 60  # seconds

    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"
    LOG_FILE_MAX_BYTES: int = 10 * 1024 * 1024
    LOG_FILE_BACKUPS: int = 5

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def REDIS_HOST(self) -> str:
        return "localhost" if self.ENVIRONMENT == "local" else self.REDIS_HOST_PROD


Config = Settings()

Path(Config.LOG_FILE).parent.mkdir(parents=True, exist_ok=True)


def build_log_config(settings: Settings) -> dict:
    """
    Console gets the short format, the rotating file the long one. The "app"
    logger owns both handlers; services log on its children
    (`app.problem`, `app.consistency`, ...).
    """
    handlers = ["console", "file"]
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "short": {"format": "%(asctime)s %(levelname)-7s %(name)s: %(message)s"},
            "long": {
                "format": "%(asctime)s %(levelname)-7s %(name)s "
                "[%(module)s.%(funcName)s:%(lineno)d] %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "short",
                "level": settings.LOG_LEVEL,
            },
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": "long",
                "filename": settings.LOG_FILE,
                "maxBytes": settings.LOG_FILE_MAX_BYTES,
                "backupCount": settings.LOG_FILE_BACKUPS,
                "level": settings.LOG_LEVEL,
            },
        },
        "loggers": {
            "app": {"handlers": handlers, "level": settings.LOG_LEVEL, "propagate": False},
        },
        "root": {"handlers": handlers, "level": settings.LOG_LEVEL},
    }


def configure_logging(settings: Settings = Config) -> logging.Logger:
    dictConfig(build_log_config(settings))
    return logging.getLogger("app")


logger = configure_logging()
