# crudsuite/core/config.py
from enum import Enum
from typing import Optional
from pydantic_settings import BaseSettings


class Deployment(str, Enum):
    SHOP = "shop"
    QUIZ = "quiz"
    JOBS = "jobs"


class Settings(BaseSettings):
    # App
    APP_ENV: str = "development"
    DEBUG: bool = False
    # which of the three applications this process serves
    DEPLOYMENT: Deployment = Deployment.SHOP
    SECRET_KEY: str = "change-me"  # override in .env / secrets
    LOG_LEVEL: str = "INFO"

    # Access token expiry (minutes), 7 days by default
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # MongoDB
    MONGODB_URI: str = "mongodb://localhost:27017"
    # empty means crudsuite_<deployment>
    MONGODB_DB: Optional[str] = None

    # Uploads (jobs deployment)
    UPLOAD_DIR: str = "uploads"
    MAX_IMAGE_BYTES: int = 5 * 1024 * 1024
    MAX_RESUME_BYTES: int = 10 * 1024 * 1024

    # Pydantic v2 settings: read from .env file
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    def database_name(self, deployment: Optional[Deployment] = None) -> str:
        if self.MONGODB_DB:
            return self.MONGODB_DB
        return f"crudsuite_{(deployment or self.DEPLOYMENT).value}"

# single shared settings instance
settings = Settings()
