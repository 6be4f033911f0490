import os
from typing import List, Union
from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings

# Load environment variables from the correct .env file
env_file = ".env.production" if os.getenv("APP_ENV") == "production" else ".env"
load_dotenv(env_file)

class Settings(BaseSettings):
    APP_ENV: str = "development"
    DEBUG: bool = False
    DATABASE_URL: str
    ALEMBIC_DATABASE_URL: str = ""
    DB_STATEMENT_TIMEOUT_SECONDS: int = 10

    # Tokens are issued by the identity provider; we only verify them
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str = "authenticated"

    ALLOWED_ORIGINS: Union[str, List[str]] = ["*"]
    LOG_LEVEL: str = "info"
    LOG_JSON: bool = False

    # Realtime change feed
    REALTIME_QUEUE_SIZE: int = 100

    @field_validator("ALLOWED_ORIGINS", mode="before")
    def split_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("REALTIME_QUEUE_SIZE")
    def positive_queue_size(cls, value):
        if value < 1:
            raise ValueError("REALTIME_QUEUE_SIZE must be at least 1")
        return value

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.lower() == "production"

settings = Settings()
