from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    DATABASE_URL: str
    REDIS_URL: Optional[str] = None
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    CACHE_TTL_SECONDS: int = 86400

    class Config:
        env_file = ".env"

settings = Settings()
