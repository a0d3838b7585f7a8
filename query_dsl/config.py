# query_dsl/config.py
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    LOG_LEVEL: str = "INFO"
    # Optional log file; receives DEBUG detail regardless of LOG_LEVEL
    LOG_FILE: Optional[str] = None

    # Qualifier catalog (YAML); the packaged catalog is used when unset
    CATALOG_PATH: Optional[str] = None

    # Structured-value extraction
    REPO_QUALIFIER: str = "repo"
    REPO_SEPARATOR: str = "/"

    class Config:
        env_prefix = "QDSL_"
        env_file = ".env"
        extra = "ignore"


settings = Settings()
