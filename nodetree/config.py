"""Runtime settings, read from the environment (and an optional .env file)."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

_ENV_FILE = Path(__file__).resolve().parent.parent / ".env"

DEFAULT_CORS_ORIGINS = ["http://localhost:5173"]


class Settings(BaseModel):
    db_path: str = "nodetree.db"
    log_level: str = "INFO"
    default_language: str = "en"
    create_retries: int = Field(default=3, ge=1)
    cors_origins: list[str] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)


def load_settings(env_file: Path | None = _ENV_FILE) -> Settings:
    """Build Settings from NODETREE_* environment variables.

    Values already present in the environment win over the .env file.
    """
    if env_file is not None:
        load_dotenv(env_file)

    values: dict[str, object] = {}
    if db_path := os.environ.get("NODETREE_DB_PATH"):
        values["db_path"] = db_path
    if log_level := os.environ.get("NODETREE_LOG_LEVEL"):
        values["log_level"] = log_level.upper()
    if language := os.environ.get("NODETREE_DEFAULT_LANGUAGE"):
        values["default_language"] = language
    if retries := os.environ.get("NODETREE_CREATE_RETRIES"):
        values["create_retries"] = retries
    if origins := os.environ.get("NODETREE_CORS_ORIGINS"):
        values["cors_origins"] = [o.strip() for o in origins.split(",") if o.strip()]
    if host := os.environ.get("NODETREE_HOST"):
        values["host"] = host
    if port := os.environ.get("NODETREE_PORT"):
        values["port"] = port
    return Settings.model_validate(values)
