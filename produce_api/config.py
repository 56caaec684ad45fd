from __future__ import annotations
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List
from dotenv import load_dotenv
load_dotenv()  # populates os.environ from .env


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Bootstrap dataset (BOOTSTRAP_FILE, BOOTSTRAP_RETRY_ON_FAILURE)
    bootstrap_file: str = "data/request.json"
    bootstrap_retry_on_failure: bool = True

    # Logging (LOG_LEVEL)
    log_level: str = "INFO"

    # CORS (CORS_ALLOW_ORIGINS, JSON list)
    cors_allow_origins: List[str] = Field(default_factory=lambda: ["http://127.0.0.1:8001"])
