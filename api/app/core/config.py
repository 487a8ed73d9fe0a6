"""
Application settings loaded from environment variables.

All configuration is read once per app instance via get_settings();
tests build their own Settings directly.
"""

import os
from dataclasses import dataclass, field
from typing import List


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    """Runtime configuration."""

    env: str = "development"
    log_level: str = "INFO"
    log_format: str = "json"

    # "required": every API call needs Basic credentials
    # "disabled": no auth (development only)
    auth_mode: str = "required"
    api_username: str = "developer"
    api_password: str = "awesome"

    # file | mongo | memory
    schema_store: str = "file"
    schema_dir: str = "data/schemas"
    # mongo | memory
    record_store: str = "mongo"

    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "records_service"
    mongodb_timeout: int = 5000

    allowed_origins: List[str] = field(default_factory=list)

    @property
    def is_production(self) -> bool:
        return self.env == "production"


def get_settings() -> Settings:
    """Build Settings from the current environment."""
    return Settings(
        env=os.getenv("ENV", "development"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_format=os.getenv("LOG_FORMAT", "json").lower(),
        auth_mode=os.getenv("AUTH_MODE", "required").lower(),
        api_username=os.getenv("API_USERNAME", "developer"),
        api_password=os.getenv("API_PASSWORD", "awesome"),
        schema_store=os.getenv("SCHEMA_STORE", "file").lower(),
        schema_dir=os.getenv("SCHEMA_DIR", "data/schemas"),
        record_store=os.getenv("RECORD_STORE", "mongo").lower(),
        mongodb_uri=os.getenv("MONGODB_URI", "mongodb://localhost:27017"),
        mongodb_database=os.getenv("MONGODB_DATABASE", "records_service"),
        mongodb_timeout=int(os.getenv("MONGODB_TIMEOUT", "5000")),
        allowed_origins=_split_csv(os.getenv("ALLOWED_ORIGINS", "")),
    )
