"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.

Services receive the Settings object; nothing else reads the environment.
"""

from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # MongoDB
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "placement_portal"

    # JWT Auth
    jwt_secret_key: str = "change-this-secret-change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 7 * 24 * 60
    cookie_secure: bool = False

    # Password hashing (lower in tests)
    bcrypt_rounds: int = 12

    # Uploads
    upload_dir: str = "uploads"
    max_upload_mb: int = 5

    # Notifications
    notification_ttl_days: int = 30

    # Rate limiting (per client IP)
    rate_limit_enabled: bool = True
    rate_limit_window_minutes: int = 5
    rate_limit_max_requests: int = 200
    login_rate_limit_window_minutes: int = 15
    login_rate_limit_max: int = 20

    # App
    cors_origins: List[str] = ["http://localhost:3000"]
    log_level: str = "INFO"
    debug: bool = False

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    @property
    def api_rate_limit(self) -> str:
        return f"{self.rate_limit_max_requests} per {self.rate_limit_window_minutes} minutes"

    @property
    def login_rate_limit(self) -> str:
        return f"{self.login_rate_limit_max} per {self.login_rate_limit_window_minutes} minutes"

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
