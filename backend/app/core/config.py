from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    app_name: str = "Fitness Tracker"
    log_level: str = "INFO"

    database_url: str
    database_echo: bool = False

    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Invitation emails; sending is skipped when host or sender is missing.
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_starttls: bool = True
    email_sender: str | None = None
    app_base_url: str | None = None

    upload_max_bytes: int = 5 * 1024 * 1024
    media_root: str = "media"

    default_daily_step_target: int = 10000


@lru_cache
def get_settings() -> Settings:
    return Settings()
