"""
VidShare Core Settings.

Every field can be overridden with a ``VIDSHARE_``-prefixed environment
variable or a ``.env`` file next to the process.
"""
from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8",
        env_prefix="VIDSHARE_", case_sensitive=False,
    )

    # ── App ──────────────────────────────────────────────────────────────
    app_name: str = "VidShare"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    api_prefix: str = "/api/v1"
    cors_origins: List[str] = ["*"]
    share_base_url: Optional[str] = None

    # ── PostgreSQL ───────────────────────────────────────────────────────
    db_host: str = "postgres"
    db_port: int = 5432
    db_user: str = "vidshare"
    db_password: str = "vidshare_secret"
    db_name: str = "vidshare"
    database_dsn: Optional[str] = None
    database_echo: bool = False
    auto_create_tables: bool = True

    @property
    def database_url(self) -> str:
        if self.database_dsn:
            return self.database_dsn
        return (
            f"postgresql+asyncpg://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    # ── Tokens ───────────────────────────────────────────────────────────
    secret_key: str = "change-me-in-production"
    refresh_secret_key: str = "change-me-too-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    refresh_token_expire_days: int = 10
    cookie_secure: bool = True

    # ── MinIO / S3 ───────────────────────────────────────────────────────
    s3_endpoint_url: Optional[str] = "http://minio:9000"
    s3_access_key: str = "vidshare_minio"
    s3_secret_key: str = "vidshare_minio_secret"
    s3_region: str = "us-east-1"
    s3_bucket: str = "vidshare-media"
    media_public_url: str = "http://localhost:9000/vidshare-media"
    ffprobe_binary: str = "ffprobe"

    # ── Paths ────────────────────────────────────────────────────────────
    temp_dir: str = "/tmp/vidshare"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
