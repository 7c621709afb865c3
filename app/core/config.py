from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Process configuration, read from the environment (and `.env` when present).

    DATABASE_URL and JWT_SECRET_KEY have no defaults: the app refuses to start
    without them.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    # ─────────── APP ───────────
    app_name: str = "Civic Issue Reporter"
    environment: str = "dev"
    log_level: str = "INFO"

    # ─────────── API ───────────
    api_prefix: str = "/api/v1"
    request_id_header: str = "X-Request-Id"

    # ─────────── RECORD STORE ───────────
    database_url: str

    # ─────────── SESSIONS / TOKENS ───────────
    jwt_secret_key: str = Field(..., min_length=32)
    jwt_algorithm: str = "HS256"
    jwt_access_token_minutes: int = 1440  # 24 hours

    # ─────────── BLOB STORE ───────────
    blob_storage_dir: str = "./media"
    blob_public_base_url: str = "/media"

    # ─────────── ISSUE WORKFLOW ───────────
    verification_threshold: int = Field(3, ge=1)
    report_redirect_delay_ms: int = Field(2000, ge=0)

    @field_validator("database_url")
    @classmethod
    def _normalize_database_url(cls, v: str) -> str:
        # some hosts still hand out the pre-SQLAlchemy-1.4 scheme
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def media_root(self) -> Path:
        return Path(self.blob_storage_dir)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
