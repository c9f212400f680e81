"""
Server configuration using Pydantic Settings.

Values come from S3_* environment variables (or a local .env file) with
defaults suited to a local S3-compatible endpoint.
"""
from typing import Annotated, Optional, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class ServerSettings(BaseSettings):
    """Immutable configuration for the presign/delete API."""

    bucket: str = Field("uploads-locale", validation_alias="S3_BUCKET")
    endpoint_url: Optional[str] = Field(None, validation_alias="S3_ENDPOINT")  # e.g. https://<account>.r2.cloudflarestorage.com
    region: str = Field("auto", validation_alias="S3_REGION")
    access_key: Optional[str] = Field(None, validation_alias="S3_ACCESS_KEY")
    secret_key: Optional[str] = Field(None, validation_alias="S3_SECRET_KEY")
    force_path_style: bool = Field(False, validation_alias="S3_FORCE_PATH_STYLE")
    presign_expiration: int = Field(360, gt=0, validation_alias="S3_PRESIGN_EXPIRATION")  # seconds
    cors_origins: Annotated[Tuple[str, ...], NoDecode] = Field(
        ("*",), validation_alias="S3DROP_CORS_ORIGINS"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    @field_validator("endpoint_url", "access_key", "secret_key", mode="before")
    @classmethod
    def _empty_as_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        # Comma-separated in the environment
        if isinstance(value, str):
            origins = tuple(o.strip() for o in value.split(",") if o.strip())
            return origins or ("*",)
        return value

    @classmethod
    def from_env(cls) -> "ServerSettings":
        """Build settings from the environment, falling back to defaults."""
        return cls()
