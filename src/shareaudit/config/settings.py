"""Configuration management using Pydantic Settings."""

from pathlib import Path
from typing import Literal, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_prefix="SHAREAUDIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API configuration
    api_token: Optional[str] = Field(None, description="Bearer token forwarded to the platform")
    api_base_url: str = Field("https://api.smartsheet.com/2.0", description="Upstream API root")
    relay_url: Optional[str] = Field(
        None,
        description="Pass-through relay prefixed to every upstream URL (e.g. https://relay.example/fetch/)",
    )
    user_agent: str = Field("ShareAudit/0.1.0", description="User-Agent header sent upstream")

    # Listing
    page_size: int = Field(100, ge=1, description="Rows requested per listing page")

    # Enrichment fan-out; None keeps it unbounded
    max_concurrency: Optional[int] = Field(None, ge=1)

    # Logging
    log_level: str = Field("INFO")
    log_format: Literal["json", "text"] = Field("json")

    # Exports
    export_dir: Path = Field(Path("."), description="Default directory for CSV/JSON exports")

    @field_validator("api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("api_token", "relay_url")
    @classmethod
    def _blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()


# Instantiate global settings
settings = Settings()
