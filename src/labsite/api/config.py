"""
Configuration management for the application.
"""

import json
import os
from typing import Any, List, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .. import __version__
from ..core.constants import DEFAULT_BACKGROUND_DOC_ID, DEFAULT_PROTOCOL_IMAGE
from ..core.google_docs_html import slugify


class CommunicationCategory(BaseModel):
    """One tab of the communication directory sheet."""

    gid: str
    title: str
    description: str = ""
    accent: str = ""

    @field_validator("gid", mode="before")
    @classmethod
    def coerce_gid(cls, v: Any) -> str:
        return str(v).strip()

    @property
    def id(self) -> str:
        return slugify(self.title)


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"  # Ignore extra fields from .env
    )

    @classmethod
    def settings_customise_sources(cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings):
        # Allow tests to disable reading .env to avoid polluting constructor kwargs
        if os.getenv("PYTEST_DISABLE_DOTENV") == "1":
            return (init_settings, env_settings, file_secret_settings)
        return (init_settings, env_settings, dotenv_settings, file_secret_settings)

    # Application
    app_name: str = "Lab Site Content API"
    app_version: str = __version__
    environment: str = Field(default="development")
    debug: bool = Field(default=False)

    # Google service account (Docs API + inline images)
    google_client_email: Optional[str] = None
    google_private_key: Optional[str] = None  # PEM; literal "\n" sequences are accepted

    # Background primer document
    background_doc_id: str = DEFAULT_BACKGROUND_DOC_ID

    # Protocols sheet
    protocol_sheet_id: Optional[str] = None
    protocol_sheet_gid: Optional[str] = None
    protocol_sheet_name: Optional[str] = None
    default_protocol_image: str = DEFAULT_PROTOCOL_IMAGE

    # Communication directory sheet; categories come from env as a JSON list
    communication_sheet_id: Optional[str] = None
    communication_categories: List[CommunicationCategory] = Field(default_factory=list)

    # HTTP
    cache_control: str = "s-maxage=60, stale-while-revalidate"
    http_timeout_seconds: float = 15.0

    # CORS - accept string or list, will be converted to list
    cors_origins: Union[str, list[str]] = Field(default="*")

    @field_validator("google_private_key")
    @classmethod
    def restore_key_newlines(cls, v: Optional[str]) -> Optional[str]:
        """Environment files usually store the PEM key on one line with escaped newlines."""
        if v is None:
            return None
        return v.replace("\\n", "\n")

    @field_validator("communication_categories", mode="before")
    @classmethod
    def parse_categories(cls, v: Any) -> Any:
        if isinstance(v, str):
            if not v.strip():
                return []
            try:
                return json.loads(v)
            except json.JSONDecodeError as e:
                raise ValueError("COMMUNICATION_CATEGORIES must be a JSON list of {gid, title, description, accent}") from e
        return v

    @model_validator(mode="after")
    def parse_cors_origins(self):
        """Parse comma-separated CORS origins string into a list."""
        if isinstance(self.cors_origins, str):
            if "," in self.cors_origins:
                self.cors_origins = [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
            else:
                self.cors_origins = [self.cors_origins.strip()] if self.cors_origins.strip() else ["*"]
        elif isinstance(self.cors_origins, list):
            if not self.cors_origins:
                self.cors_origins = ["*"]
        else:
            self.cors_origins = ["*"]
        return self


# Global settings instance
settings = Settings()
