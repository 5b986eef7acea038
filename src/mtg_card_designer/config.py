"""Configuration management for the application."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings."""

    app_name: str = "MTG Card Designer"
    app_version: str = "0.1.0"
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Backend API
    api_base_url: str = Field(default="http://localhost:3001/api")
    api_timeout: int = Field(default=30)
    access_token: Optional[str] = Field(default=None)

    # AI providers
    openai_api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    gemini_api_key: Optional[str] = Field(default=None, alias="GEMINI_API_KEY")

    # Rendering / export
    export_supersample: int = Field(default=2, ge=2)
    fonts_dir: Path = Field(default=Path("fonts"))

    # Paths
    data_dir: Path = Field(default=Path("data"))
    output_dir: Path = Field(default=Path("output"))

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    def __init__(self, **kwargs):
        """Initialize settings and create directories."""
        super().__init__(**kwargs)
        self.data_dir.mkdir(exist_ok=True)
        self.output_dir.mkdir(exist_ok=True)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
