"""
Application Settings
===================

Main application settings and environment configuration using Pydantic Settings.
Supports development, testing, and production environments.
"""

from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path


class Settings(BaseSettings):
    """Main application settings with environment variable support."""

    # Application Configuration
    app_name: str = Field(default="wavesynth", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(
        default="development", description="Environment: development, testing, production"
    )
    debug: bool = Field(default=False, description="Debug mode")

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8080, ge=1, le=65535, description="Server port")

    # Static File Serving
    server_root: Path = Field(
        default=Path("/srv/http"), description="Directory served as the document root"
    )
    fallback: Optional[str] = Field(
        default=None, description="File served for unknown paths, relative to the server root"
    )
    https_promote: bool = Field(default=False, description="Redirect plain HTTP to HTTPS")
    enable_logging: bool = Field(default=False, description="Log every request")
    enable_health: bool = Field(default=False, description="Expose GET /health")
    hsts_max_age: int = Field(
        default=31536000, ge=0, description="Strict-Transport-Security max-age in seconds"
    )

    # Storage Configuration
    storage_path: Path = Field(default=Path("./storage"), description="Storage directory path")
    persist_state: bool = Field(default=True, description="Persist application state on change")

    # Build Configuration
    git_hash: Optional[str] = Field(
        default=None, description="Version hash override, skips calling git"
    )
    repository_url: Optional[str] = Field(
        default=None, description="Repository URL used to link the version hash"
    )

    # Plot Configuration
    default_sample_rate: float = Field(default=3000.0, gt=0, description="Default sample rate (Hz)")
    default_n_samples: int = Field(default=1000, ge=0, le=65535, description="Default sample count")
    plot_width: int = Field(default=1200, description="Default plot image width")
    plot_height: int = Field(default=300, description="Default plot image height")

    # API Documentation Configuration
    enable_docs: bool = Field(default=True, description="Enable FastAPI docs endpoint")

    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = {"development", "testing", "production"}
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("fallback")
    @classmethod
    def normalize_fallback(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty fallback as unset and strip the leading slash."""
        if v is None or not v.strip():
            return None
        return v.strip().lstrip("/")

    @field_validator("storage_path")
    @classmethod
    def create_directories(cls, v: Path) -> Path:
        """Ensure directories exist."""
        v.mkdir(parents=True, exist_ok=True)
        return v

    @property
    def state_file(self) -> Path:
        return self.storage_path / "state.json"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, env_prefix="WAVESYNTH_"
    )


# Global settings instance - will be initialized when needed
settings = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment."""
    global settings
    settings = Settings()
    return settings
