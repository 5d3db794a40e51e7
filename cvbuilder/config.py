"""Application settings loaded from environment variables or a .env file."""

from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """CV builder configuration settings."""
    
    storage_dir: Path = Path.home() / ".cvbuilder"
    debounce_seconds: float = 1.0
    export_timeout: float = 30.0
    api_base_url: str = "http://localhost:8000"
    api_timeout: float = 10.0
    default_template: str = "classic"
    log_level: str = "INFO"
    log_file: Optional[Path] = None
    
    class Config:
        env_prefix = "CVBUILDER_"
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


# Singleton instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or create the settings singleton.
    
    Returns:
        Settings: The application settings
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
