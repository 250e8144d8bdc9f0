"""
Application configuration settings.

This file loads settings from environment variables.
For local development, create a .env file based on .env.example
"""

from pydantic_settings import BaseSettings
from typing import Optional

from hr_pipeline.core.permissions import RoleLevels


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    
    Attributes:
        BACKEND_URL: Base URL of the remote function backend (queries/mutations)
        APP_NAME: Name of the application
        DEBUG: Enable debug mode (True for development, False for production)
    """
    
    # Remote backend deployment
    # Format: https://<deployment>.example.cloud
    BACKEND_URL: str = "http://localhost:3210"
    BACKEND_AUTH_TOKEN: Optional[str] = None
    BACKEND_TIMEOUT_SECONDS: float = 15.0
    
    # Application settings
    APP_NAME: str = "HR Candidate Pipeline"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Pipeline board (override via env)
    PIPELINE_PAGE_SIZE: int = 30
    PIPELINE_DISCARD_STALE_LOADS: bool = True

    # Conversion to user account
    CONVERSION_MIN_ROLE_LEVEL: int = RoleLevels.SUBDISTRICT_MANAGER
    DISTRICT_MANAGER_ROLE_LEVEL: int = RoleLevels.DISTRICT_MANAGER
    ADMIN_ROLE_LEVEL: int = RoleLevels.DISTRICT_MANAGER
    MANAGER_LOOKUP_LIMIT: int = 5
    
    class Config:
        # Load variables from .env file if it exists
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Create a single settings instance to use throughout the app
settings = Settings()
