"""
Application configuration using Pydantic settings.
"""
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Site storage service
    site_store_base_url: str = Field(
        default="http://localhost:3000",
        description="Base URL of the site storage service"
    )
    site_store_api_key: str = Field(
        default="",
        description="Bearer token sent to the site storage service"
    )

    # Retry Configuration
    max_retry_attempts: int = Field(
        default=3,
        description="Maximum number of retry attempts for storage calls"
    )
    retry_backoff_multiplier: int = Field(
        default=1,
        description="Multiplier for exponential backoff"
    )
    retry_min_wait: int = Field(
        default=1,
        description="Minimum wait time in seconds between retries"
    )
    retry_max_wait: int = Field(
        default=10,
        description="Maximum wait time in seconds between retries"
    )

    # Drawing and metrics parameters
    snap_threshold_px: float = Field(
        default=15.0,
        description="Screen distance in pixels under which a click snaps to an existing vertex"
    )
    walk_speed_m_per_min: float = Field(
        default=83.33,
        description="Walking speed used for the walk time estimate (83.33 m/min ~ 5 km/h)"
    )
    default_commitment_per_day: float = Field(
        default=100.0,
        description="Contractor commitment in meters/day when a site has none stored"
    )
    default_is_closed: bool = Field(
        default=True,
        description="Closure flag used when a stored site has none"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    rate_limit_requests: int = Field(
        default=100,
        description="Maximum requests per minute per client"
    )

    # Application Settings
    app_name: str = Field(
        default="Glass Mapper Site Editor",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode"
    )

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
