"""
Catalog sync configuration using Pydantic Settings.
All configuration is loaded from environment variables (or a .env file).
"""
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Catalog sync settings loaded from environment variables."""

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=True, alias="LOG_JSON")

    # Database
    database_url: str = Field(default="sqlite:///./azure_catalog.db", alias="DATABASE_URL")
    database_echo: bool = Field(default=False, alias="DATABASE_ECHO")

    # Catalog namespace owning every persisted row
    node: str = Field(default="service:prov:azure", alias="AZURE_CATALOG_NODE")

    # Remote catalog
    prices_url: str = Field(
        default="https://azure.microsoft.com/api/v3/pricing",
        alias="AZURE_CATALOG_PRICES_URL"
    )
    http_timeout: float = Field(default=120.0, alias="AZURE_CATALOG_HTTP_TIMEOUT")
    http_retries: int = Field(default=3, alias="AZURE_CATALOG_HTTP_RETRIES")

    # Enablement patterns, full match
    regions: str = Field(default=".*", alias="AZURE_CATALOG_REGIONS")
    instance_type: str = Field(default=".*", alias="AZURE_CATALOG_INSTANCE_TYPE")
    os: str = Field(default=".*", alias="AZURE_CATALOG_OS")
    database_type: str = Field(default=".*", alias="AZURE_CATALOG_DATABASE_TYPE")
    database_engine: str = Field(default=".*", alias="AZURE_CATALOG_DATABASE_ENGINE")

    # Cost normalization
    hours_month: int = Field(default=730, alias="AZURE_CATALOG_HOURS_MONTH")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True
    )

    @field_validator("prices_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Endpoint paths are appended with a leading slash."""
        return v.rstrip("/")

    @field_validator("hours_month")
    @classmethod
    def positive_hours(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("hours_month must be positive")
        return v


# Global settings instance
settings = Settings()
