"""
Application settings for the checkout core.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Settings(BaseSettings):
    """Project settings"""

    PROJECT_NAME: str = Field(default="Checkout Core")
    VERSION: str = Field(default="1.0.0")
    DEBUG: bool = Field(default=False)
    ENVIRONMENT: str = Field(default="development")
    LOG_LEVEL: str = Field(default="INFO")

    # Currency used for new orders when none is given explicitly
    DEFAULT_CURRENCY: str = Field(default="EUR")

    # pydantic-settings v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def _check_level(cls, v: str) -> str:
        u = (v or "").upper()
        if u not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("LOG_LEVEL must be a standard logging level name")
        return u

    @field_validator("DEFAULT_CURRENCY")
    @classmethod
    def _upper_currency(cls, v: str) -> str:
        u = (v or "").upper()
        if len(u) != 3 or not u.isalpha():
            raise ValueError("DEFAULT_CURRENCY must be ISO-4217 alpha-3")
        return u


settings = Settings()
