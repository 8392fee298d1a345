"""
Payment-related settings using pydantic-settings v2 with nested env keys.

Kept apart from core.config.Settings so provider tuning can be overridden
without touching the application settings.
"""
from __future__ import annotations

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field


class PaymentTimeouts(BaseModel):
    connect: float = 1.0
    read: float = 3.0
    write: float = 3.0
    total: float = 5.0


class FakeProviderSettings(BaseModel):
    outcome: str = "success"  # success | failure | redirect | timeout
    failure_reason: str = "Card declined"
    redirect_url: str = "https://example.test/3ds"


class GatewaySettings(BaseModel):
    base_url: Optional[str] = None
    api_key: Optional[str] = None


class PaymentSettings(BaseSettings):
    default_provider: str = Field(default="fake", validation_alias="PAYMENT__DEFAULT_PROVIDER")
    # Upper bound for a single provider call as seen by the Payment aggregate
    provider_timeout: float = Field(default=10.0, validation_alias="PAYMENT__PROVIDER_TIMEOUT")
    timeouts: PaymentTimeouts = Field(default_factory=PaymentTimeouts)

    fake: FakeProviderSettings = Field(default_factory=FakeProviderSettings)
    gateway: GatewaySettings = Field(default_factory=GatewaySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="allow",
        env_nested_delimiter="__",
    )


payment_settings = PaymentSettings()
