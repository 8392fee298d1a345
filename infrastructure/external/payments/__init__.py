"""
Factory for payment providers.
"""
from __future__ import annotations

from typing import Optional

from application.ports.payment_provider import PaymentProvider
from core.settings import payment_settings


def get_payment_provider(name: Optional[str] = None) -> PaymentProvider:
    provider = (name or payment_settings.default_provider).lower()
    if provider == "fake":
        from .fake_adapter import FakeProvider
        return FakeProvider()
    if provider in {"offline", "cash_on_delivery", "cod"}:
        from .offline_adapter import OfflineProvider
        return OfflineProvider()
    if provider in {"json_gateway", "gateway"}:
        from .json_gateway import JsonGatewayProvider
        return JsonGatewayProvider()
    raise ValueError(f"Unsupported payment provider: {provider}")
