"""Pytest bootstrap configuration.

Ensure environment variables are set before test collection and module
imports that depend on application settings.
"""
import os

os.environ.setdefault("DEFAULT_CURRENCY", "EUR")
os.environ.setdefault("DEBUG", "false")

from decimal import Decimal

import pytest

from domain.common.identifiers import sequential_identifiers
from domain.common.money import Money
from domain.order.entity import Order, Product
from domain.payment.entity import PaymentMethod
from infrastructure.external.payments.fake_adapter import FakeProvider
from infrastructure.external.payments.offline_adapter import OfflineProvider


def eur(amount) -> Money:
    return Money(Decimal(str(amount)), "EUR")


@pytest.fixture
def identifiers():
    return sequential_identifiers("pay")


@pytest.fixture
def order() -> Order:
    return Order(currency="EUR", identifier="order-1")


@pytest.fixture
def book() -> Product:
    return Product(sku="BOOK-1", unit_price=eur("10.00"), description="Paperback")


@pytest.fixture
def lamp() -> Product:
    return Product(sku="LAMP-1", unit_price=eur("25.50"), description="Desk lamp")


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider("success")


@pytest.fixture
def card_method(fake_provider) -> PaymentMethod:
    return PaymentMethod(name="credit_card", provider=fake_provider, cost=eur("5.00"))


@pytest.fixture
def free_card_method(fake_provider) -> PaymentMethod:
    return PaymentMethod(name="credit_card", provider=fake_provider, cost=eur("0"))


@pytest.fixture
def cod_method() -> PaymentMethod:
    return PaymentMethod(name="cash_on_delivery", provider=OfflineProvider(), cost=eur("0"))
