from decimal import Decimal

import pytest

from application.dtos.payments import Failure, Redirect, Success
from core.settings import payment_settings
from domain.common.exceptions import (
    CurrencyMismatchError,
    IllegalTransitionError,
    MissingAmountError,
    MissingPaymentMethodError,
    ProviderCommunicationError,
    UnsupportedActionError,
)
from domain.common.money import Money
from domain.order.entity import Order, Product
from domain.payment.entity import Payment, PaymentMethod
from infrastructure.external.payments.fake_adapter import FakeProvider


def eur(amount: str) -> Money:
    return Money(Decimal(amount), "EUR")


@pytest.fixture
def order_95(order) -> Order:
    order.add_item(Product(sku="SHOE-1", unit_price=eur("95.00")))
    return order


def test_identifier_comes_from_injected_factory(identifiers, card_method):
    first = Payment(payment_method=card_method, identifier_factory=identifiers)
    second = Payment(payment_method=card_method, identifier_factory=identifiers)
    assert first.identifier == "pay-1"
    assert second.identifier == "pay-2"


def test_default_identifier_is_unique(card_method):
    assert Payment(payment_method=card_method).identifier != Payment(payment_method=card_method).identifier


def test_attach_creates_cost_adjustment_once(order_95, card_method):
    payment = Payment(payment_method=card_method)
    order_95.add_payment(payment)
    order_95.add_payment(payment)
    payment.set_order(order_95)

    assert order_95.total == eur("100.00")
    assert len(order_95.adjustments) == 1
    assert order_95.adjustments.find_by_label(payment.identifier).amount == eur("5.00")
    assert order_95.payments == [payment]


def test_detach_restores_total(order_95, card_method):
    payment = Payment(payment_method=card_method)
    order_95.add_payment(payment)

    assert payment.detach_order() is True
    assert payment.order is None
    assert order_95.total == eur("95.00")
    assert payment.identifier not in order_95.adjustments


def test_detach_without_cost_adjustment_is_a_noop(order_95, free_card_method):
    payment = Payment(payment_method=free_card_method)
    order_95.add_payment(payment)

    assert len(order_95.adjustments) == 0
    assert payment.detach_order() is False
    assert payment.order is order_95
    assert order_95.total == eur("95.00")


def test_detach_leaves_other_adjustments(order_95, card_method, identifiers):
    a = Payment(payment_method=card_method, identifier_factory=identifiers)
    b = Payment(payment_method=card_method, identifier_factory=identifiers)
    order_95.add_payment(a)
    order_95.add_payment(b)
    assert order_95.total == eur("105.00")

    a.detach_order()
    assert [adj.label for adj in order_95.adjustments] == [b.identifier]
    assert order_95.total == eur("100.00")


def test_moving_payment_to_another_order_takes_its_adjustment_along(order_95, card_method):
    other = Order(currency="EUR", identifier="order-2")
    other.add_item(Product(sku="BAG-1", unit_price=eur("20.00")))
    payment = Payment(payment_method=card_method)
    order_95.add_payment(payment)

    other.add_payment(payment)

    assert payment.order is other
    assert payment.identifier not in order_95.adjustments
    assert order_95.payments == []
    assert order_95.total == eur("95.00")
    assert other.payments == [payment]
    assert other.total == eur("25.00")

    assert payment.detach_order() is True
    assert other.total == eur("20.00")


def test_foreign_currency_cost_leaves_payment_unattached(order_95, fake_provider):
    method = PaymentMethod(name="us_card", provider=fake_provider, cost=Money("2.00", "USD"))
    payment = Payment(payment_method=method)

    with pytest.raises(CurrencyMismatchError):
        order_95.add_payment(payment)

    assert order_95.payments == []
    assert payment.order is None
    assert len(order_95.adjustments) == 0
    assert order_95.total == eur("95.00")


def test_remove_payment_from_order(order_95, card_method):
    payment = Payment(payment_method=card_method)
    order_95.add_payment(payment)
    assert order_95.remove_payment(payment) is True
    assert order_95.payments == []
    assert payment.order is None
    assert order_95.total == eur("95.00")
    assert order_95.remove_payment(payment) is False


@pytest.mark.asyncio
async def test_purchase_freezes_order_total(order_95, card_method, fake_provider):
    payment = Payment(payment_method=card_method)
    order_95.add_payment(payment)

    response = await payment.apply_transition("purchase")

    assert isinstance(response, Success)
    assert payment.state == "paid"
    assert payment.amount == eur("100.00")
    assert payment.last_response is response
    assert [t.transaction_id for t in payment.transactions] == [response.transaction_id]
    assert payment.transactions[0].amount == eur("100.00")
    assert fake_provider.calls[0]["amount"] == eur("100.00")

    # later order changes do not alter what was charged
    order_95.add_item(Product(sku="SOCK-1", unit_price=eur("3.00")))
    assert payment.amount == eur("100.00")
    assert order_95.balance == eur("3.00")


@pytest.mark.asyncio
async def test_cash_on_delivery_keeps_explicit_amount(order, cod_method):
    payment = Payment(payment_method=cod_method, amount=eur("100.00"))
    order.add_payment(payment)

    response = await payment.apply_transition("purchase")

    assert response.is_success
    assert payment.state == "paid"
    assert payment.get_amount() == eur("100.00")
    order.add_item(Product(sku="HAT-1", unit_price=eur("20.00")))
    assert payment.get_amount() == eur("100.00")
    assert order.balance == eur("-80.00")


@pytest.mark.asyncio
async def test_explicit_amount_adds_method_cost(card_method):
    payment = Payment(payment_method=card_method, amount=eur("50.00"))
    response = await payment.process()
    assert response.is_success
    assert payment.transactions[0].amount == eur("55.00")
    assert payment.amount == eur("50.00")


@pytest.mark.asyncio
async def test_failure_is_returned_and_recorded(order_95, card_method, fake_provider):
    fake_provider.configure("failure", failure_reason="Insufficient funds")
    payment = Payment(payment_method=card_method)
    order_95.add_payment(payment)

    first = await payment.apply_transition("purchase")
    second = await payment.apply_transition("purchase")

    assert isinstance(first, Failure)
    assert first.reason == "Insufficient funds"
    assert payment.state == "unpaid"
    assert payment.amount is None
    assert payment.last_response is None
    assert len(payment.transactions) == 2
    assert not any(t.success for t in payment.transactions)
    assert order_95.balance == eur("100.00")


@pytest.mark.asyncio
async def test_redirect_moves_to_in_progress(order_95, card_method, fake_provider):
    fake_provider.configure("redirect", redirect_url="https://bank.test/3ds")
    payment = Payment(payment_method=card_method)
    order_95.add_payment(payment)

    response = await payment.apply_transition("purchase")

    assert isinstance(response, Redirect)
    assert response.redirect_url == "https://bank.test/3ds"
    assert payment.state == "in_progress"
    assert payment.amount is None
    assert len(payment.transactions) == 1

    fake_provider.configure("success")
    await payment.apply_transition("purchase")
    assert payment.state == "paid"
    assert len(payment.transactions) == 2
    # completion refers back to the redirect transaction
    assert fake_provider.calls[1]["options"]["transaction_id"] == response.transaction_id


@pytest.mark.asyncio
async def test_authorize_capture_credit(order_95, card_method):
    payment = Payment(payment_method=card_method)
    order_95.add_payment(payment)

    await payment.apply_transition("authorize")
    assert payment.state == "authorized"
    assert order_95.balance == eur("0.00")

    await payment.apply_transition("capture")
    assert payment.state == "paid"

    await payment.apply_transition("credit")
    assert payment.state == "refunded"
    assert payment.state_machine.is_final()
    assert order_95.balance == eur("100.00")
    assert [t.action for t in payment.transactions] == ["authorize", "capture", "credit"]
    assert {t.amount for t in payment.transactions} == {eur("100.00")}


@pytest.mark.asyncio
async def test_void_before_capture_returns_to_unpaid(order_95, card_method):
    payment = Payment(payment_method=card_method)
    order_95.add_payment(payment)
    await payment.apply_transition("authorize")
    await payment.apply_transition("void")
    assert payment.state == "unpaid"


@pytest.mark.asyncio
async def test_illegal_transition_does_not_call_provider(order_95, card_method, fake_provider):
    payment = Payment(payment_method=card_method)
    order_95.add_payment(payment)

    with pytest.raises(IllegalTransitionError):
        await payment.apply_transition("capture")
    with pytest.raises(IllegalTransitionError):
        await payment.apply_transition("refund")

    assert payment.state == "unpaid"
    assert payment.transactions == []
    assert fake_provider.calls == []


@pytest.mark.asyncio
async def test_missing_payment_method():
    payment = Payment(amount=eur("10.00"))
    with pytest.raises(MissingPaymentMethodError):
        await payment.process()
    assert payment.transactions == []


@pytest.mark.asyncio
async def test_missing_amount(card_method):
    payment = Payment(payment_method=card_method)
    with pytest.raises(MissingAmountError):
        await payment.process()
    assert payment.transactions == []


@pytest.mark.asyncio
async def test_unsupported_action_rejected_before_any_call(order, cod_method):
    payment = Payment(payment_method=cod_method, amount=eur("10.00"))
    order.add_payment(payment)

    with pytest.raises(UnsupportedActionError):
        await payment.process("authorize")
    with pytest.raises(UnsupportedActionError):
        await payment.process("__init__")
    assert payment.transactions == []


@pytest.mark.asyncio
async def test_timeout_is_recorded_and_raised(monkeypatch, order_95):
    monkeypatch.setattr(payment_settings, "provider_timeout", 0.05)
    provider = FakeProvider("timeout", delay=5)
    method = PaymentMethod(name="slow_card", provider=provider, cost=eur("0"))
    payment = Payment(payment_method=method)
    order_95.add_payment(payment)

    with pytest.raises(ProviderCommunicationError):
        await payment.apply_transition("purchase")

    assert payment.state == "unpaid"
    assert payment.amount is None
    assert len(payment.transactions) == 1
    record = payment.transactions[0]
    assert record.success is False
    assert record.transaction_id is None
    assert record.amount == eur("95.00")


@pytest.mark.asyncio
async def test_each_process_appends_exactly_one_record(card_method, fake_provider):
    payment = Payment(payment_method=card_method, amount=eur("1.00"))
    for outcome in ("success", "failure", "redirect", "success"):
        fake_provider.configure(outcome)
        before = len(payment.transactions)
        await payment.process()
        assert len(payment.transactions) == before + 1


def test_transaction_lookup(card_method):
    payment = Payment(payment_method=card_method, amount=eur("1.00"))
    record = payment._record("purchase", eur("1.00"), Success(transaction_id="T1"))
    assert payment.contains_transaction(record)
    assert payment.remove_transaction(record) is True
    assert payment.contains_transaction(record) is False


@pytest.mark.asyncio
async def test_balance_uses_amount_actually_charged(order_95, card_method):
    payment = Payment(payment_method=card_method, amount=eur("95.00"))
    order_95.add_payment(payment)

    await payment.apply_transition("purchase")

    assert payment.transactions[0].amount == eur("100.00")
    assert payment.charged_amount == eur("100.00")
    assert payment.get_amount() == eur("100.00")
    assert order_95.total == eur("100.00")
    assert order_95.balance == eur("0.00")


@pytest.mark.asyncio
async def test_redirected_capture_keeps_authorization(order_95, card_method, fake_provider):
    payment = Payment(payment_method=card_method)
    order_95.add_payment(payment)
    await payment.apply_transition("authorize")

    fake_provider.configure("redirect", redirect_url="https://bank.test/sca")
    response = await payment.apply_transition("capture")

    assert isinstance(response, Redirect)
    assert payment.state == "authorized"
    assert set(payment.state_machine.available_transitions()) == {"capture", "void"}
    assert order_95.balance == eur("0.00")
    with pytest.raises(IllegalTransitionError):
        await payment.apply_transition("purchase")

    fake_provider.configure("success")
    await payment.apply_transition("capture")
    assert payment.state == "paid"
    assert order_95.balance == eur("0.00")


@pytest.mark.asyncio
async def test_source_options_cannot_override_identifiers(order_95, fake_provider):
    method = PaymentMethod(
        name="credit_card",
        provider=fake_provider,
        cost=eur("0"),
        source_options={"card_token": "tok_visa", "payment_identifier": "spoofed", "transaction_id": "T-x"},
    )
    payment = Payment(payment_method=method)
    order_95.add_payment(payment)

    await payment.apply_transition("purchase")

    options = fake_provider.calls[0]["options"]
    assert options["card_token"] == "tok_visa"
    assert "transaction_id" not in options
    assert options["payment_identifier"] == payment.identifier
    assert options["order_identifier"] == "order-1"

    await payment.apply_transition("credit")
    assert fake_provider.calls[1]["options"]["transaction_id"] == payment.transactions[0].transaction_id
