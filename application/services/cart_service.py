"""
Application service assembling an Order from a shopping cart.

Thin orchestration over the domain: items go into the Order, payment methods
become Payments, and named transitions drive both state machines. All rules
live in the aggregates.
"""
from __future__ import annotations

from typing import Optional

from application.dtos.payments import Response
from core.logging_config import get_logger
from domain.common.identifiers import IdentifierFactory
from domain.common.money import Money
from domain.order.adjustments import Adjustment
from domain.order.entity import Order, Orderable, OrderItem, Shipment
from domain.payment.entity import Payment, PaymentMethod


logger = get_logger(__name__)

SHIPPING_ADJUSTMENT = "shipping"


class CartService:
    def __init__(self, order: Optional[Order] = None, *, identifier_factory: Optional[IdentifierFactory] = None) -> None:
        self._order = order
        self._identifier_factory = identifier_factory

    @property
    def order(self) -> Order:
        """The Order behind this cart, created on first use."""
        if self._order is None:
            self._order = Order()
        return self._order

    @order.setter
    def order(self, order: Order) -> None:
        self._order = order

    @property
    def items(self) -> list[OrderItem]:
        return self.order.items

    def add_item(self, orderable: Orderable, quantity: int = 1) -> OrderItem:
        item = self.order.add_item(orderable, quantity)
        logger.info("cart_item_added", order=self.order.identifier, sku=item.sku, quantity=item.quantity)
        return item

    def remove_item(self, item: OrderItem) -> bool:
        return self.order.remove_item(item)

    def items_count(self) -> int:
        return len(self.order.items)

    def total_quantity(self) -> int:
        return self.order.total_quantity

    def add_payment_method(self, method: PaymentMethod, amount: Optional[Money] = None) -> Payment:
        """Create a Payment for `method` and attach it to the Order."""
        payment = Payment(payment_method=method, amount=amount, identifier_factory=self._identifier_factory)
        self.order.add_payment(payment)
        logger.info(
            "cart_payment_added",
            order=self.order.identifier,
            payment=payment.identifier,
            method=method.name,
        )
        return payment

    def set_shipping_method(self, cost: Optional[Money] = None) -> Shipment:
        """Ship every item in one Shipment; a non-zero cost is charged as an adjustment."""
        shipment = Shipment(cost=cost)
        for item in self.order.items:
            shipment.add_order_item(item)
        self.order.add_shipment(shipment)

        self.order.remove_adjustment(SHIPPING_ADJUSTMENT)
        if cost is not None and not cost.is_zero():
            self.order.add_adjustment(Adjustment(label=SHIPPING_ADJUSTMENT, amount=cost))
        return shipment

    def process_to(self, transition: str) -> str:
        """Apply `transition` to the Order state machine."""
        return self.order.state_machine.apply(transition)

    async def pay(self, payment: Payment, transition: Optional[str] = None) -> Response:
        """Run a Payment transition; defaults to the method's action."""
        if transition is None and payment.payment_method is not None:
            transition = payment.payment_method.action
        response = await payment.apply_transition(transition or "purchase")
        logger.info(
            "cart_payment_processed",
            order=self.order.identifier,
            payment=payment.identifier,
            kind=response.kind,
            state=payment.state,
        )
        return response
