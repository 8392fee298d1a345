"""
Order aggregate root - items, adjustments, payments and shipments of one
commerce transaction.

Business rules:
1. total == items_total + sum(adjustments), recomputed by every mutator
2. adding an equivalent orderable (same sku) merges quantities into one item
3. all amounts share the Order currency
4. state changes only through the Order state machine
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional, Protocol, Union, runtime_checkable

from core.config import settings
from domain.common.exceptions import CurrencyMismatchError, DomainValidationException
from domain.common.identifiers import new_identifier
from domain.common.money import Money
from domain.common.state_machine import StateMachine
from domain.order.adjustments import Adjustment, AdjustmentLedger
from domain.order.states import ORDER_TRANSITIONS, OrderState
from domain.payment.states import SETTLED_STATES

if TYPE_CHECKING:
    from domain.payment.entity import Payment


@runtime_checkable
class Orderable(Protocol):
    """Anything that can be put in an Order."""

    sku: str
    unit_price: Money
    description: str


@dataclass(frozen=True)
class Product:
    sku: str
    unit_price: Money
    description: str = ""


def _validate_quantity(quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise DomainValidationException(f"Quantity must be a positive integer: {quantity!r}", field="quantity")


@dataclass(eq=False)
class OrderItem:
    orderable: Orderable
    quantity: int = 1
    identifier: str = field(default_factory=new_identifier)
    unit_price: Money = field(init=False)
    description: str = field(init=False)
    total_price: Money = field(init=False)

    def __post_init__(self):
        _validate_quantity(self.quantity)
        self.unit_price = self.orderable.unit_price
        self.description = self.orderable.description
        self.calculate_total_price()

    @property
    def sku(self) -> str:
        return self.orderable.sku

    def calculate_total_price(self) -> None:
        self.total_price = self.unit_price * self.quantity

    def is_equivalent(self, other: Union["OrderItem", Orderable]) -> bool:
        return self.sku == other.sku


@dataclass(eq=False)
class Shipment:
    """Groups order items that travel together. Cost is supplied from outside."""

    identifier: str = field(default_factory=new_identifier)
    items: list[OrderItem] = field(default_factory=list)
    cost: Optional[Money] = None

    def add_order_item(self, item: OrderItem) -> None:
        if not any(i is item for i in self.items):
            self.items.append(item)


@dataclass(eq=False)
class Order:
    currency: str = field(default_factory=lambda: settings.DEFAULT_CURRENCY)
    identifier: str = field(default_factory=new_identifier)
    state: str = OrderState.CART.value
    items: list[OrderItem] = field(default_factory=list, init=False)
    payments: list["Payment"] = field(default_factory=list, init=False)
    shipments: list[Shipment] = field(default_factory=list, init=False)
    adjustments: AdjustmentLedger = field(init=False, repr=False)
    items_total: Money = field(init=False)
    total: Money = field(init=False)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        self.currency = Money.zero(self.currency).currency
        self.adjustments = AdjustmentLedger(self.currency)
        self.created_at = self.created_at or datetime.now(timezone.utc)
        self.updated_at = self.created_at
        self.calculate_total_amount()

    def _touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------
    def add_item(self, orderable: Orderable, quantity: int = 1) -> OrderItem:
        """Add `quantity` of `orderable`; an equivalent item absorbs the quantity."""
        _validate_quantity(quantity)
        if orderable.unit_price.currency != self.currency:
            raise CurrencyMismatchError(self.currency, orderable.unit_price.currency)

        item = self.contains_item(orderable)
        if item is not None:
            item.quantity += quantity
            item.calculate_total_price()
        else:
            item = OrderItem(orderable=orderable, quantity=quantity)
            self.items.append(item)

        self.calculate_total_amount()
        self._touch()
        return item

    def remove_item(self, item: OrderItem) -> bool:
        for index, existing in enumerate(self.items):
            if existing is item:
                del self.items[index]
                self.calculate_total_amount()
                self._touch()
                return True
        return False

    def contains_item(self, item: Union[OrderItem, Orderable]) -> Optional[OrderItem]:
        """Return the item in this order equivalent to `item`, if any."""
        return next((i for i in self.items if i.is_equivalent(item)), None)

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    # ------------------------------------------------------------------
    # Adjustments
    # ------------------------------------------------------------------
    def add_adjustment(self, adjustment: Adjustment) -> None:
        self.adjustments.add(adjustment)
        self.calculate_total_amount()
        self._touch()

    def remove_adjustment(self, label: str) -> bool:
        removed = self.adjustments.remove(label)
        if removed:
            self.calculate_total_amount()
            self._touch()
        return removed

    # ------------------------------------------------------------------
    # Totals
    # ------------------------------------------------------------------
    def calculate_items_total_amount(self) -> Money:
        total = Money.zero(self.currency)
        for item in self.items:
            total = total + item.unit_price * item.quantity
        self.items_total = total
        return total

    def calculate_total_amount(self) -> Money:
        """Recompute items_total and total from scratch.

        Mutators of this aggregate call it themselves; code that changes an
        OrderItem in place must call it afterwards.
        """
        self.calculate_items_total_amount()
        self.total = self.items_total + self.adjustments.sum()
        return self.total

    @property
    def balance(self) -> Money:
        """Total minus what paid or authorized payments charged; negative when overpaid."""
        settled = Money.zero(self.currency)
        for payment in self.payments:
            if payment.state not in SETTLED_STATES:
                continue
            charged = payment.charged_amount
            if charged is not None:
                settled = settled + charged
        return self.total - settled

    def get_balance(self) -> Money:
        return self.balance

    # ------------------------------------------------------------------
    # Payments & shipments
    # ------------------------------------------------------------------
    def add_payment(self, payment: "Payment") -> None:
        # set_order validates before either side changes
        payment.set_order(self)
        if not any(p is payment for p in self.payments):
            self.payments.append(payment)
        self._touch()

    def remove_payment(self, payment: "Payment") -> bool:
        for index, existing in enumerate(self.payments):
            if existing is payment:
                del self.payments[index]
                payment.detach_order()
                if payment.order is self:
                    payment.order = None
                self._touch()
                return True
        return False

    def add_shipment(self, shipment: Shipment) -> None:
        if not any(s is shipment for s in self.shipments):
            self.shipments.append(shipment)
            self._touch()

    def remove_shipment(self, shipment: Shipment) -> bool:
        for index, existing in enumerate(self.shipments):
            if existing is shipment:
                del self.shipments[index]
                self._touch()
                return True
        return False

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------
    @property
    def state_machine(self) -> StateMachine:
        return StateMachine(self, ORDER_TRANSITIONS, name="order")

    def is_final_status(self) -> bool:
        return self.state_machine.is_final()
