"""
Payment aggregate root - drives money movement against an Order through a
pluggable payment provider.

Business rules:
1. the identifier is generated once and labels the cost adjustment the
   Payment creates on its Order
2. every provider invocation appends exactly one TransactionRecord,
   whatever the outcome
3. nothing on the aggregate changes until the provider call returns
4. the state moves only on a successful provider outcome
5. a Payment without explicit amount freezes the charged amount on success
"""
from __future__ import annotations

from dataclasses import InitVar, dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Mapping, Optional

from application.dtos.payments import Failure, Redirect, Response
from application.ports.payment_provider import PaymentProvider, invoke, resolve_action
from core.logging_config import bind_checkout_context, get_logger
from core.settings import payment_settings
from domain.common.exceptions import (
    CurrencyMismatchError,
    MissingAmountError,
    MissingPaymentMethodError,
    ProviderCommunicationError,
)
from domain.common.identifiers import IdentifierFactory, new_identifier
from domain.common.money import Money
from domain.common.state_machine import StateMachine
from domain.order.adjustments import Adjustment
from domain.payment.states import PAYMENT_TRANSITIONS, PaymentState

if TYPE_CHECKING:
    from domain.order.entity import Order


logger = get_logger(__name__)

RESERVED_OPTIONS = frozenset({"payment_identifier", "order_identifier", "transaction_id"})


@dataclass(frozen=True)
class TransactionRecord:
    """Immutable audit entry for one provider call."""

    payment_identifier: str
    action: str
    amount: Money
    transaction_id: Optional[str]
    success: bool
    message: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(eq=False)
class PaymentMethod:
    """How a Payment is collected. Shared between Payments, never owned by one."""

    name: str
    provider: PaymentProvider
    cost: Money
    action: str = "purchase"
    source_options: dict[str, Any] = field(default_factory=dict)


@dataclass(eq=False)
class Payment:
    payment_method: Optional[PaymentMethod] = None
    amount: Optional[Money] = None
    identifier_factory: InitVar[Optional[IdentifierFactory]] = None
    identifier: str = field(init=False)
    state: str = field(default=PaymentState.UNPAID.value, init=False)
    order: Optional["Order"] = field(default=None, init=False, repr=False)
    transactions: list[TransactionRecord] = field(default_factory=list, init=False, repr=False)
    last_response: Optional[Response] = field(default=None, init=False, repr=False)
    # True once a successful call fixed `amount` from the Order total
    amount_frozen: bool = field(default=False, init=False)

    def __post_init__(self, identifier_factory: Optional[IdentifierFactory]):
        self.identifier = (identifier_factory or new_identifier)()

    # ------------------------------------------------------------------
    # Order linkage
    # ------------------------------------------------------------------
    def set_order(self, order: "Order") -> None:
        """Attach to `order`, charging the payment method cost as an adjustment.

        The adjustment is labeled with this Payment's identifier and is
        created at most once. A Payment attached to another Order is
        removed from it first, taking its adjustment along.
        """
        cost = self.payment_method.cost if self.payment_method is not None else None
        # Checked before anything changes so a rejected attach leaves no trace
        if cost is not None and cost.currency != order.currency:
            raise CurrencyMismatchError(order.currency, cost.currency)

        if self.order is not None and self.order is not order:
            if not self.order.remove_payment(self):
                self.detach_order()
        self.order = order
        if cost is None or cost.is_zero() or self.identifier in order.adjustments:
            return
        order.add_adjustment(Adjustment(label=self.identifier, amount=cost))
        logger.info(
            "payment_cost_adjustment_added",
            payment=self.identifier,
            order=order.identifier,
            cost=str(cost),
        )

    def detach_order(self) -> bool:
        """Remove this Payment's cost adjustment and drop the Order reference.

        Returns False, changing nothing, when no such adjustment exists.
        """
        if self.order is None or self.identifier not in self.order.adjustments:
            return False
        self.order.remove_adjustment(self.identifier)
        logger.info("payment_detached", payment=self.identifier, order=self.order.identifier)
        self.order = None
        return True

    # ------------------------------------------------------------------
    # Amounts
    # ------------------------------------------------------------------
    def charge_amount(self) -> Money:
        """Amount the next provider call will carry.

        Explicit amount plus method cost, or the Order total. The Order total
        already holds this Payment's cost adjustment when one was created, so
        the cost is only added on top when the adjustment is absent. A frozen
        amount already includes the cost.
        """
        if self.payment_method is None:
            raise MissingPaymentMethodError()
        if self.amount_frozen:
            return self.amount
        cost = self.payment_method.cost
        if self.amount is not None:
            return self.amount + cost
        if self.order is None:
            raise MissingAmountError()
        own = self.order.adjustments.find_by_label(self.identifier)
        base = self.order.total - own.amount if own is not None else self.order.total
        return base + cost

    def get_amount(self) -> Money:
        """Amount this Payment charges, method cost included."""
        return self.charge_amount()

    @property
    def charged_amount(self) -> Optional[Money]:
        """Amount carried by the last successful provider call, if any."""
        record = next((t for t in reversed(self.transactions) if t.success), None)
        return record.amount if record is not None else None

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------
    def options(self) -> dict[str, Any]:
        """Options handed to the provider along with the amount."""
        options: dict[str, Any] = {}
        # Identifier keys are owned by the Payment, never by method options
        if self.payment_method is not None:
            options.update(
                (key, value)
                for key, value in self.payment_method.source_options.items()
                if key not in RESERVED_OPTIONS
            )
        options["payment_identifier"] = self.identifier
        if self.order is not None:
            options["order_identifier"] = self.order.identifier
        # capture/void/credit refer to the previous gateway transaction
        previous = next((t for t in reversed(self.transactions) if t.transaction_id), None)
        if previous is not None:
            options["transaction_id"] = previous.transaction_id
        return options

    async def process(self, action: Optional[str] = None) -> Response:
        """Invoke the provider and record the outcome.

        Returns the provider Response; a Failure is returned, not raised, so
        callers decide whether to retry. Timeouts and transport errors are
        recorded as failed transactions and re-raised as
        ProviderCommunicationError.
        """
        if self.payment_method is None:
            raise MissingPaymentMethodError()

        amount = self.charge_amount()
        action = action or self.payment_method.action
        provider = self.payment_method.provider
        # Reject unknown actions before anything is recorded
        resolve_action(provider, action)

        order_identifier = self.order.identifier if self.order is not None else None
        try:
            with bind_checkout_context(self.identifier, order_identifier):
                response = await invoke(
                    provider,
                    action,
                    amount,
                    self.options(),
                    timeout=payment_settings.provider_timeout,
                )
        except ProviderCommunicationError as exc:
            self._record(action, amount, Failure(reason=exc.message))
            logger.warning(
                "payment_provider_unreachable",
                payment=self.identifier,
                action=action,
                error=exc.message,
            )
            raise

        self._record(action, amount, response)

        if isinstance(response, Redirect):
            # A redirected capture/void/credit keeps the held or paid state
            if self.state == PaymentState.UNPAID.value:
                self.state = PaymentState.IN_PROGRESS.value
            logger.info("payment_redirected", payment=self.identifier, action=action, url=response.redirect_url)
            return response

        if response.is_success:
            if self.amount is None:
                self.amount = amount
                self.amount_frozen = True
            self.last_response = response
            logger.info("payment_processed", payment=self.identifier, action=action, amount=str(amount))
            return response

        logger.info("payment_failed", payment=self.identifier, action=action, reason=response.reason)
        return response

    def _record(self, action: str, amount: Money, response: Response) -> TransactionRecord:
        record = TransactionRecord(
            payment_identifier=self.identifier,
            action=action,
            amount=amount,
            transaction_id=response.transaction_id,
            success=response.is_success,
            message=response.message,
        )
        self.transactions.append(record)
        return record

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------
    def contains_transaction(self, record: TransactionRecord) -> bool:
        return any(t.transaction_id == record.transaction_id for t in self.transactions)

    def remove_transaction(self, record: TransactionRecord) -> bool:
        for index, existing in enumerate(self.transactions):
            if existing.transaction_id == record.transaction_id:
                del self.transactions[index]
                return True
        return False

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------
    @property
    def state_machine(self) -> StateMachine:
        return StateMachine(self, PAYMENT_TRANSITIONS, name="payment")

    async def apply_transition(self, transition: str) -> Response:
        """Run `transition` through the provider; move state only on success."""
        machine = self.state_machine
        machine.target(transition)
        response = await self.process(transition)
        if response.is_success:
            machine.apply(transition)
        return response
