"""
Payment states and the transition table driving the Payment state machine.

Transition names double as provider action names: applying "capture"
invokes the provider's capture operation and only moves the Payment on
a successful outcome.
"""
from __future__ import annotations

from enum import Enum

from domain.common.state_machine import validate_table


class PaymentState(str, Enum):
    UNPAID = "unpaid"
    IN_PROGRESS = "in_progress"  # provider answered with a redirect
    AUTHORIZED = "authorized"
    PAID = "paid"
    REFUNDED = "refunded"


PAYMENT_TRANSITIONS = {
    PaymentState.UNPAID.value: {
        "purchase": PaymentState.PAID.value,
        "authorize": PaymentState.AUTHORIZED.value,
    },
    PaymentState.IN_PROGRESS.value: {
        "purchase": PaymentState.PAID.value,
        "authorize": PaymentState.AUTHORIZED.value,
    },
    PaymentState.AUTHORIZED.value: {
        "capture": PaymentState.PAID.value,
        "void": PaymentState.UNPAID.value,
    },
    PaymentState.PAID.value: {
        "void": PaymentState.REFUNDED.value,
        "credit": PaymentState.REFUNDED.value,
    },
    PaymentState.REFUNDED.value: {},  # Terminal
}

# States whose amount counts against the Order balance
SETTLED_STATES = frozenset({PaymentState.PAID.value, PaymentState.AUTHORIZED.value})

validate_table(PAYMENT_TRANSITIONS)
