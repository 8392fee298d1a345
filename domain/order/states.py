"""
Order states and the transition table driving the Order state machine.
"""
from __future__ import annotations

from enum import Enum

from domain.common.state_machine import validate_table


class OrderState(str, Enum):
    CART = "cart"
    CHECKOUT = "checkout"
    PARTIAL_PAID = "partial_paid"
    PAID = "paid"
    PROCESSING = "processing"
    SENT = "sent"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"


_CANCEL = {"cancel": OrderState.CANCELLED.value}

ORDER_TRANSITIONS = {
    OrderState.CART.value: {"checkout": OrderState.CHECKOUT.value, **_CANCEL},
    OrderState.CHECKOUT.value: {
        "partial_pay": OrderState.PARTIAL_PAID.value,
        "mark_paid": OrderState.PAID.value,
        **_CANCEL,
    },
    OrderState.PARTIAL_PAID.value: {
        "partial_pay": OrderState.PARTIAL_PAID.value,
        "mark_paid": OrderState.PAID.value,
        "process": OrderState.PROCESSING.value,
        **_CANCEL,
    },
    OrderState.PAID.value: {"process": OrderState.PROCESSING.value, **_CANCEL},
    OrderState.PROCESSING.value: {"ship": OrderState.SENT.value, **_CANCEL},
    OrderState.SENT.value: {"deliver": OrderState.DELIVERED.value, **_CANCEL},
    OrderState.DELIVERED.value: {"return": OrderState.RETURNED.value},
    OrderState.CANCELLED.value: {},  # Terminal
    OrderState.RETURNED.value: {},  # Terminal
}

validate_table(ORDER_TRANSITIONS)
