"""
Checkout and payment specific codes.
"""
from __future__ import annotations

from enum import IntEnum


class CheckoutCode(IntEnum):
    # Aggregate/configuration errors (7xxxx)
    CONFIGURATION_ERROR = 70000
    ILLEGAL_TRANSITION = 70001
    CURRENCY_MISMATCH = 70002
    DUPLICATE_ADJUSTMENT = 70003


class PaymentCode(IntEnum):
    # Generic success
    SUCCESS = 0

    # Provider/Network errors (6xxxx)
    PROVIDER_ERROR = 60000
    PROVIDER_COMMUNICATION = 60001
    UNSUPPORTED_ACTION = 60005


# Gateway status -> Response variant
GATEWAY_STATUS_TO_OUTCOME = {
    "succeeded": "success",
    "authorized": "success",
    "captured": "success",
    "voided": "success",
    "refunded": "success",
    "requires_action": "redirect",
    "pending": "redirect",
    "failed": "failure",
    "declined": "failure",
    "canceled": "failure",
}
