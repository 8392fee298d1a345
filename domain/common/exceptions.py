"""Domain-level business exceptions shared by the domain and infrastructure layers.

Every error carries a numeric code from `shared.codes` so that an outer
service can map it without inspecting the exception type.
"""
from __future__ import annotations

from typing import Optional

from shared.codes import BusinessCode
from shared.codes.payment_codes import CheckoutCode, PaymentCode


class BusinessException(Exception):
    """Base business exception"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
        message_key: Optional[str] = None,
        format_params: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        self.message_key = message_key
        self.format_params = format_params
        super().__init__(self.message)


class DomainValidationException(BusinessException):
    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        details: dict | None = None,
        message_key: str | None = None,
        format_params: dict | None = None,
    ):
        super().__init__(
            code=BusinessCode.PARAM_VALIDATION_ERROR,
            message=message,
            error_type="DomainValidationError",
            details=details,
            field=field,
            message_key=message_key or "validation.domain",
            format_params=format_params,
        )


class ConfigurationError(BusinessException):
    """A Payment is missing something it needs before it can be processed."""

    def __init__(self, message: str, *, error_type: str = "ConfigurationError", field: str | None = None):
        super().__init__(
            code=CheckoutCode.CONFIGURATION_ERROR,
            message=message,
            error_type=error_type,
            field=field,
            message_key="checkout.configuration",
        )


class MissingPaymentMethodError(ConfigurationError):
    def __init__(self):
        super().__init__(
            "You must set a PaymentMethod for this Payment",
            error_type="MissingPaymentMethod",
            field="payment_method",
        )


class MissingAmountError(ConfigurationError):
    def __init__(self):
        super().__init__(
            "Payment has neither an explicit amount nor an attached Order",
            error_type="MissingAmount",
            field="amount",
        )


class IllegalTransitionError(BusinessException):
    def __init__(self, machine: str, transition: str, state: str):
        super().__init__(
            code=CheckoutCode.ILLEGAL_TRANSITION,
            message=f"Cannot apply transition '{transition}' to {machine} in state '{state}'",
            error_type="IllegalTransition",
            details={"machine": machine, "transition": transition, "state": state},
            field="state",
            message_key="checkout.transition.illegal",
            format_params={"transition": transition, "state": state},
        )
        self.machine = machine
        self.transition = transition
        self.state = state


class UnsupportedActionError(BusinessException):
    def __init__(self, action: str, *, provider: str):
        super().__init__(
            code=PaymentCode.UNSUPPORTED_ACTION,
            message=f"Provider '{provider}' does not support action '{action}'",
            error_type="UnsupportedAction",
            details={"action": action, "provider": provider},
            field="action",
            message_key="payment.action.unsupported",
        )
        self.action = action
        self.provider = provider


class CurrencyMismatchError(BusinessException):
    def __init__(self, expected: str, actual: str):
        super().__init__(
            code=CheckoutCode.CURRENCY_MISMATCH,
            message=f"Currency mismatch: expected {expected}, got {actual}",
            error_type="CurrencyMismatch",
            details={"expected": expected, "actual": actual},
            field="currency",
            message_key="money.currency.mismatch",
        )


class DuplicateAdjustmentError(BusinessException):
    def __init__(self, label: str):
        super().__init__(
            code=CheckoutCode.DUPLICATE_ADJUSTMENT,
            message=f"Adjustment with label '{label}' already exists",
            error_type="DuplicateAdjustment",
            details={"label": label},
            field="label",
            message_key="order.adjustment.duplicate",
        )
        self.label = label


class ProviderCommunicationError(BusinessException):
    """Network failure or timeout while talking to a payment provider."""

    def __init__(self, message: str, *, provider: str, action: str | None = None, details: Optional[dict] = None):
        full_details = {"provider": provider, "action": action}
        if details:
            full_details.update(details)
        super().__init__(
            code=PaymentCode.PROVIDER_COMMUNICATION,
            message=message,
            error_type="ProviderCommunicationError",
            details=full_details,
        )
        self.provider = provider
        self.action = action
