"""
Payment provider port exposing a replaceable protocol.

The Payment aggregate depends on this Protocol; infrastructure implements
adapters. An action name is turned into a provider call through an explicit
lookup against the fixed capability set, never through attribute reflection,
so an unknown name is rejected before anything reaches the network.
"""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Mapping, Protocol, runtime_checkable

from application.dtos.payments import RESPONSE_TYPES, Response
from core.logging_config import get_logger
from domain.common.exceptions import ProviderCommunicationError, UnsupportedActionError
from domain.common.money import Money


logger = get_logger(__name__)

ACTIONS = ("purchase", "authorize", "capture", "void", "credit")

ProviderOperation = Callable[[Money, Mapping[str, Any]], Awaitable[Response]]


@runtime_checkable
class PaymentProvider(Protocol):
    """Protocol for payment backends.

    Implementations should be async and side-effect free beyond IO.
    `supported_actions` lists the subset of ACTIONS the backend accepts.
    """

    name: str
    supported_actions: frozenset[str]

    async def purchase(self, amount: Money, options: Mapping[str, Any]) -> Response: ...

    async def authorize(self, amount: Money, options: Mapping[str, Any]) -> Response: ...

    async def capture(self, amount: Money, options: Mapping[str, Any]) -> Response: ...

    async def void(self, amount: Money, options: Mapping[str, Any]) -> Response: ...

    async def credit(self, amount: Money, options: Mapping[str, Any]) -> Response: ...


def _operations(provider: PaymentProvider) -> dict[str, ProviderOperation]:
    return {
        "purchase": provider.purchase,
        "authorize": provider.authorize,
        "capture": provider.capture,
        "void": provider.void,
        "credit": provider.credit,
    }


def resolve_action(provider: PaymentProvider, action: str) -> ProviderOperation:
    """Map an action name to the provider operation that implements it."""
    provider_name = getattr(provider, "name", type(provider).__name__)
    if action not in ACTIONS:
        raise UnsupportedActionError(action, provider=provider_name)
    supported = getattr(provider, "supported_actions", frozenset(ACTIONS))
    if action not in supported:
        raise UnsupportedActionError(action, provider=provider_name)
    return _operations(provider)[action]


async def invoke(
    provider: PaymentProvider,
    action: str,
    amount: Money,
    options: Mapping[str, Any],
    *,
    timeout: float | None = None,
) -> Response:
    """Resolve `action` and await the provider, bounded by `timeout` seconds.

    A timeout surfaces as ProviderCommunicationError; so does a provider that
    answers with something other than a Response.
    """
    operation = resolve_action(provider, action)
    provider_name = getattr(provider, "name", type(provider).__name__)

    logger.info("provider_call", provider=provider_name, action=action, amount=str(amount))
    try:
        response = await asyncio.wait_for(operation(amount, options), timeout=timeout)
    except asyncio.TimeoutError as exc:
        logger.warning("provider_timeout", provider=provider_name, action=action, timeout=timeout)
        raise ProviderCommunicationError(
            f"Provider '{provider_name}' timed out after {timeout}s",
            provider=provider_name,
            action=action,
        ) from exc

    if not isinstance(response, RESPONSE_TYPES):
        raise ProviderCommunicationError(
            f"Provider '{provider_name}' returned {type(response).__name__} instead of a Response",
            provider=provider_name,
            action=action,
        )
    logger.info(
        "provider_response",
        provider=provider_name,
        action=action,
        kind=response.kind,
        transaction_id=response.transaction_id,
    )
    return response
