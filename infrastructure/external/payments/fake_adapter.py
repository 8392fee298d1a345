"""Configurable fake payment provider for development and testing.

Simulates a gateway without any external calls. The outcome of the next
call can be configured at runtime: success, failure, redirect or timeout.
"""
from __future__ import annotations

import asyncio
from typing import Any, Mapping
from uuid import uuid4

from application.dtos.payments import Failure, Redirect, Response, Success
from application.ports.payment_provider import ACTIONS
from core.settings import payment_settings
from domain.common.money import Money

OUTCOMES = ("success", "failure", "redirect", "timeout")


class FakeProvider:
    """Configurable fake payment provider."""

    name = "fake"

    def __init__(
        self,
        outcome: str | None = None,
        *,
        failure_reason: str | None = None,
        redirect_url: str | None = None,
        supported_actions: frozenset[str] | None = None,
        delay: float = 3600.0,
    ) -> None:
        self.supported_actions = supported_actions if supported_actions is not None else frozenset(ACTIONS)
        self.calls: list[dict] = []
        self.delay = delay
        self.configure(
            outcome or payment_settings.fake.outcome,
            failure_reason=failure_reason or payment_settings.fake.failure_reason,
            redirect_url=redirect_url or payment_settings.fake.redirect_url,
        )

    def configure(self, outcome: str, *, failure_reason: str = "Card declined", redirect_url: str | None = None) -> None:
        """Configure provider behaviour at runtime."""
        if outcome not in OUTCOMES:
            raise ValueError(f"Unknown fake outcome: {outcome}")
        self.outcome = outcome
        self.failure_reason = failure_reason
        if redirect_url is not None:
            self.redirect_url = redirect_url

    async def _respond(self, action: str, amount: Money, options: Mapping[str, Any]) -> Response:
        self.calls.append({"method": action, "amount": amount, "options": dict(options)})

        if self.outcome == "timeout":
            # Sleeps past any sensible provider timeout
            await asyncio.sleep(self.delay)
        if self.outcome == "failure":
            return Failure(reason=self.failure_reason)
        txn = f"fake_txn_{uuid4().hex[:12]}"
        if self.outcome == "redirect":
            return Redirect(transaction_id=txn, redirect_url=self.redirect_url)
        return Success(transaction_id=txn, message=f"{action} successful")

    async def purchase(self, amount: Money, options: Mapping[str, Any]) -> Response:
        return await self._respond("purchase", amount, options)

    async def authorize(self, amount: Money, options: Mapping[str, Any]) -> Response:
        return await self._respond("authorize", amount, options)

    async def capture(self, amount: Money, options: Mapping[str, Any]) -> Response:
        return await self._respond("capture", amount, options)

    async def void(self, amount: Money, options: Mapping[str, Any]) -> Response:
        return await self._respond("void", amount, options)

    async def credit(self, amount: Money, options: Mapping[str, Any]) -> Response:
        return await self._respond("credit", amount, options)
