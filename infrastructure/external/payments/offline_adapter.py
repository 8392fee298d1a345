"""Offline provider for cash on delivery and bank transfer.

No money moves at checkout, so purchase and void always succeed with a
locally generated reference.
"""
from __future__ import annotations

from typing import Any, Mapping
from uuid import uuid4

from application.dtos.payments import Response, Success
from domain.common.money import Money


class OfflineProvider:
    name = "offline"
    supported_actions = frozenset({"purchase", "void"})

    async def purchase(self, amount: Money, options: Mapping[str, Any]) -> Response:
        return Success(transaction_id=f"offline_{uuid4().hex[:12]}", message=f"collect {amount} on delivery")

    async def void(self, amount: Money, options: Mapping[str, Any]) -> Response:
        return Success(transaction_id=f"offline_{uuid4().hex[:12]}", message="offline payment voided")

    async def authorize(self, amount: Money, options: Mapping[str, Any]) -> Response:
        raise NotImplementedError

    async def capture(self, amount: Money, options: Mapping[str, Any]) -> Response:
        raise NotImplementedError

    async def credit(self, amount: Money, options: Mapping[str, Any]) -> Response:
        raise NotImplementedError
