"""
Generic JSON gateway adapter.

Posts every action to ``{base_url}/{action}`` with the amount in minor units
and maps the gateway's ``status`` field onto a provider Response::

    {"status": "succeeded", "transaction_id": "ch_1"}
    {"status": "requires_action", "transaction_id": "ch_1", "redirect_url": "https://..."}
    {"status": "failed", "reason": "card_declined"}
"""
from __future__ import annotations

from typing import Any, Mapping

from application.dtos.payments import Failure, Redirect, Response, Success
from application.ports.payment_provider import ACTIONS
from domain.common.money import Money
from infrastructure.external.payments.base import BaseHttpProvider
from shared.codes.payment_codes import GATEWAY_STATUS_TO_OUTCOME


class JsonGatewayProvider(BaseHttpProvider):
    name = "json_gateway"
    supported_actions = frozenset(ACTIONS)

    @staticmethod
    def _to_minor(amount: Money) -> int:
        # Amounts travel in the smallest currency unit
        exponent = 0 if amount.currency in {"JPY", "KRW"} else 2
        return amount.to_minor(exponent)

    def _payload(self, amount: Money, options: Mapping[str, Any]) -> dict[str, Any]:
        payload = {
            "amount": self._to_minor(amount),
            "currency": amount.currency.lower(),
            "reference": options.get("payment_identifier"),
        }
        for key in ("order_identifier", "transaction_id", "token"):
            if options.get(key) is not None:
                payload[key] = options[key]
        return payload

    def _to_response(self, data: dict[str, Any]) -> Response:
        outcome = GATEWAY_STATUS_TO_OUTCOME.get(str(data.get("status", "")), "failure")
        transaction_id = data.get("transaction_id")
        if outcome == "success" and transaction_id:
            return Success(transaction_id=str(transaction_id), message=data.get("message"))
        if outcome == "redirect" and transaction_id and data.get("redirect_url"):
            return Redirect(transaction_id=str(transaction_id), redirect_url=str(data["redirect_url"]))
        return Failure(
            reason=str(data.get("reason") or data.get("status") or "unknown gateway status"),
            transaction_id=str(transaction_id) if transaction_id else None,
        )

    async def _call(self, action: str, amount: Money, options: Mapping[str, Any]) -> Response:
        data = await self._post(f"/{action}", self._payload(amount, options), action=action)
        return self._to_response(data)

    async def purchase(self, amount: Money, options: Mapping[str, Any]) -> Response:  # type: ignore[override]
        return await self._call("purchase", amount, options)

    async def authorize(self, amount: Money, options: Mapping[str, Any]) -> Response:  # type: ignore[override]
        return await self._call("authorize", amount, options)

    async def capture(self, amount: Money, options: Mapping[str, Any]) -> Response:  # type: ignore[override]
        return await self._call("capture", amount, options)

    async def void(self, amount: Money, options: Mapping[str, Any]) -> Response:  # type: ignore[override]
        return await self._call("void", amount, options)

    async def credit(self, amount: Money, options: Mapping[str, Any]) -> Response:  # type: ignore[override]
        return await self._call("credit", amount, options)
