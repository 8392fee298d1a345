"""
Base HTTP provider implementing shared concerns: http client, timeouts,
logging, error mapping.

Concrete gateways subclass it and implement the actions they support. No
retries happen here: a repeated charge must be a decision of the caller.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Mapping, Optional

import httpx

from application.dtos.payments import Response
from core.logging_config import get_logger
from core.settings import payment_settings
from domain.common.exceptions import ProviderCommunicationError
from domain.common.money import Money


logger = get_logger(__name__)


class BaseHttpProvider:
    name: str = "base"
    supported_actions: frozenset[str] = frozenset()

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeouts: Optional[dict[str, float]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url or payment_settings.gateway.base_url or ""
        self.api_key = api_key or payment_settings.gateway.api_key
        self._timeouts_cfg = timeouts or payment_settings.timeouts.model_dump()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def timeouts(self) -> httpx.Timeout:
        return httpx.Timeout(
            connect=self._timeouts_cfg["connect"],
            read=self._timeouts_cfg["read"],
            write=self._timeouts_cfg["write"],
            timeout=self._timeouts_cfg["total"],
        )

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    @asynccontextmanager
    async def client(self):
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeouts,
                headers=self._headers(),
                transport=self._transport,
            )
        try:
            yield self._client
        finally:
            # Keep open for reuse; explicit aclose() will close.
            ...

    async def aclose(self) -> None:
        """Close underlying HTTP client if created."""
        if self._client is not None:
            try:
                await self._client.aclose()
            finally:
                self._client = None

    async def _post(self, path: str, payload: dict[str, Any], *, action: str) -> dict[str, Any]:
        """POST `payload` as JSON; transport problems become ProviderCommunicationError."""
        try:
            async with self.client() as client:
                resp = await client.post(path, json=payload)
        except httpx.TimeoutException as exc:
            raise ProviderCommunicationError(
                f"Timeout calling {self.name}: {exc}", provider=self.name, action=action
            ) from exc
        except httpx.TransportError as exc:
            raise ProviderCommunicationError(
                f"Transport error calling {self.name}: {exc}", provider=self.name, action=action
            ) from exc

        if resp.status_code >= 500:
            raise ProviderCommunicationError(
                f"{self.name} answered HTTP {resp.status_code}",
                provider=self.name,
                action=action,
                details={"status_code": resp.status_code},
            )
        try:
            data = resp.json()
        except ValueError as exc:
            raise ProviderCommunicationError(
                f"{self.name} answered with a non-JSON body", provider=self.name, action=action
            ) from exc
        self._log("provider_http_response", action=action, status_code=resp.status_code)
        return data

    # Default implementations raise to force override where needed
    async def purchase(self, amount: Money, options: Mapping[str, Any]) -> Response:
        raise NotImplementedError

    async def authorize(self, amount: Money, options: Mapping[str, Any]) -> Response:
        raise NotImplementedError

    async def capture(self, amount: Money, options: Mapping[str, Any]) -> Response:
        raise NotImplementedError

    async def void(self, amount: Money, options: Mapping[str, Any]) -> Response:
        raise NotImplementedError

    async def credit(self, amount: Money, options: Mapping[str, Any]) -> Response:
        raise NotImplementedError

    def _log(self, event: str, **kwargs) -> None:
        logger.info(
            event,
            provider=self.name,
            **kwargs,
        )
