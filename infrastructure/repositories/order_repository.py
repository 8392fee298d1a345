"""
In-memory Order repository with per-order write locks.
"""
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from domain.common.exceptions import DomainValidationException
from domain.order.entity import Order
from domain.order.repository import OrderRepository
from core.logging_config import get_logger


logger = get_logger(__name__)


class InMemoryOrderRepository(OrderRepository):
    """Keeps whole aggregates in a dict; meant for tests and single-process use."""

    def __init__(self) -> None:
        self._orders: dict[str, Order] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    async def add(self, order: Order) -> Order:
        if order.identifier in self._orders:
            raise DomainValidationException(
                f"Order {order.identifier} already exists",
                field="identifier",
            )
        self._orders[order.identifier] = order
        logger.info("order_added", order=order.identifier)
        return order

    async def get(self, identifier: str) -> Optional[Order]:
        return self._orders.get(identifier)

    async def save(self, order: Order) -> Order:
        self._orders[order.identifier] = order
        logger.debug("order_saved", order=order.identifier, state=order.state, total=str(order.total))
        return order

    async def delete(self, identifier: str) -> bool:
        self._locks.pop(identifier, None)
        return self._orders.pop(identifier, None) is not None

    @asynccontextmanager
    async def lock(self, identifier: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(identifier, asyncio.Lock())
        async with lock:
            yield
