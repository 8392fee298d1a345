"""
Order repository interface - whole-aggregate persistence keyed by identifier.
"""
from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import Optional

from .entity import Order


class OrderRepository(ABC):
    """Defines what the store can do, not how it does it.

    The store serialises writers per Order: callers mutate an aggregate
    only while holding `lock(identifier)`.
    """

    @abstractmethod
    async def add(self, order: Order) -> Order:
        pass

    @abstractmethod
    async def get(self, identifier: str) -> Optional[Order]:
        pass

    @abstractmethod
    async def save(self, order: Order) -> Order:
        pass

    @abstractmethod
    async def delete(self, identifier: str) -> bool:
        pass

    @abstractmethod
    def lock(self, identifier: str) -> AbstractAsyncContextManager[None]:
        """At most one writer per Order identifier at a time."""
        pass
