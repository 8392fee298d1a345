"""Identifier generation for aggregates.

Aggregates take an identifier factory at construction so tests can make
identifiers deterministic.
"""
from __future__ import annotations

import itertools
from typing import Callable
from uuid import uuid4


IdentifierFactory = Callable[[], str]


def new_identifier() -> str:
    return uuid4().hex


def sequential_identifiers(prefix: str = "id") -> IdentifierFactory:
    """Factory yielding prefix-1, prefix-2, ..."""
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"
