"""
Finite-state tables and the function that applies a named transition.

A table maps each state to the transitions allowed from it and the state each
transition leads to::

    {"unpaid": {"purchase": "paid", "authorize": "authorized"}, "paid": {}}

The subject is any object with a writable ``state`` attribute.
"""
from __future__ import annotations

from typing import Any, Mapping

from core.logging_config import get_logger
from domain.common.exceptions import IllegalTransitionError


logger = get_logger(__name__)

TransitionTable = Mapping[str, Mapping[str, str]]


def validate_table(table: TransitionTable) -> None:
    """Every target state must itself be a state of the table."""
    for state, transitions in table.items():
        for name, target in transitions.items():
            if target not in table:
                raise ValueError(f"Transition '{name}' from '{state}' targets unknown state '{target}'")


def transition_names(table: TransitionTable) -> frozenset[str]:
    return frozenset(name for transitions in table.values() for name in transitions)


class StateMachine:
    """Binds a transition table to one stateful subject."""

    def __init__(self, subject: Any, table: TransitionTable, *, name: str) -> None:
        self.subject = subject
        self.table = table
        self.name = name

    @property
    def state(self) -> str:
        return self.subject.state

    def is_final(self) -> bool:
        return not self.table.get(self.state)

    def available_transitions(self) -> list[str]:
        return list(self.table.get(self.state, {}))

    def can(self, transition: str) -> bool:
        return transition in self.table.get(self.state, {})

    def target(self, transition: str) -> str:
        """Return the state `transition` leads to, or raise IllegalTransitionError."""
        try:
            return self.table[self.state][transition]
        except KeyError:
            raise IllegalTransitionError(self.name, transition, self.state) from None

    def apply(self, transition: str) -> str:
        """Apply `transition` and return the new state."""
        source = self.state
        target = self.target(transition)
        self.subject.state = target
        logger.info(
            "state_transition_applied",
            machine=self.name,
            transition=transition,
            source=source,
            target=target,
        )
        return target
