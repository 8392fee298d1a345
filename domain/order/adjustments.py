"""
Adjustment ledger: labeled amounts (shipping, payment surcharge, discounts)
attached to an Order.

The ledger only contains and looks up adjustments; totals are computed by
the Order.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional

from domain.common.exceptions import CurrencyMismatchError, DuplicateAdjustmentError
from domain.common.money import Money


@dataclass(frozen=True)
class Adjustment:
    label: str
    amount: Money


class AdjustmentLedger:
    def __init__(self, currency: str) -> None:
        self.currency = currency
        self._adjustments: list[Adjustment] = []

    def add(self, adjustment: Adjustment) -> None:
        if adjustment.amount.currency != self.currency:
            raise CurrencyMismatchError(self.currency, adjustment.amount.currency)
        if self.find_by_label(adjustment.label) is not None:
            raise DuplicateAdjustmentError(adjustment.label)
        self._adjustments.append(adjustment)

    def remove(self, label: str) -> bool:
        """Remove the adjustment labeled `label`; False when there is none."""
        for index, adjustment in enumerate(self._adjustments):
            if adjustment.label == label:
                del self._adjustments[index]
                return True
        return False

    def find_by_label(self, label: str) -> Optional[Adjustment]:
        return next((a for a in self._adjustments if a.label == label), None)

    def sum(self) -> Money:
        total = Money.zero(self.currency)
        for adjustment in self._adjustments:
            if adjustment.amount.currency != self.currency:
                raise CurrencyMismatchError(self.currency, adjustment.amount.currency)
            total = total + adjustment.amount
        return total

    def __contains__(self, label: object) -> bool:
        return any(a.label == label for a in self._adjustments)

    def __iter__(self) -> Iterator[Adjustment]:
        return iter(list(self._adjustments))

    def __len__(self) -> int:
        return len(self._adjustments)
