"""
Money value object: exact Decimal amount plus ISO-4217 currency.

Arithmetic and ordering only work between amounts of the same currency;
there is no implicit conversion.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Union

from domain.common.exceptions import CurrencyMismatchError, DomainValidationException


AmountLike = Union[Decimal, int, str]


def _to_decimal(value: AmountLike) -> Decimal:
    # float is rejected: it cannot represent most decimal amounts exactly
    if isinstance(value, bool) or isinstance(value, float):
        raise DomainValidationException(
            f"Money amount must be Decimal, int or str, not {type(value).__name__}",
            field="amount",
        )
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(value)
        except (InvalidOperation, TypeError, ValueError) as exc:
            raise DomainValidationException(f"Invalid money amount: {value!r}", field="amount") from exc
    if not result.is_finite():
        raise DomainValidationException(f"Invalid money amount: {value!r}", field="amount")
    return result


@dataclass(frozen=True)
class Money:
    """Exact amount in one currency.

    Equality is plain value equality: amounts in different currencies are
    unequal rather than an error, so Money can sit in sets and be compared
    with `in`. Ordering and arithmetic raise CurrencyMismatchError instead.
    """

    amount: Decimal
    currency: str

    def __post_init__(self):
        currency = (self.currency or "").upper()
        if len(currency) != 3 or not currency.isalpha():
            raise DomainValidationException(f"Invalid currency code: {self.currency}", field="currency")
        object.__setattr__(self, "amount", _to_decimal(self.amount))
        object.__setattr__(self, "currency", currency)

    @classmethod
    def zero(cls, currency: str) -> "Money":
        return cls(Decimal(0), currency)

    def is_zero(self) -> bool:
        return self.amount == 0

    def is_negative(self) -> bool:
        return self.amount < 0

    def _check(self, other: "Money") -> None:
        if not isinstance(other, Money):
            raise TypeError(f"Expected Money, got {type(other).__name__}")
        if other.currency != self.currency:
            raise CurrencyMismatchError(self.currency, other.currency)

    def __add__(self, other: "Money") -> "Money":
        self._check(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: "Money") -> "Money":
        self._check(other)
        return Money(self.amount - other.amount, self.currency)

    def __neg__(self) -> "Money":
        return Money(-self.amount, self.currency)

    def __mul__(self, factor: Union[int, Decimal]) -> "Money":
        if isinstance(factor, bool) or not isinstance(factor, (int, Decimal)):
            return NotImplemented
        return Money(self.amount * factor, self.currency)

    __rmul__ = __mul__

    def __lt__(self, other: "Money") -> bool:
        self._check(other)
        return self.amount < other.amount

    def __le__(self, other: "Money") -> bool:
        self._check(other)
        return self.amount <= other.amount

    def __gt__(self, other: "Money") -> bool:
        self._check(other)
        return self.amount > other.amount

    def __ge__(self, other: "Money") -> bool:
        self._check(other)
        return self.amount >= other.amount

    def to_minor(self, exponent: int = 2) -> int:
        return int((self.amount * (Decimal(10) ** exponent)).to_integral_value())

    def __str__(self) -> str:
        return f"{self.amount} {self.currency}"


def sum_money(values, currency: str) -> Money:
    """Sum Money values in `currency`; an empty iterable yields zero."""
    total = Money.zero(currency)
    for value in values:
        total = total + value
    return total
