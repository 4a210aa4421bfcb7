"""
Common Value Objects

- Money: whole-unit monetary amounts with currency
- DateRange: rental period, start inclusive and end exclusive
"""

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterator

from shared.domain.base import ValueObject

WHOLE_UNIT = Decimal('1')


def round_amount(value) -> Decimal:
    """Round to whole currency units, halves away from zero."""
    return Decimal(str(value)).quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Amounts are kept as Decimal and rounded to whole currency units on
    construction.
    """
    amount: Decimal
    currency: str = 'MAD'

    def __post_init__(self):
        if not self.currency:
            raise ValueError("Currency is required")
        object.__setattr__(self, 'amount', round_amount(self.amount))
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")

    def __add__(self, other: 'Money') -> 'Money':
        self._check_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        self._check_currency(other)
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, factor) -> 'Money':
        if not isinstance(factor, (int, float, Decimal)):
            raise TypeError("Can only multiply Money by number")
        return Money(self.amount * Decimal(str(factor)), self.currency)

    def _check_currency(self, other):
        if not isinstance(other, Money):
            raise TypeError("Operand must be Money")
        if self.currency != other.currency:
            raise ValueError(f"Currency mismatch: {self.currency} and {other.currency}")


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a range from start_date (inclusive) to end_date (exclusive).
    Used for rental periods and vehicle day locks.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date >= self.end_date:
            raise ValueError(f"Start date ({self.start_date}) must be before end date ({self.end_date})")

    def days(self) -> Iterator[date]:
        """Every calendar day in the range, in order."""
        current = self.start_date
        while current < self.end_date:
            yield current
            current += timedelta(days=1)

    def iso_days(self) -> list[str]:
        return [day.isoformat() for day in self.days()]

    def __str__(self):
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"
