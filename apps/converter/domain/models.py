"""
Pure domain entities (POPOs).
No dependency on Django or the ORM.
"""

import enum
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Mapping, Optional


@dataclass(frozen=True)
class Currency:

    code: str
    name: str
    symbol: str

    def __post_init__(self):
        if len(self.code) != 3:
            raise ValueError(f"Currency code must be exactly 3 characters, got '{self.code}'")


@dataclass
class TrackedCurrency:
    """A currency shown in a session together with its current amount."""

    currency: Currency
    amount: Decimal = Decimal("0")
    is_active: bool = False

    @property
    def code(self) -> str:
        return self.currency.code


@dataclass(frozen=True)
class RateSnapshot:
    """
    One set of rates relative to ``base_currency`` plus the time it was fetched.

    Build instances through ``RateSnapshot.create`` so the base rate is pinned
    to 1 and non-positive rates are discarded.
    """

    base_currency: str
    rates: Mapping[str, Decimal]
    fetched_at_epoch_millis: int

    @classmethod
    def create(
        cls,
        base_currency: str,
        rates: Mapping[str, object],
        fetched_at_epoch_millis: int
    ) -> "RateSnapshot":
        base_currency = base_currency.upper()
        clean: Dict[str, Decimal] = {}
        for code, rate in rates.items():
            value = rate if isinstance(rate, Decimal) else Decimal(str(rate))
            if value.is_finite() and value > 0:
                clean[code.upper()] = value
        clean[base_currency] = Decimal("1")
        return cls(
            base_currency=base_currency,
            rates=clean,
            fetched_at_epoch_millis=int(fetched_at_epoch_millis),
        )

    def age_millis(self, now_epoch_millis: int) -> int:
        return now_epoch_millis - self.fetched_at_epoch_millis


class Operator(enum.Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"


@dataclass
class CalculatorState:

    digits_buffer: str = ""
    pending_operator: Optional[Operator] = None
    first_operand: Decimal = field(default_factory=lambda: Decimal("0"))
    awaiting_fresh_operand: bool = False
