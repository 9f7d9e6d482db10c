"""
Plain result objects handed from the domain to the API serializers.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from apps.converter.domain.models import RateSnapshot, TrackedCurrency
from apps.converter.domain.services import ConversionSession


@dataclass
class TrackedCurrencyDTO:
    """Tracked currency with its current amount."""
    code: str
    name: str
    symbol: str
    amount: Decimal
    is_active: bool

    @classmethod
    def from_domain(cls, tracked: TrackedCurrency) -> "TrackedCurrencyDTO":
        return cls(
            code=tracked.code,
            name=tracked.currency.name,
            symbol=tracked.currency.symbol,
            amount=tracked.amount,
            is_active=tracked.is_active,
        )


@dataclass
class RateSnapshotDTO:
    """Rate snapshot data transfer object."""
    base_currency: str
    rates: Dict[str, Decimal]
    fetched_at: datetime
    is_stale: bool = False

    @classmethod
    def from_domain(cls, snapshot: RateSnapshot, is_stale: bool = False) -> "RateSnapshotDTO":
        return cls(
            base_currency=snapshot.base_currency,
            rates=dict(snapshot.rates),
            fetched_at=datetime.fromtimestamp(snapshot.fetched_at_epoch_millis / 1000, tz=timezone.utc),
            is_stale=is_stale,
        )


@dataclass
class ConversionResultDTO:
    """Result DTO for a single currency conversion."""
    source_currency: str
    exchanged_currency: str
    amount: Decimal
    rate: Decimal
    converted_amount: Decimal
    rates_fetched_at: Optional[datetime] = None


@dataclass
class SessionResultDTO:
    """Calculator value and the tracked amounts it produced."""
    value: Decimal
    display: str
    active_currency: Optional[str]
    tracked: List[TrackedCurrencyDTO] = field(default_factory=list)

    @classmethod
    def from_session(cls, session: ConversionSession, value: Decimal) -> "SessionResultDTO":
        active = session.active
        return cls(
            value=value,
            display=session.calculator.display or "0",
            active_currency=active.code if active else None,
            tracked=[TrackedCurrencyDTO.from_domain(t) for t in session.tracked],
        )

