"""
Domain services - Core business logic.

ConversionEngine owns the current rate snapshot and computes cross rates.
ConversionSession keeps a set of tracked currencies in step with a calculator.

Rate policy:
1. Live fetch from the provider
2. On failure, keep the last known snapshot (in memory or persisted)
3. With no snapshot at all, convert with identity rates
"""

import asyncio
import logging
import threading
import time
from dataclasses import dataclass
from decimal import Decimal, MAX_EMAX, ROUND_HALF_UP, localcontext
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from apps.converter.domain.calculator import CalculatorEngine, working_precision
from apps.converter.domain.exceptions import (
    CannotRemoveLastCurrency,
    FetchError,
    RateStoreError,
)
from apps.converter.domain.interfaces import BaseRateProvider, BaseRateStore
from apps.converter.domain.models import Currency, RateSnapshot, TrackedCurrency

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE_MILLIS = 6 * 60 * 60 * 1000
CENT = Decimal("0.01")
ONE = Decimal("1")
ZERO = Decimal("0")


def wall_clock_millis() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class RefreshResult:
    """Outcome of ConversionEngine.refresh: either a new snapshot or the fetch error."""

    snapshot: Optional[RateSnapshot] = None
    error: Optional[FetchError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ConversionEngine:
    """
    Holds the most recent valid RateSnapshot and converts amounts with it.

    The snapshot lock is only held to swap or read the snapshot reference,
    never across a provider call.
    """

    def __init__(
        self,
        provider: BaseRateProvider,
        store: BaseRateStore,
        clock: Callable[[], int] = wall_clock_millis,
        max_age_millis: int = DEFAULT_MAX_AGE_MILLIS,
    ):
        self._provider = provider
        self._store = store
        self._clock = clock
        self.max_age_millis = max_age_millis
        self._snapshot: Optional[RateSnapshot] = None
        self._store_checked = False
        self._lock = threading.Lock()

    @property
    def snapshot(self) -> Optional[RateSnapshot]:
        """Current snapshot; the persisted one is loaded on first access if none was fetched."""
        with self._lock:
            if self._snapshot is None and not self._store_checked:
                self._store_checked = True
                try:
                    self._snapshot = self._store.load_latest()
                except RateStoreError as e:
                    logger.error("Could not load persisted rates: %s", e)
                if self._snapshot is not None:
                    logger.info(
                        "Loaded persisted %s rates fetched at %s",
                        self._snapshot.base_currency,
                        self._snapshot.fetched_at_epoch_millis,
                    )
            return self._snapshot

    def refresh(self, base_currency: str) -> RefreshResult:
        """
        Fetch fresh rates for base_currency.

        On success the snapshot is persisted and replaces the in-memory one.
        On FetchError nothing changes and the error is returned, not raised.
        """
        base_currency = base_currency.upper()
        try:
            rates = self._provider.get_latest_rates(base_currency)
        except FetchError as e:
            logger.warning("Rate refresh for %s failed, keeping previous snapshot: %s", base_currency, e)
            return RefreshResult(error=e)

        snapshot = RateSnapshot.create(base_currency, rates, self._clock())

        try:
            self._store.save(snapshot)
        except RateStoreError as e:
            logger.error("Failed to persist %s rates: %s", base_currency, e)

        with self._lock:
            self._snapshot = snapshot
            self._store_checked = True

        logger.info("Refreshed %d rates for base %s", len(snapshot.rates), base_currency)
        return RefreshResult(snapshot=snapshot)

    async def refresh_async(self, base_currency: str) -> RefreshResult:
        """Run refresh in a worker thread so a slow provider never blocks input."""
        return await asyncio.to_thread(self.refresh, base_currency)

    def needs_refresh(self, max_age_millis: Optional[int] = None) -> bool:
        if max_age_millis is None:
            max_age_millis = self.max_age_millis
        snapshot = self.snapshot
        if snapshot is None:
            return True
        return snapshot.age_millis(self._clock()) > max_age_millis

    def rate(self, from_code: str, to_code: str) -> Decimal:
        """Cross rate from_code -> to_code. Codes missing from the snapshot count as 1."""
        if from_code == to_code:
            return ONE
        snapshot = self.snapshot
        rates = snapshot.rates if snapshot is not None else {}
        from_rate = rates.get(from_code, ONE)
        to_rate = rates.get(to_code, ONE)
        if from_rate <= 0:
            logger.warning("Invalid exchange rate for %s: %s", from_code, from_rate)
            return ZERO
        return to_rate / from_rate

    def convert(self, amount: Decimal, from_code: str, to_code: str) -> Decimal:
        """
        Convert amount between two currencies, rounded half-up to 2 places.

        Same-currency conversion returns amount untouched.
        """
        if from_code == to_code:
            return amount
        if not isinstance(amount, Decimal):
            amount = Decimal(str(amount))
        rate = self.rate(from_code, to_code)
        with localcontext() as ctx:
            # Large calculator results must survive the cent quantization
            ctx.prec = working_precision(amount) + max(rate.adjusted(), 0) + 1
            ctx.Emax = MAX_EMAX
            return (amount * rate).quantize(CENT, rounding=ROUND_HALF_UP)


class ConversionSession:
    """
    Binds a CalculatorEngine to tracked currencies and a ConversionEngine.

    Every calculator emission sets the active amount and re-derives all the
    others from it. Mutations are serialised by the session lock, which is
    separate from the engine's snapshot lock.
    """

    def __init__(
        self,
        engine: ConversionEngine,
        calculator: Optional[CalculatorEngine] = None,
        currencies: Iterable[Currency] = (),
    ):
        self.engine = engine
        self.calculator = calculator or CalculatorEngine()
        self._tracked: List[TrackedCurrency] = []
        # Shared with the calculator so an emission and a session mutation never interleave
        self._lock = self.calculator.lock
        self.calculator.subscribe(self.update_amount)
        for currency in currencies:
            self.add_tracked(currency)

    @property
    def tracked(self) -> Tuple[TrackedCurrency, ...]:
        with self._lock:
            return tuple(self._tracked)

    @property
    def active(self) -> Optional[TrackedCurrency]:
        with self._lock:
            return next((t for t in self._tracked if t.is_active), None)

    def amounts(self) -> Dict[str, Decimal]:
        with self._lock:
            return {t.code: t.amount for t in self._tracked}

    def update_amount(self, value: Decimal) -> None:
        with self._lock:
            active = self.active
            if active is None:
                return
            active.amount = value
            for entry in self._tracked:
                if entry is not active:
                    entry.amount = self.engine.convert(value, active.code, entry.code)

    def recalculate(self) -> None:
        """Re-derive every amount from the active entry, e.g. after new rates arrived."""
        with self._lock:
            active = self.active
            if active is not None:
                self.update_amount(active.amount)

    def set_active(self, code: str) -> None:
        with self._lock:
            target = self._find(code)
            if target is None:
                return
            for entry in self._tracked:
                entry.is_active = entry is target
            self.calculator.load(target.amount)

    def add_tracked(self, currency: Currency) -> None:
        with self._lock:
            if self._find(currency.code) is not None:
                return
            if self._tracked:
                entry = TrackedCurrency(currency=currency)
            else:
                # The first entry takes over whatever the calculator already holds
                entry = TrackedCurrency(currency=currency, amount=self.calculator.value, is_active=True)
            self._tracked.append(entry)
            self.recalculate()

    def remove_tracked(self, code: str) -> None:
        with self._lock:
            entry = self._find(code)
            if entry is None:
                return
            if len(self._tracked) == 1:
                raise CannotRemoveLastCurrency(code)

            self._tracked.remove(entry)
            if entry.is_active:
                promoted = self._tracked[0]
                promoted.is_active = True
                self.calculator.load(promoted.amount)
            self.recalculate()

    def _find(self, code: str) -> Optional[TrackedCurrency]:
        return next((t for t in self._tracked if t.code == code), None)
