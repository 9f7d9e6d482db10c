"""
Repositories over the converter ORM models, plus the ORM-backed rate store.
"""

import logging
from decimal import Decimal
from typing import List, Optional

from django.db import DatabaseError, transaction

from apps.converter.domain import models as domain
from apps.converter.domain.exceptions import RateStoreError
from apps.converter.domain.interfaces import BaseRateStore
from apps.converter.infrastructure.persistence.models import (
    Currency,
    Provider,
    RateSnapshotRecord,
    SnapshotRate,
    TrackedCurrencySelection,
)

logger = logging.getLogger(__name__)

DEFAULT_TRACKED_CODES = ("USD", "EUR", "GBP")


def to_domain_currency(currency: Currency) -> domain.Currency:
    return domain.Currency(code=currency.code, name=currency.name, symbol=currency.symbol)


class CurrencyRepository:
    """Repository for the Currency catalog."""

    @staticmethod
    def get_by_code(code: str) -> Optional[Currency]:
        """Get currency by code."""
        try:
            return Currency.objects.get(code=code.upper())
        except Currency.DoesNotExist:
            return None

    @staticmethod
    def get_all() -> List[Currency]:
        """Get the whole catalog in catalog order."""
        return list(Currency.objects.all())

    @staticmethod
    def exists(code: str) -> bool:
        """Check if currency exists."""
        return Currency.objects.filter(code=code.upper()).exists()

    @staticmethod
    def bulk_create(currencies: List[dict]) -> List[Currency]:
        """Bulk create currencies, keeping the given order as catalog position."""
        currency_objects = [
            Currency(
                code=c["code"].upper(),
                name=c["name"],
                symbol=c["symbol"],
                position=index,
            )
            for index, c in enumerate(currencies)
        ]
        return Currency.objects.bulk_create(
            currency_objects,
            ignore_conflicts=True
        )


class TrackedCurrencyRepository:
    """
    Repository for the user's tracked currency selection.

    An empty selection is seeded with DEFAULT_TRACKED_CODES on first read.
    """

    @staticmethod
    def get_tracked() -> List[Currency]:
        """Get tracked currencies in display order."""
        selections = list(
            TrackedCurrencySelection.objects
            .select_related("currency")
            .order_by("position")
        )
        if not selections:
            return TrackedCurrencyRepository._add_defaults()
        return [s.currency for s in selections]

    @staticmethod
    def codes() -> List[str]:
        return [c.code for c in TrackedCurrencyRepository.get_tracked()]

    @staticmethod
    def add(code: str) -> bool:
        """Track a catalog currency. Returns False if it is not in the catalog."""
        currency = CurrencyRepository.get_by_code(code)
        if currency is None:
            return False

        with transaction.atomic():
            if TrackedCurrencySelection.objects.filter(currency=currency).exists():
                return True
            last = TrackedCurrencySelection.objects.order_by("-position").first()
            TrackedCurrencySelection.objects.create(
                currency=currency,
                position=last.position + 1 if last else 0,
            )
        return True

    @staticmethod
    def remove(code: str) -> bool:
        """Stop tracking a currency. Returns False if it was not tracked."""
        deleted, _ = TrackedCurrencySelection.objects.filter(currency__code=code.upper()).delete()
        return deleted > 0

    @staticmethod
    def _add_defaults() -> List[Currency]:
        defaults = [
            c for c in (CurrencyRepository.get_by_code(code) for code in DEFAULT_TRACKED_CODES)
            if c is not None
        ]
        TrackedCurrencySelection.objects.bulk_create(
            [
                TrackedCurrencySelection(currency=currency, position=index)
                for index, currency in enumerate(defaults)
            ],
            ignore_conflicts=True
        )
        logger.info("Seeded default tracked currencies: %s", [c.code for c in defaults])
        return defaults


class DjangoRateStore(BaseRateStore):
    """RateStore backed by RateSnapshotRecord/SnapshotRate. Keeps a single snapshot."""

    def save(self, snapshot: domain.RateSnapshot) -> None:
        try:
            with transaction.atomic():
                RateSnapshotRecord.objects.all().delete()
                record = RateSnapshotRecord.objects.create(
                    base_currency=snapshot.base_currency,
                    fetched_at_epoch_millis=snapshot.fetched_at_epoch_millis,
                )
                SnapshotRate.objects.bulk_create([
                    SnapshotRate(snapshot=record, currency_code=code, rate_value=rate)
                    for code, rate in snapshot.rates.items()
                ])
        except DatabaseError as e:
            raise RateStoreError(f"Could not save {snapshot.base_currency} snapshot: {e}") from e

    def load_latest(self) -> Optional[domain.RateSnapshot]:
        try:
            record = RateSnapshotRecord.objects.prefetch_related("rates").first()
            if record is None:
                return None
            rates = {r.currency_code: Decimal(r.rate_value) for r in record.rates.all()}
        except DatabaseError as e:
            raise RateStoreError(f"Could not load latest snapshot: {e}") from e

        return domain.RateSnapshot(
            base_currency=record.base_currency,
            rates=rates,
            fetched_at_epoch_millis=record.fetched_at_epoch_millis,
        )


class ProviderRepository:
    """Repository for Provider aggregate."""

    @staticmethod
    def get_active_ordered() -> List[Provider]:
        """Get all active providers ordered by priority."""
        return list(
            Provider.objects
            .filter(is_active=True)
            .order_by('priority')
        )

    @staticmethod
    def get_by_name(name: str) -> Optional[Provider]:
        """Get provider by name."""
        try:
            return Provider.objects.get(name=name)
        except Provider.DoesNotExist:
            return None
