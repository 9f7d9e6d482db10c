"""
ORM models for the currency catalog, the tracked selection,
the stored rate snapshot and the provider chain.
"""

import uuid
from django.db import models


class BaseModel(models.Model):

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Currency(BaseModel):
    """Catalog entry. The catalog order is (position, code)."""

    code = models.CharField(max_length=3, unique=True)
    name = models.CharField(max_length=40, db_index=True)
    symbol = models.CharField(max_length=10)
    position = models.PositiveSmallIntegerField(default=0)

    class Meta:
        verbose_name_plural = "currencies"
        ordering = ["position", "code"]

    def __str__(self):
        return f"{self.code} ({self.symbol})"


class TrackedCurrencySelection(BaseModel):
    """A currency the user follows in the converter, in display order."""

    currency = models.OneToOneField(
        Currency,
        related_name="tracked_selection",
        on_delete=models.CASCADE,
    )
    position = models.PositiveSmallIntegerField(db_index=True)

    class Meta:
        ordering = ["position"]

    def __str__(self):
        return f"{self.currency.code} @ {self.position}"


class RateSnapshotRecord(BaseModel):

    base_currency = models.CharField(max_length=3)
    fetched_at_epoch_millis = models.BigIntegerField(db_index=True)

    class Meta:
        ordering = ["-fetched_at_epoch_millis"]

    def __str__(self):
        return f"{self.base_currency} rates | fetched_at={self.fetched_at_epoch_millis}"


class SnapshotRate(models.Model):

    snapshot = models.ForeignKey(
        RateSnapshotRecord,
        related_name="rates",
        on_delete=models.CASCADE,
    )
    currency_code = models.CharField(max_length=3, db_index=True)
    rate_value = models.DecimalField(
        decimal_places=10,
        max_digits=24,
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["snapshot", "currency_code"],
                name="unique_rate_per_snapshot",
            )
        ]
        ordering = ["currency_code"]

    def __str__(self):
        return f"{self.snapshot.base_currency}/{self.currency_code} | {self.rate_value}"


class ProviderName(models.TextChoices):
    """
    Enum with available rate providers.
    To add a new provider:
    1. Add an entry here
    2. Implement the BaseRateProvider interface
    3. Register in PROVIDER_REGISTRY (providers/registry.py)
    """

    EXCHANGERATE_HOST = "exchangerate_host", "exchangerate.host"
    EXCHANGE_RATE = "exchange_rate", "ExchangeRate-API"
    MOCK = "mock", "Mock"


class Provider(BaseModel):

    name = models.CharField(
        max_length=50,
        choices=ProviderName.choices,
        unique=True,
    )
    priority = models.PositiveSmallIntegerField(
        unique=True,
        help_text="Lower number = higher priority. Determines the fallback order.",
    )
    is_active = models.BooleanField(
        default=True,
        help_text="Uncheck to exclude this provider from the fallback chain.",
    )

    class Meta:
        ordering = ["priority"]

    def __str__(self):
        return f"{self.get_name_display()} (priority={self.priority}) (status={self.is_active})"
