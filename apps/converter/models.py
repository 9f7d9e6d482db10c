from apps.converter.infrastructure.persistence.models import (  # noqa: F401
    Currency,
    Provider,
    RateSnapshotRecord,
    SnapshotRate,
    TrackedCurrencySelection,
)
