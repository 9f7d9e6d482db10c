"""
Celery tasks for background processing.

Rate refreshes run here, off the input path: a slow or failing provider only
delays the next snapshot, it never blocks conversions.
"""

import logging
from typing import Dict, Optional

from celery import shared_task

from apps.converter.application.services import (
    build_conversion_engine,
    default_base_currency,
    hours_to_millis,
)
from apps.converter.domain.exceptions import FetchError
from apps.converter.infrastructure.persistence.repositories import ProviderRepository
from apps.converter.infrastructure.providers.registry import get_provider_instance

logger = logging.getLogger(__name__)


@shared_task(name="refresh_exchange_rates")
def refresh_exchange_rates(base_currency: Optional[str] = None) -> Dict:
    """
    Fetch the latest rates for base_currency and store them as the current snapshot.

    A failed fetch keeps the previous snapshot in place.

    Args:
        base_currency: Base currency code, defaults to DEFAULT_BASE_CURRENCY

    Returns:
        Dict with operation results
    """
    base_currency = (base_currency or default_base_currency()).upper()
    engine = build_conversion_engine()

    result = engine.refresh(base_currency)
    if not result.ok:
        return {
            "success": False,
            "base_currency": base_currency,
            "message": str(result.error),
            "rates_synced": 0,
        }

    return {
        "success": True,
        "base_currency": base_currency,
        "rates_synced": len(result.snapshot.rates),
        "fetched_at_epoch_millis": result.snapshot.fetched_at_epoch_millis,
    }


@shared_task(name="refresh_stale_exchange_rates")
def refresh_stale_exchange_rates(max_age_hours: Optional[float] = None, base_currency: Optional[str] = None) -> Dict:
    """
    Refresh rates only when the current snapshot is missing or older than max_age_hours.

    Scheduled through CELERY_BEAT_SCHEDULE.
    """
    engine = build_conversion_engine()
    max_age_millis = hours_to_millis(max_age_hours) if max_age_hours is not None else None

    if not engine.needs_refresh(max_age_millis):
        logger.info("Rates are fresh, skipping refresh")
        return {
            "success": True,
            "refreshed": False,
            "message": "Rates are fresh",
        }

    base_currency = (base_currency or default_base_currency()).upper()
    result = engine.refresh(base_currency)
    if not result.ok:
        return {
            "success": False,
            "refreshed": False,
            "base_currency": base_currency,
            "message": str(result.error),
        }

    return {
        "success": True,
        "refreshed": True,
        "base_currency": base_currency,
        "rates_synced": len(result.snapshot.rates),
    }


@shared_task(name="check_providers_health")
def check_providers_health() -> Dict:
    """
    Ask every active provider for the default base currency and report its status.

    Returns:
        Dict with a status entry ("healthy", "unhealthy" or "error") per provider
    """
    base_currency = default_base_currency()
    results = {}

    providers = ProviderRepository.get_active_ordered()
    for provider_model in providers:
        instance = get_provider_instance(provider_model.name)
        if instance is None:
            results[provider_model.name] = {
                "status": "error",
                "message": "Provider not registered",
            }
            continue

        try:
            rates = instance.get_latest_rates(base_currency)
            results[provider_model.name] = {
                "status": "healthy",
                "rates_count": len(rates),
            }
        except FetchError as e:
            results[provider_model.name] = {
                "status": "unhealthy",
                "message": str(e),
            }
        except Exception as e:
            logger.exception("Provider %s raised an unexpected error", provider_model.name)
            results[provider_model.name] = {
                "status": "error",
                "message": str(e),
            }

    return {
        "success": True,
        "providers_checked": len(providers),
        "results": results,
    }
