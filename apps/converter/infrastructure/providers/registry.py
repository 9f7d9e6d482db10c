"""
Maps the ProviderName stored on Provider rows to rate provider adapters.
"""

import logging

from apps.converter.domain.interfaces import BaseRateProvider
from apps.converter.infrastructure.persistence.models import ProviderName
from apps.converter.infrastructure.persistence.repositories import ProviderRepository
from apps.converter.infrastructure.providers.exchange_rate import ExchangeRateProvider
from apps.converter.infrastructure.providers.exchangerate_host import ExchangeRateHostProvider
from apps.converter.infrastructure.providers.mock import MockProvider

logger = logging.getLogger(__name__)


PROVIDER_REGISTRY: dict[str, type[BaseRateProvider]] = {
    ProviderName.EXCHANGERATE_HOST: ExchangeRateHostProvider,
    ProviderName.EXCHANGE_RATE: ExchangeRateProvider,
    ProviderName.MOCK: MockProvider,
}


def get_provider_instance(provider_name: str) -> BaseRateProvider | None:
    """Build the adapter registered for provider_name, or None for an unknown name."""
    adapter_class = PROVIDER_REGISTRY.get(provider_name)
    if adapter_class is None:
        logger.warning("No rate provider registered as '%s'", provider_name)
        return None
    return adapter_class()


def get_active_providers_ordered() -> list[BaseRateProvider]:
    """
    Adapters for the active Provider rows, lowest priority number first.

    Rows whose name has no registered adapter are skipped.
    """
    adapters = (
        get_provider_instance(row.name)
        for row in ProviderRepository.get_active_ordered()
    )
    return [adapter for adapter in adapters if adapter is not None]
