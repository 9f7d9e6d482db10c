import logging
from decimal import Decimal

from apps.converter.domain.exceptions import FetchError
from apps.converter.domain.interfaces import BaseRateProvider

logger = logging.getLogger(__name__)


class ChainedRateProvider(BaseRateProvider):
    """
    Tries providers in priority order; the first one that answers wins.

    Raises FetchError when the chain is empty or every provider failed.
    """

    name = "chain"

    def __init__(self, providers: list[BaseRateProvider]):
        self.providers = list(providers)

    def get_latest_rates(self, base_currency: str) -> dict[str, Decimal]:
        if not self.providers:
            raise FetchError("No active providers configured", provider=self.name)

        errors = []
        for provider in self.providers:
            provider_name = getattr(provider, "name", provider.__class__.__name__)
            logger.debug("Trying %s for base %s", provider_name, base_currency)
            try:
                rates = provider.get_latest_rates(base_currency)
            except FetchError as e:
                logger.warning("%s failed, trying next: %s", provider_name, e)
                errors.append(f"{provider_name}: {e}")
                continue

            logger.info("%s returned %d rates for %s", provider_name, len(rates), base_currency)
            return rates

        raise FetchError(
            f"All providers failed for {base_currency}: " + "; ".join(errors),
            provider=self.name,
        )
