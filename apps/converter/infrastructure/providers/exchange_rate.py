from decimal import Decimal

from core.settings import EXCHANGERATE_API_KEY, EXCHANGERATE_URL
from apps.converter.domain.exceptions import FetchError
from apps.converter.domain.interfaces import BaseRateProvider
from apps.converter.infrastructure.providers.http import fetch_json, parse_rates


class ExchangeRateProvider(BaseRateProvider):
    """
    ExchangeRate-API v6 provider.
    Uses the /latest endpoint, which needs an API key.
    """

    name = "ExchangeRate-API"

    def get_latest_rates(self, base_currency: str) -> dict[str, Decimal]:
        # if EXCHANGERATE_URL is not configured, there is nothing to call
        if not EXCHANGERATE_URL or not EXCHANGERATE_API_KEY:
            raise FetchError(
                "EXCHANGERATE_URL or EXCHANGERATE_API_KEY is not configured. Cannot fetch exchange rates.",
                provider=self.name,
            )

        # Format: https://v6.exchangerate-api.com/v6/YOUR-API-KEY/latest/USD
        url = f"{EXCHANGERATE_URL}/{EXCHANGERATE_API_KEY}/latest/{base_currency}"
        data = fetch_json(url, self.name)

        # Response format: {"result": "success", "base_code": "USD", "conversion_rates": {"EUR": 0.92}}
        if data.get("result") != "success":
            raise FetchError(
                f"{self.name} returned an error: {data.get('error-type', 'unknown')}",
                provider=self.name,
            )
        return parse_rates(data.get("conversion_rates"), self.name)
