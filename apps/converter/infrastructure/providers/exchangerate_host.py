from decimal import Decimal

from core.settings import EXCHANGERATE_HOST_ACCESS_KEY, EXCHANGERATE_HOST_URL
from apps.converter.domain.exceptions import FetchError
from apps.converter.domain.interfaces import BaseRateProvider
from apps.converter.infrastructure.providers.http import fetch_json, parse_rates


class ExchangeRateHostProvider(BaseRateProvider):
    """
    exchangerate.host provider.
    Uses the /latest endpoint to fetch every rate for a base currency at once.
    """

    name = "exchangerate.host"

    def get_latest_rates(self, base_currency: str) -> dict[str, Decimal]:
        """
        Fetch latest rates from exchangerate.host.

        Args:
            base_currency: Base currency code (e.g. USD)

        Returns:
            Mapping of currency code to rate relative to base_currency

        Raises:
            FetchError: if the API cannot be reached or answers with an error
        """
        # Format: https://api.exchangerate.host/latest?base=USD
        params = {"base": base_currency}
        if EXCHANGERATE_HOST_ACCESS_KEY:
            params["access_key"] = EXCHANGERATE_HOST_ACCESS_KEY

        data = fetch_json(f"{EXCHANGERATE_HOST_URL}/latest", self.name, params=params)

        # Response format: {"base": "USD", "date": "2024-05-21", "rates": {"EUR": 0.92}}
        if data.get("success") is False:
            raise FetchError(f"{self.name} returned an error: {data.get('error')}", provider=self.name)
        return parse_rates(data.get("rates"), self.name)
