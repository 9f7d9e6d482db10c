"""
Mock provider for development and tests.
Serves a fixed rate table, re-based on the requested currency.
"""

from decimal import Decimal

from apps.converter.domain.exceptions import FetchError
from apps.converter.domain.interfaces import BaseRateProvider


class MockProvider(BaseRateProvider):
    """
    Mock provider with static rates.
    Useful for:
    - Testing without external API calls
    - Last entry of the fallback chain
    - Development without API keys
    """

    name = "Mock"

    # Base rates relative to USD (approximate real-world values)
    BASE_RATES = {
        "USD": Decimal("1.0"),
        "EUR": Decimal("0.92"),
        "GBP": Decimal("0.8"),
        "JPY": Decimal("110.0"),
        "GEL": Decimal("2.75"),
        "THB": Decimal("33.5"),
        "AED": Decimal("3.67"),
        "VND": Decimal("25000.0"),
        "RUB": Decimal("83.5"),
    }

    def get_latest_rates(self, base_currency: str) -> dict[str, Decimal]:
        base_rate = self.BASE_RATES.get(base_currency)
        if base_rate is None:
            raise FetchError(f"MockProvider: unsupported base currency {base_currency}", provider=self.name)

        return {
            code: (rate / base_rate).quantize(Decimal("0.000001"))
            for code, rate in self.BASE_RATES.items()
        }
