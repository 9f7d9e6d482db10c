"""
Shared HTTP plumbing for the remote rate providers.
"""

import logging
from decimal import Decimal

import requests

from apps.converter.domain.exceptions import FetchError
from core.settings import RATES_REQUEST_TIMEOUT

logger = logging.getLogger(__name__)


def fetch_json(url: str, provider: str, params: dict | None = None) -> dict:
    """
    GET url and decode the JSON body.

    Raises:
        FetchError: on timeout, connection or HTTP errors, or a non-JSON body
    """
    try:
        response = requests.get(url, params=params, timeout=RATES_REQUEST_TIMEOUT)
        response.raise_for_status()
        return response.json()
    except requests.exceptions.Timeout as e:
        raise FetchError(f"Timeout calling {provider}", provider=provider) from e
    except requests.exceptions.HTTPError as e:
        raise FetchError(f"HTTP error from {provider}: {e}", provider=provider) from e
    except requests.exceptions.RequestException as e:
        raise FetchError(f"Could not reach {provider}: {e}", provider=provider) from e
    except ValueError as e:
        raise FetchError(f"Invalid JSON from {provider}: {e}", provider=provider) from e


def parse_rates(rates: object, provider: str) -> dict[str, Decimal]:
    """Turn a {code: number} payload into Decimal rates."""
    if not isinstance(rates, dict) or not rates:
        raise FetchError(f"Invalid response from {provider}: no rates", provider=provider)
    try:
        parsed = {str(code).upper(): Decimal(str(rate)) for code, rate in rates.items()}
    except ArithmeticError as e:
        raise FetchError(f"Invalid rate value from {provider}: {e}", provider=provider) from e

    non_finite = sorted(code for code, rate in parsed.items() if not rate.is_finite())
    if non_finite:
        raise FetchError(
            f"Invalid rate value from {provider}: non-finite rate for {', '.join(non_finite)}",
            provider=provider,
        )
    return parsed
