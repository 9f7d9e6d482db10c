"""
Application services.
Wire the ORM-backed store and the configured provider chain into the domain core.
"""

from decimal import Decimal
from typing import Iterable, Optional

from core.settings import DEFAULT_BASE_CURRENCY, RATES_MAX_AGE_HOURS
from apps.converter.domain.services import ConversionEngine, ConversionSession
from apps.converter.infrastructure.persistence.repositories import (
    DjangoRateStore,
    TrackedCurrencyRepository,
    to_domain_currency,
)
from apps.converter.infrastructure.providers.chained import ChainedRateProvider
from apps.converter.infrastructure.providers.registry import get_active_providers_ordered


def hours_to_millis(hours: float) -> int:
    return int(hours * 60 * 60 * 1000)


def build_conversion_engine() -> ConversionEngine:
    """Engine backed by the database snapshot and the active providers in priority order."""
    return ConversionEngine(
        provider=ChainedRateProvider(get_active_providers_ordered()),
        store=DjangoRateStore(),
        max_age_millis=hours_to_millis(RATES_MAX_AGE_HOURS),
    )


def build_session(
    engine: Optional[ConversionEngine] = None,
    active_code: Optional[str] = None,
) -> ConversionSession:
    """Session over the persisted tracked selection; the first entry is active unless active_code says otherwise."""
    engine = engine or build_conversion_engine()
    currencies = [to_domain_currency(c) for c in TrackedCurrencyRepository.get_tracked()]
    session = ConversionSession(engine, currencies=currencies)
    if active_code:
        session.set_active(active_code.upper())
    return session


def evaluate_keys(session: ConversionSession, keys: Iterable[str]) -> Decimal:
    """Feed keypad symbols to the session calculator and return the final value."""
    value = session.calculator.value
    for key in keys:
        if key.isspace():
            continue
        value = session.calculator.press(key)
    return value


def default_base_currency() -> str:
    return DEFAULT_BASE_CURRENCY.upper()
