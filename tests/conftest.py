from decimal import Decimal

import pytest

from apps.converter.domain.exceptions import FetchError
from apps.converter.domain.interfaces import BaseRateProvider, BaseRateStore
from apps.converter.domain.services import ConversionEngine

SCENARIO_RATES = {
    "USD": Decimal("1.0"),
    "EUR": Decimal("0.92"),
    "GBP": Decimal("0.8"),
    "JPY": Decimal("110"),
}


class StaticRateProvider(BaseRateProvider):
    """Serves a fixed rate table; flip `failing` to simulate an outage."""

    name = "static"

    def __init__(self, rates):
        self.rates = dict(rates)
        self.failing = False
        self.calls = []

    def get_latest_rates(self, base_currency):
        self.calls.append(base_currency)
        if self.failing:
            raise FetchError("provider down", provider=self.name)
        return dict(self.rates)


class InMemoryRateStore(BaseRateStore):

    def __init__(self, snapshot=None):
        self.snapshot = snapshot
        self.saved = []
        self.load_calls = 0

    def save(self, snapshot):
        self.saved.append(snapshot)
        self.snapshot = snapshot

    def load_latest(self):
        self.load_calls += 1
        return self.snapshot


class FakeClock:

    def __init__(self, now=1_700_000_000_000):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, millis):
        self.now += millis


@pytest.fixture
def static_provider():
    return StaticRateProvider(SCENARIO_RATES)


@pytest.fixture
def memory_store():
    return InMemoryRateStore()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def engine(static_provider, memory_store, fake_clock):
    return ConversionEngine(static_provider, memory_store, clock=fake_clock)
