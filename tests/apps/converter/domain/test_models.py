import pytest
from decimal import Decimal

from apps.converter.domain.models import Currency, RateSnapshot, TrackedCurrency


def test_currency_requires_three_letter_code():
    with pytest.raises(ValueError):
        Currency(code="EURO", name="Euro", symbol="€")


def test_tracked_currency_defaults():
    tracked = TrackedCurrency(currency=Currency(code="GEL", name="Georgian Lari", symbol="₾"))

    assert tracked.code == "GEL"
    assert tracked.amount == Decimal("0")
    assert tracked.is_active is False


class TestRateSnapshot:

    def test_create_normalises_codes_and_values(self):
        snapshot = RateSnapshot.create("usd", {"eur": "0.92", "JPY": 110}, 1000)

        assert snapshot.base_currency == "USD"
        assert snapshot.rates == {
            "EUR": Decimal("0.92"),
            "JPY": Decimal("110"),
            "USD": Decimal("1"),
        }

    def test_create_drops_non_positive_rates(self):
        snapshot = RateSnapshot.create("USD", {"EUR": Decimal("0"), "GBP": Decimal("-1"), "THB": Decimal("33.5")}, 0)

        assert "EUR" not in snapshot.rates
        assert "GBP" not in snapshot.rates
        assert snapshot.rates["THB"] == Decimal("33.5")

    def test_create_pins_base_rate_to_one(self):
        snapshot = RateSnapshot.create("EUR", {"EUR": Decimal("0.9")}, 0)

        assert snapshot.rates["EUR"] == Decimal("1")

    def test_age(self):
        snapshot = RateSnapshot.create("USD", {}, 1_000)

        assert snapshot.age_millis(4_500) == 3_500


@pytest.mark.parametrize("bad_rate", [Decimal("NaN"), Decimal("sNaN"), "Infinity", float("-inf")])
def test_create_drops_non_finite_rates(bad_rate):
    snapshot = RateSnapshot.create("USD", {"EUR": bad_rate, "GBP": "0.8"}, 0)

    assert snapshot.rates == {"GBP": Decimal("0.8"), "USD": Decimal("1")}
