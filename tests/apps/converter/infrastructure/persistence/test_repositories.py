import pytest
from decimal import Decimal

from django.db import DatabaseError

from apps.converter.catalog import DEFAULT_CATALOG
from apps.converter.domain.exceptions import RateStoreError
from apps.converter.domain.models import RateSnapshot
from apps.converter.infrastructure.persistence.models import (
    Currency,
    Provider,
    ProviderName,
    RateSnapshotRecord,
    SnapshotRate,
    TrackedCurrencySelection,
)
from apps.converter.infrastructure.persistence.repositories import (
    CurrencyRepository,
    DjangoRateStore,
    ProviderRepository,
    TrackedCurrencyRepository,
    to_domain_currency,
)


@pytest.fixture
def catalog(db):
    CurrencyRepository.bulk_create(DEFAULT_CATALOG)
    return {c.code: c for c in Currency.objects.all()}


@pytest.mark.django_db(transaction=True)
class TestCurrencyRepository:
    """Tests for CurrencyRepository."""

    def test_get_by_code_case_insensitive(self):
        Currency.objects.create(code="USD", name="US Dollar", symbol="$")

        currency = CurrencyRepository.get_by_code("usd")

        assert currency is not None
        assert currency.code == "USD"

    def test_get_by_code_not_found(self):
        assert CurrencyRepository.get_by_code("XXX") is None

    def test_exists(self):
        Currency.objects.create(code="EUR", name="Euro", symbol="€")

        assert CurrencyRepository.exists("eur") is True
        assert CurrencyRepository.exists("GBP") is False

    def test_bulk_create_keeps_catalog_order(self):
        CurrencyRepository.bulk_create(DEFAULT_CATALOG)

        codes = [c.code for c in CurrencyRepository.get_all()]

        assert codes == [c["code"] for c in DEFAULT_CATALOG]

    def test_bulk_create_is_idempotent(self):
        CurrencyRepository.bulk_create(DEFAULT_CATALOG)
        CurrencyRepository.bulk_create(DEFAULT_CATALOG)

        assert Currency.objects.count() == len(DEFAULT_CATALOG)

    def test_to_domain_currency(self):
        orm = Currency.objects.create(code="GEL", name="Georgian Lari", symbol="₾")

        currency = to_domain_currency(orm)

        assert (currency.code, currency.name, currency.symbol) == ("GEL", "Georgian Lari", "₾")


@pytest.mark.django_db
class TestTrackedCurrencyRepository:
    """Tests for the persisted tracked selection."""

    def test_empty_selection_is_seeded_with_defaults(self, catalog):
        assert TrackedCurrencyRepository.codes() == ["USD", "EUR", "GBP"]
        assert TrackedCurrencySelection.objects.count() == 3

    def test_defaults_skip_currencies_missing_from_catalog(self):
        Currency.objects.create(code="EUR", name="Euro", symbol="€")

        assert TrackedCurrencyRepository.codes() == ["EUR"]

    def test_add_appends_in_order(self, catalog):
        TrackedCurrencyRepository.codes()

        assert TrackedCurrencyRepository.add("jpy") is True

        assert TrackedCurrencyRepository.codes() == ["USD", "EUR", "GBP", "JPY"]

    def test_add_is_idempotent(self, catalog):
        TrackedCurrencyRepository.codes()

        assert TrackedCurrencyRepository.add("EUR") is True

        assert TrackedCurrencyRepository.codes() == ["USD", "EUR", "GBP"]

    def test_add_unknown_currency(self, catalog):
        assert TrackedCurrencyRepository.add("XXX") is False

    def test_remove(self, catalog):
        TrackedCurrencyRepository.codes()

        assert TrackedCurrencyRepository.remove("eur") is True
        assert TrackedCurrencyRepository.remove("JPY") is False

        assert TrackedCurrencyRepository.codes() == ["USD", "GBP"]


@pytest.mark.django_db
class TestDjangoRateStore:
    """Tests for the ORM-backed rate store."""

    def test_load_latest_without_snapshot(self):
        assert DjangoRateStore().load_latest() is None

    def test_save_and_load(self):
        store = DjangoRateStore()
        snapshot = RateSnapshot.create("USD", {"EUR": Decimal("0.92"), "VND": Decimal("25000")}, 1_700_000_000_000)

        store.save(snapshot)
        loaded = store.load_latest()

        assert loaded.base_currency == "USD"
        assert loaded.fetched_at_epoch_millis == 1_700_000_000_000
        assert loaded.rates == {
            "EUR": Decimal("0.92"),
            "USD": Decimal("1"),
            "VND": Decimal("25000"),
        }

    def test_save_replaces_previous_snapshot(self):
        """
        Test that only the most recent snapshot is kept.
        """
        store = DjangoRateStore()
        store.save(RateSnapshot.create("USD", {"EUR": "0.92"}, 1000))
        store.save(RateSnapshot.create("EUR", {"USD": "1.08"}, 2000))

        loaded = store.load_latest()

        assert RateSnapshotRecord.objects.count() == 1
        assert SnapshotRate.objects.count() == 2
        assert loaded.base_currency == "EUR"
        assert loaded.rates["USD"] == Decimal("1.08")

    def test_save_wraps_database_errors(self, mocker):
        mocker.patch.object(
            RateSnapshotRecord.objects, "create", side_effect=DatabaseError("disk I/O error")
        )

        with pytest.raises(RateStoreError):
            DjangoRateStore().save(RateSnapshot.create("USD", {"EUR": "0.92"}, 1000))


@pytest.mark.django_db
class TestProviderRepository:

    def test_get_active_ordered(self):
        Provider.objects.create(name=ProviderName.MOCK, priority=5, is_active=True)
        Provider.objects.create(name=ProviderName.EXCHANGE_RATE, priority=1, is_active=False)
        Provider.objects.create(name=ProviderName.EXCHANGERATE_HOST, priority=3, is_active=True)

        names = [p.name for p in ProviderRepository.get_active_ordered()]

        assert names == [ProviderName.EXCHANGERATE_HOST, ProviderName.MOCK]

    def test_get_by_name(self):
        Provider.objects.create(name=ProviderName.MOCK, priority=1)

        assert ProviderRepository.get_by_name(ProviderName.MOCK).priority == 1
        assert ProviderRepository.get_by_name(ProviderName.EXCHANGE_RATE) is None
