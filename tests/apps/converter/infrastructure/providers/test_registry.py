import pytest
from apps.converter.infrastructure.providers.registry import (
    get_provider_instance,
    get_active_providers_ordered,
    PROVIDER_REGISTRY
)
from apps.converter.infrastructure.persistence.models import Provider, ProviderName
from apps.converter.infrastructure.providers.exchange_rate import ExchangeRateProvider
from apps.converter.infrastructure.providers.exchangerate_host import ExchangeRateHostProvider
from apps.converter.infrastructure.providers.mock import MockProvider


@pytest.mark.django_db(transaction=True)
class TestProviderRegistry:
    """Tests for provider registry functions."""

    def test_provider_registry_contains_every_provider_name(self):
        assert set(PROVIDER_REGISTRY) == set(ProviderName.values)

    @pytest.mark.parametrize("name, expected_class", [
        (ProviderName.MOCK, MockProvider),
        (ProviderName.EXCHANGERATE_HOST, ExchangeRateHostProvider),
        (ProviderName.EXCHANGE_RATE, ExchangeRateProvider),
    ])
    def test_get_provider_instance(self, name, expected_class):
        instance = get_provider_instance(name)

        assert isinstance(instance, expected_class)

    def test_get_provider_instance_unknown(self):
        """
        Test that an unregistered name yields None instead of raising.
        """
        assert get_provider_instance("nonexistent") is None

    def test_get_active_providers_ordered_by_priority(self):
        Provider.objects.create(name=ProviderName.MOCK, priority=2, is_active=True)
        Provider.objects.create(name=ProviderName.EXCHANGERATE_HOST, priority=1, is_active=True)

        providers = get_active_providers_ordered()

        assert [type(p) for p in providers] == [ExchangeRateHostProvider, MockProvider]

    def test_get_active_providers_skips_inactive(self):
        Provider.objects.create(name=ProviderName.MOCK, priority=1, is_active=True)
        Provider.objects.create(name=ProviderName.EXCHANGE_RATE, priority=2, is_active=False)

        providers = get_active_providers_ordered()

        assert len(providers) == 1
        assert isinstance(providers[0], MockProvider)

    def test_get_active_providers_empty(self):
        assert get_active_providers_ordered() == []
