from abc import ABC, abstractmethod
from decimal import Decimal

from apps.converter.domain.models import RateSnapshot


class BaseRateProvider(ABC):
    @abstractmethod
    def get_latest_rates(self, base_currency: str) -> dict[str, Decimal]:
        """Return rates relative to base_currency, or raise FetchError."""


class BaseRateStore(ABC):
    @abstractmethod
    def save(self, snapshot: RateSnapshot) -> None:
        pass

    @abstractmethod
    def load_latest(self) -> RateSnapshot | None:
        pass
