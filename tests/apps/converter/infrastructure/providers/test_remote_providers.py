import pytest
import requests
from unittest.mock import Mock
from decimal import Decimal

from apps.converter.domain.exceptions import FetchError
from apps.converter.infrastructure.providers.exchange_rate import ExchangeRateProvider
from apps.converter.infrastructure.providers.exchangerate_host import ExchangeRateHostProvider


@pytest.fixture
def mock_requests_get(mocker):
    return mocker.patch("requests.get")


def json_response(payload):
    response = Mock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


class TestExchangeRateHostProvider:

    def test_get_latest_rates_success(self, mock_requests_get):
        """
        Test that the /latest payload is turned into Decimal rates.
        """
        mock_requests_get.return_value = json_response({
            "base": "USD",
            "date": "2024-05-21",
            "rates": {"EUR": 0.92, "GBP": 0.8, "USD": 1},
        })

        rates = ExchangeRateHostProvider().get_latest_rates("USD")

        assert rates == {"EUR": Decimal("0.92"), "GBP": Decimal("0.8"), "USD": Decimal("1")}
        mock_requests_get.assert_called_once()
        url = mock_requests_get.call_args[0][0]
        assert url.endswith("/latest")
        assert mock_requests_get.call_args.kwargs["params"]["base"] == "USD"
        assert "timeout" in mock_requests_get.call_args.kwargs

    def test_api_error_flag_raises(self, mock_requests_get):
        mock_requests_get.return_value = json_response({
            "success": False,
            "error": {"code": 101, "type": "missing_access_key"},
        })

        with pytest.raises(FetchError) as exc_info:
            ExchangeRateHostProvider().get_latest_rates("USD")

        assert exc_info.value.provider == "exchangerate.host"

    def test_empty_rates_raise(self, mock_requests_get):
        mock_requests_get.return_value = json_response({"base": "USD", "rates": {}})

        with pytest.raises(FetchError):
            ExchangeRateHostProvider().get_latest_rates("USD")

    def test_non_numeric_rate_raises(self, mock_requests_get):
        mock_requests_get.return_value = json_response({"rates": {"EUR": "n/a"}})

        with pytest.raises(FetchError):
            ExchangeRateHostProvider().get_latest_rates("USD")

    @pytest.mark.parametrize("bad_rate", [float("nan"), float("inf"), "-Infinity"])
    def test_non_finite_rate_raises(self, mock_requests_get, bad_rate):
        mock_requests_get.return_value = json_response({"rates": {"EUR": bad_rate, "GBP": 0.8}})

        with pytest.raises(FetchError) as exc_info:
            ExchangeRateHostProvider().get_latest_rates("USD")

        assert "EUR" in str(exc_info.value)

    @pytest.mark.parametrize("error", [
        requests.exceptions.Timeout("slow"),
        requests.exceptions.ConnectionError("offline"),
    ])
    def test_network_errors_raise_fetch_error(self, mock_requests_get, error):
        mock_requests_get.side_effect = error

        with pytest.raises(FetchError):
            ExchangeRateHostProvider().get_latest_rates("USD")

    def test_http_error_raises_fetch_error(self, mock_requests_get):
        response = Mock()
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("503 Server Error")
        mock_requests_get.return_value = response

        with pytest.raises(FetchError) as exc_info:
            ExchangeRateHostProvider().get_latest_rates("USD")

        assert "HTTP error" in str(exc_info.value)

    def test_invalid_json_raises_fetch_error(self, mock_requests_get):
        response = Mock()
        response.raise_for_status.return_value = None
        response.json.side_effect = ValueError("Expecting value")
        mock_requests_get.return_value = response

        with pytest.raises(FetchError):
            ExchangeRateHostProvider().get_latest_rates("USD")


class TestExchangeRateProvider:

    @pytest.fixture
    def configured(self, mocker):
        module = "apps.converter.infrastructure.providers.exchange_rate"
        mocker.patch(f"{module}.EXCHANGERATE_URL", "https://v6.example.test/v6")
        mocker.patch(f"{module}.EXCHANGERATE_API_KEY", "test-key")

    def test_get_latest_rates_success(self, configured, mock_requests_get):
        mock_requests_get.return_value = json_response({
            "result": "success",
            "base_code": "EUR",
            "conversion_rates": {"EUR": 1, "USD": 1.087},
        })

        rates = ExchangeRateProvider().get_latest_rates("EUR")

        assert rates == {"EUR": Decimal("1"), "USD": Decimal("1.087")}
        assert mock_requests_get.call_args[0][0] == "https://v6.example.test/v6/test-key/latest/EUR"

    def test_error_result_raises(self, configured, mock_requests_get):
        mock_requests_get.return_value = json_response({"result": "error", "error-type": "invalid-key"})

        with pytest.raises(FetchError) as exc_info:
            ExchangeRateProvider().get_latest_rates("USD")

        assert "invalid-key" in str(exc_info.value)

    def test_missing_api_key_raises_without_calling_api(self, mocker, mock_requests_get):
        mocker.patch("apps.converter.infrastructure.providers.exchange_rate.EXCHANGERATE_API_KEY", "")

        with pytest.raises(FetchError):
            ExchangeRateProvider().get_latest_rates("USD")

        mock_requests_get.assert_not_called()
