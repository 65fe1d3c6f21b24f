"""
FIPE Client Unit Tests
======================

Tests for the FIPE price lookup against a mocked transport.
"""

from decimal import Decimal

import httpx
import pytest

from app.core.exceptions import NotFoundError, UpstreamServiceError
from app.services.fipe_client import FipeClient, parse_fipe_value


pytestmark = pytest.mark.unit


class TestParseFipeValue:

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("R$ 85.432,00", Decimal("85432.00")),
            ("R$ 1.234.567,89", Decimal("1234567.89")),
            ("950,50", Decimal("950.50")),
        ],
    )
    def test_parses_brazilian_format(self, raw, expected):
        assert parse_fipe_value(raw) == expected

    def test_rejects_empty_value(self):
        with pytest.raises(ValueError):
            parse_fipe_value("R$ ")


class TestFipeClient:

    def test_list_brands(self, fipe_client: FipeClient):
        brands = fipe_client.list_brands()

        assert [(b.codigo, b.nome) for b in brands] == [("21", "Fiat"), ("59", "VW")]

    def test_list_models_unwraps_payload(self, fipe_client: FipeClient):
        models = fipe_client.list_models("21")

        assert models[0].codigo == "4828"
        assert models[0].nome == "Strada Freedom 1.3"

    def test_list_years(self, fipe_client: FipeClient):
        years = fipe_client.list_years("21", "4828")

        assert [y.codigo for y in years] == ["2022-1"]

    def test_get_price(self, fipe_client: FipeClient):
        price = fipe_client.get_price("21", "4828", "2022-1")

        assert price.valor == Decimal("85432.00")
        assert price.codigo_fipe == "001234-5"
        assert price.ano_modelo == 2022
        assert price.mes_referencia == "outubro de 2026"

    def test_unknown_model_is_not_found(self, fipe_client: FipeClient):
        with pytest.raises(NotFoundError):
            fipe_client.list_years("21", "1")

    def test_server_error_is_upstream_failure(self):
        client = FipeClient(
            base_url="http://fipe.test/api/v1/carros",
            transport=httpx.MockTransport(lambda request: httpx.Response(500)),
        )

        with pytest.raises(UpstreamServiceError) as exc_info:
            client.list_brands()

        assert exc_info.value.status_code == 502

    def test_unexpected_price_payload(self):
        client = FipeClient(
            base_url="http://fipe.test/api/v1/carros",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"Valor": "R$ 1,00"})),
        )

        with pytest.raises(UpstreamServiceError):
            client.get_price("21", "4828", "2022-1")

    def test_connection_error_is_upstream_failure(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = FipeClient(base_url="http://fipe.test", transport=httpx.MockTransport(refuse))

        with pytest.raises(UpstreamServiceError):
            client.list_brands()
