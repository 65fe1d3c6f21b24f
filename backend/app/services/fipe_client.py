"""
FIPE Price Table Client
=======================

Looks up brands, models, years and reference prices in the public FIPE
API (parallelum). Only cars are queried.
"""

from decimal import Decimal, InvalidOperation
from functools import lru_cache
from typing import Any, List, Optional

import httpx

from app.core.config import settings
from app.core.exceptions import NotFoundError, UpstreamServiceError
from app.core.logging import get_logger, log_execution_time
from app.schemas.vehicle import FipeOption, FipePrice

logger = get_logger(__name__)


def parse_fipe_value(value: str) -> Decimal:
    """
    Parse a FIPE price string such as ``"R$ 85.432,00"``.

    Raises:
        ValueError: If the string holds no amount
    """
    cleaned = value.replace("R$", "").strip().replace(".", "").replace(",", ".")
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Invalid FIPE value: {value!r}")


class FipeClient:
    """
    Client for the FIPE reference price API.

    Args:
        base_url: API root for cars
        transport: Optional httpx transport (tests use ``httpx.MockTransport``)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._http = httpx.Client(
            base_url=(base_url or settings.FIPE_API_URL).rstrip("/"),
            timeout=settings.HTTP_TIMEOUT_SECONDS,
            transport=transport,
        )

    def _get(self, path: str) -> Any:
        try:
            response = self._http.get(path)
        except httpx.HTTPError as e:
            logger.error("FIPE request failed", path=path, error=str(e))
            raise UpstreamServiceError("FIPE")

        if response.status_code == 404:
            raise NotFoundError(resource="FIPE entry", identifier=path)
        if response.is_error:
            logger.error("FIPE returned an error", path=path, status_code=response.status_code)
            raise UpstreamServiceError("FIPE", upstream_status=response.status_code)
        return response.json()

    @staticmethod
    def _options(rows: List[dict]) -> List[FipeOption]:
        return [FipeOption(codigo=str(row["codigo"]), nome=row["nome"]) for row in rows]

    def list_brands(self) -> List[FipeOption]:
        return self._options(self._get("/marcas"))

    def list_models(self, brand: str) -> List[FipeOption]:
        # The models endpoint wraps models and years together
        data = self._get(f"/marcas/{brand}/modelos")
        return self._options(data.get("modelos", []))

    def list_years(self, brand: str, model: str) -> List[FipeOption]:
        return self._options(self._get(f"/marcas/{brand}/modelos/{model}/anos"))

    @log_execution_time(logger, "fipe_price_lookup")
    def get_price(self, brand: str, model: str, year: str) -> FipePrice:
        data = self._get(f"/marcas/{brand}/modelos/{model}/anos/{year}")
        try:
            return FipePrice(
                valor=parse_fipe_value(data["Valor"]),
                marca=data["Marca"],
                modelo=data["Modelo"],
                ano_modelo=int(data["AnoModelo"]),
                combustivel=data["Combustivel"],
                codigo_fipe=data["CodigoFipe"],
                mes_referencia=data["MesReferencia"].strip(),
            )
        except (KeyError, ValueError) as e:
            logger.error("Unexpected FIPE payload", error=str(e))
            raise UpstreamServiceError("FIPE", message="The FIPE service returned an unexpected response")


@lru_cache
def get_fipe_client() -> FipeClient:
    """FastAPI dependency returning the shared FIPE client."""
    return FipeClient()
