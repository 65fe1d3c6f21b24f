"""
Report Export Client
====================

Report files (PDF, Excel, CSV) are produced by an external export
service. This client forwards the report name, format and filters and
returns the job description the service answers with.
"""

from functools import lru_cache
from typing import Any, Dict, Optional

import httpx

from app.core.config import settings
from app.core.exceptions import ServiceUnavailableError, UpstreamServiceError
from app.core.logging import get_logger

logger = get_logger(__name__)


class ExportClient:
    """
    Client for the external export service.

    Args:
        base_url: Export service URL. Empty means exports are disabled.
        transport: Optional httpx transport (tests use ``httpx.MockTransport``)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = (base_url if base_url is not None else settings.EXPORT_SERVICE_URL).rstrip("/")
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    def request_export(
        self,
        report: str,
        export_format: str,
        filters: Dict[str, Any],
        requested_by: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Ask the export service to render a report.

        Raises:
            ServiceUnavailableError: If no export service is configured
            UpstreamServiceError: If the service fails
        """
        if not self.enabled:
            raise ServiceUnavailableError("export")

        payload = {
            "report": report,
            "format": export_format,
            "filters": filters,
            "requested_by": requested_by,
        }

        try:
            with httpx.Client(
                base_url=self.base_url,
                timeout=settings.HTTP_TIMEOUT_SECONDS,
                transport=self._transport,
            ) as client:
                response = client.post("/exports", json=payload)
        except httpx.HTTPError as e:
            logger.error("Export request failed", report=report, error=str(e))
            raise UpstreamServiceError("export")

        if response.is_error:
            logger.error(
                "Export service returned an error",
                report=report,
                status_code=response.status_code,
            )
            raise UpstreamServiceError("export", upstream_status=response.status_code)

        logger.info("Export requested", report=report, format=export_format)
        return response.json() if response.content else {}


@lru_cache
def get_export_client() -> ExportClient:
    """FastAPI dependency returning the export client."""
    return ExportClient()
