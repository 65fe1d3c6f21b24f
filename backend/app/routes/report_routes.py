"""
Report Routes Module
====================

Filtered, paginated report listings and the export placeholder.

Endpoints:
- GET  /reports/clients
- GET  /reports/organizations
- GET  /reports/organization-members
- GET  /reports/vehicles
- GET  /reports/policies
- GET  /reports/documents
- POST /reports/{report}/export

Every filter is optional; empty values and `todos` are ignored.

Security:
- All endpoints require operator or higher
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.dependencies.pagination import PageParams, get_page_params
from app.core.dependencies.rbac import require_operator
from app.core.enums import ReportName
from app.core.logging import get_logger
from app.db.session import get_db
from app.models.profile import UserProfile
from app.schemas import COMMON_RESPONSES, ErrorResponse, Page
from app.schemas.document import DocumentResponse
from app.schemas.organization import OrganizationResponse
from app.schemas.policy import PolicyResponse
from app.schemas.report import (
    ClientReportFilters,
    ClientReportRow,
    DocumentReportFilters,
    ExportRequest,
    ExportResponse,
    MemberReportFilters,
    MemberReportRow,
    OrganizationReportFilters,
    PolicyReportFilters,
    VehicleReportFilters,
)
from app.schemas.vehicle import VehicleResponse
from app.services.export_client import ExportClient, get_export_client
from app.services.report_service import ReportService

# Initialize logger
logger = get_logger(__name__)


# =====================================
# Router Setup
# =====================================

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
    responses=COMMON_RESPONSES,
)


def _page(items, total: int, paging: PageParams, schema):
    return Page[schema](
        items=items,
        total=total,
        page=paging.page,
        page_size=paging.page_size,
    )


# =====================================
# Report Endpoints
# =====================================

@router.get(
    "/clients",
    response_model=Page[ClientReportRow],
    summary="Clients Report",
    description="Clients with their latest license and relationship organization.",
)
def clients_report(
    filters: Annotated[ClientReportFilters, Query()],
    paging: PageParams = Depends(get_page_params),
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
):
    rows, total = ReportService(db).clients_report(filters, paging.page, paging.page_size)
    return _page(rows, total, paging, ClientReportRow)


@router.get(
    "/organizations",
    response_model=Page[OrganizationResponse],
    summary="Organizations Report",
)
def organizations_report(
    filters: Annotated[OrganizationReportFilters, Query()],
    paging: PageParams = Depends(get_page_params),
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
):
    rows, total = ReportService(db).organizations_report(filters, paging.page, paging.page_size)
    items = [OrganizationResponse.model_validate(row) for row in rows]
    return _page(items, total, paging, OrganizationResponse)


@router.get(
    "/organization-members",
    response_model=Page[MemberReportRow],
    summary="Organization Members Report",
)
def members_report(
    filters: Annotated[MemberReportFilters, Query()],
    paging: PageParams = Depends(get_page_params),
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
):
    rows, total = ReportService(db).members_report(filters, paging.page, paging.page_size)
    return _page(rows, total, paging, MemberReportRow)


@router.get(
    "/vehicles",
    response_model=Page[VehicleResponse],
    summary="Vehicles Report",
)
def vehicles_report(
    filters: Annotated[VehicleReportFilters, Query()],
    paging: PageParams = Depends(get_page_params),
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
):
    rows, total = ReportService(db).vehicles_report(filters, paging.page, paging.page_size)
    items = [VehicleResponse.model_validate(row) for row in rows]
    return _page(items, total, paging, VehicleResponse)


@router.get(
    "/policies",
    response_model=Page[PolicyResponse],
    summary="Policies Report",
)
def policies_report(
    filters: Annotated[PolicyReportFilters, Query()],
    paging: PageParams = Depends(get_page_params),
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
):
    rows, total = ReportService(db).policies_report(filters, paging.page, paging.page_size)
    items = [PolicyResponse.model_validate(row) for row in rows]
    return _page(items, total, paging, PolicyResponse)


@router.get(
    "/documents",
    response_model=Page[DocumentResponse],
    summary="Documents Report",
)
def documents_report(
    filters: Annotated[DocumentReportFilters, Query()],
    paging: PageParams = Depends(get_page_params),
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
):
    rows, total = ReportService(db).documents_report(filters, paging.page, paging.page_size)
    items = [DocumentResponse.model_validate(row) for row in rows]
    return _page(items, total, paging, DocumentResponse)


# =====================================
# Export Endpoint
# =====================================

@router.post(
    "/{report}/export",
    response_model=ExportResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Export Report",
    description="""
    Forward an export request (PDF, Excel or CSV) to the export service.

    With `export_all` the filters are ignored.
    """,
    responses={
        502: {"model": ErrorResponse, "description": "Export service failure"},
        503: {"model": ErrorResponse, "description": "Export service not configured"},
    },
)
def export_report(
    report: ReportName,
    payload: ExportRequest,
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
    export_client: ExportClient = Depends(get_export_client),
) -> ExportResponse:
    return ReportService(db).request_export(
        report=report,
        request=payload,
        export_client=export_client,
        requested_by=str(current_user.id),
    )
