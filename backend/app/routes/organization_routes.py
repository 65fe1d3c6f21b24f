"""
Organization Routes Module
==========================

CRUD endpoints for organizations and their members.

Security:
- Reads and writes require operator or higher
- Deletes require supervisor or higher
- All writes are audit logged
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.dependencies.pagination import PageParams, get_page_params
from app.core.dependencies.rbac import require_operator, require_supervisor
from app.core.logging import audit_logger, get_logger
from app.db.session import get_db
from app.models.profile import UserProfile
from app.schemas import COMMON_RESPONSES, ErrorResponse, Page
from app.schemas.organization import (
    MemberCreate,
    MemberResponse,
    MemberUpdate,
    OrganizationDetailResponse,
    OrganizationResponse,
    OrganizationUpsert,
)
from app.services.organization_service import OrganizationService

# Initialize logger
logger = get_logger(__name__)


# =====================================
# Router Setup
# =====================================

router = APIRouter(
    prefix="/organizations",
    tags=["Organizations"],
    responses=COMMON_RESPONSES,
)


# =====================================
# Organization Endpoints
# =====================================

@router.get(
    "",
    response_model=Page[OrganizationResponse],
    summary="List Organizations",
    description="List organizations, optionally searching by name, code or CNPJ.",
)
def list_organizations(
    search: Optional[str] = Query(None, description="Name, code or CNPJ"),
    id_tipo_entidade: Optional[int] = Query(None, description="Entity type id"),
    paging: PageParams = Depends(get_page_params),
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
) -> Page[OrganizationResponse]:
    rows, total = OrganizationService(db).list_organizations(
        search=search,
        id_tipo_entidade=id_tipo_entidade,
        page=paging.page,
        page_size=paging.page_size,
    )
    return Page[OrganizationResponse](
        items=[OrganizationResponse.model_validate(row) for row in rows],
        total=total,
        page=paging.page,
        page_size=paging.page_size,
    )


@router.get(
    "/{organization_id}",
    response_model=OrganizationDetailResponse,
    summary="Get Organization",
    description="Get an organization with its type and members.",
    responses={404: {"model": ErrorResponse, "description": "Organization not found"}},
)
def get_organization(
    organization_id: int,
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
) -> OrganizationDetailResponse:
    service = OrganizationService(db)
    organization = service.get_organization(organization_id)
    response = OrganizationDetailResponse.model_validate(organization)
    response.members = [
        MemberResponse.model_validate(member)
        for member in service.list_members(organization_id)
    ]
    return response


@router.post(
    "",
    response_model=OrganizationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Organization",
    responses={409: {"model": ErrorResponse, "description": "Code or CNPJ already registered"}},
)
def create_organization(
    payload: OrganizationUpsert,
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
) -> OrganizationResponse:
    organization = OrganizationService(db).create_organization(payload)
    audit_logger.log_record_created("organization", organization.id_entidade, str(current_user.id))
    return OrganizationResponse.model_validate(organization)


@router.put(
    "/{organization_id}",
    response_model=OrganizationResponse,
    summary="Update Organization",
    responses={
        404: {"model": ErrorResponse, "description": "Organization not found"},
        409: {"model": ErrorResponse, "description": "Code or CNPJ already registered"},
    },
)
def update_organization(
    organization_id: int,
    payload: OrganizationUpsert,
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
) -> OrganizationResponse:
    organization = OrganizationService(db).update_organization(organization_id, payload)
    audit_logger.log_record_updated("organization", organization_id, str(current_user.id))
    return OrganizationResponse.model_validate(organization)


@router.delete(
    "/{organization_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Organization",
    description="Delete an organization and its memberships. Requires supervisor role.",
    responses={
        404: {"model": ErrorResponse, "description": "Organization not found"},
        409: {"model": ErrorResponse, "description": "Organization referenced by vehicles or policies"},
    },
)
def delete_organization(
    organization_id: int,
    current_user: UserProfile = Depends(require_supervisor),
    db: Session = Depends(get_db),
) -> None:
    OrganizationService(db).delete_organization(organization_id)
    audit_logger.log_record_deleted("organization", organization_id, str(current_user.id))


# =====================================
# Member Endpoints
# =====================================

@router.get(
    "/{organization_id}/members",
    response_model=List[MemberResponse],
    summary="List Members",
)
def list_members(
    organization_id: int,
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
) -> List[MemberResponse]:
    members = OrganizationService(db).list_members(organization_id)
    return [MemberResponse.model_validate(member) for member in members]


@router.post(
    "/{organization_id}/members",
    response_model=MemberResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add Member",
    description="Link a client (`pessoa_fisica`) or another organization (`pessoa_juridica`).",
    responses={409: {"model": ErrorResponse, "description": "Member already linked"}},
)
def add_member(
    organization_id: int,
    payload: MemberCreate,
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
) -> MemberResponse:
    member = OrganizationService(db).add_member(organization_id, payload)
    audit_logger.log_record_created("organization_member", member.id_membro_entidade, str(current_user.id))
    return MemberResponse.model_validate(member)


@router.put(
    "/{organization_id}/members/{member_id}",
    response_model=MemberResponse,
    summary="Update Member",
)
def update_member(
    organization_id: int,
    member_id: int,
    payload: MemberUpdate,
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
) -> MemberResponse:
    member = OrganizationService(db).update_member(organization_id, member_id, payload)
    audit_logger.log_record_updated("organization_member", member_id, str(current_user.id))
    return MemberResponse.model_validate(member)


@router.delete(
    "/{organization_id}/members/{member_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove Member",
)
def delete_member(
    organization_id: int,
    member_id: int,
    current_user: UserProfile = Depends(require_supervisor),
    db: Session = Depends(get_db),
) -> None:
    OrganizationService(db).delete_member(organization_id, member_id)
    audit_logger.log_record_deleted("organization_member", member_id, str(current_user.id))
