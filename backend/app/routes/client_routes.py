"""
Client Routes Module
====================

CRUD endpoints for individual clients and their driver licenses.

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
from app.core.enums import RelationshipType
from app.core.logging import audit_logger, get_logger
from app.db.session import get_db
from app.models.profile import UserProfile
from app.schemas import COMMON_RESPONSES, ErrorResponse, Page
from app.schemas.client import (
    ClientDetailResponse,
    ClientResponse,
    ClientUpsert,
    DriverLicenseResponse,
    DriverLicenseUpsert,
)
from app.services.client_service import ClientService

# Initialize logger
logger = get_logger(__name__)


# =====================================
# Router Setup
# =====================================

router = APIRouter(
    prefix="/clients",
    tags=["Clients"],
    responses=COMMON_RESPONSES,
)


# =====================================
# Client Endpoints
# =====================================

@router.get(
    "",
    response_model=Page[ClientResponse],
    summary="List Clients",
    description="List clients, optionally searching by name, CPF or email.",
)
def list_clients(
    search: Optional[str] = Query(None, description="Name, CPF or email"),
    tipo_relacao: Optional[RelationshipType] = Query(None, description="Relationship type"),
    paging: PageParams = Depends(get_page_params),
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
) -> Page[ClientResponse]:
    rows, total = ClientService(db).list_clients(
        search=search,
        tipo_relacao=tipo_relacao.value if tipo_relacao else None,
        page=paging.page,
        page_size=paging.page_size,
    )
    return Page[ClientResponse](
        items=[ClientResponse.model_validate(row) for row in rows],
        total=total,
        page=paging.page,
        page_size=paging.page_size,
    )


@router.get(
    "/{client_id}",
    response_model=ClientDetailResponse,
    summary="Get Client",
    description="Get a client with its licenses and organization links.",
    responses={404: {"model": ErrorResponse, "description": "Client not found"}},
)
def get_client(
    client_id: int,
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
) -> ClientDetailResponse:
    client = ClientService(db).get_client(client_id)
    return ClientDetailResponse.model_validate(client)


@router.post(
    "",
    response_model=ClientDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Client",
    description="""
    Create a client.

    - `id_entidade` is required unless `tipo_relacao` is `cliente_geral`
    - An optional `cnh` is created together with the client
    """,
    responses={409: {"model": ErrorResponse, "description": "CPF or license already registered"}},
)
def create_client(
    payload: ClientUpsert,
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
) -> ClientDetailResponse:
    client = ClientService(db).create_client(payload)
    audit_logger.log_record_created("client", client.id_pessoa_fisica, str(current_user.id))
    return ClientDetailResponse.model_validate(client)


@router.put(
    "/{client_id}",
    response_model=ClientDetailResponse,
    summary="Update Client",
    description="Update a client. Switching to `cliente_geral` removes the organization link.",
    responses={
        404: {"model": ErrorResponse, "description": "Client not found"},
        409: {"model": ErrorResponse, "description": "CPF already registered"},
    },
)
def update_client(
    client_id: int,
    payload: ClientUpsert,
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
) -> ClientDetailResponse:
    client = ClientService(db).update_client(client_id, payload)
    audit_logger.log_record_updated("client", client_id, str(current_user.id))
    return ClientDetailResponse.model_validate(client)


@router.delete(
    "/{client_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Client",
    description="Delete a client with its licenses and memberships. Requires supervisor role.",
    responses={
        404: {"model": ErrorResponse, "description": "Client not found"},
        409: {"model": ErrorResponse, "description": "Client referenced by vehicles or policies"},
    },
)
def delete_client(
    client_id: int,
    current_user: UserProfile = Depends(require_supervisor),
    db: Session = Depends(get_db),
) -> None:
    ClientService(db).delete_client(client_id)
    audit_logger.log_record_deleted("client", client_id, str(current_user.id))


# =====================================
# Driver License Endpoints
# =====================================

@router.get(
    "/{client_id}/licenses",
    response_model=List[DriverLicenseResponse],
    summary="List Driver Licenses",
)
def list_licenses(
    client_id: int,
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
) -> List[DriverLicenseResponse]:
    licenses = ClientService(db).list_licenses(client_id)
    return [DriverLicenseResponse.model_validate(row) for row in licenses]


@router.post(
    "/{client_id}/licenses",
    response_model=DriverLicenseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add Driver License",
    responses={409: {"model": ErrorResponse, "description": "License number already registered"}},
)
def add_license(
    client_id: int,
    payload: DriverLicenseUpsert,
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
) -> DriverLicenseResponse:
    license_ = ClientService(db).add_license(client_id, payload)
    audit_logger.log_record_created("driver_license", license_.id_cnh, str(current_user.id))
    return DriverLicenseResponse.model_validate(license_)


@router.put(
    "/{client_id}/licenses/{license_id}",
    response_model=DriverLicenseResponse,
    summary="Update Driver License",
)
def update_license(
    client_id: int,
    license_id: int,
    payload: DriverLicenseUpsert,
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
) -> DriverLicenseResponse:
    license_ = ClientService(db).update_license(client_id, license_id, payload)
    audit_logger.log_record_updated("driver_license", license_id, str(current_user.id))
    return DriverLicenseResponse.model_validate(license_)


@router.delete(
    "/{client_id}/licenses/{license_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Driver License",
)
def delete_license(
    client_id: int,
    license_id: int,
    current_user: UserProfile = Depends(require_supervisor),
    db: Session = Depends(get_db),
) -> None:
    ClientService(db).delete_license(client_id, license_id)
    audit_logger.log_record_deleted("driver_license", license_id, str(current_user.id))
