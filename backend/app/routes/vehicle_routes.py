"""
Vehicle Routes Module
=====================

CRUD endpoints for vehicles and their drivers, plus the FIPE reference
price lookups used by the vehicle form.

Security:
- Reads, writes and FIPE lookups require operator or higher
- Deletes require supervisor or higher
- All writes are audit logged
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.dependencies.pagination import PageParams, get_page_params
from app.core.dependencies.rbac import require_operator, require_supervisor
from app.core.enums import PartyType
from app.core.logging import audit_logger, get_logger
from app.db.session import get_db
from app.models.profile import UserProfile
from app.schemas import COMMON_RESPONSES, ErrorResponse, Page
from app.schemas.vehicle import (
    FipeOption,
    FipePrice,
    FipeQuoteUpdate,
    VehicleDetailResponse,
    VehicleResponse,
    VehicleUpsert,
)
from app.services.fipe_client import FipeClient, get_fipe_client
from app.services.vehicle_service import VehicleService

# Initialize logger
logger = get_logger(__name__)


# =====================================
# Router Setup
# =====================================

router = APIRouter(
    prefix="/vehicles",
    tags=["Vehicles"],
    responses=COMMON_RESPONSES,
)

FIPE_RESPONSES = {502: {"model": ErrorResponse, "description": "FIPE service failure"}}


# =====================================
# FIPE Endpoints
# =====================================

@router.get(
    "/fipe/brands",
    response_model=List[FipeOption],
    summary="List FIPE Brands",
    responses=FIPE_RESPONSES,
)
def list_fipe_brands(
    current_user: UserProfile = Depends(require_operator),
    fipe: FipeClient = Depends(get_fipe_client),
) -> List[FipeOption]:
    return fipe.list_brands()


@router.get(
    "/fipe/brands/{brand}/models",
    response_model=List[FipeOption],
    summary="List FIPE Models",
    responses=FIPE_RESPONSES,
)
def list_fipe_models(
    brand: str,
    current_user: UserProfile = Depends(require_operator),
    fipe: FipeClient = Depends(get_fipe_client),
) -> List[FipeOption]:
    return fipe.list_models(brand)


@router.get(
    "/fipe/brands/{brand}/models/{model}/years",
    response_model=List[FipeOption],
    summary="List FIPE Years",
    responses=FIPE_RESPONSES,
)
def list_fipe_years(
    brand: str,
    model: str,
    current_user: UserProfile = Depends(require_operator),
    fipe: FipeClient = Depends(get_fipe_client),
) -> List[FipeOption]:
    return fipe.list_years(brand, model)


@router.get(
    "/fipe/brands/{brand}/models/{model}/years/{year}",
    response_model=FipePrice,
    summary="Get FIPE Price",
    description="Reference price of a brand/model/year, with the value parsed to a decimal.",
    responses=FIPE_RESPONSES,
)
def get_fipe_price(
    brand: str,
    model: str,
    year: str,
    current_user: UserProfile = Depends(require_operator),
    fipe: FipeClient = Depends(get_fipe_client),
) -> FipePrice:
    return fipe.get_price(brand, model, year)


# =====================================
# Vehicle Endpoints
# =====================================

@router.get(
    "",
    response_model=Page[VehicleResponse],
    summary="List Vehicles",
    description="List vehicles, optionally searching by plate, brand, model or RENAVAM.",
)
def list_vehicles(
    search: Optional[str] = Query(None, description="Plate, brand, model or RENAVAM"),
    tipo_proprietario: Optional[PartyType] = Query(None, description="Owner type"),
    paging: PageParams = Depends(get_page_params),
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
) -> Page[VehicleResponse]:
    rows, total = VehicleService(db).list_vehicles(
        search=search,
        tipo_proprietario=tipo_proprietario,
        page=paging.page,
        page_size=paging.page_size,
    )
    return Page[VehicleResponse](
        items=[VehicleResponse.model_validate(row) for row in rows],
        total=total,
        page=paging.page,
        page_size=paging.page_size,
    )


@router.get(
    "/{vehicle_id}",
    response_model=VehicleDetailResponse,
    summary="Get Vehicle",
    description="Get a vehicle with its owner and drivers.",
    responses={404: {"model": ErrorResponse, "description": "Vehicle not found"}},
)
def get_vehicle(
    vehicle_id: int,
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
) -> VehicleDetailResponse:
    vehicle = VehicleService(db).get_vehicle(vehicle_id)
    return VehicleDetailResponse.model_validate(vehicle)


@router.post(
    "",
    response_model=VehicleDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Vehicle",
    description="""
    Create a vehicle with its drivers.

    - Each driver's license must belong to that driver
    - The license category is copied from the license
    """,
    responses={409: {"model": ErrorResponse, "description": "Plate, chassis or RENAVAM already registered"}},
)
def create_vehicle(
    payload: VehicleUpsert,
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
) -> VehicleDetailResponse:
    vehicle = VehicleService(db).create_vehicle(payload)
    audit_logger.log_record_created("vehicle", vehicle.id_veiculo, str(current_user.id))
    return VehicleDetailResponse.model_validate(vehicle)


@router.put(
    "/{vehicle_id}",
    response_model=VehicleDetailResponse,
    summary="Update Vehicle",
    description="Update a vehicle. The driver list replaces the current one.",
    responses={
        404: {"model": ErrorResponse, "description": "Vehicle not found"},
        409: {"model": ErrorResponse, "description": "Plate, chassis or RENAVAM already registered"},
    },
)
def update_vehicle(
    vehicle_id: int,
    payload: VehicleUpsert,
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
) -> VehicleDetailResponse:
    vehicle = VehicleService(db).update_vehicle(vehicle_id, payload)
    audit_logger.log_record_updated("vehicle", vehicle_id, str(current_user.id))
    return VehicleDetailResponse.model_validate(vehicle)


@router.post(
    "/{vehicle_id}/fipe",
    response_model=VehicleResponse,
    summary="Store FIPE Quote",
    description="Store the FIPE code, value and reference month on the vehicle.",
    responses={404: {"model": ErrorResponse, "description": "Vehicle not found"}},
)
def store_fipe_quote(
    vehicle_id: int,
    payload: FipeQuoteUpdate,
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
) -> VehicleResponse:
    vehicle = VehicleService(db).update_fipe_quote(vehicle_id, payload)
    audit_logger.log_record_updated(
        "vehicle",
        vehicle_id,
        str(current_user.id),
        changes={"codigo_fipe": vehicle.codigo_fipe, "valor_fipe": str(vehicle.valor_fipe)},
    )
    return VehicleResponse.model_validate(vehicle)


@router.delete(
    "/{vehicle_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Vehicle",
    description="Delete a vehicle and its driver links. Requires supervisor role.",
    responses={
        404: {"model": ErrorResponse, "description": "Vehicle not found"},
        409: {"model": ErrorResponse, "description": "Vehicle referenced by policies"},
    },
)
def delete_vehicle(
    vehicle_id: int,
    current_user: UserProfile = Depends(require_supervisor),
    db: Session = Depends(get_db),
) -> None:
    VehicleService(db).delete_vehicle(vehicle_id)
    audit_logger.log_record_deleted("vehicle", vehicle_id, str(current_user.id))
