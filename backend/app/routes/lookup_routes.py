"""
Lookup Table Routes Module
==========================

CRUD endpoints for the reference tables behind the form selects:

- /lookups/insurers
- /lookups/coverages
- /lookups/assistances
- /lookups/entity-types
- /lookups/vehicle-models

Every table gets the same five endpoints from ``build_lookup_router``.

Security:
- Reads require operator or higher
- Writes require supervisor or higher
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.dependencies.pagination import PageParams, get_page_params
from app.core.dependencies.rbac import require_operator, require_supervisor
from app.core.logging import audit_logger, get_logger
from app.db.session import get_db
from app.models.profile import UserProfile
from app.schemas import COMMON_RESPONSES, ErrorResponse, Page
from app.services.lookup_service import LOOKUP_TABLES, LookupService, LookupTable

# Initialize logger
logger = get_logger(__name__)


def build_lookup_router(table: LookupTable) -> APIRouter:
    """
    Create the CRUD router of one lookup table.

    Args:
        table: Table description

    Returns:
        Router mounted at ``/{table.slug}``
    """
    upsert_schema = table.upsert_schema
    response_schema = table.response_schema
    resource = table.slug.replace("-", "_")

    router = APIRouter(prefix=f"/{table.slug}")

    @router.get(
        "",
        response_model=Page[response_schema],
        summary=f"List {table.label}s",
        name=f"list_{resource}",
    )
    def list_rows(
        search: Optional[str] = Query(None, description="Case-insensitive text search"),
        paging: PageParams = Depends(get_page_params),
        current_user: UserProfile = Depends(require_operator),
        db: Session = Depends(get_db),
    ):
        rows, total = LookupService(db, table).list_rows(search, paging.page, paging.page_size)
        return Page[response_schema](
            items=[response_schema.model_validate(row) for row in rows],
            total=total,
            page=paging.page,
            page_size=paging.page_size,
        )

    @router.get(
        "/{row_id}",
        response_model=response_schema,
        summary=f"Get {table.label}",
        name=f"get_{resource}",
        responses={404: {"model": ErrorResponse, "description": f"{table.label} not found"}},
    )
    def get_row(
        row_id: int,
        current_user: UserProfile = Depends(require_operator),
        db: Session = Depends(get_db),
    ):
        return response_schema.model_validate(LookupService(db, table).get_row(row_id))

    @router.post(
        "",
        response_model=response_schema,
        status_code=status.HTTP_201_CREATED,
        summary=f"Create {table.label}",
        name=f"create_{resource}",
        responses={409: {"model": ErrorResponse, "description": "Duplicate name"}},
    )
    def create_row(
        payload: upsert_schema,
        current_user: UserProfile = Depends(require_supervisor),
        db: Session = Depends(get_db),
    ):
        service = LookupService(db, table)
        row = service.create_row(payload)
        audit_logger.log_record_created(resource, service.primary_key(row), str(current_user.id))
        return response_schema.model_validate(row)

    @router.put(
        "/{row_id}",
        response_model=response_schema,
        summary=f"Update {table.label}",
        name=f"update_{resource}",
        responses={
            404: {"model": ErrorResponse, "description": f"{table.label} not found"},
            409: {"model": ErrorResponse, "description": "Duplicate name"},
        },
    )
    def update_row(
        row_id: int,
        payload: upsert_schema,
        current_user: UserProfile = Depends(require_supervisor),
        db: Session = Depends(get_db),
    ):
        row = LookupService(db, table).update_row(row_id, payload)
        audit_logger.log_record_updated(resource, row_id, str(current_user.id))
        return response_schema.model_validate(row)

    @router.delete(
        "/{row_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary=f"Delete {table.label}",
        name=f"delete_{resource}",
        responses={
            404: {"model": ErrorResponse, "description": f"{table.label} not found"},
            409: {"model": ErrorResponse, "description": "Row still referenced"},
        },
    )
    def delete_row(
        row_id: int,
        current_user: UserProfile = Depends(require_supervisor),
        db: Session = Depends(get_db),
    ) -> None:
        LookupService(db, table).delete_row(row_id)
        audit_logger.log_record_deleted(resource, row_id, str(current_user.id))

    return router


# =====================================
# Router Setup
# =====================================

router = APIRouter(
    prefix="/lookups",
    tags=["Lookup Tables"],
    responses=COMMON_RESPONSES,
)

for _table in LOOKUP_TABLES:
    router.include_router(build_lookup_router(_table))
