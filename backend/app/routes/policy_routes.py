"""
Insurance Policy Routes Module
==============================

CRUD endpoints for insurance policies.

Security:
- Reads and writes require operator or higher
- Deletes require supervisor or higher
- All writes are audit logged
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.dependencies.pagination import PageParams, get_page_params
from app.core.dependencies.rbac import require_operator, require_supervisor
from app.core.enums import PolicyStatus
from app.core.logging import audit_logger, get_logger
from app.db.session import get_db
from app.models.policy import InsurancePolicy
from app.models.profile import UserProfile
from app.schemas import COMMON_RESPONSES, ErrorResponse, Page
from app.schemas.policy import (
    PolicyDetailResponse,
    PolicyLookupRef,
    PolicyResponse,
    PolicyUpsert,
)
from app.services.policy_service import PolicyService

# Initialize logger
logger = get_logger(__name__)


# =====================================
# Router Setup
# =====================================

router = APIRouter(
    prefix="/policies",
    tags=["Insurance Policies"],
    responses=COMMON_RESPONSES,
)


def _detail(policy: InsurancePolicy) -> PolicyDetailResponse:
    response = PolicyDetailResponse.model_validate(policy)
    response.coberturas = [
        PolicyLookupRef(id=c.id_cobertura, nome=c.nome_cobertura) for c in policy.coverages
    ]
    response.assistencias = [
        PolicyLookupRef(id=a.id_assistencia, nome=a.nome_assistencia) for a in policy.assistances
    ]
    return response


# =====================================
# Policy Endpoints
# =====================================

@router.get(
    "",
    response_model=Page[PolicyResponse],
    summary="List Policies",
    description="""
    List policies.

    - `search` matches the policy number
    - `status=ativo` keeps policies ending today or later, `vencido` the expired ones
    """,
)
def list_policies(
    search: Optional[str] = Query(None, description="Policy number"),
    id_seguradora: Optional[int] = Query(None, description="Insurer id"),
    status_filter: Optional[PolicyStatus] = Query(None, alias="status", description="ativo or vencido"),
    paging: PageParams = Depends(get_page_params),
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
) -> Page[PolicyResponse]:
    rows, total = PolicyService(db).list_policies(
        search=search,
        id_seguradora=id_seguradora,
        status=status_filter,
        page=paging.page,
        page_size=paging.page_size,
    )
    return Page[PolicyResponse](
        items=[PolicyResponse.model_validate(row) for row in rows],
        total=total,
        page=paging.page,
        page_size=paging.page_size,
    )


@router.get(
    "/{policy_id}",
    response_model=PolicyDetailResponse,
    summary="Get Policy",
    description="Get a policy with its insurer, holder, vehicle, coverages and assistances.",
    responses={404: {"model": ErrorResponse, "description": "Policy not found"}},
)
def get_policy(
    policy_id: int,
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
) -> PolicyDetailResponse:
    return _detail(PolicyService(db).get_policy(policy_id))


@router.post(
    "",
    response_model=PolicyDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Policy",
    description="Money fields accept a comma as decimal separator (`\"1500,50\"`).",
    responses={409: {"model": ErrorResponse, "description": "Policy number already registered"}},
)
def create_policy(
    payload: PolicyUpsert,
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
) -> PolicyDetailResponse:
    policy = PolicyService(db).create_policy(payload)
    audit_logger.log_record_created("policy", policy.id_seguro, str(current_user.id))
    return _detail(policy)


@router.put(
    "/{policy_id}",
    response_model=PolicyDetailResponse,
    summary="Update Policy",
    description="Update a policy. Coverages and assistances replace the current selection.",
    responses={
        404: {"model": ErrorResponse, "description": "Policy not found"},
        409: {"model": ErrorResponse, "description": "Policy number already registered"},
    },
)
def update_policy(
    policy_id: int,
    payload: PolicyUpsert,
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
) -> PolicyDetailResponse:
    policy = PolicyService(db).update_policy(policy_id, payload)
    audit_logger.log_record_updated("policy", policy_id, str(current_user.id))
    return _detail(policy)


@router.delete(
    "/{policy_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Policy",
    responses={404: {"model": ErrorResponse, "description": "Policy not found"}},
)
def delete_policy(
    policy_id: int,
    current_user: UserProfile = Depends(require_supervisor),
    db: Session = Depends(get_db),
) -> None:
    PolicyService(db).delete_policy(policy_id)
    audit_logger.log_record_deleted("policy", policy_id, str(current_user.id))
