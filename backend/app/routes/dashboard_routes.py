"""
Dashboard Routes Module
=======================

Counters, upcoming expirations and chart series for the home screen.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.dependencies.rbac import require_operator
from app.core.logging import get_logger
from app.db.session import get_db
from app.models.profile import UserProfile
from app.schemas import COMMON_RESPONSES
from app.schemas.dashboard import DashboardCharts, DashboardSummary
from app.services.dashboard_service import DashboardService

# Initialize logger
logger = get_logger(__name__)


# =====================================
# Router Setup
# =====================================

router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard"],
    responses=COMMON_RESPONSES,
)


@router.get(
    "/summary",
    response_model=DashboardSummary,
    summary="Dashboard Summary",
    description="Totals plus licenses and policies expiring within the window.",
)
def get_summary(
    days: Optional[int] = Query(
        None,
        ge=1,
        le=365,
        description="Expiration window in days (defaults to EXPIRY_WARNING_DAYS)",
    ),
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
) -> DashboardSummary:
    return DashboardService(db).get_summary(days or settings.EXPIRY_WARNING_DAYS)


@router.get(
    "/charts",
    response_model=DashboardCharts,
    summary="Dashboard Charts",
    description="Organizations by entity type, vehicles by fuel and policies by insurer.",
)
def get_charts(
    current_user: UserProfile = Depends(require_operator),
    db: Session = Depends(get_db),
) -> DashboardCharts:
    return DashboardService(db).get_charts()
