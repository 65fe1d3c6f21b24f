"""
Dashboard Service Module
========================

Counters, upcoming expirations and chart series for the dashboard.
"""

from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models.client import Client, DriverLicense
from app.models.document import Document
from app.models.lookup import EntityType, Insurer
from app.models.organization import Organization
from app.models.policy import InsurancePolicy
from app.models.vehicle import Vehicle
from app.schemas.dashboard import (
    ChartPoint,
    DashboardCharts,
    DashboardSummary,
    DashboardTotals,
    ExpiringLicense,
    ExpiringPolicy,
)

# Initialize logger
logger = get_logger(__name__)

# Label for rows without a fuel type
NOT_INFORMED = "Não informado"

EXPIRING_LIMIT = 50


class DashboardService:
    """Dashboard aggregations."""

    def __init__(self, db: Session):
        self.db = db

    def _count(self, column, *criteria) -> int:
        return self.db.query(func.count(column)).filter(*criteria).scalar() or 0

    def get_summary(self, window_days: int, today: Optional[date] = None) -> DashboardSummary:
        """
        Totals plus licenses and policies expiring within ``window_days``.

        Active policies are the ones whose coverage ends today or later.
        """
        today = today or date.today()
        limit = today + timedelta(days=window_days)

        totals = DashboardTotals(
            organizations=self._count(Organization.id_entidade),
            clients=self._count(Client.id_pessoa_fisica),
            vehicles=self._count(Vehicle.id_veiculo),
            active_policies=self._count(
                InsurancePolicy.id_seguro,
                InsurancePolicy.data_vigencia_fim >= today,
            ),
            documents=self._count(Document.id_arquivo),
        )

        licenses = (
            self.db.query(DriverLicense, Client.nome_completo)
            .join(Client, Client.id_pessoa_fisica == DriverLicense.id_pessoa_fisica)
            .filter(DriverLicense.data_validade.between(today, limit))
            .order_by(DriverLicense.data_validade, Client.nome_completo)
            .limit(EXPIRING_LIMIT)
            .all()
        )

        policies = (
            self.db.query(InsurancePolicy)
            .filter(InsurancePolicy.data_vigencia_fim.between(today, limit))
            .order_by(InsurancePolicy.data_vigencia_fim, InsurancePolicy.numero_apolice)
            .limit(EXPIRING_LIMIT)
            .all()
        )

        summary = DashboardSummary(
            totals=totals,
            window_days=window_days,
            expiring_licenses=[
                ExpiringLicense(
                    id_cnh=license_.id_cnh,
                    id_pessoa_fisica=license_.id_pessoa_fisica,
                    nome_completo=nome,
                    numero_registro=license_.numero_registro,
                    categoria=license_.categoria,
                    data_validade=license_.data_validade,
                    days_left=(license_.data_validade - today).days,
                )
                for license_, nome in licenses
            ],
            expiring_policies=[
                ExpiringPolicy(
                    id_seguro=policy.id_seguro,
                    numero_apolice=policy.numero_apolice,
                    nome_seguradora=policy.nome_seguradora,
                    nome_titular=policy.nome_titular,
                    data_vigencia_fim=policy.data_vigencia_fim,
                    days_left=(policy.data_vigencia_fim - today).days,
                )
                for policy in policies
            ],
        )

        logger.debug(
            "Dashboard summary built",
            expiring_licenses=len(summary.expiring_licenses),
            expiring_policies=len(summary.expiring_policies),
        )
        return summary

    def get_charts(self) -> DashboardCharts:
        by_type = (
            self.db.query(EntityType.nome_tipo, func.count(Organization.id_entidade))
            .join(Organization, Organization.id_tipo_entidade == EntityType.id_tipo_entidade)
            .group_by(EntityType.nome_tipo)
            .order_by(func.count(Organization.id_entidade).desc(), EntityType.nome_tipo)
            .all()
        )

        fuel = func.coalesce(Vehicle.combustivel, NOT_INFORMED)
        by_fuel = (
            self.db.query(fuel, func.count(Vehicle.id_veiculo))
            .group_by(fuel)
            .order_by(func.count(Vehicle.id_veiculo).desc(), fuel)
            .all()
        )

        by_insurer = (
            self.db.query(Insurer.nome_seguradora, func.count(InsurancePolicy.id_seguro))
            .join(InsurancePolicy, InsurancePolicy.id_seguradora == Insurer.id_seguradora)
            .group_by(Insurer.nome_seguradora)
            .order_by(func.count(InsurancePolicy.id_seguro).desc(), Insurer.nome_seguradora)
            .all()
        )

        return DashboardCharts(
            organizations_by_type=_points(by_type),
            vehicles_by_fuel=_points(by_fuel),
            policies_by_insurer=_points(by_insurer),
        )


def _points(rows) -> List[ChartPoint]:
    return [ChartPoint(label=label, value=value) for label, value in rows]
