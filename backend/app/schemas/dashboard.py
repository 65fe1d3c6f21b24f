"""
Dashboard Schemas Module
========================

Pydantic models for the dashboard summary and charts.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field


class DashboardTotals(BaseModel):
    organizations: int = 0
    clients: int = 0
    vehicles: int = 0
    active_policies: int = 0
    documents: int = 0


class ExpiringLicense(BaseModel):
    id_cnh: int
    id_pessoa_fisica: int
    nome_completo: str
    numero_registro: str
    categoria: str
    data_validade: date
    days_left: int


class ExpiringPolicy(BaseModel):
    id_seguro: int
    numero_apolice: str
    nome_seguradora: Optional[str] = None
    nome_titular: Optional[str] = None
    data_vigencia_fim: date
    days_left: int


class DashboardSummary(BaseModel):
    """Counters and upcoming expirations."""

    totals: DashboardTotals
    window_days: int = Field(..., description="Expiration window in days")
    expiring_licenses: List[ExpiringLicense] = Field(default_factory=list)
    expiring_policies: List[ExpiringPolicy] = Field(default_factory=list)


class ChartPoint(BaseModel):
    label: str
    value: int


class DashboardCharts(BaseModel):
    organizations_by_type: List[ChartPoint] = Field(default_factory=list)
    vehicles_by_fuel: List[ChartPoint] = Field(default_factory=list)
    policies_by_insurer: List[ChartPoint] = Field(default_factory=list)
