"""
Report Schemas Module
=====================

Filter models and row shapes of the filtered reports, plus the export
request forwarded to the external export service.

Every filter is optional. Blank values and the ``todos`` sentinel sent
by the report screens are ignored by the query builder.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.core.enums import ExportFormat, ReportName
from app.core.query.query_filter import is_blank


# ==========================
# Filters
# ==========================

class ReportFilters(BaseModel):
    """Base for report filter models."""

    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def drop_ignored_values(cls, data: Any) -> Any:
        """Blank values and ``todos`` mean no filter, whatever the field type."""
        if not isinstance(data, dict):
            return data
        return {key: None if is_blank(value) else value for key, value in data.items()}


class ClientReportFilters(ReportFilters):
    nome: Optional[str] = None
    cpf: Optional[str] = None
    tipo_relacao: Optional[str] = None
    id_entidade: Optional[str] = None
    numero_cnh: Optional[str] = None
    categoria_cnh: Optional[str] = None
    validade_cnh_de: Optional[date] = None
    validade_cnh_ate: Optional[date] = None
    mes_validade_cnh: Optional[int] = Field(default=None, ge=1, le=12)
    ano_validade_cnh: Optional[int] = Field(default=None, ge=1900, le=2200)


class OrganizationReportFilters(ReportFilters):
    nome: Optional[str] = None
    cnpj: Optional[str] = None
    id_tipo_entidade: Optional[str] = None
    data_cadastro_de: Optional[date] = None
    data_cadastro_ate: Optional[date] = None


class MemberReportFilters(ReportFilters):
    id_entidade: Optional[str] = None
    nome_membro: Optional[str] = None
    tipo_membro: Optional[str] = None
    funcao: Optional[str] = None
    data_associacao_de: Optional[date] = None
    data_associacao_ate: Optional[date] = None


class VehicleReportFilters(ReportFilters):
    placa: Optional[str] = None
    marca: Optional[str] = None
    modelo: Optional[str] = None
    ano_fabricacao: Optional[int] = None
    tipo_proprietario: Optional[str] = None
    id_proprietario: Optional[str] = None
    codigo_renavam: Optional[str] = None
    tipo_especie: Optional[str] = None
    combustivel: Optional[str] = None


class PolicyReportFilters(ReportFilters):
    numero_apolice: Optional[str] = None
    id_seguradora: Optional[str] = None
    vigencia_inicio_de: Optional[date] = None
    vigencia_fim_ate: Optional[date] = None
    valor_indenizacao_min: Optional[Decimal] = None
    valor_indenizacao_max: Optional[Decimal] = None
    tipo_titular: Optional[str] = None
    id_titular: Optional[str] = None
    id_veiculo: Optional[str] = None


class DocumentReportFilters(ReportFilters):
    titulo: Optional[str] = None
    tipo_documento: Optional[str] = None
    data_upload_de: Optional[date] = None
    data_upload_ate: Optional[date] = None
    tipo_associacao: Optional[str] = None
    id_associado: Optional[str] = None


# ==========================
# Rows
# ==========================

class ClientReportRow(BaseModel):
    id_pessoa_fisica: int
    nome_completo: str
    cpf: str
    email: str
    telefone: Optional[str] = None
    tipo_relacao: str
    nome_entidade: Optional[str] = None
    numero_cnh: Optional[str] = None
    categoria_cnh: Optional[str] = None
    validade_cnh: Optional[date] = None


class MemberReportRow(BaseModel):
    id_membro_entidade: int
    id_entidade: int
    nome_entidade: str
    tipo_membro: str
    id_membro: int
    nome_membro: Optional[str] = None
    funcao: str
    data_associacao: Optional[date] = None


# ==========================
# Export
# ==========================

class ExportRequest(BaseModel):
    """Export placeholder request."""

    format: ExportFormat = ExportFormat.PDF
    export_all: bool = Field(
        default=False,
        description="Ignore filters and export every row"
    )
    filters: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "format": "excel",
                "export_all": False,
                "filters": {"tipo_relacao": "associado"}
            }
        }
    )


class ExportResponse(BaseModel):
    report: ReportName
    format: ExportFormat
    status: str = "accepted"
    job_id: Optional[str] = None
    download_url: Optional[str] = None
