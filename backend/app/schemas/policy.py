"""
Insurance Policy Schemas Module
===============================

Pydantic models for insurance policies.
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.core.enums import PartyType
from app.schemas.common import blank_to_none, parse_decimal


class PolicyUpsert(BaseModel):
    """
    Policy create/update payload.

    Money amounts accept a comma as decimal separator. ``coberturas`` and
    ``assistencias`` hold lookup ids and replace the current selection.
    """

    numero_apolice: str = Field(..., min_length=1, max_length=50)
    id_seguradora: int
    data_vigencia_inicio: date
    data_vigencia_fim: date
    data_contratacao: Optional[date] = None
    valor_indenizacao: Optional[Decimal] = Field(default=None, ge=0)
    franquia: Optional[Decimal] = Field(default=None, ge=0)
    tipo_titular: PartyType
    id_titular: int
    id_veiculo: Optional[int] = None
    observacoes: Optional[str] = None
    coberturas: List[int] = Field(default_factory=list)
    assistencias: List[int] = Field(default_factory=list)

    blank_fields = field_validator(
        "data_contratacao", "id_veiculo", "observacoes", mode="before"
    )(blank_to_none)
    parse_amounts = field_validator("valor_indenizacao", "franquia", mode="before")(parse_decimal)

    @field_validator("numero_apolice")
    @classmethod
    def strip_number(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Policy number is required")
        return v

    @field_validator("coberturas", "assistencias")
    @classmethod
    def unique_ids(cls, v: List[int]) -> List[int]:
        return list(dict.fromkeys(v))

    @model_validator(mode="after")
    def end_after_start(self) -> "PolicyUpsert":
        if self.data_vigencia_fim <= self.data_vigencia_inicio:
            raise ValueError("Coverage end date must be after the start date")
        return self

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "numero_apolice": "AP-2024-0001",
                "id_seguradora": 1,
                "data_vigencia_inicio": "2024-01-01",
                "data_vigencia_fim": "2025-01-01",
                "valor_indenizacao": "85000,00",
                "franquia": "2500,00",
                "tipo_titular": "pessoa_fisica",
                "id_titular": 3,
                "id_veiculo": 5,
                "coberturas": [1, 2],
                "assistencias": [1]
            }
        }
    )


class PolicyLookupRef(BaseModel):
    id: int
    nome: str


class PolicyResponse(BaseModel):
    """Policy response schema."""

    id_seguro: int
    numero_apolice: str
    id_seguradora: int
    nome_seguradora: Optional[str] = None
    data_vigencia_inicio: date
    data_vigencia_fim: date
    data_contratacao: Optional[date] = None
    valor_indenizacao: Optional[Decimal] = None
    franquia: Optional[Decimal] = None
    tipo_titular: PartyType
    id_titular: int
    nome_titular: Optional[str] = None
    id_veiculo: Optional[int] = None
    placa_veiculo: Optional[str] = None
    observacoes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class PolicyDetailResponse(PolicyResponse):
    coberturas: List[PolicyLookupRef] = Field(default_factory=list)
    assistencias: List[PolicyLookupRef] = Field(default_factory=list)
