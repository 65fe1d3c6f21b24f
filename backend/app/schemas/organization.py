"""
Organization Schemas Module
===========================

Pydantic models for organizations and their members.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.core.enums import MemberType
from app.schemas.common import blank_to_none, digits_only


def _required_role(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Role is required")
    return value


# ==========================
# Organization Schemas
# ==========================

class OrganizationUpsert(BaseModel):
    """Organization create/update payload."""

    nome: str = Field(..., min_length=1, max_length=255, description="Organization name")
    codigo_entidade: str = Field(..., min_length=1, max_length=50, description="Internal code")
    cnpj: str = Field(..., description="CNPJ, with or without punctuation")
    id_tipo_entidade: int = Field(..., description="Entity type id")
    telefone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[EmailStr] = None

    logradouro: Optional[str] = Field(default=None, max_length=255)
    numero: Optional[str] = Field(default=None, max_length=20)
    complemento: Optional[str] = Field(default=None, max_length=100)
    bairro: Optional[str] = Field(default=None, max_length=100)
    cep: Optional[str] = Field(default=None, max_length=9)
    cidade: Optional[str] = Field(default=None, max_length=100)
    estado_uf: Optional[str] = Field(default=None, max_length=2)

    blank_fields = field_validator(
        "telefone", "email", "logradouro", "numero", "complemento",
        "bairro", "cep", "cidade", "estado_uf",
        mode="before",
    )(blank_to_none)

    @field_validator("nome", "codigo_entidade")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field is required")
        return v

    @field_validator("cnpj")
    @classmethod
    def normalize_cnpj(cls, v: str) -> str:
        v = digits_only(v)
        if len(v) != 14:
            raise ValueError("CNPJ must have 14 digits")
        return v

    @field_validator("cep")
    @classmethod
    def normalize_cep(cls, v: Optional[str]) -> Optional[str]:
        return digits_only(v) or None

    @field_validator("estado_uf")
    @classmethod
    def upper_uf(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v else v

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "nome": "Cooperativa Central",
                "codigo_entidade": "COOP-001",
                "cnpj": "12.345.678/0001-95",
                "id_tipo_entidade": 1,
                "email": "contato@coop.com.br"
            }
        }
    )


class OrganizationResponse(BaseModel):
    """Organization response schema."""

    id_entidade: int
    nome: str
    codigo_entidade: str
    cnpj: str
    id_tipo_entidade: int
    nome_tipo: Optional[str] = None
    telefone: Optional[str] = None
    email: Optional[str] = None
    logradouro: Optional[str] = None
    numero: Optional[str] = None
    complemento: Optional[str] = None
    bairro: Optional[str] = None
    cep: Optional[str] = None
    cidade: Optional[str] = None
    estado_uf: Optional[str] = None
    data_cadastro: Optional[date] = None

    model_config = ConfigDict(from_attributes=True)


# ==========================
# Member Schemas
# ==========================

class MemberCreate(BaseModel):
    """Adds an individual or another organization as member."""

    tipo_membro: MemberType
    id_membro: int = Field(..., description="Client id or organization id, per tipo_membro")
    funcao: str = Field(..., min_length=1, max_length=100, description="Role inside the organization")
    data_associacao: date

    check_role = field_validator("funcao")(_required_role)


class MemberUpdate(BaseModel):
    funcao: str = Field(..., min_length=1, max_length=100)
    data_associacao: date

    check_role = field_validator("funcao")(_required_role)


class MemberResponse(BaseModel):
    id_membro_entidade: int
    id_entidade_pai: int
    tipo_membro: MemberType
    id_membro: int
    nome_membro: Optional[str] = None
    funcao: str
    data_associacao: Optional[date] = None

    model_config = ConfigDict(from_attributes=True)


class OrganizationDetailResponse(OrganizationResponse):
    members: List[MemberResponse] = Field(default_factory=list)
