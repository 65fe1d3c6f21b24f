"""
Client Schemas Module
=====================

Pydantic models for individual clients and their driver licenses.
"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from app.core.enums import RelationshipType
from app.schemas.common import blank_to_none, digits_only


# ==========================
# Driver License Schemas
# ==========================

class DriverLicenseUpsert(BaseModel):
    """Driver license (CNH) payload."""

    numero_registro: str = Field(..., min_length=1, max_length=20, description="CNH registry number")
    categoria: str = Field(..., min_length=1, max_length=5, description="CNH category (A, B, AB...)")
    data_emissao: date
    data_validade: date
    primeira_habilitacao: Optional[date] = None
    local_emissao_cidade: Optional[str] = Field(default=None, max_length=100)
    local_emissao_uf: Optional[str] = Field(default=None, max_length=2)
    observacoes_cnh: Optional[str] = None

    blank_fields = field_validator(
        "primeira_habilitacao", "local_emissao_cidade", "local_emissao_uf", "observacoes_cnh",
        mode="before",
    )(blank_to_none)

    @field_validator("numero_registro")
    @classmethod
    def strip_number(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("CNH number is required")
        return v

    @field_validator("categoria", "local_emissao_uf")
    @classmethod
    def upper(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v else v

    @model_validator(mode="after")
    def validity_after_issue(self) -> "DriverLicenseUpsert":
        if self.data_validade < self.data_emissao:
            raise ValueError("Expiry date cannot precede the issue date")
        return self


class DriverLicenseResponse(BaseModel):
    id_cnh: int
    id_pessoa_fisica: int
    numero_registro: str
    categoria: str
    data_emissao: date
    data_validade: date
    primeira_habilitacao: Optional[date] = None
    local_emissao_cidade: Optional[str] = None
    local_emissao_uf: Optional[str] = None
    observacoes_cnh: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# ==========================
# Client Schemas
# ==========================

class ClientUpsert(BaseModel):
    """
    Client create/update payload.

    ``id_entidade`` is required for every relationship type except
    ``cliente_geral``, for which it is discarded.
    """

    nome_completo: str = Field(..., min_length=1, max_length=255)
    cpf: str = Field(..., description="CPF, with or without punctuation")
    rg: Optional[str] = Field(default=None, max_length=20)
    data_nascimento: Optional[date] = None
    email: EmailStr
    telefone: Optional[str] = Field(default=None, max_length=20)
    tipo_relacao: RelationshipType
    id_entidade: Optional[int] = Field(default=None, description="Organization the client belongs to")

    logradouro: Optional[str] = Field(default=None, max_length=255)
    numero: Optional[str] = Field(default=None, max_length=20)
    complemento: Optional[str] = Field(default=None, max_length=100)
    bairro: Optional[str] = Field(default=None, max_length=100)
    cep: Optional[str] = Field(default=None, max_length=9)
    cidade: Optional[str] = Field(default=None, max_length=100)
    estado_uf: Optional[str] = Field(default=None, max_length=2)
    observacoes: Optional[str] = None

    cnh: Optional[DriverLicenseUpsert] = Field(
        default=None,
        description="License created together with the client (create only)"
    )

    blank_fields = field_validator(
        "rg", "data_nascimento", "telefone", "logradouro", "numero", "complemento",
        "bairro", "cep", "cidade", "estado_uf", "observacoes", "id_entidade",
        mode="before",
    )(blank_to_none)

    @field_validator("nome_completo")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Full name is required")
        return v

    @field_validator("cpf")
    @classmethod
    def normalize_cpf(cls, v: str) -> str:
        v = digits_only(v)
        if len(v) != 11:
            raise ValueError("CPF must have 11 digits")
        return v

    @field_validator("cep")
    @classmethod
    def normalize_cep(cls, v: Optional[str]) -> Optional[str]:
        return digits_only(v) or None

    @field_validator("estado_uf")
    @classmethod
    def upper_uf(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v else v

    @model_validator(mode="after")
    def organization_rule(self) -> "ClientUpsert":
        if self.tipo_relacao == RelationshipType.CLIENTE_GERAL:
            self.id_entidade = None
        elif self.id_entidade is None:
            raise ValueError("An organization is required for this relationship type")
        return self

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "nome_completo": "João da Silva",
                "cpf": "123.456.789-09",
                "email": "joao@example.com",
                "telefone": "(31) 99999-0000",
                "tipo_relacao": "associado",
                "id_entidade": 1,
                "cidade": "Belo Horizonte",
                "estado_uf": "MG"
            }
        }
    )


class ClientMembership(BaseModel):
    id_membro_entidade: int
    id_entidade_pai: int
    funcao: str
    data_associacao: Optional[date] = None

    model_config = ConfigDict(from_attributes=True)


class ClientResponse(BaseModel):
    """Client response schema."""

    id_pessoa_fisica: int
    nome_completo: str
    cpf: str
    rg: Optional[str] = None
    data_nascimento: Optional[date] = None
    email: str
    telefone: Optional[str] = None
    tipo_relacao: RelationshipType
    logradouro: Optional[str] = None
    numero: Optional[str] = None
    complemento: Optional[str] = None
    bairro: Optional[str] = None
    cep: Optional[str] = None
    cidade: Optional[str] = None
    estado_uf: Optional[str] = None
    observacoes: Optional[str] = None
    data_cadastro: Optional[date] = None

    model_config = ConfigDict(from_attributes=True)


class ClientDetailResponse(ClientResponse):
    """Client with licenses and organization links."""

    licenses: List[DriverLicenseResponse] = Field(default_factory=list)
    memberships: List[ClientMembership] = Field(default_factory=list)
