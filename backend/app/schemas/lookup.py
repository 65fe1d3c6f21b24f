"""
Lookup Schemas Module
=====================

Pydantic models for the reference tables edited on the settings screen.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.common import blank_to_none


def _required_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Name is required")
    return value


# ==========================
# Entity Types
# ==========================

class EntityTypeUpsert(BaseModel):
    nome_tipo: str = Field(..., max_length=100)

    check_name = field_validator("nome_tipo")(_required_name)


class EntityTypeResponse(BaseModel):
    id_tipo_entidade: int
    nome_tipo: str

    model_config = ConfigDict(from_attributes=True)


# ==========================
# Insurers
# ==========================

class InsurerUpsert(BaseModel):
    nome_seguradora: str = Field(..., max_length=150)

    check_name = field_validator("nome_seguradora")(_required_name)


class InsurerResponse(BaseModel):
    id_seguradora: int
    nome_seguradora: str

    model_config = ConfigDict(from_attributes=True)


# ==========================
# Coverages
# ==========================

class CoverageUpsert(BaseModel):
    nome_cobertura: str = Field(..., max_length=150)
    descricao_cobertura: Optional[str] = None

    check_name = field_validator("nome_cobertura")(_required_name)
    blank_description = field_validator("descricao_cobertura", mode="before")(blank_to_none)


class CoverageResponse(BaseModel):
    id_cobertura: int
    nome_cobertura: str
    descricao_cobertura: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# ==========================
# Assistances
# ==========================

class AssistanceUpsert(BaseModel):
    nome_assistencia: str = Field(..., max_length=150)
    descricao_assistencia: Optional[str] = None

    check_name = field_validator("nome_assistencia")(_required_name)
    blank_description = field_validator("descricao_assistencia", mode="before")(blank_to_none)


class AssistanceResponse(BaseModel):
    id_assistencia: int
    nome_assistencia: str
    descricao_assistencia: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# ==========================
# Vehicle Models
# ==========================

class VehicleModelUpsert(BaseModel):
    marca: str = Field(..., max_length=100)
    modelo: str = Field(..., max_length=100)
    versao: Optional[str] = Field(default=None, max_length=100)

    check_names = field_validator("marca", "modelo")(_required_name)
    blank_version = field_validator("versao", mode="before")(blank_to_none)


class VehicleModelResponse(BaseModel):
    id_modelo_veiculo: int
    marca: str
    modelo: str
    versao: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
