"""
Vehicle Schemas Module
======================

Pydantic models for vehicles, their drivers and FIPE price lookups.
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.enums import PartyType
from app.schemas.common import blank_to_none, parse_decimal

SPECIES_PLACEHOLDER = "--select--"


# ==========================
# Driver Schemas
# ==========================

class VehicleDriverInput(BaseModel):
    id_motorista: int = Field(..., description="Client id of the driver")
    id_cnh: int = Field(..., description="License of that driver")


class VehicleDriverResponse(BaseModel):
    id_veiculo_motorista: int
    id_motorista: int
    nome_motorista: Optional[str] = None
    id_cnh: int
    numero_cnh: Optional[str] = None
    categoria_cnh: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# ==========================
# Vehicle Schemas
# ==========================

class VehicleUpsert(BaseModel):
    """
    Vehicle create/update payload.

    Drivers are replaced as a whole on update.
    """

    placa_atual: str = Field(..., min_length=1, max_length=10)
    placa_anterior: Optional[str] = Field(default=None, max_length=10)
    chassi: Optional[str] = Field(default=None, max_length=17)
    codigo_renavam: str = Field(..., min_length=1, max_length=11)
    marca: str = Field(..., min_length=1, max_length=100)
    modelo: str = Field(..., min_length=1, max_length=100)
    ano_fabricacao: int = Field(..., ge=1900, le=2100)
    ano_modelo: Optional[int] = Field(default=None, ge=1900, le=2100)
    cor: Optional[str] = Field(default=None, max_length=50)
    combustivel: Optional[str] = Field(default=None, max_length=50)
    tipo_especie: Optional[str] = Field(default=None, max_length=50)

    estado_crlv: Optional[str] = Field(default=None, max_length=2)
    numero_serie_crlv: Optional[str] = Field(default=None, max_length=50)
    data_expedicao_crlv: Optional[date] = None
    data_validade_crlv: Optional[date] = None

    tipo_proprietario: PartyType
    id_proprietario: int
    data_aquisicao: Optional[date] = None
    observacao: Optional[str] = None

    motoristas: List[VehicleDriverInput] = Field(default_factory=list)

    blank_fields = field_validator(
        "placa_anterior", "chassi", "ano_modelo", "cor", "combustivel", "tipo_especie",
        "estado_crlv", "numero_serie_crlv", "data_expedicao_crlv", "data_validade_crlv",
        "data_aquisicao", "observacao",
        mode="before",
    )(blank_to_none)

    @field_validator("placa_atual")
    @classmethod
    def required_plate(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("Plate is required")
        return v

    @field_validator("placa_anterior", "chassi", "estado_crlv")
    @classmethod
    def upper(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v else v

    @field_validator("codigo_renavam", "marca", "modelo")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field is required")
        return v

    @field_validator("tipo_especie")
    @classmethod
    def drop_placeholder(cls, v: Optional[str]) -> Optional[str]:
        if v == SPECIES_PLACEHOLDER:
            return None
        return v

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "placa_atual": "ABC1D23",
                "codigo_renavam": "12345678901",
                "marca": "Fiat",
                "modelo": "Strada",
                "ano_fabricacao": 2022,
                "ano_modelo": 2023,
                "combustivel": "Flex",
                "tipo_proprietario": "organizacao",
                "id_proprietario": 1,
                "motoristas": [{"id_motorista": 3, "id_cnh": 7}]
            }
        }
    )


class VehicleResponse(BaseModel):
    """Vehicle response schema."""

    id_veiculo: int
    placa_atual: str
    placa_anterior: Optional[str] = None
    chassi: Optional[str] = None
    codigo_renavam: str
    marca: str
    modelo: str
    ano_fabricacao: int
    ano_modelo: Optional[int] = None
    cor: Optional[str] = None
    combustivel: Optional[str] = None
    tipo_especie: Optional[str] = None
    estado_crlv: Optional[str] = None
    numero_serie_crlv: Optional[str] = None
    data_expedicao_crlv: Optional[date] = None
    data_validade_crlv: Optional[date] = None
    tipo_proprietario: PartyType
    id_proprietario: int
    nome_proprietario: Optional[str] = None
    data_aquisicao: Optional[date] = None
    codigo_fipe: Optional[str] = None
    valor_fipe: Optional[Decimal] = None
    mes_referencia_fipe: Optional[str] = None
    data_consulta_fipe: Optional[date] = None
    observacao: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class VehicleDetailResponse(VehicleResponse):
    drivers: List[VehicleDriverResponse] = Field(default_factory=list)


# ==========================
# FIPE Schemas
# ==========================

class FipeOption(BaseModel):
    """Brand, model or year entry of the FIPE catalogue."""

    codigo: str
    nome: str


class FipePrice(BaseModel):
    """Reference price of a brand/model/year."""

    valor: Decimal
    marca: str
    modelo: str
    ano_modelo: int
    combustivel: str
    codigo_fipe: str
    mes_referencia: str


class FipeQuoteUpdate(BaseModel):
    """FIPE quote stored on a vehicle."""

    codigo_fipe: str = Field(..., min_length=1, max_length=20)
    valor_fipe: Decimal = Field(..., ge=0)
    mes_referencia_fipe: str = Field(..., min_length=1, max_length=50)
    data_consulta_fipe: Optional[date] = None

    parse_value = field_validator("valor_fipe", mode="before")(parse_decimal)
