"""
Document Schemas Module
=======================

Pydantic models for stored documents.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from app.core.enums import DocumentAssociation, DocumentType
from app.schemas.common import blank_to_none

_SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB"]


def format_file_size(size_bytes: int) -> str:
    """
    Human readable size with up to two decimals.

    >>> format_file_size(1536)
    '1.5 KB'
    """
    if size_bytes <= 0:
        return "0 Bytes"
    value = float(size_bytes)
    index = 0
    while value >= 1024 and index < len(_SIZE_UNITS) - 1:
        value /= 1024
        index += 1
    return f"{round(value, 2):g} {_SIZE_UNITS[index]}"


class DocumentResponse(BaseModel):
    """Document metadata response."""

    id_arquivo: int
    nome_arquivo: str
    tipo_documento: DocumentType
    data_upload: datetime
    tamanho_bytes: int
    mime_type: Optional[str] = None
    observacoes: Optional[str] = None
    caminho_armazenamento: str
    tipo_associacao: DocumentAssociation
    id_pessoa_fisica: Optional[int] = None
    id_entidade: Optional[int] = None
    id_veiculo: Optional[int] = None
    id_seguro: Optional[int] = None
    associado_a: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def tamanho_formatado(self) -> str:
        return format_file_size(self.tamanho_bytes)


class DocumentUrlResponse(BaseModel):
    id_arquivo: int
    url: str


class DocumentUpdate(BaseModel):
    """
    Metadata edit. The stored file is never replaced.

    The association is rewritten as a whole: the ids left out are cleared.
    """

    titulo: str = Field(..., max_length=255, description="Display name")
    tipo_documento: DocumentType
    observacoes: Optional[str] = None
    id_pessoa_fisica: Optional[int] = None
    id_entidade: Optional[int] = None
    id_veiculo: Optional[int] = None
    id_seguro: Optional[int] = None

    blank_notes = field_validator("observacoes", mode="before")(blank_to_none)

    @field_validator("titulo")
    @classmethod
    def required_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v
