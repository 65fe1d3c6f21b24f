"""
Document Model
==============

Metadata of files kept in Supabase Storage (``Arquivos``).

A document is associated with at most one client, organization,
vehicle or policy. Deleting the associated record leaves the document
unassociated.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    String,
    Text,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship, Mapped, mapped_column

from app.core.enums import DocumentAssociation
from app.db.base import Base

if TYPE_CHECKING:
    from app.models.client import Client
    from app.models.organization import Organization
    from app.models.policy import InsurancePolicy
    from app.models.vehicle import Vehicle


class Document(Base):
    """Stored file and its association."""

    __tablename__ = "Arquivos"

    id_arquivo: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    nome_arquivo: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    tipo_documento: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    caminho_armazenamento: Mapped[str] = mapped_column(String(500), nullable=False, unique=True)
    mime_type: Mapped[Optional[str]] = mapped_column(String(150), nullable=True)
    tamanho_bytes: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    observacoes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    data_upload: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    # ==========================
    # Association (at most one)
    # ==========================
    id_pessoa_fisica: Mapped[Optional[int]] = mapped_column(
        ForeignKey("PessoasFisicas.id_pessoa_fisica", ondelete="SET NULL"),
        nullable=True,
    )
    id_entidade: Mapped[Optional[int]] = mapped_column(
        ForeignKey("Entidades.id_entidade", ondelete="SET NULL"),
        nullable=True,
    )
    id_veiculo: Mapped[Optional[int]] = mapped_column(
        ForeignKey("Veiculos.id_veiculo", ondelete="SET NULL"),
        nullable=True,
    )
    id_seguro: Mapped[Optional[int]] = mapped_column(
        ForeignKey("Seguros.id_seguro", ondelete="SET NULL"),
        nullable=True,
    )

    client: Mapped[Optional["Client"]] = relationship("Client")
    organization: Mapped[Optional["Organization"]] = relationship("Organization")
    vehicle: Mapped[Optional["Vehicle"]] = relationship("Vehicle")
    policy: Mapped[Optional["InsurancePolicy"]] = relationship("InsurancePolicy")

    __table_args__ = (
        CheckConstraint(
            "(CASE WHEN id_pessoa_fisica IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN id_entidade IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN id_veiculo IS NULL THEN 0 ELSE 1 END"
            " + CASE WHEN id_seguro IS NULL THEN 0 ELSE 1 END) <= 1",
            name="ck_arquivos_uma_associacao",
        ),
    )

    def __repr__(self) -> str:
        return f"<Document(id={self.id_arquivo}, nome={self.nome_arquivo})>"

    @property
    def tipo_associacao(self) -> str:
        if self.id_pessoa_fisica is not None:
            return DocumentAssociation.PESSOA_FISICA.value
        if self.id_entidade is not None:
            return DocumentAssociation.ORGANIZACAO.value
        if self.id_veiculo is not None:
            return DocumentAssociation.VEICULO.value
        if self.id_seguro is not None:
            return DocumentAssociation.SEGURO.value
        return DocumentAssociation.NENHUM.value

    @property
    def associado_a(self) -> Optional[str]:
        """Display label of the associated record."""
        if self.client is not None:
            return self.client.nome_completo
        if self.organization is not None:
            return self.organization.nome
        if self.vehicle is not None:
            return self.vehicle.placa_atual
        if self.policy is not None:
            return self.policy.numero_apolice
        return None
