"""
Client Models
=============

Individuals (``PessoasFisicas``) served by INBM and their driver
licenses (``CNHs``).

Database Indexes:
- Unique: PessoasFisicas.cpf (digits only)
- Unique: CNHs.numero_registro
- Index: CNHs.id_pessoa_fisica, CNHs.data_validade
"""

from datetime import date
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    Date,
    ForeignKey,
    Index,
    String,
    Text,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from app.db.base import Base

if TYPE_CHECKING:
    from app.models.organization import OrganizationMember


class Client(Base):
    """
    Individual client record.

    A client relates to INBM through ``tipo_relacao``. Every type except
    ``cliente_geral`` is tied to an organization through a membership row.

    Attributes:
        id_pessoa_fisica: Integer primary key
        nome_completo: Full name
        cpf: Individual tax id, digits only
        tipo_relacao: associado, cooperado, funcionario or cliente_geral
        licenses: Driver licenses, newest expiry first
        memberships: Organization links where this client is the member
    """

    __tablename__ = "PessoasFisicas"

    # ==========================
    # Primary Key
    # ==========================
    id_pessoa_fisica: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # ==========================
    # Identity
    # ==========================
    nome_completo: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    cpf: Mapped[str] = mapped_column(String(11), nullable=False, unique=True)
    rg: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    data_nascimento: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # ==========================
    # Contact
    # ==========================
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    telefone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # ==========================
    # Address
    # ==========================
    logradouro: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    numero: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    complemento: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    bairro: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    cep: Mapped[Optional[str]] = mapped_column(String(9), nullable=True)
    cidade: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    estado_uf: Mapped[Optional[str]] = mapped_column(String(2), nullable=True)

    # ==========================
    # Relationship With INBM
    # ==========================
    tipo_relacao: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    observacoes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    data_cadastro: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)

    # ==========================
    # Relationships
    # ==========================
    licenses: Mapped[List["DriverLicense"]] = relationship(
        "DriverLicense",
        back_populates="client",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="DriverLicense.data_validade.desc()",
        lazy="selectin",
    )

    memberships: Mapped[List["OrganizationMember"]] = relationship(
        "OrganizationMember",
        back_populates="person",
        foreign_keys="OrganizationMember.id_membro_pessoa_fisica",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Client(id={self.id_pessoa_fisica}, nome={self.nome_completo})>"

    @property
    def current_license(self) -> Optional["DriverLicense"]:
        """License with the latest expiry date, if any."""
        return self.licenses[0] if self.licenses else None


class DriverLicense(Base):
    """
    Driver license (CNH) of a client.
    """

    __tablename__ = "CNHs"

    id_cnh: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    id_pessoa_fisica: Mapped[int] = mapped_column(
        ForeignKey("PessoasFisicas.id_pessoa_fisica", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    numero_registro: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    categoria: Mapped[str] = mapped_column(String(5), nullable=False)
    data_emissao: Mapped[date] = mapped_column(Date, nullable=False)
    data_validade: Mapped[date] = mapped_column(Date, nullable=False)
    primeira_habilitacao: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    local_emissao_cidade: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    local_emissao_uf: Mapped[Optional[str]] = mapped_column(String(2), nullable=True)
    observacoes_cnh: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    client: Mapped["Client"] = relationship("Client", back_populates="licenses")

    __table_args__ = (
        Index("ix_cnhs_data_validade", "data_validade"),
    )

    def __repr__(self) -> str:
        return f"<DriverLicense(id={self.id_cnh}, numero={self.numero_registro})>"
