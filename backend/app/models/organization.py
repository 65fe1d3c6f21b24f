"""
Organization Models
===================

Business accounts (``Entidades``) such as cooperatives, associations
and companies, and their members (``MembrosEntidade``).

A member is either an individual client or another organization.
Exactly one of the two member columns is set on every membership row.

Database Indexes:
- Unique: Entidades.codigo_entidade, Entidades.cnpj
- Unique: (id_entidade_pai, id_membro_pessoa_fisica)
- Unique: (id_entidade_pai, id_membro_entidade_filha)
"""

from datetime import date
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    CheckConstraint,
    Date,
    ForeignKey,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from app.core.enums import MemberType
from app.db.base import Base

if TYPE_CHECKING:
    from app.models.client import Client
    from app.models.lookup import EntityType


class Organization(Base):
    """
    Organization Entity.

    Attributes:
        id_entidade: Integer primary key
        nome: Display name
        codigo_entidade: Unique internal code
        cnpj: Company tax id, digits only
        id_tipo_entidade: Entity type lookup
        members: Membership rows where this organization is the parent
    """

    __tablename__ = "Entidades"

    # ==========================
    # Primary Key
    # ==========================
    id_entidade: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # ==========================
    # Organization Info
    # ==========================
    nome: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    codigo_entidade: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    cnpj: Mapped[str] = mapped_column(String(14), nullable=False, unique=True)

    id_tipo_entidade: Mapped[int] = mapped_column(
        ForeignKey("TiposEntidade.id_tipo_entidade", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    telefone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

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
    # Timestamps
    # ==========================
    data_cadastro: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)

    # ==========================
    # Relationships
    # ==========================
    entity_type: Mapped["EntityType"] = relationship("EntityType", lazy="joined")

    members: Mapped[List["OrganizationMember"]] = relationship(
        "OrganizationMember",
        back_populates="parent",
        foreign_keys="OrganizationMember.id_entidade_pai",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Organization(id={self.id_entidade}, nome={self.nome})>"

    @property
    def member_count(self) -> int:
        return len(self.members) if self.members else 0

    @property
    def nome_tipo(self) -> Optional[str]:
        return self.entity_type.nome_tipo if self.entity_type else None


class OrganizationMember(Base):
    """
    Link between an organization and one of its members.

    Attributes:
        id_entidade_pai: Organization that owns the membership
        id_membro_pessoa_fisica: Member when it is an individual
        id_membro_entidade_filha: Member when it is another organization
        funcao: Role of the member inside the organization
        data_associacao: Date the member joined
    """

    __tablename__ = "MembrosEntidade"

    id_membro_entidade: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    id_entidade_pai: Mapped[int] = mapped_column(
        ForeignKey("Entidades.id_entidade", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    id_membro_pessoa_fisica: Mapped[Optional[int]] = mapped_column(
        ForeignKey("PessoasFisicas.id_pessoa_fisica", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    id_membro_entidade_filha: Mapped[Optional[int]] = mapped_column(
        ForeignKey("Entidades.id_entidade", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    funcao: Mapped[str] = mapped_column(String(100), nullable=False)
    data_associacao: Mapped[Optional[date]] = mapped_column(Date, nullable=True, default=date.today)

    # ==========================
    # Relationships
    # ==========================
    parent: Mapped["Organization"] = relationship(
        "Organization",
        back_populates="members",
        foreign_keys=[id_entidade_pai],
    )

    person: Mapped[Optional["Client"]] = relationship(
        "Client",
        back_populates="memberships",
        foreign_keys=[id_membro_pessoa_fisica],
        lazy="joined",
    )

    child_organization: Mapped[Optional["Organization"]] = relationship(
        "Organization",
        foreign_keys=[id_membro_entidade_filha],
        lazy="joined",
    )

    __table_args__ = (
        CheckConstraint(
            "(id_membro_pessoa_fisica IS NULL) <> (id_membro_entidade_filha IS NULL)",
            name="ck_membros_entidade_um_membro",
        ),
        CheckConstraint(
            "id_membro_entidade_filha IS NULL OR id_membro_entidade_filha <> id_entidade_pai",
            name="ck_membros_entidade_nao_proprio",
        ),
        UniqueConstraint("id_entidade_pai", "id_membro_pessoa_fisica", name="uq_membros_entidade_pessoa"),
        UniqueConstraint("id_entidade_pai", "id_membro_entidade_filha", name="uq_membros_entidade_filha"),
    )

    def __repr__(self) -> str:
        return f"<OrganizationMember(id={self.id_membro_entidade}, pai={self.id_entidade_pai})>"

    @property
    def tipo_membro(self) -> str:
        if self.id_membro_pessoa_fisica is not None:
            return MemberType.PESSOA_FISICA.value
        return MemberType.PESSOA_JURIDICA.value

    @property
    def id_membro(self) -> Optional[int]:
        if self.id_membro_pessoa_fisica is not None:
            return self.id_membro_pessoa_fisica
        return self.id_membro_entidade_filha

    @property
    def nome_membro(self) -> Optional[str]:
        if self.person is not None:
            return self.person.nome_completo
        if self.child_organization is not None:
            return self.child_organization.nome
        return None
