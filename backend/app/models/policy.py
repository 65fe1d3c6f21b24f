"""
Insurance Policy Models
=======================

Insurance contracts (``Seguros``) and their coverage/assistance links.

Every policy has exactly one holder (an individual client or an
organization) and is optionally tied to a vehicle.
"""

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    ForeignKey,
    Numeric,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from app.core.enums import PartyType
from app.db.base import Base

if TYPE_CHECKING:
    from app.models.client import Client
    from app.models.lookup import Assistance, Coverage, Insurer
    from app.models.organization import Organization
    from app.models.vehicle import Vehicle


# ==========================
# Association Tables
# ==========================

policy_coverages = Table(
    "SeguroCoberturas",
    Base.metadata,
    Column("id_seguro", ForeignKey("Seguros.id_seguro", ondelete="CASCADE"), primary_key=True),
    Column("id_cobertura", ForeignKey("Coberturas.id_cobertura", ondelete="RESTRICT"), primary_key=True),
)

policy_assistances = Table(
    "SeguroAssistencias",
    Base.metadata,
    Column("id_seguro", ForeignKey("Seguros.id_seguro", ondelete="CASCADE"), primary_key=True),
    Column("id_assistencia", ForeignKey("Assistencias.id_assistencia", ondelete="RESTRICT"), primary_key=True),
)


class InsurancePolicy(Base):
    """
    Insurance Policy Entity.

    Attributes:
        id_seguro: Integer primary key
        numero_apolice: Unique policy number
        id_seguradora: Insurer lookup
        data_vigencia_inicio: Start of coverage
        data_vigencia_fim: End of coverage, strictly after the start
        valor_indenizacao: Indemnity value
        franquia: Deductible
        coverages: Coverage lookups included in the contract
        assistances: Assistance lookups included in the contract
    """

    __tablename__ = "Seguros"

    # ==========================
    # Primary Key
    # ==========================
    id_seguro: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # ==========================
    # Contract
    # ==========================
    numero_apolice: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)

    id_seguradora: Mapped[int] = mapped_column(
        ForeignKey("Seguradoras.id_seguradora", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    data_vigencia_inicio: Mapped[date] = mapped_column(Date, nullable=False)
    data_vigencia_fim: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    data_contratacao: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    valor_indenizacao: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)
    franquia: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)

    observacoes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ==========================
    # Holder and Vehicle
    # ==========================
    id_titular_pessoa_fisica: Mapped[Optional[int]] = mapped_column(
        ForeignKey("PessoasFisicas.id_pessoa_fisica", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    id_titular_entidade: Mapped[Optional[int]] = mapped_column(
        ForeignKey("Entidades.id_entidade", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    id_veiculo: Mapped[Optional[int]] = mapped_column(
        ForeignKey("Veiculos.id_veiculo", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )

    # ==========================
    # Relationships
    # ==========================
    insurer: Mapped["Insurer"] = relationship("Insurer", lazy="joined")
    holder_client: Mapped[Optional["Client"]] = relationship("Client", lazy="joined")
    holder_organization: Mapped[Optional["Organization"]] = relationship("Organization", lazy="joined")
    vehicle: Mapped[Optional["Vehicle"]] = relationship("Vehicle")

    coverages: Mapped[List["Coverage"]] = relationship(
        "Coverage",
        secondary=policy_coverages,
        lazy="selectin",
    )
    assistances: Mapped[List["Assistance"]] = relationship(
        "Assistance",
        secondary=policy_assistances,
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint(
            "(id_titular_pessoa_fisica IS NULL) <> (id_titular_entidade IS NULL)",
            name="ck_seguros_um_titular",
        ),
        CheckConstraint(
            "data_vigencia_fim > data_vigencia_inicio",
            name="ck_seguros_vigencia",
        ),
    )

    def __repr__(self) -> str:
        return f"<InsurancePolicy(id={self.id_seguro}, apolice={self.numero_apolice})>"

    @property
    def tipo_titular(self) -> str:
        if self.id_titular_pessoa_fisica is not None:
            return PartyType.PESSOA_FISICA.value
        return PartyType.ORGANIZACAO.value

    @property
    def id_titular(self) -> Optional[int]:
        if self.id_titular_pessoa_fisica is not None:
            return self.id_titular_pessoa_fisica
        return self.id_titular_entidade

    @property
    def nome_titular(self) -> Optional[str]:
        if self.holder_client is not None:
            return self.holder_client.nome_completo
        if self.holder_organization is not None:
            return self.holder_organization.nome
        return None

    @property
    def nome_seguradora(self) -> Optional[str]:
        return self.insurer.nome_seguradora if self.insurer else None

    @property
    def placa_veiculo(self) -> Optional[str]:
        return self.vehicle.placa_atual if self.vehicle else None

    def is_active_on(self, day: date) -> bool:
        return self.data_vigencia_fim >= day
