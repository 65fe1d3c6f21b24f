"""
Vehicle Models
==============

Fleet vehicles (``Veiculos``) and their authorized drivers
(``VeiculoMotoristas``).

Every vehicle has exactly one owner: an individual client or an
organization. FIPE columns cache the last reference-price lookup.

Database Indexes:
- Unique: placa_atual, chassi, codigo_renavam
- Unique: (id_veiculo, id_motorista)
"""

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship, Mapped, mapped_column

from app.core.enums import PartyType
from app.db.base import Base

if TYPE_CHECKING:
    from app.models.client import Client, DriverLicense
    from app.models.organization import Organization


class Vehicle(Base):
    """
    Vehicle Entity.

    Attributes:
        id_veiculo: Integer primary key
        placa_atual: Current plate, upper case
        codigo_renavam: National registry code
        id_proprietario_pessoa_fisica: Owner when it is an individual
        id_proprietario_entidade: Owner when it is an organization
        drivers: Authorized drivers
    """

    __tablename__ = "Veiculos"

    # ==========================
    # Primary Key
    # ==========================
    id_veiculo: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # ==========================
    # Identification
    # ==========================
    placa_atual: Mapped[str] = mapped_column(String(10), nullable=False, unique=True)
    placa_anterior: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    chassi: Mapped[Optional[str]] = mapped_column(String(17), nullable=True, unique=True)
    codigo_renavam: Mapped[str] = mapped_column(String(11), nullable=False, unique=True)

    # ==========================
    # Characteristics
    # ==========================
    marca: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    modelo: Mapped[str] = mapped_column(String(100), nullable=False)
    ano_fabricacao: Mapped[int] = mapped_column(Integer, nullable=False)
    ano_modelo: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    cor: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    combustivel: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    tipo_especie: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # ==========================
    # CRLV (registration certificate)
    # ==========================
    estado_crlv: Mapped[Optional[str]] = mapped_column(String(2), nullable=True)
    numero_serie_crlv: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    data_expedicao_crlv: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    data_validade_crlv: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # ==========================
    # Ownership
    # ==========================
    id_proprietario_pessoa_fisica: Mapped[Optional[int]] = mapped_column(
        ForeignKey("PessoasFisicas.id_pessoa_fisica", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    id_proprietario_entidade: Mapped[Optional[int]] = mapped_column(
        ForeignKey("Entidades.id_entidade", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    data_aquisicao: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # ==========================
    # FIPE reference price
    # ==========================
    codigo_fipe: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    valor_fipe: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)
    mes_referencia_fipe: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    data_consulta_fipe: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    observacao: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ==========================
    # Relationships
    # ==========================
    owner_client: Mapped[Optional["Client"]] = relationship("Client", lazy="joined")
    owner_organization: Mapped[Optional["Organization"]] = relationship("Organization", lazy="joined")

    drivers: Mapped[List["VehicleDriver"]] = relationship(
        "VehicleDriver",
        back_populates="vehicle",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint(
            "(id_proprietario_pessoa_fisica IS NULL) <> (id_proprietario_entidade IS NULL)",
            name="ck_veiculos_um_proprietario",
        ),
    )

    def __repr__(self) -> str:
        return f"<Vehicle(id={self.id_veiculo}, placa={self.placa_atual})>"

    @property
    def tipo_proprietario(self) -> str:
        if self.id_proprietario_pessoa_fisica is not None:
            return PartyType.PESSOA_FISICA.value
        return PartyType.ORGANIZACAO.value

    @property
    def id_proprietario(self) -> Optional[int]:
        if self.id_proprietario_pessoa_fisica is not None:
            return self.id_proprietario_pessoa_fisica
        return self.id_proprietario_entidade

    @property
    def nome_proprietario(self) -> Optional[str]:
        if self.owner_client is not None:
            return self.owner_client.nome_completo
        if self.owner_organization is not None:
            return self.owner_organization.nome
        return None


class VehicleDriver(Base):
    """Driver authorized on a vehicle, with the license used."""

    __tablename__ = "VeiculoMotoristas"

    id_veiculo_motorista: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    id_veiculo: Mapped[int] = mapped_column(
        ForeignKey("Veiculos.id_veiculo", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    id_motorista: Mapped[int] = mapped_column(
        ForeignKey("PessoasFisicas.id_pessoa_fisica", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    id_cnh: Mapped[int] = mapped_column(
        ForeignKey("CNHs.id_cnh", ondelete="CASCADE"),
        nullable=False,
    )
    categoria_cnh: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)

    vehicle: Mapped["Vehicle"] = relationship("Vehicle", back_populates="drivers")
    driver: Mapped["Client"] = relationship("Client", lazy="joined")
    license: Mapped["DriverLicense"] = relationship("DriverLicense", lazy="joined")

    __table_args__ = (
        UniqueConstraint("id_veiculo", "id_motorista", name="uq_veiculo_motoristas_veiculo_motorista"),
    )

    def __repr__(self) -> str:
        return f"<VehicleDriver(veiculo={self.id_veiculo}, motorista={self.id_motorista})>"

    @property
    def nome_motorista(self) -> Optional[str]:
        return self.driver.nome_completo if self.driver else None

    @property
    def numero_cnh(self) -> Optional[str]:
        return self.license.numero_registro if self.license else None
