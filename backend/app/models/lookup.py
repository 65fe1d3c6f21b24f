"""
Lookup Table Models
===================

Small reference tables used to populate form selects:
entity types, insurers, coverages, assistances and vehicle models.
"""

from typing import Optional

from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class EntityType(Base):
    """Kind of organization (cooperative, association, company...)."""

    __tablename__ = "TiposEntidade"

    id_tipo_entidade: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    nome_tipo: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<EntityType(id={self.id_tipo_entidade}, nome={self.nome_tipo})>"


class Insurer(Base):
    __tablename__ = "Seguradoras"

    id_seguradora: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    nome_seguradora: Mapped[str] = mapped_column(String(150), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<Insurer(id={self.id_seguradora}, nome={self.nome_seguradora})>"


class Coverage(Base):
    __tablename__ = "Coberturas"

    id_cobertura: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    nome_cobertura: Mapped[str] = mapped_column(String(150), nullable=False, unique=True)
    descricao_cobertura: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Coverage(id={self.id_cobertura}, nome={self.nome_cobertura})>"


class Assistance(Base):
    __tablename__ = "Assistencias"

    id_assistencia: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    nome_assistencia: Mapped[str] = mapped_column(String(150), nullable=False, unique=True)
    descricao_assistencia: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Assistance(id={self.id_assistencia}, nome={self.nome_assistencia})>"


class VehicleModel(Base):
    """Brand/model/version catalogue entry."""

    __tablename__ = "ModelosVeiculo"

    id_modelo_veiculo: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    marca: Mapped[str] = mapped_column(String(100), nullable=False)
    modelo: Mapped[str] = mapped_column(String(100), nullable=False)
    versao: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    __table_args__ = (
        UniqueConstraint("marca", "modelo", "versao", name="uq_modelos_veiculo_marca_modelo_versao"),
    )

    def __repr__(self) -> str:
        return f"<VehicleModel(id={self.id_modelo_veiculo}, {self.marca} {self.modelo})>"
