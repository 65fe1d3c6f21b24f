"""
Lookup Table Service Module
===========================

One generic CRUD service shared by the reference tables. Each table is
described by a ``LookupTable`` entry: the model, its id column, the
searchable text columns and the ordering.
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple, Type

from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.core.logging import get_logger
from app.core.query.query_filter import QueryFilter, paginate
from app.db.errors import commit_or_raise
from app.models.lookup import Assistance, Coverage, EntityType, Insurer, VehicleModel
from app.schemas.lookup import (
    AssistanceResponse,
    AssistanceUpsert,
    CoverageResponse,
    CoverageUpsert,
    EntityTypeResponse,
    EntityTypeUpsert,
    InsurerResponse,
    InsurerUpsert,
    VehicleModelResponse,
    VehicleModelUpsert,
)

# Initialize logger
logger = get_logger(__name__)


@dataclass(frozen=True)
class LookupTable:
    """Description of a lookup table exposed under ``/lookups/{slug}``."""

    slug: str
    label: str
    model: Type
    id_column: Any
    search_columns: Sequence[Any]
    order_by: Sequence[Any]
    upsert_schema: Type[BaseModel]
    response_schema: Type[BaseModel]
    conflict_message: str


LOOKUP_TABLES: List[LookupTable] = [
    LookupTable(
        slug="insurers",
        label="Insurer",
        model=Insurer,
        id_column=Insurer.id_seguradora,
        search_columns=[Insurer.nome_seguradora],
        order_by=[Insurer.nome_seguradora],
        upsert_schema=InsurerUpsert,
        response_schema=InsurerResponse,
        conflict_message="An insurer with this name already exists",
    ),
    LookupTable(
        slug="coverages",
        label="Coverage",
        model=Coverage,
        id_column=Coverage.id_cobertura,
        search_columns=[Coverage.nome_cobertura, Coverage.descricao_cobertura],
        order_by=[Coverage.nome_cobertura],
        upsert_schema=CoverageUpsert,
        response_schema=CoverageResponse,
        conflict_message="A coverage with this name already exists",
    ),
    LookupTable(
        slug="assistances",
        label="Assistance",
        model=Assistance,
        id_column=Assistance.id_assistencia,
        search_columns=[Assistance.nome_assistencia, Assistance.descricao_assistencia],
        order_by=[Assistance.nome_assistencia],
        upsert_schema=AssistanceUpsert,
        response_schema=AssistanceResponse,
        conflict_message="An assistance with this name already exists",
    ),
    LookupTable(
        slug="entity-types",
        label="Entity type",
        model=EntityType,
        id_column=EntityType.id_tipo_entidade,
        search_columns=[EntityType.nome_tipo],
        order_by=[EntityType.nome_tipo],
        upsert_schema=EntityTypeUpsert,
        response_schema=EntityTypeResponse,
        conflict_message="An entity type with this name already exists",
    ),
    LookupTable(
        slug="vehicle-models",
        label="Vehicle model",
        model=VehicleModel,
        id_column=VehicleModel.id_modelo_veiculo,
        search_columns=[VehicleModel.marca, VehicleModel.modelo, VehicleModel.versao],
        order_by=[VehicleModel.marca, VehicleModel.modelo, VehicleModel.versao],
        upsert_schema=VehicleModelUpsert,
        response_schema=VehicleModelResponse,
        conflict_message="This brand, model and version already exists",
    ),
]


class LookupService:
    """CRUD operations on one lookup table."""

    def __init__(self, db: Session, table: LookupTable):
        self.db = db
        self.table = table

    def list_rows(self, search: Optional[str], page: int, page_size: int) -> Tuple[List[Any], int]:
        query = (
            QueryFilter(self.db.query(self.table.model))
            .search(self.table.search_columns, search)
            .build()
            .order_by(*self.table.order_by)
        )
        return paginate(query, page, page_size)

    def get_row(self, row_id: int) -> Any:
        row = self.db.get(self.table.model, row_id)
        if row is None:
            raise NotFoundError(resource=self.table.label, identifier=str(row_id))
        return row

    def create_row(self, data: BaseModel) -> Any:
        row = self.table.model(**data.model_dump())
        self.db.add(row)
        commit_or_raise(self.db, self.table.label, self.table.conflict_message)
        self.db.refresh(row)
        logger.info("Lookup row created", table=self.table.slug, row_id=self.primary_key(row))
        return row

    def update_row(self, row_id: int, data: BaseModel) -> Any:
        row = self.get_row(row_id)
        for field, value in data.model_dump().items():
            setattr(row, field, value)
        commit_or_raise(self.db, self.table.label, self.table.conflict_message)
        self.db.refresh(row)
        logger.info("Lookup row updated", table=self.table.slug, row_id=row_id)
        return row

    def delete_row(self, row_id: int) -> None:
        """
        Raises:
            RecordInUseError: If other records still reference the row
        """
        row = self.get_row(row_id)
        self.db.delete(row)
        commit_or_raise(self.db, self.table.label, deleting=True)
        logger.info("Lookup row deleted", table=self.table.slug, row_id=row_id)

    def primary_key(self, row: Any) -> int:
        return getattr(row, self.table.id_column.key)
