"""
Vehicle Service Module
======================

Business operations on vehicles, their authorized drivers and the
cached FIPE reference price.
"""

from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.enums import PartyType
from app.core.exceptions import NotFoundError, ValidationError
from app.core.logging import get_logger
from app.core.query.query_filter import QueryFilter, paginate
from app.db.errors import commit_or_raise, flush_or_raise
from app.models.client import Client, DriverLicense
from app.models.organization import Organization
from app.models.vehicle import Vehicle, VehicleDriver
from app.schemas.vehicle import FipeQuoteUpdate, VehicleDriverInput, VehicleUpsert

# Initialize logger
logger = get_logger(__name__)

VEHICLE_CONFLICT = "A vehicle with this plate, chassis or RENAVAM already exists"

_OWNER_COLUMNS = {
    PartyType.PESSOA_FISICA: Vehicle.id_proprietario_pessoa_fisica,
    PartyType.ORGANIZACAO: Vehicle.id_proprietario_entidade,
}


class VehicleService:
    """
    Vehicle operations.

    Usage:
        service = VehicleService(db)
        vehicle = service.create_vehicle(payload)
    """

    def __init__(self, db: Session):
        self.db = db

    def list_vehicles(
        self,
        search: Optional[str],
        tipo_proprietario: Optional[PartyType],
        page: int,
        page_size: int,
    ) -> Tuple[List[Vehicle], int]:
        query = QueryFilter(self.db.query(Vehicle)).search(
            [Vehicle.placa_atual, Vehicle.marca, Vehicle.modelo, Vehicle.codigo_renavam],
            search,
        )
        if tipo_proprietario is not None:
            query = query.where(
                tipo_proprietario,
                lambda owner: _OWNER_COLUMNS[PartyType(owner)].is_not(None),
            )
        return paginate(query.build().order_by(Vehicle.placa_atual), page, page_size)

    def get_vehicle(self, vehicle_id: int) -> Vehicle:
        vehicle = self.db.get(Vehicle, vehicle_id)
        if vehicle is None:
            raise NotFoundError(resource="Vehicle", identifier=str(vehicle_id))
        return vehicle

    def create_vehicle(self, data: VehicleUpsert) -> Vehicle:
        """
        Create a vehicle with its drivers.

        Raises:
            ValidationError: If the owner or a driver license is invalid
            ConflictError: If plate, chassis or RENAVAM is taken
        """
        vehicle = Vehicle()
        self._apply(vehicle, data)
        self.db.add(vehicle)
        flush_or_raise(self.db, "Vehicle", VEHICLE_CONFLICT)

        self._replace_drivers(vehicle, data.motoristas)

        commit_or_raise(self.db, "Vehicle", VEHICLE_CONFLICT)
        self.db.refresh(vehicle)

        logger.info("Vehicle created", vehicle_id=vehicle.id_veiculo, drivers=len(data.motoristas))
        return vehicle

    def update_vehicle(self, vehicle_id: int, data: VehicleUpsert) -> Vehicle:
        vehicle = self.get_vehicle(vehicle_id)
        self._apply(vehicle, data)
        flush_or_raise(self.db, "Vehicle", VEHICLE_CONFLICT)

        self._replace_drivers(vehicle, data.motoristas)

        commit_or_raise(self.db, "Vehicle", VEHICLE_CONFLICT)
        self.db.refresh(vehicle)

        logger.info("Vehicle updated", vehicle_id=vehicle_id, drivers=len(data.motoristas))
        return vehicle

    def delete_vehicle(self, vehicle_id: int) -> None:
        """
        Delete a vehicle. Driver links are removed with it.

        Raises:
            RecordInUseError: If policies still reference the vehicle
        """
        vehicle = self.get_vehicle(vehicle_id)
        self.db.delete(vehicle)
        commit_or_raise(self.db, "Vehicle", deleting=True)
        logger.info("Vehicle deleted", vehicle_id=vehicle_id)

    def update_fipe_quote(self, vehicle_id: int, data: FipeQuoteUpdate) -> Vehicle:
        """Store the FIPE reference price consulted for the vehicle."""
        vehicle = self.get_vehicle(vehicle_id)
        vehicle.codigo_fipe = data.codigo_fipe.strip()
        vehicle.valor_fipe = data.valor_fipe
        vehicle.mes_referencia_fipe = data.mes_referencia_fipe.strip()
        vehicle.data_consulta_fipe = data.data_consulta_fipe or date.today()
        commit_or_raise(self.db, "Vehicle")
        self.db.refresh(vehicle)

        logger.info("FIPE quote stored", vehicle_id=vehicle_id, codigo_fipe=vehicle.codigo_fipe)
        return vehicle

    # --------------------------
    # Helpers
    # --------------------------

    def _apply(self, vehicle: Vehicle, data: VehicleUpsert) -> None:
        values = data.model_dump(exclude={"tipo_proprietario", "id_proprietario", "motoristas"})
        for field, value in values.items():
            setattr(vehicle, field, value)

        if data.tipo_proprietario == PartyType.PESSOA_FISICA:
            if self.db.get(Client, data.id_proprietario) is None:
                raise ValidationError("Owner client not found", field="id_proprietario")
            vehicle.id_proprietario_pessoa_fisica = data.id_proprietario
            vehicle.id_proprietario_entidade = None
        else:
            if self.db.get(Organization, data.id_proprietario) is None:
                raise ValidationError("Owner organization not found", field="id_proprietario")
            vehicle.id_proprietario_entidade = data.id_proprietario
            vehicle.id_proprietario_pessoa_fisica = None

    def _replace_drivers(self, vehicle: Vehicle, drivers: List[VehicleDriverInput]) -> None:
        """Replace the driver list. Each license must belong to its driver."""
        seen = set()
        rows = []
        for item in drivers:
            if item.id_motorista in seen:
                raise ValidationError(
                    "The same driver was listed more than once",
                    field="motoristas",
                )
            seen.add(item.id_motorista)

            license_ = self.db.get(DriverLicense, item.id_cnh)
            if license_ is None or license_.id_pessoa_fisica != item.id_motorista:
                raise ValidationError(
                    f"License {item.id_cnh} does not belong to driver {item.id_motorista}",
                    field="motoristas",
                )
            rows.append(VehicleDriver(
                id_motorista=item.id_motorista,
                id_cnh=item.id_cnh,
                categoria_cnh=license_.categoria,
            ))

        # Old rows go first so a driver can be listed again
        vehicle.drivers.clear()
        flush_or_raise(self.db, "Vehicle driver")
        vehicle.drivers.extend(rows)
        flush_or_raise(self.db, "Vehicle driver")
