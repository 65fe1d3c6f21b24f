"""
Client Service Module
=====================

Business operations on individual clients and their driver licenses.

The client form also manages the client's link to an organization: for
every relationship type except ``cliente_geral`` a ``MembrosEntidade``
row is kept with ``funcao`` equal to the relationship type. Links added
from the organization screen with other roles are left untouched, and
linking the client to an organization where it holds such a role is a
conflict.
"""

from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.enums import RelationshipType
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.logging import get_logger
from app.core.query.query_filter import QueryFilter, paginate
from app.db.errors import commit_or_raise, flush_or_raise
from app.models.client import Client, DriverLicense
from app.models.organization import Organization, OrganizationMember
from app.schemas.client import ClientUpsert, DriverLicenseUpsert

# Initialize logger
logger = get_logger(__name__)

CPF_CONFLICT = "A client with this CPF already exists"
LICENSE_CONFLICT = "A license with this number already exists"
MEMBER_ROLE_CONFLICT = "The client is already a member of this organization with another role"

# Roles written by the client form
_RELATIONSHIP_ROLES = [r.value for r in RelationshipType if r != RelationshipType.CLIENTE_GERAL]


def _client_values(data: ClientUpsert) -> dict:
    values = data.model_dump(exclude={"id_entidade", "cnh"})
    values["tipo_relacao"] = data.tipo_relacao.value
    return values


class ClientService:
    """
    Client operations.

    Usage:
        service = ClientService(db)
        client = service.create_client(payload)
    """

    def __init__(self, db: Session):
        self.db = db

    # --------------------------
    # Clients
    # --------------------------

    def list_clients(
        self,
        search: Optional[str],
        tipo_relacao: Optional[str],
        page: int,
        page_size: int,
    ) -> Tuple[List[Client], int]:
        query = (
            QueryFilter(self.db.query(Client))
            .search([Client.nome_completo, Client.cpf, Client.email], search)
            .equals(Client.tipo_relacao, tipo_relacao)
            .build()
            .order_by(Client.nome_completo)
        )
        return paginate(query, page, page_size)

    def get_client(self, client_id: int) -> Client:
        client = self.db.get(Client, client_id)
        if client is None:
            raise NotFoundError(resource="Client", identifier=str(client_id))
        return client

    def create_client(self, data: ClientUpsert) -> Client:
        """
        Create a client, its organization link and an optional license.

        Raises:
            ConflictError: If the CPF or license number is taken
            ValidationError: If the organization does not exist
        """
        self._check_organization(data.id_entidade)

        client = Client(**_client_values(data))
        self.db.add(client)
        flush_or_raise(self.db, "Client", CPF_CONFLICT)

        self._sync_membership(client, data.tipo_relacao.value, data.id_entidade)

        if data.cnh is not None:
            self.db.add(DriverLicense(id_pessoa_fisica=client.id_pessoa_fisica, **data.cnh.model_dump()))
            flush_or_raise(self.db, "Driver license", LICENSE_CONFLICT)

        commit_or_raise(self.db, "Client", CPF_CONFLICT)
        self.db.refresh(client)

        logger.info("Client created", client_id=client.id_pessoa_fisica)
        return client

    def update_client(self, client_id: int, data: ClientUpsert) -> Client:
        client = self.get_client(client_id)
        self._check_organization(data.id_entidade)

        for field, value in _client_values(data).items():
            setattr(client, field, value)
        flush_or_raise(self.db, "Client", CPF_CONFLICT)

        self._sync_membership(client, data.tipo_relacao.value, data.id_entidade)

        commit_or_raise(self.db, "Client", CPF_CONFLICT)
        self.db.refresh(client)

        logger.info("Client updated", client_id=client_id)
        return client

    def delete_client(self, client_id: int) -> None:
        """
        Delete a client. Licenses and memberships are removed with it.

        Raises:
            RecordInUseError: If vehicles or policies still reference the client
        """
        client = self.get_client(client_id)
        self.db.delete(client)
        commit_or_raise(self.db, "Client", deleting=True)
        logger.info("Client deleted", client_id=client_id)

    def _check_organization(self, id_entidade: Optional[int]) -> None:
        if id_entidade is not None and self.db.get(Organization, id_entidade) is None:
            raise ValidationError("Organization not found", field="id_entidade")

    def _sync_membership(
        self,
        client: Client,
        tipo_relacao: str,
        id_entidade: Optional[int],
    ) -> None:
        """Keep exactly one relationship membership, or none for cliente_geral."""
        if id_entidade is not None:
            other_role = (
                self.db.query(OrganizationMember)
                .filter(
                    OrganizationMember.id_entidade_pai == id_entidade,
                    OrganizationMember.id_membro_pessoa_fisica == client.id_pessoa_fisica,
                    OrganizationMember.funcao.notin_(_RELATIONSHIP_ROLES),
                )
                .first()
            )
            if other_role is not None:
                raise ConflictError(
                    MEMBER_ROLE_CONFLICT,
                    details={"id_entidade": id_entidade, "funcao": other_role.funcao},
                )

        managed = (
            self.db.query(OrganizationMember)
            .filter(
                OrganizationMember.id_membro_pessoa_fisica == client.id_pessoa_fisica,
                OrganizationMember.funcao.in_(_RELATIONSHIP_ROLES),
            )
            .all()
        )

        kept = None
        for membership in managed:
            if membership.id_entidade_pai == id_entidade and kept is None:
                kept = membership
            else:
                self.db.delete(membership)
        self.db.flush()

        if id_entidade is None:
            return

        if kept is not None:
            kept.funcao = tipo_relacao
        else:
            self.db.add(OrganizationMember(
                id_entidade_pai=id_entidade,
                id_membro_pessoa_fisica=client.id_pessoa_fisica,
                funcao=tipo_relacao,
                data_associacao=client.data_cadastro,
            ))
        flush_or_raise(self.db, "Organization member")

    # --------------------------
    # Driver Licenses
    # --------------------------

    def list_licenses(self, client_id: int) -> List[DriverLicense]:
        return self.get_client(client_id).licenses

    def get_license(self, client_id: int, license_id: int) -> DriverLicense:
        license_ = self.db.get(DriverLicense, license_id)
        if license_ is None or license_.id_pessoa_fisica != client_id:
            raise NotFoundError(resource="Driver license", identifier=str(license_id))
        return license_

    def add_license(self, client_id: int, data: DriverLicenseUpsert) -> DriverLicense:
        self.get_client(client_id)
        license_ = DriverLicense(id_pessoa_fisica=client_id, **data.model_dump())
        self.db.add(license_)
        commit_or_raise(self.db, "Driver license", LICENSE_CONFLICT)
        self.db.refresh(license_)
        logger.info("Driver license added", client_id=client_id, license_id=license_.id_cnh)
        return license_

    def update_license(
        self,
        client_id: int,
        license_id: int,
        data: DriverLicenseUpsert,
    ) -> DriverLicense:
        license_ = self.get_license(client_id, license_id)
        for field, value in data.model_dump().items():
            setattr(license_, field, value)
        commit_or_raise(self.db, "Driver license", LICENSE_CONFLICT)
        self.db.refresh(license_)
        return license_

    def delete_license(self, client_id: int, license_id: int) -> None:
        license_ = self.get_license(client_id, license_id)
        self.db.delete(license_)
        commit_or_raise(self.db, "Driver license", deleting=True)
        logger.info("Driver license deleted", client_id=client_id, license_id=license_id)
