"""
Organization Service Module
===========================

Business operations on organizations and their members.
"""

from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.enums import MemberType
from app.core.exceptions import NotFoundError, ValidationError
from app.core.logging import get_logger
from app.core.query.query_filter import QueryFilter, paginate
from app.db.errors import commit_or_raise
from app.models.client import Client
from app.models.lookup import EntityType
from app.models.organization import Organization, OrganizationMember
from app.schemas.organization import MemberCreate, MemberUpdate, OrganizationUpsert

# Initialize logger
logger = get_logger(__name__)

ORGANIZATION_CONFLICT = "An organization with this code or CNPJ already exists"
MEMBER_CONFLICT = "This member is already linked to the organization"


class OrganizationService:
    """
    Organization operations.

    Usage:
        service = OrganizationService(db)
        members = service.list_members(organization_id)
    """

    def __init__(self, db: Session):
        self.db = db

    # --------------------------
    # Organizations
    # --------------------------

    def list_organizations(
        self,
        search: Optional[str],
        id_tipo_entidade: Optional[int],
        page: int,
        page_size: int,
    ) -> Tuple[List[Organization], int]:
        query = (
            QueryFilter(self.db.query(Organization))
            .search(
                [Organization.nome, Organization.codigo_entidade, Organization.cnpj],
                search,
            )
            .equals(Organization.id_tipo_entidade, id_tipo_entidade)
            .build()
            .order_by(Organization.nome)
        )
        return paginate(query, page, page_size)

    def get_organization(self, organization_id: int) -> Organization:
        organization = self.db.get(Organization, organization_id)
        if organization is None:
            raise NotFoundError(resource="Organization", identifier=str(organization_id))
        return organization

    def create_organization(self, data: OrganizationUpsert) -> Organization:
        self._check_entity_type(data.id_tipo_entidade)

        organization = Organization(**data.model_dump())
        self.db.add(organization)
        commit_or_raise(self.db, "Organization", ORGANIZATION_CONFLICT)
        self.db.refresh(organization)

        logger.info("Organization created", organization_id=organization.id_entidade)
        return organization

    def update_organization(self, organization_id: int, data: OrganizationUpsert) -> Organization:
        organization = self.get_organization(organization_id)
        self._check_entity_type(data.id_tipo_entidade)

        for field, value in data.model_dump().items():
            setattr(organization, field, value)
        commit_or_raise(self.db, "Organization", ORGANIZATION_CONFLICT)
        self.db.refresh(organization)

        logger.info("Organization updated", organization_id=organization_id)
        return organization

    def delete_organization(self, organization_id: int) -> None:
        """
        Delete an organization and its memberships.

        Raises:
            RecordInUseError: If vehicles or policies still reference it
        """
        organization = self.get_organization(organization_id)
        self.db.delete(organization)
        commit_or_raise(self.db, "Organization", deleting=True)
        logger.info("Organization deleted", organization_id=organization_id)

    def _check_entity_type(self, id_tipo_entidade: int) -> None:
        if self.db.get(EntityType, id_tipo_entidade) is None:
            raise ValidationError("Entity type not found", field="id_tipo_entidade")

    # --------------------------
    # Members
    # --------------------------

    def list_members(self, organization_id: int) -> List[OrganizationMember]:
        self.get_organization(organization_id)
        return (
            self.db.query(OrganizationMember)
            .filter(OrganizationMember.id_entidade_pai == organization_id)
            .order_by(OrganizationMember.data_associacao.desc(), OrganizationMember.id_membro_entidade)
            .all()
        )

    def get_member(self, organization_id: int, member_id: int) -> OrganizationMember:
        member = self.db.get(OrganizationMember, member_id)
        if member is None or member.id_entidade_pai != organization_id:
            raise NotFoundError(resource="Organization member", identifier=str(member_id))
        return member

    def add_member(self, organization_id: int, data: MemberCreate) -> OrganizationMember:
        """
        Link an individual or another organization.

        Raises:
            ValidationError: If the member does not exist or is the organization itself
            ConflictError: If the member is already linked
        """
        self.get_organization(organization_id)

        member = OrganizationMember(
            id_entidade_pai=organization_id,
            funcao=data.funcao,
            data_associacao=data.data_associacao,
        )

        if data.tipo_membro == MemberType.PESSOA_FISICA:
            if self.db.get(Client, data.id_membro) is None:
                raise ValidationError("Client not found", field="id_membro")
            member.id_membro_pessoa_fisica = data.id_membro
        else:
            if data.id_membro == organization_id:
                raise ValidationError(
                    "An organization cannot be a member of itself",
                    field="id_membro",
                )
            if self.db.get(Organization, data.id_membro) is None:
                raise ValidationError("Organization not found", field="id_membro")
            member.id_membro_entidade_filha = data.id_membro

        self.db.add(member)
        commit_or_raise(self.db, "Organization member", MEMBER_CONFLICT)
        self.db.refresh(member)

        logger.info(
            "Organization member added",
            organization_id=organization_id,
            member_id=member.id_membro_entidade,
            member_type=data.tipo_membro.value,
        )
        return member

    def update_member(
        self,
        organization_id: int,
        member_id: int,
        data: MemberUpdate,
    ) -> OrganizationMember:
        member = self.get_member(organization_id, member_id)
        member.funcao = data.funcao.strip()
        member.data_associacao = data.data_associacao
        commit_or_raise(self.db, "Organization member", MEMBER_CONFLICT)
        self.db.refresh(member)
        return member

    def delete_member(self, organization_id: int, member_id: int) -> None:
        member = self.get_member(organization_id, member_id)
        self.db.delete(member)
        commit_or_raise(self.db, "Organization member", deleting=True)
        logger.info(
            "Organization member removed",
            organization_id=organization_id,
            member_id=member_id,
        )
