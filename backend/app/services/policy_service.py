"""
Insurance Policy Service Module
===============================

Business operations on insurance policies, including the coverage and
assistance selections.
"""

from datetime import date
from typing import List, Optional, Sequence, Tuple, Type

from sqlalchemy.orm import Session

from app.core.enums import PartyType, PolicyStatus
from app.core.exceptions import NotFoundError, ValidationError
from app.core.logging import get_logger
from app.core.query.query_filter import QueryFilter, paginate
from app.db.errors import commit_or_raise
from app.models.client import Client
from app.models.lookup import Assistance, Coverage, Insurer
from app.models.organization import Organization
from app.models.policy import InsurancePolicy
from app.models.vehicle import Vehicle
from app.schemas.policy import PolicyUpsert

# Initialize logger
logger = get_logger(__name__)

POLICY_CONFLICT = "A policy with this number already exists"


class PolicyService:
    """
    Insurance policy operations.

    Usage:
        service = PolicyService(db)
        rows, total = service.list_policies(None, None, PolicyStatus.ATIVO, 1, 20)
    """

    def __init__(self, db: Session):
        self.db = db

    def list_policies(
        self,
        search: Optional[str],
        id_seguradora: Optional[int],
        status: Optional[PolicyStatus],
        page: int,
        page_size: int,
        today: Optional[date] = None,
    ) -> Tuple[List[InsurancePolicy], int]:
        """
        List policies.

        ``ativo`` policies end today or later. ``vencido`` ones ended before today.
        """
        today = today or date.today()
        query = (
            QueryFilter(self.db.query(InsurancePolicy))
            .icontains(InsurancePolicy.numero_apolice, search)
            .equals(InsurancePolicy.id_seguradora, id_seguradora)
            .where(
                status,
                lambda s: InsurancePolicy.data_vigencia_fim >= today
                if PolicyStatus(s) == PolicyStatus.ATIVO
                else InsurancePolicy.data_vigencia_fim < today,
            )
            .build()
            .order_by(InsurancePolicy.data_vigencia_fim.desc(), InsurancePolicy.numero_apolice)
        )
        return paginate(query, page, page_size)

    def get_policy(self, policy_id: int) -> InsurancePolicy:
        policy = self.db.get(InsurancePolicy, policy_id)
        if policy is None:
            raise NotFoundError(resource="Insurance policy", identifier=str(policy_id))
        return policy

    def create_policy(self, data: PolicyUpsert) -> InsurancePolicy:
        """
        Create a policy with its coverages and assistances.

        Raises:
            ValidationError: If a referenced record does not exist
            ConflictError: If the policy number is taken
        """
        policy = InsurancePolicy()
        self._apply(policy, data)
        self.db.add(policy)
        commit_or_raise(self.db, "Insurance policy", POLICY_CONFLICT)
        self.db.refresh(policy)

        logger.info("Insurance policy created", policy_id=policy.id_seguro)
        return policy

    def update_policy(self, policy_id: int, data: PolicyUpsert) -> InsurancePolicy:
        policy = self.get_policy(policy_id)
        self._apply(policy, data)
        commit_or_raise(self.db, "Insurance policy", POLICY_CONFLICT)
        self.db.refresh(policy)

        logger.info("Insurance policy updated", policy_id=policy_id)
        return policy

    def delete_policy(self, policy_id: int) -> None:
        policy = self.get_policy(policy_id)
        self.db.delete(policy)
        commit_or_raise(self.db, "Insurance policy", deleting=True)
        logger.info("Insurance policy deleted", policy_id=policy_id)

    # --------------------------
    # Helpers
    # --------------------------

    def _apply(self, policy: InsurancePolicy, data: PolicyUpsert) -> None:
        if self.db.get(Insurer, data.id_seguradora) is None:
            raise ValidationError("Insurer not found", field="id_seguradora")
        if data.id_veiculo is not None and self.db.get(Vehicle, data.id_veiculo) is None:
            raise ValidationError("Vehicle not found", field="id_veiculo")

        if data.tipo_titular == PartyType.PESSOA_FISICA:
            if self.db.get(Client, data.id_titular) is None:
                raise ValidationError("Holder client not found", field="id_titular")
            policy.id_titular_pessoa_fisica = data.id_titular
            policy.id_titular_entidade = None
        else:
            if self.db.get(Organization, data.id_titular) is None:
                raise ValidationError("Holder organization not found", field="id_titular")
            policy.id_titular_entidade = data.id_titular
            policy.id_titular_pessoa_fisica = None

        values = data.model_dump(
            exclude={"tipo_titular", "id_titular", "coberturas", "assistencias"}
        )
        for field, value in values.items():
            setattr(policy, field, value)

        policy.coverages = self._load_lookups(Coverage, Coverage.id_cobertura, data.coberturas, "coberturas")
        policy.assistances = self._load_lookups(
            Assistance, Assistance.id_assistencia, data.assistencias, "assistencias"
        )

    def _load_lookups(self, model: Type, id_column, ids: Sequence[int], field: str) -> list:
        if not ids:
            return []
        rows = self.db.query(model).filter(id_column.in_(ids)).all()
        found = {getattr(row, id_column.key) for row in rows}
        missing = [i for i in ids if i not in found]
        if missing:
            raise ValidationError(
                f"Unknown ids in {field}",
                field=field,
                details={"missing": missing},
            )
        return rows
