"""
Client Service Unit Tests
=========================

Tests for client registration covering:
- Creation with organization link and license
- Membership sync when the relationship type or organization changes
- CPF and license conflicts
- License ownership checks
"""

from datetime import date

import pytest
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, NotFoundError, RecordInUseError, ValidationError
from app.models import Client, DriverLicense, OrganizationMember
from app.schemas.client import ClientUpsert, DriverLicenseUpsert
from app.services.client_service import ClientService


pytestmark = pytest.mark.unit


def _payload(**overrides) -> ClientUpsert:
    values = {
        "nome_completo": "Ana Lima",
        "cpf": "111.444.777-35",
        "email": "ana@example.com",
        "tipo_relacao": "associado",
    }
    values.update(overrides)
    return ClientUpsert(**values)


def _memberships(db: Session, client_id: int):
    return (
        db.query(OrganizationMember)
        .filter(OrganizationMember.id_membro_pessoa_fisica == client_id)
        .all()
    )


class TestCreateClient:

    def test_creates_membership_with_relationship_role(self, db_session: Session, sample_organization):
        client = ClientService(db_session).create_client(
            _payload(id_entidade=sample_organization.id_entidade)
        )

        memberships = _memberships(db_session, client.id_pessoa_fisica)
        assert client.cpf == "11144477735"
        assert len(memberships) == 1
        assert memberships[0].id_entidade_pai == sample_organization.id_entidade
        assert memberships[0].funcao == "associado"

    def test_general_client_has_no_membership(self, db_session: Session, sample_organization):
        client = ClientService(db_session).create_client(
            _payload(tipo_relacao="cliente_geral", id_entidade=sample_organization.id_entidade)
        )

        assert _memberships(db_session, client.id_pessoa_fisica) == []

    def test_creates_license_together(self, db_session: Session, sample_organization):
        cnh = DriverLicenseUpsert(
            numero_registro="CNH-NEW",
            categoria="b",
            data_emissao=date(2024, 1, 1),
            data_validade=date(2034, 1, 1),
        )

        client = ClientService(db_session).create_client(
            _payload(id_entidade=sample_organization.id_entidade, cnh=cnh)
        )

        assert [lic.numero_registro for lic in client.licenses] == ["CNH-NEW"]
        assert client.current_license.categoria == "B"

    def test_duplicate_cpf(self, db_session: Session, sample_client, sample_organization):
        with pytest.raises(ConflictError) as exc_info:
            ClientService(db_session).create_client(
                _payload(cpf=sample_client.cpf, id_entidade=sample_organization.id_entidade)
            )

        assert "CPF" in exc_info.value.message

    def test_unknown_organization(self, db_session: Session):
        with pytest.raises(ValidationError) as exc_info:
            ClientService(db_session).create_client(_payload(id_entidade=999))

        assert exc_info.value.details["field"] == "id_entidade"
        assert db_session.query(Client).count() == 0


class TestMembershipSync:

    def test_moving_to_another_organization(self, db_session: Session, sample_client, second_organization):
        ClientService(db_session).update_client(
            sample_client.id_pessoa_fisica,
            _payload(
                cpf=sample_client.cpf,
                tipo_relacao="cooperado",
                id_entidade=second_organization.id_entidade,
            ),
        )

        memberships = _memberships(db_session, sample_client.id_pessoa_fisica)
        assert [(m.id_entidade_pai, m.funcao) for m in memberships] == [
            (second_organization.id_entidade, "cooperado")
        ]

    def test_becoming_general_client_removes_link(self, db_session: Session, sample_client):
        ClientService(db_session).update_client(
            sample_client.id_pessoa_fisica,
            _payload(cpf=sample_client.cpf, tipo_relacao="cliente_geral"),
        )

        assert _memberships(db_session, sample_client.id_pessoa_fisica) == []

    def test_other_roles_are_kept(self, db_session: Session, sample_client, second_organization):
        """Links added from the organization screen survive a client edit."""
        db_session.add(OrganizationMember(
            id_entidade_pai=second_organization.id_entidade,
            id_membro_pessoa_fisica=sample_client.id_pessoa_fisica,
            funcao="diretor",
        ))
        db_session.commit()

        ClientService(db_session).update_client(
            sample_client.id_pessoa_fisica,
            _payload(cpf=sample_client.cpf, tipo_relacao="cliente_geral"),
        )

        memberships = _memberships(db_session, sample_client.id_pessoa_fisica)
        assert [m.funcao for m in memberships] == ["diretor"]

    def test_link_to_organization_with_other_role_conflicts(self, db_session: Session, sample_client,
                                                            sample_organization, second_organization):
        db_session.add(OrganizationMember(
            id_entidade_pai=second_organization.id_entidade,
            id_membro_pessoa_fisica=sample_client.id_pessoa_fisica,
            funcao="diretor",
        ))
        db_session.commit()

        with pytest.raises(ConflictError) as exc_info:
            ClientService(db_session).update_client(
                sample_client.id_pessoa_fisica,
                _payload(
                    cpf=sample_client.cpf,
                    tipo_relacao="associado",
                    id_entidade=second_organization.id_entidade,
                ),
            )
        db_session.rollback()

        assert exc_info.value.details["funcao"] == "diretor"
        memberships = _memberships(db_session, sample_client.id_pessoa_fisica)
        assert sorted((m.id_entidade_pai, m.funcao) for m in memberships) == sorted([
            (sample_organization.id_entidade, "associado"),
            (second_organization.id_entidade, "diretor"),
        ])


class TestDeleteClient:

    def test_delete_cascades_licenses(self, db_session: Session, sample_client):
        client_id = sample_client.id_pessoa_fisica

        ClientService(db_session).delete_client(client_id)

        assert db_session.get(Client, client_id) is None
        assert db_session.query(DriverLicense).count() == 0
        assert db_session.query(OrganizationMember).count() == 0

    def test_policy_holder_cannot_be_deleted(self, db_session: Session, sample_policy):
        with pytest.raises(RecordInUseError):
            ClientService(db_session).delete_client(sample_policy.id_titular_pessoa_fisica)


class TestLicenses:

    def test_license_of_another_client_is_not_found(self, db_session: Session, sample_client, general_client):
        license_id = sample_client.licenses[0].id_cnh

        with pytest.raises(NotFoundError):
            ClientService(db_session).get_license(general_client.id_pessoa_fisica, license_id)

    def test_duplicate_license_number(self, db_session: Session, sample_client, general_client):
        data = DriverLicenseUpsert(
            numero_registro="CNH0001",
            categoria="B",
            data_emissao=date(2024, 1, 1),
            data_validade=date(2034, 1, 1),
        )

        with pytest.raises(ConflictError):
            ClientService(db_session).add_license(general_client.id_pessoa_fisica, data)
