"""
Report Service Unit Tests
=========================

Tests for the filtered report queries and the export request:
- Client report with latest license and organization
- Member, vehicle, policy and document filters
- Export filter validation and forwarding
"""

from datetime import date, timedelta

import pytest
from sqlalchemy.orm import Session

from app.core.enums import ExportFormat, ReportName
from app.core.exceptions import ServiceUnavailableError, ValidationError
from app.models import Document, DriverLicense, OrganizationMember
from app.schemas.report import (
    ClientReportFilters,
    DocumentReportFilters,
    ExportRequest,
    MemberReportFilters,
    OrganizationReportFilters,
    PolicyReportFilters,
    VehicleReportFilters,
)
from app.services.export_client import ExportClient
from app.services.report_service import ReportService


pytestmark = pytest.mark.unit


class TestClientsReport:

    def test_row_has_latest_license_and_organization(self, db_session: Session, sample_client, general_client):
        db_session.add(DriverLicense(
            id_pessoa_fisica=sample_client.id_pessoa_fisica,
            numero_registro="CNH-OLD",
            categoria="A",
            data_emissao=date(2010, 1, 1),
            data_validade=date(2015, 1, 1),
        ))
        db_session.commit()

        rows, total = ReportService(db_session).clients_report(ClientReportFilters(), 1, 20)

        assert total == 2
        joao = next(r for r in rows if r.id_pessoa_fisica == sample_client.id_pessoa_fisica)
        assert joao.numero_cnh == "CNH0001"
        assert joao.nome_entidade == "Cooperativa Central"
        maria = next(r for r in rows if r.id_pessoa_fisica == general_client.id_pessoa_fisica)
        assert maria.numero_cnh is None
        assert maria.nome_entidade is None

    def test_one_row_when_licenses_share_expiry(self, db_session: Session, sample_client):
        twin = DriverLicense(
            id_pessoa_fisica=sample_client.id_pessoa_fisica,
            numero_registro="CNH0002",
            categoria="AB",
            data_emissao=date.today() - timedelta(days=30),
            data_validade=sample_client.licenses[0].data_validade,
        )
        db_session.add(twin)
        db_session.commit()

        rows, total = ReportService(db_session).clients_report(ClientReportFilters(), 1, 20)

        assert total == 1
        assert len(rows) == 1
        assert rows[0].numero_cnh == "CNH0002"

    def test_filter_by_organization(self, db_session: Session, sample_client, general_client, sample_organization):
        filters = ClientReportFilters(id_entidade=str(sample_organization.id_entidade))

        rows, total = ReportService(db_session).clients_report(filters, 1, 20)

        assert total == 1
        assert rows[0].nome_completo == "João da Silva"

    def test_filter_by_license_expiry_month(self, db_session: Session, sample_client, general_client):
        expiry = date.today() + timedelta(days=10)
        filters = ClientReportFilters(mes_validade_cnh=expiry.month, ano_validade_cnh=expiry.year)

        rows, total = ReportService(db_session).clients_report(filters, 1, 20)

        assert [r.numero_cnh for r in rows] == ["CNH0001"]

    def test_todos_and_formatted_cpf(self, db_session: Session, sample_client, general_client):
        filters = ClientReportFilters(tipo_relacao="todos", cpf="987.654")

        rows, total = ReportService(db_session).clients_report(filters, 1, 20)

        assert total == 1
        assert rows[0].nome_completo == "Maria Souza"

    def test_non_numeric_organization(self, db_session: Session):
        with pytest.raises(ValidationError):
            ReportService(db_session).clients_report(ClientReportFilters(id_entidade="abc"), 1, 20)


class TestOrganizationReports:

    def test_organizations_by_cnpj(self, db_session: Session, sample_organization, second_organization):
        rows, total = ReportService(db_session).organizations_report(
            OrganizationReportFilters(cnpj="98.765"), 1, 20
        )

        assert [o.codigo_entidade for o in rows] == ["ASSOC-002"]

    def test_members_of_both_kinds(self, db_session: Session, sample_client, sample_organization, second_organization):
        db_session.add(OrganizationMember(
            id_entidade_pai=sample_organization.id_entidade,
            id_membro_entidade_filha=second_organization.id_entidade,
            funcao="filiada",
        ))
        db_session.commit()
        service = ReportService(db_session)

        rows, total = service.members_report(MemberReportFilters(), 1, 20)
        people, _ = service.members_report(MemberReportFilters(tipo_membro="pessoa_fisica"), 1, 20)
        by_name, _ = service.members_report(MemberReportFilters(nome_membro="norte"), 1, 20)

        assert total == 2
        assert {r.nome_membro for r in rows} == {"João da Silva", "Associação Norte"}
        assert [r.tipo_membro for r in people] == ["pessoa_fisica"]
        assert [r.funcao for r in by_name] == ["filiada"]

    def test_invalid_member_type(self, db_session: Session, sample_client):
        with pytest.raises(ValidationError):
            ReportService(db_session).members_report(MemberReportFilters(tipo_membro="robo"), 1, 20)


class TestVehicleAndPolicyReports:

    def test_vehicles_by_owner_type(self, db_session: Session, sample_vehicle):
        service = ReportService(db_session)

        owned_by_org, _ = service.vehicles_report(VehicleReportFilters(tipo_proprietario="organizacao"), 1, 20)
        owned_by_person, _ = service.vehicles_report(VehicleReportFilters(tipo_proprietario="pessoa_fisica"), 1, 20)

        assert [v.placa_atual for v in owned_by_org] == ["ABC1D23"]
        assert owned_by_person == []

    def test_invalid_owner_type(self, db_session: Session):
        with pytest.raises(ValidationError):
            ReportService(db_session).vehicles_report(VehicleReportFilters(tipo_proprietario="x"), 1, 20)

    def test_policies_by_holder_and_value(self, db_session: Session, sample_policy):
        service = ReportService(db_session)
        holder = str(sample_policy.id_titular_pessoa_fisica)

        matching, _ = service.policies_report(
            PolicyReportFilters(tipo_titular="pessoa_fisica", id_titular=holder, valor_indenizacao_min=80000),
            1,
            20,
        )
        too_expensive, _ = service.policies_report(PolicyReportFilters(valor_indenizacao_min=90000), 1, 20)

        assert [p.numero_apolice for p in matching] == ["AP-2026-0001"]
        assert too_expensive == []


class TestDocumentsReport:

    def test_association_filters(self, db_session: Session, sample_vehicle):
        db_session.add_all([
            Document(
                nome_arquivo="CRLV",
                tipo_documento="laudo",
                caminho_armazenamento="documentos/a.pdf",
                tamanho_bytes=10,
                id_veiculo=sample_vehicle.id_veiculo,
            ),
            Document(
                nome_arquivo="Avulso",
                tipo_documento="outro",
                caminho_armazenamento="documentos/b.pdf",
                tamanho_bytes=10,
            ),
        ])
        db_session.commit()
        service = ReportService(db_session)

        vehicle_docs, _ = service.documents_report(
            DocumentReportFilters(tipo_associacao="veiculo", id_associado=str(sample_vehicle.id_veiculo)), 1, 20
        )
        loose_docs, _ = service.documents_report(DocumentReportFilters(tipo_associacao="nenhum"), 1, 20)
        recent_docs, total = service.documents_report(
            DocumentReportFilters(
                data_upload_de=date.today() - timedelta(days=1),
                data_upload_ate=date.today() + timedelta(days=1),
            ),
            1,
            20,
        )

        assert [d.nome_arquivo for d in vehicle_docs] == ["CRLV"]
        assert [d.nome_arquivo for d in loose_docs] == ["Avulso"]
        assert total == 2


class TestExport:

    def test_forwards_validated_filters(self, db_session: Session, export_client, fake_export):
        request = ExportRequest(
            format=ExportFormat.EXCEL,
            filters={"nome": "Ana", "mes_validade_cnh": "3", "unknown": "x"},
        )

        result = ReportService(db_session).request_export(
            ReportName.CLIENTS, request, export_client, requested_by="user-1"
        )

        assert result.job_id == "42"
        assert result.status == "queued"
        assert fake_export.payloads == [{
            "report": "clients",
            "format": "excel",
            "filters": {"nome": "Ana", "mes_validade_cnh": 3},
            "requested_by": "user-1",
        }]

    def test_export_all_ignores_filters(self, db_session: Session, export_client, fake_export):
        request = ExportRequest(export_all=True, filters={"nome": "Ana"})

        ReportService(db_session).request_export(ReportName.VEHICLES, request, export_client)

        assert fake_export.payloads[0]["filters"] == {}

    def test_invalid_filters(self, db_session: Session, export_client, fake_export):
        request = ExportRequest(filters={"mes_validade_cnh": 14})

        with pytest.raises(ValidationError) as exc_info:
            ReportService(db_session).request_export(ReportName.CLIENTS, request, export_client)

        assert exc_info.value.details["field"] == "filters"
        assert fake_export.payloads == []

    def test_disabled_export_service(self, db_session: Session):
        with pytest.raises(ServiceUnavailableError):
            ReportService(db_session).request_export(ReportName.CLIENTS, ExportRequest(), ExportClient(base_url=""))
