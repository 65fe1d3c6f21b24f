"""
Report Service Module
=====================

Filtered, paginated listings behind the report screens, and the export
request forwarded to the external export service.

Every filter is optional. Blank values and the ``todos`` sentinel are
skipped by ``QueryFilter``.
"""

from datetime import datetime, time, timedelta
from typing import Any, Dict, List, Optional, Tuple, Type

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import and_, extract, func, or_
from sqlalchemy.orm import Session, aliased

from app.core.enums import DocumentAssociation, MemberType, PartyType, RelationshipType, ReportName
from app.core.exceptions import ValidationError
from app.core.logging import get_logger, log_execution_time
from app.core.query.query_filter import QueryFilter, is_blank, paginate, to_int
from app.models.client import Client, DriverLicense
from app.models.document import Document
from app.models.organization import Organization, OrganizationMember
from app.models.policy import InsurancePolicy
from app.models.vehicle import Vehicle
from app.schemas.report import (
    ClientReportFilters,
    ClientReportRow,
    DocumentReportFilters,
    ExportRequest,
    ExportResponse,
    MemberReportFilters,
    MemberReportRow,
    OrganizationReportFilters,
    PolicyReportFilters,
    ReportFilters,
    VehicleReportFilters,
)
from app.services.export_client import ExportClient

# Initialize logger
logger = get_logger(__name__)

REPORT_FILTERS: Dict[ReportName, Type[ReportFilters]] = {
    ReportName.CLIENTS: ClientReportFilters,
    ReportName.ORGANIZATIONS: OrganizationReportFilters,
    ReportName.ORGANIZATION_MEMBERS: MemberReportFilters,
    ReportName.VEHICLES: VehicleReportFilters,
    ReportName.POLICIES: PolicyReportFilters,
    ReportName.DOCUMENTS: DocumentReportFilters,
}

_RELATIONSHIP_ROLES = [r.value for r in RelationshipType if r != RelationshipType.CLIENTE_GERAL]

_DOCUMENT_COLUMNS = {
    DocumentAssociation.PESSOA_FISICA: Document.id_pessoa_fisica,
    DocumentAssociation.ORGANIZACAO: Document.id_entidade,
    DocumentAssociation.VEICULO: Document.id_veiculo,
    DocumentAssociation.SEGURO: Document.id_seguro,
}


def _member_type(value: str) -> MemberType:
    try:
        return MemberType(value)
    except ValueError:
        raise ValidationError(f"'{value}' is not a valid member type", field="tipo_membro")


def _party_filter(
    query: QueryFilter,
    party_type: Optional[str],
    party_id: Optional[str],
    client_column,
    organization_column,
) -> QueryFilter:
    """Filter on a client-or-organization pair of columns."""
    if not is_blank(party_type):
        try:
            party = PartyType(party_type)
        except ValueError:
            raise ValidationError(f"'{party_type}' is not a valid party type")
        column = client_column if party == PartyType.PESSOA_FISICA else organization_column
        query.where(party, lambda _: column.is_not(None))
        query.equals(column, party_id, coerce=int)
    elif not is_blank(party_id):
        target = to_int(party_id, "id")
        query.where(party_id, lambda _: or_(client_column == target, organization_column == target))
    return query


class ReportService:
    """
    Report queries.

    Usage:
        service = ReportService(db)
        rows, total = service.clients_report(filters, page=1, page_size=20)
    """

    def __init__(self, db: Session):
        self.db = db

    # --------------------------
    # Clients
    # --------------------------

    @log_execution_time(logger, "clients_report")
    def clients_report(
        self,
        filters: ClientReportFilters,
        page: int,
        page_size: int,
    ) -> Tuple[List[ClientReportRow], int]:
        """
        One row per client with its latest license and relationship organization.
        """
        ranked = (
            self.db.query(
                DriverLicense.id_cnh.label("id_cnh"),
                DriverLicense.id_pessoa_fisica.label("id_pessoa_fisica"),
                func.row_number()
                .over(
                    partition_by=DriverLicense.id_pessoa_fisica,
                    order_by=(DriverLicense.data_validade.desc(), DriverLicense.id_cnh.desc()),
                )
                .label("rn"),
            )
            .subquery()
        )
        latest = (
            self.db.query(ranked.c.id_cnh, ranked.c.id_pessoa_fisica)
            .filter(ranked.c.rn == 1)
            .subquery()
        )
        parent = aliased(Organization)

        base = (
            self.db.query(
                Client.id_pessoa_fisica,
                Client.nome_completo,
                Client.cpf,
                Client.email,
                Client.telefone,
                Client.tipo_relacao,
                parent.nome.label("nome_entidade"),
                DriverLicense.numero_registro.label("numero_cnh"),
                DriverLicense.categoria.label("categoria_cnh"),
                DriverLicense.data_validade.label("validade_cnh"),
            )
            .outerjoin(latest, latest.c.id_pessoa_fisica == Client.id_pessoa_fisica)
            .outerjoin(DriverLicense, DriverLicense.id_cnh == latest.c.id_cnh)
            .outerjoin(
                OrganizationMember,
                and_(
                    OrganizationMember.id_membro_pessoa_fisica == Client.id_pessoa_fisica,
                    OrganizationMember.funcao.in_(_RELATIONSHIP_ROLES),
                ),
            )
            .outerjoin(parent, parent.id_entidade == OrganizationMember.id_entidade_pai)
        )

        query = (
            QueryFilter(base)
            .icontains(Client.nome_completo, filters.nome)
            .digits(Client.cpf, filters.cpf)
            .equals(Client.tipo_relacao, filters.tipo_relacao)
            .equals(OrganizationMember.id_entidade_pai, filters.id_entidade, coerce=int)
            .icontains(DriverLicense.numero_registro, filters.numero_cnh)
            .icontains(DriverLicense.categoria, filters.categoria_cnh)
            .gte(DriverLicense.data_validade, filters.validade_cnh_de)
            .lte(DriverLicense.data_validade, filters.validade_cnh_ate)
            .where(filters.mes_validade_cnh, lambda m: extract("month", DriverLicense.data_validade) == m)
            .where(filters.ano_validade_cnh, lambda y: extract("year", DriverLicense.data_validade) == y)
            .build()
            .order_by(Client.nome_completo, Client.id_pessoa_fisica)
        )

        rows, total = paginate(query, page, page_size)
        return [ClientReportRow(**row._asdict()) for row in rows], total

    # --------------------------
    # Organizations
    # --------------------------

    def organizations_report(
        self,
        filters: OrganizationReportFilters,
        page: int,
        page_size: int,
    ) -> Tuple[List[Organization], int]:
        query = (
            QueryFilter(self.db.query(Organization))
            .icontains(Organization.nome, filters.nome)
            .digits(Organization.cnpj, filters.cnpj)
            .equals(Organization.id_tipo_entidade, filters.id_tipo_entidade, coerce=int)
            .gte(Organization.data_cadastro, filters.data_cadastro_de)
            .lte(Organization.data_cadastro, filters.data_cadastro_ate)
            .build()
            .order_by(Organization.nome)
        )
        return paginate(query, page, page_size)

    # --------------------------
    # Organization Members
    # --------------------------

    def members_report(
        self,
        filters: MemberReportFilters,
        page: int,
        page_size: int,
    ) -> Tuple[List[MemberReportRow], int]:
        parent = aliased(Organization)
        child = aliased(Organization)
        person = aliased(Client)

        base = (
            self.db.query(OrganizationMember, parent.nome.label("nome_entidade"))
            .join(parent, parent.id_entidade == OrganizationMember.id_entidade_pai)
            .outerjoin(person, person.id_pessoa_fisica == OrganizationMember.id_membro_pessoa_fisica)
            .outerjoin(child, child.id_entidade == OrganizationMember.id_membro_entidade_filha)
        )

        query = (
            QueryFilter(base)
            .equals(OrganizationMember.id_entidade_pai, filters.id_entidade, coerce=int)
            .search([person.nome_completo, child.nome], filters.nome_membro)
            .where(
                filters.tipo_membro,
                lambda t: OrganizationMember.id_membro_pessoa_fisica.is_not(None)
                if _member_type(t) == MemberType.PESSOA_FISICA
                else OrganizationMember.id_membro_entidade_filha.is_not(None),
            )
            .icontains(OrganizationMember.funcao, filters.funcao)
            .gte(OrganizationMember.data_associacao, filters.data_associacao_de)
            .lte(OrganizationMember.data_associacao, filters.data_associacao_ate)
            .build()
            .order_by(parent.nome, OrganizationMember.id_membro_entidade)
        )

        rows, total = paginate(query, page, page_size)
        items = [
            MemberReportRow(
                id_membro_entidade=member.id_membro_entidade,
                id_entidade=member.id_entidade_pai,
                nome_entidade=nome_entidade,
                tipo_membro=member.tipo_membro,
                id_membro=member.id_membro,
                nome_membro=member.nome_membro,
                funcao=member.funcao,
                data_associacao=member.data_associacao,
            )
            for member, nome_entidade in rows
        ]
        return items, total

    # --------------------------
    # Vehicles
    # --------------------------

    def vehicles_report(
        self,
        filters: VehicleReportFilters,
        page: int,
        page_size: int,
    ) -> Tuple[List[Vehicle], int]:
        query = (
            QueryFilter(self.db.query(Vehicle))
            .icontains(Vehicle.placa_atual, filters.placa)
            .icontains(Vehicle.marca, filters.marca)
            .icontains(Vehicle.modelo, filters.modelo)
            .equals(Vehicle.ano_fabricacao, filters.ano_fabricacao)
            .icontains(Vehicle.codigo_renavam, filters.codigo_renavam)
            .icontains(Vehicle.tipo_especie, filters.tipo_especie)
            .icontains(Vehicle.combustivel, filters.combustivel)
        )
        _party_filter(
            query,
            filters.tipo_proprietario,
            filters.id_proprietario,
            Vehicle.id_proprietario_pessoa_fisica,
            Vehicle.id_proprietario_entidade,
        )
        return paginate(query.build().order_by(Vehicle.placa_atual), page, page_size)

    # --------------------------
    # Policies
    # --------------------------

    def policies_report(
        self,
        filters: PolicyReportFilters,
        page: int,
        page_size: int,
    ) -> Tuple[List[InsurancePolicy], int]:
        query = (
            QueryFilter(self.db.query(InsurancePolicy))
            .icontains(InsurancePolicy.numero_apolice, filters.numero_apolice)
            .equals(InsurancePolicy.id_seguradora, filters.id_seguradora, coerce=int)
            .gte(InsurancePolicy.data_vigencia_inicio, filters.vigencia_inicio_de)
            .lte(InsurancePolicy.data_vigencia_fim, filters.vigencia_fim_ate)
            .gte(InsurancePolicy.valor_indenizacao, filters.valor_indenizacao_min)
            .lte(InsurancePolicy.valor_indenizacao, filters.valor_indenizacao_max)
            .equals(InsurancePolicy.id_veiculo, filters.id_veiculo, coerce=int)
        )
        _party_filter(
            query,
            filters.tipo_titular,
            filters.id_titular,
            InsurancePolicy.id_titular_pessoa_fisica,
            InsurancePolicy.id_titular_entidade,
        )
        ordered = query.build().order_by(
            InsurancePolicy.data_vigencia_fim.desc(), InsurancePolicy.numero_apolice
        )
        return paginate(ordered, page, page_size)

    # --------------------------
    # Documents
    # --------------------------

    def documents_report(
        self,
        filters: DocumentReportFilters,
        page: int,
        page_size: int,
    ) -> Tuple[List[Document], int]:
        query = (
            QueryFilter(self.db.query(Document))
            .icontains(Document.nome_arquivo, filters.titulo)
            .equals(Document.tipo_documento, filters.tipo_documento)
            .where(
                filters.data_upload_de,
                lambda d: Document.data_upload >= datetime.combine(d, time.min),
            )
            .where(
                filters.data_upload_ate,
                lambda d: Document.data_upload < datetime.combine(d + timedelta(days=1), time.min),
            )
        )

        if not is_blank(filters.tipo_associacao):
            try:
                association = DocumentAssociation(filters.tipo_associacao)
            except ValueError:
                raise ValidationError(
                    f"'{filters.tipo_associacao}' is not a valid association type",
                    field="tipo_associacao",
                )
            if association == DocumentAssociation.NENHUM:
                query.where(
                    association,
                    lambda _: and_(*[column.is_(None) for column in _DOCUMENT_COLUMNS.values()]),
                )
            else:
                column = _DOCUMENT_COLUMNS[association]
                query.where(association, lambda _: column.is_not(None))
                query.equals(column, filters.id_associado, coerce=int)

        ordered = query.build().order_by(Document.data_upload.desc(), Document.id_arquivo.desc())
        return paginate(ordered, page, page_size)

    # --------------------------
    # Export
    # --------------------------

    def request_export(
        self,
        report: ReportName,
        request: ExportRequest,
        export_client: ExportClient,
        requested_by: Optional[str] = None,
    ) -> ExportResponse:
        """
        Forward an export request with validated filters.

        Raises:
            ValidationError: If the filters do not match the report
            ServiceUnavailableError: If no export service is configured
            UpstreamServiceError: If the export service fails
        """
        filters: Dict[str, Any] = {}
        if not request.export_all:
            try:
                parsed = REPORT_FILTERS[report].model_validate(request.filters)
            except PydanticValidationError as e:
                raise ValidationError(
                    "Invalid report filters",
                    field="filters",
                    details={"errors": e.errors(include_url=False, include_context=False)},
                )
            filters = parsed.model_dump(mode="json", exclude_none=True)

        job = export_client.request_export(
            report=report.value,
            export_format=request.format.value,
            filters=filters,
            requested_by=requested_by,
        )

        logger.info("Report export requested", report=report.value, format=request.format.value)
        job_id = job.get("job_id") or job.get("id")
        return ExportResponse(
            report=report,
            format=request.format,
            status=job.get("status", "accepted"),
            job_id=str(job_id) if job_id is not None else None,
            download_url=job.get("download_url"),
        )
