"""
Enumeration Module
==================

Defines enumerations used across the application.
Values match the text stored in the hosted database.
"""

from enum import Enum


class RelationshipType(str, Enum):
    """How a client relates to INBM."""

    ASSOCIADO = "associado"
    COOPERADO = "cooperado"
    FUNCIONARIO = "funcionario"
    CLIENTE_GERAL = "cliente_geral"


class PartyType(str, Enum):
    """Kind of party owning a vehicle or holding a policy."""

    PESSOA_FISICA = "pessoa_fisica"
    ORGANIZACAO = "organizacao"


class MemberType(str, Enum):
    """Kind of member linked to an organization."""

    PESSOA_FISICA = "pessoa_fisica"
    PESSOA_JURIDICA = "pessoa_juridica"


class DocumentType(str, Enum):
    CONTRATO = "contrato"
    LAUDO = "laudo"
    APOLICE = "apolice"
    PROPOSTA = "proposta"
    TERMO = "termo"
    OUTRO = "outro"


class DocumentAssociation(str, Enum):
    """Association filter for the documents report."""

    PESSOA_FISICA = "pessoa_fisica"
    ORGANIZACAO = "organizacao"
    VEICULO = "veiculo"
    SEGURO = "seguro"
    NENHUM = "nenhum"


class PolicyStatus(str, Enum):
    ATIVO = "ativo"
    VENCIDO = "vencido"


class ExportFormat(str, Enum):
    PDF = "pdf"
    EXCEL = "excel"
    CSV = "csv"


class ReportName(str, Enum):
    """Reports available under /reports."""

    CLIENTS = "clients"
    ORGANIZATIONS = "organizations"
    ORGANIZATION_MEMBERS = "organization-members"
    VEHICLES = "vehicles"
    POLICIES = "policies"
    DOCUMENTS = "documents"
