"""
Test Configuration and Fixtures
================================

Central configuration for pytest with all shared fixtures.

Features:
- SQLite in-memory database for testing
- TestClient setup with the database dependency overridden
- Profiles and bearer tokens for every role
- In-memory fakes of Supabase Auth, Supabase Storage, FIPE and the
  export service, served through ``httpx.MockTransport``
- Sample registrations (organizations, clients, vehicles, policies)
"""

import json
import os
import time
import uuid
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Generator, List

import httpx
import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Set testing environment before importing app modules
os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SUPABASE_URL"] = "http://supabase.test"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret-for-testing-only-min-32-chars"
os.environ["EXPORT_SERVICE_URL"] = ""
os.environ["RATE_LIMIT_ENABLED"] = "false"  # Disable rate limiting in tests

from app.core.config import settings
from app.db.base import Base
from app.db.session import get_db
from app.main import app as main_app
from app.models import (
    Assistance,
    Client,
    Coverage,
    DriverLicense,
    EntityType,
    InsurancePolicy,
    Insurer,
    Organization,
    OrganizationMember,
    UserProfile,
    Vehicle,
)
from app.models.role_enum import Role
from app.services.export_client import ExportClient, get_export_client
from app.services.fipe_client import FipeClient, get_fipe_client
from app.services.supabase_client import (
    SupabaseAuthClient,
    SupabaseStorageClient,
    get_auth_client,
    get_storage_client,
)


# =====================================
# Database Configuration
# =====================================

# StaticPool keeps the same connection across the session
engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Enable foreign key constraints for SQLite."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


# =====================================
# Token Helpers
# =====================================

def make_token(user_id: uuid.UUID, email: str = "user@inbm.com.br", expires_in: int = 3600) -> str:
    """Mint an access token shaped like the ones Supabase issues."""
    claims = {
        "sub": str(user_id),
        "aud": settings.SUPABASE_JWT_AUDIENCE,
        "exp": int(time.time()) + expires_in,
        "email": email,
        "role": "authenticated",
    }
    return jwt.encode(claims, settings.SUPABASE_JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def auth_header(profile: UserProfile) -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_token(profile.id, profile.email)}"}


# =====================================
# External Service Fakes
# =====================================

class FakeSupabase:
    """
    In-memory Supabase Auth and Storage.

    Attributes:
        users: email -> {"id", "password"}
        objects: storage path -> (content, content type)
        requests: every request received, for assertions
    """

    def __init__(self):
        self.users: Dict[str, dict] = {}
        self.objects: Dict[str, tuple] = {}
        self.requests: List[httpx.Request] = []
        self.fail_storage = False

    def add_user(self, email: str, password: str, user_id: uuid.UUID = None) -> uuid.UUID:
        user_id = user_id or uuid.uuid4()
        self.users[email] = {"id": str(user_id), "password": password}
        return user_id

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path.startswith("/auth/v1/"):
            return self._auth(request, path)
        if path.startswith("/storage/v1/object/"):
            return self._storage(request, path)
        return httpx.Response(404, json={"message": "not found"})

    def _auth(self, request: httpx.Request, path: str) -> httpx.Response:
        if path == "/auth/v1/token" and request.method == "POST":
            body = json.loads(request.content)
            user = self.users.get(body["email"])
            if user is None or user["password"] != body["password"]:
                return httpx.Response(400, json={"error": "invalid_grant"})
            return httpx.Response(200, json={
                "access_token": make_token(uuid.UUID(user["id"]), body["email"]),
                "refresh_token": "refresh-token",
                "token_type": "bearer",
                "expires_in": 3600,
                "user": {"id": user["id"], "email": body["email"]},
            })

        if path == "/auth/v1/admin/users" and request.method == "POST":
            body = json.loads(request.content)
            if body["email"] in self.users:
                return httpx.Response(422, json={"msg": "email_exists"})
            user_id = self.add_user(body["email"], body["password"])
            return httpx.Response(200, json={"id": str(user_id), "email": body["email"]})

        if path.startswith("/auth/v1/admin/users/"):
            user_id = path.rsplit("/", 1)[-1]
            email = next((e for e, u in self.users.items() if u["id"] == user_id), None)
            if email is None:
                return httpx.Response(404, json={"msg": "user_not_found"})
            if request.method == "PUT":
                self.users[email]["password"] = json.loads(request.content)["password"]
                return httpx.Response(200, json={"id": user_id})
            if request.method == "DELETE":
                del self.users[email]
                return httpx.Response(200, json={})

        return httpx.Response(404, json={"msg": "not found"})

    def _storage(self, request: httpx.Request, path: str) -> httpx.Response:
        if self.fail_storage:
            return httpx.Response(500, json={"error": "storage down"})

        bucket_prefix = f"/storage/v1/object/{settings.STORAGE_BUCKET}"
        if request.method == "DELETE" and path == bucket_prefix:
            for prefix in json.loads(request.content)["prefixes"]:
                self.objects.pop(prefix, None)
            return httpx.Response(200, json=[])

        object_path = path[len(bucket_prefix) + 1:]
        if request.method == "POST":
            self.objects[object_path] = (request.content, request.headers.get("content-type"))
            return httpx.Response(200, json={"Key": object_path})
        if request.method == "GET":
            if object_path not in self.objects:
                return httpx.Response(404, json={"error": "not_found"})
            content, content_type = self.objects[object_path]
            return httpx.Response(200, content=content, headers={"content-type": content_type})

        return httpx.Response(405)


FIPE_PRICE = {
    "Valor": "R$ 85.432,00",
    "Marca": "Fiat",
    "Modelo": "Strada Freedom 1.3",
    "AnoModelo": 2022,
    "Combustivel": "Gasolina",
    "CodigoFipe": "001234-5",
    "MesReferencia": "outubro de 2026 ",
}


def fipe_handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path.endswith("/marcas"):
        return httpx.Response(200, json=[{"codigo": "21", "nome": "Fiat"}, {"codigo": "59", "nome": "VW"}])
    if path.endswith("/marcas/21/modelos"):
        return httpx.Response(200, json={
            "modelos": [{"codigo": 4828, "nome": "Strada Freedom 1.3"}],
            "anos": [{"codigo": "2022-1", "nome": "2022 Gasolina"}],
        })
    if path.endswith("/marcas/21/modelos/4828/anos"):
        return httpx.Response(200, json=[{"codigo": "2022-1", "nome": "2022 Gasolina"}])
    if path.endswith("/marcas/21/modelos/4828/anos/2022-1"):
        return httpx.Response(200, json=FIPE_PRICE)
    return httpx.Response(404, json={"error": "not found"})


class FakeExportService:
    def __init__(self):
        self.payloads: List[dict] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.payloads.append(json.loads(request.content))
        return httpx.Response(202, json={"job_id": 42, "status": "queued"})


# =====================================
# Database Fixtures
# =====================================

@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """
    Create a fresh database session for each test.

    Creates all tables before each test and drops them after.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


# =====================================
# External Service Fixtures
# =====================================

@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def auth_client(fake_supabase: FakeSupabase) -> SupabaseAuthClient:
    return SupabaseAuthClient(
        base_url="http://supabase.test",
        service_key="service-key",
        anon_key="anon-key",
        transport=httpx.MockTransport(fake_supabase.handler),
    )


@pytest.fixture
def storage_client(fake_supabase: FakeSupabase) -> SupabaseStorageClient:
    return SupabaseStorageClient(
        base_url="http://supabase.test",
        service_key="service-key",
        transport=httpx.MockTransport(fake_supabase.handler),
    )


@pytest.fixture
def fipe_client() -> FipeClient:
    return FipeClient(base_url="http://fipe.test/api/v1/carros", transport=httpx.MockTransport(fipe_handler))


@pytest.fixture
def fake_export() -> FakeExportService:
    return FakeExportService()


@pytest.fixture
def export_client(fake_export: FakeExportService) -> ExportClient:
    return ExportClient(base_url="http://export.test", transport=httpx.MockTransport(fake_export.handler))


@pytest.fixture(scope="function")
def client(
    db_session: Session,
    auth_client: SupabaseAuthClient,
    storage_client: SupabaseStorageClient,
    fipe_client: FipeClient,
    export_client: ExportClient,
) -> Generator[TestClient, None, None]:
    """
    Create a TestClient with the database and external services overridden.
    """
    def override_get_db():
        try:
            yield db_session
        except Exception:
            db_session.rollback()
            raise

    main_app.dependency_overrides[get_db] = override_get_db
    main_app.dependency_overrides[get_auth_client] = lambda: auth_client
    main_app.dependency_overrides[get_storage_client] = lambda: storage_client
    main_app.dependency_overrides[get_fipe_client] = lambda: fipe_client
    main_app.dependency_overrides[get_export_client] = lambda: export_client

    with TestClient(main_app) as test_client:
        yield test_client

    main_app.dependency_overrides.clear()


# =====================================
# Profile Fixtures
# =====================================

def _profile(db: Session, role: Role, email: str, is_active: bool = True) -> UserProfile:
    profile = UserProfile(
        id=uuid.uuid4(),
        full_name=f"Test {role.value.title()}",
        email=email,
        cpf="12345678909",
        role=role.value,
        is_active=is_active,
    )
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile


@pytest.fixture
def admin_profile(db_session: Session) -> UserProfile:
    return _profile(db_session, Role.ADMIN, "admin@inbm.com.br")


@pytest.fixture
def supervisor_profile(db_session: Session) -> UserProfile:
    return _profile(db_session, Role.SUPERVISOR, "supervisor@inbm.com.br")


@pytest.fixture
def operator_profile(db_session: Session) -> UserProfile:
    return _profile(db_session, Role.OPERATOR, "operator@inbm.com.br")


@pytest.fixture
def client_profile(db_session: Session) -> UserProfile:
    """Profile with the client role, which has no console access."""
    return _profile(db_session, Role.CLIENT, "client@inbm.com.br")


@pytest.fixture
def inactive_profile(db_session: Session) -> UserProfile:
    return _profile(db_session, Role.OPERATOR, "inactive@inbm.com.br", is_active=False)


@pytest.fixture
def admin_headers(admin_profile: UserProfile) -> Dict[str, str]:
    return auth_header(admin_profile)


@pytest.fixture
def supervisor_headers(supervisor_profile: UserProfile) -> Dict[str, str]:
    return auth_header(supervisor_profile)


@pytest.fixture
def operator_headers(operator_profile: UserProfile) -> Dict[str, str]:
    return auth_header(operator_profile)


@pytest.fixture
def client_headers(client_profile: UserProfile) -> Dict[str, str]:
    return auth_header(client_profile)


@pytest.fixture
def inactive_headers(inactive_profile: UserProfile) -> Dict[str, str]:
    return auth_header(inactive_profile)


# =====================================
# Lookup Fixtures
# =====================================

@pytest.fixture
def entity_type(db_session: Session) -> EntityType:
    row = EntityType(nome_tipo="Cooperativa")
    db_session.add(row)
    db_session.commit()
    db_session.refresh(row)
    return row


@pytest.fixture
def insurer(db_session: Session) -> Insurer:
    row = Insurer(nome_seguradora="Porto Seguro")
    db_session.add(row)
    db_session.commit()
    db_session.refresh(row)
    return row


@pytest.fixture
def coverage(db_session: Session) -> Coverage:
    row = Coverage(nome_cobertura="Colisão", descricao_cobertura="Danos por colisão")
    db_session.add(row)
    db_session.commit()
    db_session.refresh(row)
    return row


@pytest.fixture
def assistance(db_session: Session) -> Assistance:
    row = Assistance(nome_assistencia="Guincho 24h")
    db_session.add(row)
    db_session.commit()
    db_session.refresh(row)
    return row


# =====================================
# Registration Fixtures
# =====================================

@pytest.fixture
def sample_organization(db_session: Session, entity_type: EntityType) -> Organization:
    org = Organization(
        nome="Cooperativa Central",
        codigo_entidade="COOP-001",
        cnpj="12345678000195",
        id_tipo_entidade=entity_type.id_tipo_entidade,
        cidade="Belo Horizonte",
        estado_uf="MG",
    )
    db_session.add(org)
    db_session.commit()
    db_session.refresh(org)
    return org


@pytest.fixture
def second_organization(db_session: Session, entity_type: EntityType) -> Organization:
    org = Organization(
        nome="Associação Norte",
        codigo_entidade="ASSOC-002",
        cnpj="98765432000110",
        id_tipo_entidade=entity_type.id_tipo_entidade,
    )
    db_session.add(org)
    db_session.commit()
    db_session.refresh(org)
    return org


@pytest.fixture
def sample_client(db_session: Session, sample_organization: Organization) -> Client:
    """Associate of the sample organization with one license expiring in 10 days."""
    person = Client(
        nome_completo="João da Silva",
        cpf="12345678909",
        email="joao@example.com",
        telefone="31999990000",
        tipo_relacao="associado",
    )
    db_session.add(person)
    db_session.flush()

    db_session.add(DriverLicense(
        id_pessoa_fisica=person.id_pessoa_fisica,
        numero_registro="CNH0001",
        categoria="B",
        data_emissao=date.today() - timedelta(days=1800),
        data_validade=date.today() + timedelta(days=10),
    ))
    db_session.add(OrganizationMember(
        id_entidade_pai=sample_organization.id_entidade,
        id_membro_pessoa_fisica=person.id_pessoa_fisica,
        funcao="associado",
        data_associacao=date.today(),
    ))
    db_session.commit()
    db_session.refresh(person)
    return person


@pytest.fixture
def general_client(db_session: Session) -> Client:
    person = Client(
        nome_completo="Maria Souza",
        cpf="98765432100",
        email="maria@example.com",
        tipo_relacao="cliente_geral",
    )
    db_session.add(person)
    db_session.commit()
    db_session.refresh(person)
    return person


@pytest.fixture
def sample_vehicle(db_session: Session, sample_organization: Organization) -> Vehicle:
    vehicle = Vehicle(
        placa_atual="ABC1D23",
        codigo_renavam="12345678901",
        chassi="9BWZZZ377VT004251",
        marca="Fiat",
        modelo="Strada",
        ano_fabricacao=2022,
        ano_modelo=2022,
        combustivel="Flex",
        id_proprietario_entidade=sample_organization.id_entidade,
    )
    db_session.add(vehicle)
    db_session.commit()
    db_session.refresh(vehicle)
    return vehicle


@pytest.fixture
def sample_policy(
    db_session: Session,
    insurer: Insurer,
    coverage: Coverage,
    sample_client: Client,
    sample_vehicle: Vehicle,
) -> InsurancePolicy:
    """Policy held by the sample client, ending in 20 days."""
    policy = InsurancePolicy(
        numero_apolice="AP-2026-0001",
        id_seguradora=insurer.id_seguradora,
        data_vigencia_inicio=date.today() - timedelta(days=345),
        data_vigencia_fim=date.today() + timedelta(days=20),
        valor_indenizacao=Decimal("85000.00"),
        franquia=Decimal("2500.00"),
        id_titular_pessoa_fisica=sample_client.id_pessoa_fisica,
        id_veiculo=sample_vehicle.id_veiculo,
    )
    policy.coverages = [coverage]
    db_session.add(policy)
    db_session.commit()
    db_session.refresh(policy)
    return policy
