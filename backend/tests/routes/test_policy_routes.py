"""
Insurance Policy Routes Integration Tests
=========================================

Integration tests for /policies:
- Creation with coverages, assistances and comma decimals
- Status filter (active vs expired)
- Validation of holder, insurer and lookup references
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient


pytestmark = pytest.mark.integration


def _policy_body(insurer_id: int, holder_id: int, **overrides) -> dict:
    body = {
        "numero_apolice": "AP-2026-0100",
        "id_seguradora": insurer_id,
        "data_vigencia_inicio": "2026-01-01",
        "data_vigencia_fim": "2027-01-01",
        "valor_indenizacao": "1500,50",
        "franquia": "",
        "tipo_titular": "pessoa_fisica",
        "id_titular": holder_id,
        "id_veiculo": "",
        "coberturas": [],
        "assistencias": [],
    }
    body.update(overrides)
    return body


class TestCreatePolicy:

    def test_create_with_lookups(self, client: TestClient, operator_headers, insurer, coverage, assistance,
                                 general_client):
        body = _policy_body(
            insurer.id_seguradora,
            general_client.id_pessoa_fisica,
            coberturas=[coverage.id_cobertura],
            assistencias=[assistance.id_assistencia],
        )

        response = client.post("/policies", json=body, headers=operator_headers)

        assert response.status_code == 201
        data = response.json()
        assert Decimal(data["valor_indenizacao"]) == Decimal("1500.50")
        assert data["franquia"] is None
        assert data["nome_seguradora"] == "Porto Seguro"
        assert data["nome_titular"] == "Maria Souza"
        assert data["coberturas"] == [{"id": coverage.id_cobertura, "nome": "Colisão"}]
        assert data["assistencias"][0]["nome"] == "Guincho 24h"

    def test_organization_holder(self, client: TestClient, operator_headers, insurer, sample_organization):
        body = _policy_body(insurer.id_seguradora, sample_organization.id_entidade, tipo_titular="organizacao")

        response = client.post("/policies", json=body, headers=operator_headers)

        assert response.status_code == 201
        assert response.json()["tipo_titular"] == "organizacao"
        assert response.json()["id_titular"] == sample_organization.id_entidade

    def test_end_before_start(self, client: TestClient, operator_headers, insurer, general_client):
        body = _policy_body(insurer.id_seguradora, general_client.id_pessoa_fisica, data_vigencia_fim="2025-12-31")

        response = client.post("/policies", json=body, headers=operator_headers)

        assert response.status_code == 422

    def test_unknown_coverage(self, client: TestClient, operator_headers, insurer, general_client):
        body = _policy_body(insurer.id_seguradora, general_client.id_pessoa_fisica, coberturas=[999])

        response = client.post("/policies", json=body, headers=operator_headers)

        assert response.status_code == 422
        assert response.json()["details"]["missing"] == [999]

    def test_unknown_holder(self, client: TestClient, operator_headers, insurer):
        response = client.post("/policies", json=_policy_body(insurer.id_seguradora, 999), headers=operator_headers)

        assert response.status_code == 422
        assert response.json()["details"]["field"] == "id_titular"

    def test_duplicate_number(self, client: TestClient, operator_headers, sample_policy, general_client):
        body = _policy_body(
            sample_policy.id_seguradora,
            general_client.id_pessoa_fisica,
            numero_apolice="AP-2026-0001",
        )

        response = client.post("/policies", json=body, headers=operator_headers)

        assert response.status_code == 409


class TestListAndUpdatePolicies:

    def test_status_filter(self, client: TestClient, operator_headers, db_session, sample_policy, general_client,
                           insurer):
        expired = _policy_body(
            insurer.id_seguradora,
            general_client.id_pessoa_fisica,
            numero_apolice="AP-OLD",
            data_vigencia_inicio=(date.today() - timedelta(days=400)).isoformat(),
            data_vigencia_fim=(date.today() - timedelta(days=35)).isoformat(),
        )
        client.post("/policies", json=expired, headers=operator_headers)

        active = client.get("/policies", params={"status": "ativo"}, headers=operator_headers)
        old = client.get("/policies", params={"status": "vencido"}, headers=operator_headers)

        assert [p["numero_apolice"] for p in active.json()["items"]] == ["AP-2026-0001"]
        assert [p["numero_apolice"] for p in old.json()["items"]] == ["AP-OLD"]

    def test_update_replaces_coverages(self, client: TestClient, operator_headers, sample_policy, assistance):
        body = _policy_body(
            sample_policy.id_seguradora,
            sample_policy.id_titular_pessoa_fisica,
            numero_apolice=sample_policy.numero_apolice,
            id_veiculo=sample_policy.id_veiculo,
            assistencias=[assistance.id_assistencia],
        )

        response = client.put(f"/policies/{sample_policy.id_seguro}", json=body, headers=operator_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["coberturas"] == []
        assert len(data["assistencias"]) == 1
        assert data["placa_veiculo"] == "ABC1D23"

    def test_delete(self, client: TestClient, supervisor_headers, operator_headers, sample_policy):
        response = client.delete(f"/policies/{sample_policy.id_seguro}", headers=supervisor_headers)

        assert response.status_code == 204
        assert client.get(f"/policies/{sample_policy.id_seguro}", headers=operator_headers).status_code == 404
