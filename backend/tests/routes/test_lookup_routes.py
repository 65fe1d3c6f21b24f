"""
Lookup Table Routes Integration Tests
=====================================

Integration tests for the /lookups tables shared CRUD endpoints.
"""

import pytest
from fastapi.testclient import TestClient


pytestmark = pytest.mark.integration


class TestLookupReads:

    def test_list_insurers(self, client: TestClient, operator_headers, insurer):
        response = client.get("/lookups/insurers", headers=operator_headers)

        assert response.status_code == 200
        assert response.json()["items"] == [{"id_seguradora": insurer.id_seguradora, "nome_seguradora": "Porto Seguro"}]

    def test_search_coverages_by_description(self, client: TestClient, operator_headers, coverage):
        response = client.get("/lookups/coverages", params={"search": "danos"}, headers=operator_headers)

        assert response.json()["total"] == 1

    def test_get_missing_row(self, client: TestClient, operator_headers):
        response = client.get("/lookups/assistances/999", headers=operator_headers)

        assert response.status_code == 404
        assert response.json()["details"]["resource"] == "Assistance"


class TestLookupWrites:

    def test_operator_cannot_create(self, client: TestClient, operator_headers):
        response = client.post("/lookups/insurers", json={"nome_seguradora": "Allianz"}, headers=operator_headers)

        assert response.status_code == 403

    def test_supervisor_crud(self, client: TestClient, supervisor_headers):
        created = client.post(
            "/lookups/vehicle-models",
            json={"marca": "Fiat", "modelo": "Strada", "versao": ""},
            headers=supervisor_headers,
        )
        row_id = created.json()["id_modelo_veiculo"]
        updated = client.put(
            f"/lookups/vehicle-models/{row_id}",
            json={"marca": "Fiat", "modelo": "Strada", "versao": "Freedom 1.3"},
            headers=supervisor_headers,
        )
        deleted = client.delete(f"/lookups/vehicle-models/{row_id}", headers=supervisor_headers)

        assert created.status_code == 201
        assert created.json()["versao"] is None
        assert updated.json()["versao"] == "Freedom 1.3"
        assert deleted.status_code == 204

    def test_blank_name(self, client: TestClient, supervisor_headers):
        response = client.post("/lookups/entity-types", json={"nome_tipo": "   "}, headers=supervisor_headers)

        assert response.status_code == 422

    def test_duplicate_name(self, client: TestClient, supervisor_headers, insurer):
        response = client.post(
            "/lookups/insurers",
            json={"nome_seguradora": "Porto Seguro"},
            headers=supervisor_headers,
        )

        assert response.status_code == 409
        assert response.json()["message"] == "An insurer with this name already exists"

    def test_referenced_row_cannot_be_deleted(self, client: TestClient, supervisor_headers, sample_organization):
        response = client.delete(
            f"/lookups/entity-types/{sample_organization.id_tipo_entidade}",
            headers=supervisor_headers,
        )

        assert response.status_code == 409
