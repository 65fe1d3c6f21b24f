"""
Document Routes Integration Tests
=================================

Integration tests for /documents:
- Multipart upload with an association
- Download and public URL
- Metadata edits and upload size limit
- Role checks on delete
"""

import pytest
from fastapi.testclient import TestClient

from app.core.config import settings


pytestmark = pytest.mark.integration


def _upload(client: TestClient, headers, **form) -> dict:
    data = {"tipo_documento": "contrato", **form}
    response = client.post(
        "/documents",
        data=data,
        files={"file": ("contrato assinado.pdf", b"%PDF-1.4 contrato", "application/pdf")},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestUpload:

    def test_upload_linked_to_client(self, client: TestClient, operator_headers, sample_client, fake_supabase):
        data = _upload(client, operator_headers, id_pessoa_fisica=str(sample_client.id_pessoa_fisica))

        assert data["nome_arquivo"] == "contrato assinado.pdf"
        assert data["tamanho_bytes"] == 17
        assert data["mime_type"] == "application/pdf"
        assert data["tipo_associacao"] == "pessoa_fisica"
        assert data["associado_a"] == "João da Silva"
        assert data["caminho_armazenamento"] in fake_supabase.objects

    def test_custom_title(self, client: TestClient, operator_headers):
        data = _upload(client, operator_headers, titulo="Contrato 2026")

        assert data["nome_arquivo"] == "Contrato 2026"
        assert data["tipo_associacao"] == "nenhum"

    def test_invalid_document_type(self, client: TestClient, operator_headers):
        response = client.post(
            "/documents",
            data={"tipo_documento": "recibo"},
            files={"file": ("a.pdf", b"x", "application/pdf")},
            headers=operator_headers,
        )

        assert response.status_code == 422

    def test_storage_failure(self, client: TestClient, operator_headers, fake_supabase):
        fake_supabase.fail_storage = True

        response = client.post(
            "/documents",
            data={"tipo_documento": "outro"},
            files={"file": ("a.pdf", b"x", "application/pdf")},
            headers=operator_headers,
        )

        assert response.status_code == 502
        assert response.json()["details"]["service"] == "storage"

    def test_file_over_size_limit(self, client: TestClient, operator_headers, fake_supabase, monkeypatch):
        monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 8)

        response = client.post(
            "/documents",
            data={"tipo_documento": "outro"},
            files={"file": ("grande.pdf", b"0123456789abcdef", "application/pdf")},
            headers=operator_headers,
        )

        assert response.status_code == 422
        assert response.json()["details"] == {"field": "file", "max_bytes": 8}
        assert fake_supabase.objects == {}

    def test_notes_are_stored(self, client: TestClient, operator_headers):
        data = _upload(client, operator_headers, observacoes="  Versão final  ")

        assert data["observacoes"] == "Versão final"

    def test_requires_authentication(self, client: TestClient):
        response = client.post(
            "/documents",
            data={"tipo_documento": "outro"},
            files={"file": ("a.pdf", b"x", "application/pdf")},
        )

        assert response.status_code == 401


class TestReadAndDelete:

    def test_list_and_search(self, client: TestClient, operator_headers):
        _upload(client, operator_headers, titulo="Laudo vistoria", tipo_documento="laudo")
        _upload(client, operator_headers, titulo="Contrato social")

        response = client.get("/documents", params={"search": "laudo"}, headers=operator_headers)

        assert response.json()["total"] == 1
        assert response.json()["items"][0]["nome_arquivo"] == "Laudo vistoria"

    def test_download(self, client: TestClient, operator_headers):
        document = _upload(client, operator_headers)

        response = client.get(f"/documents/{document['id_arquivo']}/download", headers=operator_headers)

        assert response.status_code == 200
        assert response.content == b"%PDF-1.4 contrato"
        assert response.headers["content-type"].startswith("application/pdf")
        assert "contrato%20assinado.pdf" in response.headers["content-disposition"]

    def test_public_url(self, client: TestClient, operator_headers):
        document = _upload(client, operator_headers)

        response = client.get(f"/documents/{document['id_arquivo']}/url", headers=operator_headers)

        assert response.status_code == 200
        assert response.json()["url"].startswith("http://supabase.test/storage/v1/object/public/")

    def test_operator_cannot_delete(self, client: TestClient, operator_headers):
        document = _upload(client, operator_headers)

        response = client.delete(f"/documents/{document['id_arquivo']}", headers=operator_headers)

        assert response.status_code == 403

    def test_supervisor_deletes(self, client: TestClient, operator_headers, supervisor_headers, fake_supabase):
        document = _upload(client, operator_headers)

        response = client.delete(f"/documents/{document['id_arquivo']}", headers=supervisor_headers)

        assert response.status_code == 204
        assert fake_supabase.objects == {}
        assert client.get(f"/documents/{document['id_arquivo']}", headers=operator_headers).status_code == 404


class TestUpdate:

    def test_edit_metadata_and_move_association(self, client: TestClient, operator_headers, sample_client,
                                                sample_vehicle, fake_supabase):
        document = _upload(client, operator_headers, id_pessoa_fisica=str(sample_client.id_pessoa_fisica))

        response = client.put(
            f"/documents/{document['id_arquivo']}",
            json={
                "titulo": " Laudo de vistoria ",
                "tipo_documento": "laudo",
                "observacoes": "Versão final do laudo.",
                "id_veiculo": sample_vehicle.id_veiculo,
            },
            headers=operator_headers,
        )

        assert response.status_code == 200, response.text
        data = response.json()
        assert data["nome_arquivo"] == "Laudo de vistoria"
        assert data["tipo_documento"] == "laudo"
        assert data["observacoes"] == "Versão final do laudo."
        assert data["tipo_associacao"] == "veiculo"
        assert data["id_pessoa_fisica"] is None
        assert data["associado_a"] == "ABC1D23"
        assert data["caminho_armazenamento"] == document["caminho_armazenamento"]
        assert list(fake_supabase.objects) == [document["caminho_armazenamento"]]

    def test_clear_association(self, client: TestClient, operator_headers, sample_client):
        document = _upload(client, operator_headers, id_pessoa_fisica=str(sample_client.id_pessoa_fisica))

        response = client.put(
            f"/documents/{document['id_arquivo']}",
            json={"titulo": "Contrato", "tipo_documento": "contrato", "observacoes": ""},
            headers=operator_headers,
        )

        assert response.json()["tipo_associacao"] == "nenhum"
        assert response.json()["observacoes"] is None

    def test_two_associations(self, client: TestClient, operator_headers, sample_client, sample_organization):
        document = _upload(client, operator_headers)

        response = client.put(
            f"/documents/{document['id_arquivo']}",
            json={
                "titulo": "Contrato",
                "tipo_documento": "contrato",
                "id_pessoa_fisica": sample_client.id_pessoa_fisica,
                "id_entidade": sample_organization.id_entidade,
            },
            headers=operator_headers,
        )

        assert response.status_code == 422
        assert response.json()["details"]["field"] == "associacao"

    def test_unknown_association(self, client: TestClient, operator_headers):
        document = _upload(client, operator_headers)

        response = client.put(
            f"/documents/{document['id_arquivo']}",
            json={"titulo": "Contrato", "tipo_documento": "contrato", "id_seguro": 999},
            headers=operator_headers,
        )

        assert response.status_code == 422
        assert response.json()["details"]["field"] == "id_seguro"

    def test_blank_title(self, client: TestClient, operator_headers):
        document = _upload(client, operator_headers)

        response = client.put(
            f"/documents/{document['id_arquivo']}",
            json={"titulo": "  ", "tipo_documento": "contrato"},
            headers=operator_headers,
        )

        assert response.status_code == 422

    def test_not_found(self, client: TestClient, operator_headers):
        response = client.put(
            "/documents/999",
            json={"titulo": "Contrato", "tipo_documento": "contrato"},
            headers=operator_headers,
        )

        assert response.status_code == 404
