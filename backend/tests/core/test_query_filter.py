"""
Query Filter Unit Tests
=======================

Tests for the optional filter builder used by lists and reports:
- Blank and ``todos`` values are ignored
- Text search, digits-only matching, integer coercion
- Pagination totals
"""

import pytest
from sqlalchemy.orm import Session

from app.core.exceptions import ValidationError
from app.core.query.query_filter import QueryFilter, is_blank, paginate, to_int
from app.models import Client


pytestmark = pytest.mark.unit


def _add_clients(db: Session) -> None:
    db.add_all([
        Client(nome_completo="Ana Lima", cpf="11111111111", email="ana@example.com", tipo_relacao="associado"),
        Client(nome_completo="Bruno Lima", cpf="22222222222", email="bruno@example.com", tipo_relacao="cooperado"),
        Client(nome_completo="Carla 100% Dias", cpf="33333333333", email="carla@example.com", tipo_relacao="cliente_geral"),
    ])
    db.commit()


class TestIsBlank:

    @pytest.mark.parametrize("value", [None, "", "   ", "todos", "TODOS", "todas", "all"])
    def test_blank_values(self, value):
        assert is_blank(value) is True

    @pytest.mark.parametrize("value", ["ana", 0, False, "0"])
    def test_present_values(self, value):
        """Falsy non-string values still count as filters."""
        assert is_blank(value) is False


class TestToInt:

    def test_converts_numeric_string(self):
        assert to_int(" 42 ", "id_entidade") == 42

    def test_rejects_text(self):
        with pytest.raises(ValidationError) as exc_info:
            to_int("abc", "id_entidade")

        assert exc_info.value.status_code == 422
        assert exc_info.value.details["field"] == "id_entidade"


class TestQueryFilter:
    """Filters applied against a real SQLite session."""

    def test_search_matches_any_column(self, db_session: Session):
        _add_clients(db_session)

        rows = (
            QueryFilter(db_session.query(Client))
            .search([Client.nome_completo, Client.email], "LIMA")
            .build()
            .all()
        )

        assert {c.nome_completo for c in rows} == {"Ana Lima", "Bruno Lima"}

    def test_wildcards_are_escaped(self, db_session: Session):
        """A literal % in the search term does not match everything."""
        _add_clients(db_session)

        rows = (
            QueryFilter(db_session.query(Client))
            .icontains(Client.nome_completo, "100%")
            .build()
            .all()
        )

        assert [c.nome_completo for c in rows] == ["Carla 100% Dias"]

    def test_digits_strips_punctuation(self, db_session: Session):
        _add_clients(db_session)

        rows = QueryFilter(db_session.query(Client)).digits(Client.cpf, "222.222.222-22").build().all()

        assert len(rows) == 1
        assert rows[0].nome_completo == "Bruno Lima"

    def test_todos_sentinel_is_ignored(self, db_session: Session):
        _add_clients(db_session)

        rows = QueryFilter(db_session.query(Client)).equals(Client.tipo_relacao, "todos").build().all()

        assert len(rows) == 3

    def test_equals_with_int_coercion_rejects_text(self, db_session: Session):
        with pytest.raises(ValidationError):
            QueryFilter(db_session.query(Client)).equals(Client.id_pessoa_fisica, "x", coerce=int)


class TestPaginate:

    def test_returns_page_and_total(self, db_session: Session):
        _add_clients(db_session)
        query = db_session.query(Client).order_by(Client.nome_completo)

        rows, total = paginate(query, page=2, page_size=2)

        assert total == 3
        assert [c.nome_completo for c in rows] == ["Carla 100% Dias"]
