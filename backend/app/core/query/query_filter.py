"""
Query Filter Utilities Module
=============================

Provides a small fluent builder for the optional filter predicates used
by list endpoints and reports.

Features:
- Skips blank values and the ``todos`` sentinel sent by select inputs
- Case-insensitive substring matching with LIKE wildcards escaped
- Digits-only matching for CPF/CNPJ style identifiers
- Integer coercion with user-facing validation errors
- Pagination helper returning rows and total count

Usage:
    query = (
        QueryFilter(db.query(Client))
        .icontains(Client.nome_completo, filters.nome)
        .digits(Client.cpf, filters.cpf)
        .equals(Client.tipo_relacao, filters.tipo_relacao)
        .build()
    )
    rows, total = paginate(query, page, page_size)
"""

import re
from typing import Any, Callable, Iterable, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Query

from app.core.exceptions import ValidationError

# Values that mean "no filter" in the report screens
IGNORED_VALUES = frozenset({"", "todos", "todas", "all"})

_NON_DIGITS = re.compile(r"\D")


def is_blank(value: Any) -> bool:
    """Return True when a filter value should be ignored."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip().lower() in IGNORED_VALUES
    return False


def to_int(value: Any, field: str) -> int:
    """
    Coerce a filter value to int.

    Raises:
        ValidationError: If the value is not an integer
    """
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"'{value}' is not a valid id", field=field)


class QueryFilter:
    """
    Helper class for optional query predicates.

    Every method ignores blank values, so callers can pass raw request
    filters without checking each one.
    """

    def __init__(self, query: Query):
        """
        Initialize filter builder.

        Args:
            query: Base SQLAlchemy query
        """
        self.query = query

    def icontains(self, column, value: Optional[str]) -> "QueryFilter":
        """Case-insensitive substring match."""
        if not is_blank(value):
            self.query = self.query.filter(column.icontains(value.strip(), autoescape=True))
        return self

    def search(self, columns: Iterable, value: Optional[str]) -> "QueryFilter":
        """Case-insensitive substring match against any of the columns."""
        if not is_blank(value):
            term = value.strip()
            self.query = self.query.filter(
                or_(*[column.icontains(term, autoescape=True) for column in columns])
            )
        return self

    def digits(self, column, value: Optional[str]) -> "QueryFilter":
        """Substring match on identifiers stored as digits only."""
        if is_blank(value):
            return self
        digits = _NON_DIGITS.sub("", value)
        if digits:
            self.query = self.query.filter(column.contains(digits, autoescape=True))
        return self

    def equals(
        self,
        column,
        value: Any,
        coerce: Optional[Callable[[Any], Any]] = None,
    ) -> "QueryFilter":
        """Exact match, optionally coercing the raw value first."""
        if is_blank(value):
            return self
        if coerce is int:
            value = to_int(value, column.key)
        elif coerce is not None:
            value = coerce(value)
        self.query = self.query.filter(column == value)
        return self

    def gte(self, column, value: Any) -> "QueryFilter":
        if not is_blank(value):
            self.query = self.query.filter(column >= value)
        return self

    def lte(self, column, value: Any) -> "QueryFilter":
        if not is_blank(value):
            self.query = self.query.filter(column <= value)
        return self

    def where(self, value: Any, condition: Callable[[Any], Any]) -> "QueryFilter":
        """
        Apply a custom predicate built from the value, when present.

        Args:
            value: Raw filter value
            condition: Callable receiving the value and returning a SQL expression
        """
        if not is_blank(value):
            self.query = self.query.filter(condition(value))
        return self

    def build(self) -> Query:
        return self.query


# =====================================
# Convenience Functions
# =====================================

def paginate(query: Query, page: int, page_size: int) -> Tuple[List[Any], int]:
    """
    Count and slice a query.

    Args:
        query: Filtered and ordered query
        page: 1-based page number
        page_size: Rows per page

    Returns:
        Tuple of (rows for the page, total matching rows)
    """
    total = query.order_by(None).count()
    rows = query.offset((page - 1) * page_size).limit(page_size).all()
    return rows, total
