"""Tests for the SQL entity store that need no database: value coercion and predicate SQL."""

from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import Boolean, Column, Date, DateTime, Integer, MetaData, Numeric, String, Table
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.sql.elements import False_, True_

from crudguard.application.dtos.entity import ListQuery
from crudguard.domain.entities.resource_policy import PolicySnapshot
from crudguard.domain.exceptions import (
    ConflictException,
    StorageUnavailableException,
    ValidationException,
)
from crudguard.domain.value_objects.predicate import ColumnEquals, MatchAll, MatchNone
from crudguard.infrastructure.persistence.repositories import SqlEntityStore, TableCatalog
from crudguard.infrastructure.persistence.repositories.entity_store import (
    coerce_value,
    like_pattern,
)

_metadata = MetaData()
WORK_ORDERS = Table(
    "work_orders",
    _metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(255)),
    Column("customer_id", Integer),
    Column("is_active", Boolean),
    Column("amount", Numeric(10, 2)),
    Column("due_date", Date),
    Column("created_at", DateTime(timezone=True)),
)


class TestCoerceValue:
    def test_integer_from_string(self) -> None:
        assert coerce_value(WORK_ORDERS.c.customer_id, "7") == 7

    def test_integer_rejects_text(self) -> None:
        with pytest.raises(ValueError):
            coerce_value(WORK_ORDERS.c.customer_id, "seven")

    def test_integer_rejects_bool(self) -> None:
        with pytest.raises(ValueError):
            coerce_value(WORK_ORDERS.c.customer_id, True)

    def test_boolean_strings(self) -> None:
        assert coerce_value(WORK_ORDERS.c.is_active, "true") is True
        assert coerce_value(WORK_ORDERS.c.is_active, "0") is False
        with pytest.raises(ValueError):
            coerce_value(WORK_ORDERS.c.is_active, "maybe")

    def test_decimal_date_and_datetime(self) -> None:
        assert coerce_value(WORK_ORDERS.c.amount, "12.50") == Decimal("12.50")
        assert coerce_value(WORK_ORDERS.c.due_date, "2024-03-01") == date(2024, 3, 1)
        assert coerce_value(WORK_ORDERS.c.created_at, "2024-01-01T00:00:00+00:00") == datetime(
            2024, 1, 1, tzinfo=timezone.utc
        )

    def test_none_passes_through(self) -> None:
        assert coerce_value(WORK_ORDERS.c.name, None) is None


@pytest.fixture
def store() -> SqlEntityStore:
    return SqlEntityStore(AsyncMock(), TableCatalog())


class TestRowClause:
    def _sql(self, clause) -> str:
        return str(clause.compile(compile_kwargs={"literal_binds": True}))

    def test_match_all_is_true(self, store: SqlEntityStore, snapshot: PolicySnapshot) -> None:
        policy = snapshot.resource("work_orders")
        assert isinstance(store._row_clause(WORK_ORDERS, policy, MatchAll()), True_)

    def test_match_none_is_false(self, store: SqlEntityStore, snapshot: PolicySnapshot) -> None:
        policy = snapshot.resource("work_orders")
        assert isinstance(store._row_clause(WORK_ORDERS, policy, MatchNone()), False_)

    def test_column_equals(self, store: SqlEntityStore, snapshot: PolicySnapshot) -> None:
        policy = snapshot.resource("work_orders")
        clause = store._row_clause(WORK_ORDERS, policy, ColumnEquals("customer_id", "7"))
        assert self._sql(clause) == "work_orders.customer_id = 7"

    def test_missing_column_matches_nothing(
        self, store: SqlEntityStore, snapshot: PolicySnapshot
    ) -> None:
        policy = snapshot.resource("work_orders")
        clause = store._row_clause(
            WORK_ORDERS, policy, ColumnEquals("assigned_technician_id", 3)
        )
        assert isinstance(clause, False_)

    def test_uncoercible_id_matches_nothing(
        self, store: SqlEntityStore, snapshot: PolicySnapshot
    ) -> None:
        policy = snapshot.resource("work_orders")
        assert isinstance(store._pk_clause(WORK_ORDERS, policy, "abc"), False_)


class TestSearchClause:
    def _sql(self, clause) -> str:
        return str(clause.compile(dialect=postgresql.dialect()))

    def test_like_pattern_escapes_wildcards(self) -> None:
        assert like_pattern("50%_off") == "%50\\%\\_off%"

    def test_ors_over_search_fields(self, store: SqlEntityStore) -> None:
        clause = store._search_clause(
            WORK_ORDERS, ListQuery(search="boiler", search_fields=("name", "customer_id"))
        )
        sql = self._sql(clause)
        assert "work_orders.name ILIKE" in sql
        assert "CAST(work_orders.customer_id AS VARCHAR) ILIKE" in sql
        assert " OR " in sql

    def test_no_search_fields_matches_nothing(self, store: SqlEntityStore) -> None:
        clause = store._search_clause(WORK_ORDERS, ListQuery(search="boiler"))
        assert isinstance(clause, False_)

    def test_unknown_columns_are_skipped(self, store: SqlEntityStore) -> None:
        clause = store._search_clause(
            WORK_ORDERS, ListQuery(search="x", search_fields=("legacy_code",))
        )
        assert isinstance(clause, False_)


class TestWriteValues:
    def test_unknown_field_rejected(self, store: SqlEntityStore) -> None:
        with pytest.raises(ValidationException) as exc_info:
            store._values(WORK_ORDERS, {"legacy_code": "X"})
        assert exc_info.value.details == {"field": "legacy_code"}

    def test_invalid_value_rejected(self, store: SqlEntityStore) -> None:
        with pytest.raises(ValidationException):
            store._values(WORK_ORDERS, {"customer_id": "seven"})


class TestExecuteErrors:
    async def test_integrity_error_is_conflict(self, snapshot: PolicySnapshot) -> None:
        db = MagicMock()
        db.execute = AsyncMock(side_effect=IntegrityError("INSERT", {}, Exception("dup")))
        store = SqlEntityStore(db, TableCatalog())
        with pytest.raises(ConflictException):
            await store._execute(snapshot.resource("roles"), object())

    async def test_operational_error_is_unavailable(self, snapshot: PolicySnapshot) -> None:
        db = MagicMock()
        db.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("down")))
        store = SqlEntityStore(db, TableCatalog())
        with pytest.raises(StorageUnavailableException):
            await store._execute(snapshot.resource("roles"), object())
