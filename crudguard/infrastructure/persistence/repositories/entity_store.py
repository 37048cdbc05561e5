"""Generic SQL entity store: one adapter for every resource in the policy (IEntityStore).

Tables are reflected by the names the policy gives them on first use, so a new
resource needs a table and a policy entry, never a model class. The engine's
Predicate is translated here and always ANDed with caller filters.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import (
    Column,
    Enum,
    MetaData,
    String,
    Table,
    and_,
    cast,
    delete,
    false,
    insert,
    or_,
    select,
    true,
    update,
)
from sqlalchemy.exc import (
    DataError,
    IntegrityError,
    InterfaceError,
    NoSuchTableError,
    OperationalError,
)
from sqlalchemy.ext.asyncio import AsyncSession

from crudguard.application.dtos.entity import ListQuery
from crudguard.domain.entities.resource_policy import ResourcePolicy
from crudguard.domain.exceptions import (
    ConfigurationException,
    ConflictException,
    StorageUnavailableException,
    ValidationException,
)
from crudguard.domain.value_objects.predicate import (
    ColumnEquals,
    MatchAll,
    Predicate,
)
from crudguard.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off"}


def like_pattern(term: str) -> str:
    """Substring LIKE pattern for a search term, with LIKE wildcards escaped."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def coerce_value(column: Column[Any], value: Any) -> Any:
    """Convert a JSON/URL value to the column's Python type.

    Raises ValueError when the value cannot be represented in that type.
    """
    if value is None:
        return None
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return value
    if isinstance(value, python_type) and not (python_type is int and isinstance(value, bool)):
        return value
    if python_type is bool:
        text = str(value).strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        raise ValueError(f"not a boolean: {value!r}")
    if python_type is int:
        if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
            raise ValueError(f"not an integer: {value!r}")
        return int(value)
    if python_type is float:
        return float(value)
    if python_type is Decimal:
        try:
            return Decimal(str(value))
        except InvalidOperation as e:
            raise ValueError(f"not a decimal: {value!r}") from e
    if python_type is datetime:
        return datetime.fromisoformat(str(value))
    if python_type is date:
        return date.fromisoformat(str(value))
    if python_type is uuid.UUID:
        return uuid.UUID(str(value))
    if python_type is str:
        return str(value)
    return value


class TableCatalog:
    """Reflected table metadata shared by all requests (reflection happens once per table)."""

    def __init__(self) -> None:
        self.metadata = MetaData()
        self._lock = asyncio.Lock()

    async def table(self, session: AsyncSession, name: str) -> Table:
        found = self.metadata.tables.get(name)
        if found is not None:
            return found
        async with self._lock:
            if name not in self.metadata.tables:
                conn = await session.connection()
                try:
                    await conn.run_sync(
                        lambda sync_conn: self.metadata.reflect(bind=sync_conn, only=[name])
                    )
                except NoSuchTableError as e:
                    raise ConfigurationException(
                        f"Table '{name}' does not exist", f"resources/{name}"
                    ) from e
                logger.info("Reflected table %s", name)
        return self.metadata.tables[name]


class SqlEntityStore:
    """IEntityStore over SQLAlchemy Core and an AsyncSession."""

    def __init__(self, db: AsyncSession, catalog: TableCatalog) -> None:
        self.db = db
        self.catalog = catalog

    async def _table(self, policy: ResourcePolicy) -> Table:
        try:
            return await self.catalog.table(self.db, policy.table)
        except (OperationalError, InterfaceError, OSError) as e:
            logger.error("Storage unavailable while reflecting %s: %s", policy.table, type(e).__name__)
            raise StorageUnavailableException(policy.name) from e

    def _row_clause(self, table: Table, policy: ResourcePolicy, predicate: Predicate) -> Any:
        if isinstance(predicate, MatchAll):
            return true()
        if not isinstance(predicate, ColumnEquals):
            return false()
        column = table.c.get(predicate.column)
        if column is None:
            logger.warning(
                "Row scope column %s missing from table %s; no rows visible",
                predicate.column,
                policy.table,
            )
            return false()
        try:
            return column == coerce_value(column, predicate.value)
        except ValueError:
            return false()

    def _pk_clause(self, table: Table, policy: ResourcePolicy, entity_id: str) -> Any:
        column = table.c.get(policy.primary_key)
        if column is None:
            raise ConfigurationException(
                f"Primary key '{policy.primary_key}' missing from table '{policy.table}'",
                f"resources/{policy.name}/primaryKey",
            )
        try:
            return column == coerce_value(column, entity_id)
        except ValueError:
            # An id that cannot exist in this column matches nothing (404).
            return false()

    def _search_clause(self, table: Table, query: ListQuery) -> Any:
        """OR of case-insensitive substring matches over the query's search fields."""
        columns = [table.c[name] for name in query.search_fields if name in table.c]
        if not columns:
            return false()
        pattern = like_pattern(query.search or "")
        return or_(*(self._as_text(column).ilike(pattern, escape="\\") for column in columns))

    @staticmethod
    def _as_text(column: Column[Any]) -> Any:
        if isinstance(column.type, String) and not isinstance(column.type, Enum):
            return column
        return cast(column, String)

    def _column(self, table: Table, name: str) -> Column[Any]:
        column = table.c.get(name)
        if column is None:
            raise ValidationException("Unknown field", field=name)
        return column

    def _values(self, table: Table, values: dict[str, Any]) -> dict[str, Any]:
        converted: dict[str, Any] = {}
        for name, value in values.items():
            column = self._column(table, name)
            try:
                converted[name] = coerce_value(column, value)
            except (ValueError, TypeError) as e:
                raise ValidationException("Invalid value for field", field=name) from e
        return converted

    async def _execute(self, policy: ResourcePolicy, stmt: Any) -> Any:
        try:
            return await self.db.execute(stmt)
        except IntegrityError as e:
            raise ConflictException(policy.name) from e
        except DataError as e:
            raise ValidationException("Invalid value for field") from e
        except (OperationalError, InterfaceError, OSError) as e:
            logger.error("Storage unavailable for %s: %s", policy.name, type(e).__name__)
            raise StorageUnavailableException(policy.name) from e

    async def list(
        self, policy: ResourcePolicy, predicate: Predicate, query: ListQuery
    ) -> list[dict[str, Any]]:
        table = await self._table(policy)
        conditions = [self._row_clause(table, policy, predicate)]
        for name, value in query.filters.items():
            column = self._column(table, name)
            try:
                conditions.append(column == coerce_value(column, value))
            except (ValueError, TypeError) as e:
                raise ValidationException("Invalid filter value", field=name) from e
        if query.search:
            conditions.append(self._search_clause(table, query))
        order_column = self._column(table, query.sort) if query.sort else table.c.get(policy.primary_key)
        stmt = select(table).where(and_(*conditions))
        if order_column is not None:
            stmt = stmt.order_by(order_column.desc() if query.descending else order_column.asc())
        stmt = stmt.offset(query.skip).limit(query.limit)
        result = await self._execute(policy, stmt)
        return [dict(row._mapping) for row in result]

    async def get(
        self, policy: ResourcePolicy, entity_id: str, predicate: Predicate
    ) -> dict[str, Any] | None:
        table = await self._table(policy)
        stmt = select(table).where(
            and_(
                self._pk_clause(table, policy, entity_id),
                self._row_clause(table, policy, predicate),
            )
        )
        result = await self._execute(policy, stmt)
        row = result.first()
        return dict(row._mapping) if row is not None else None

    async def create(self, policy: ResourcePolicy, values: dict[str, Any]) -> dict[str, Any]:
        table = await self._table(policy)
        stmt = insert(table).values(**self._values(table, values)).returning(*table.c)
        result = await self._execute(policy, stmt)
        return dict(result.one()._mapping)

    async def update(
        self,
        policy: ResourcePolicy,
        entity_id: str,
        values: dict[str, Any],
        predicate: Predicate,
    ) -> dict[str, Any] | None:
        table = await self._table(policy)
        converted = self._values(table, values)
        if "updated_at" in table.c and "updated_at" not in converted:
            converted["updated_at"] = utc_now()
        stmt = (
            update(table)
            .where(
                and_(
                    self._pk_clause(table, policy, entity_id),
                    self._row_clause(table, policy, predicate),
                )
            )
            .values(**converted)
            .returning(*table.c)
        )
        result = await self._execute(policy, stmt)
        row = result.first()
        return dict(row._mapping) if row is not None else None

    async def delete(
        self, policy: ResourcePolicy, entity_id: str, predicate: Predicate
    ) -> bool:
        table = await self._table(policy)
        stmt = delete(table).where(
            and_(
                self._pk_clause(table, policy, entity_id),
                self._row_clause(table, policy, predicate),
            )
        )
        result = await self._execute(policy, stmt)
        return result.rowcount > 0
