"""SQLAlchemy-backed model gateway.

Tables are reflected from the live database, so a resource only needs a
table (or view) name; columns and primary key come from the schema.
Dialect-neutral via SQLAlchemy Core (SQLite and PostgreSQL).
"""

from __future__ import annotations

import logging
import threading
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

from sqlalchemy import Column, MetaData, Table, create_engine, delete, insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError

from restforge.errors import ConfigurationError, GatewayError, ValidationError

logger = logging.getLogger(__name__)

_NO_MATCH = object()

TRUE_VALUES = ("true", "1", "yes", "on")
FALSE_VALUES = ("false", "0", "no", "off")


def coerce_value(column: Column, value: Any) -> Any:
    """Convert a string from the URL to the column's Python type.

    Raises:
        ValueError: If the value is not valid for the column type.
    """
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return value
    if value is None or isinstance(value, python_type):
        return value

    if python_type is bool:
        lowered = str(value).strip().lower()
        if lowered in TRUE_VALUES:
            return True
        if lowered in FALSE_VALUES:
            return False
        raise ValueError(f"not a boolean: {value!r}")
    if python_type in (datetime, date, time):
        return python_type.fromisoformat(str(value))
    if python_type in (int, float, Decimal, str):
        try:
            return python_type(value)
        except ArithmeticError as e:
            raise ValueError(str(e)) from e
    return value


class SqlGateway:
    """Model gateway for one reflected table or view.

    Keyed operations need exactly one primary key column. Views and tables
    without one still support search, and create without the re-read.
    """

    def __init__(self, engine: Engine, table: Table):
        self._engine = engine
        self.table = table
        self.table_name = table.name

    @property
    def pk(self) -> Column | None:
        pk_columns = list(self.table.primary_key.columns)
        return pk_columns[0] if len(pk_columns) == 1 else None

    @property
    def key_name(self) -> str | None:
        return self.pk.name if self.pk is not None else None

    @property
    def columns(self) -> list[str]:
        return [c.name for c in self.table.columns]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_pk(self) -> Column:
        pk = self.pk
        if pk is None:
            raise ConfigurationError(
                f"Table '{self.table_name}' has no single-column primary key "
                f"(found {len(self.table.primary_key.columns)})"
            )
        return pk

    def _coerce_key(self, key: Any) -> Any:
        """Convert a URL key to the primary key's Python type."""
        try:
            return coerce_value(self._require_pk(), key)
        except (TypeError, ValueError):
            return _NO_MATCH

    def _coerce_filters(self, filters: dict[str, Any]) -> dict[str, Any]:
        coerced = {}
        errors = []
        for name, value in filters.items():
            try:
                coerced[name] = coerce_value(self.table.columns[name], value)
            except (TypeError, ValueError):
                errors.append(f"Invalid value for {name}: {value!r}")
        if errors:
            raise ValidationError(errors)
        return coerced

    def _known(self, data: dict[str, Any]) -> dict[str, Any]:
        return {k: v for k, v in data.items() if k in self.table.columns}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def find_by_key(self, key: Any) -> dict[str, Any] | None:
        """Return the record with this primary key, or None."""
        key = self._coerce_key(key)
        if key is _NO_MATCH:
            return None

        stmt = select(self.table).where(self.pk == key)
        try:
            with self._engine.connect() as conn:
                row = conn.execute(stmt).mappings().first()
        except SQLAlchemyError as e:
            raise GatewayError(f"find on '{self.table_name}' failed: {e}") from e
        return dict(row) if row is not None else None

    def search(
        self,
        filters: dict[str, Any] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        """Return records matching all equality filters, ordered by key.

        Filter values are converted to the column type first.

        Raises:
            ValidationError: If a filter value does not fit its column.
        """
        stmt = select(self.table)
        for name, value in self._coerce_filters(filters or {}).items():
            stmt = stmt.where(self.table.columns[name] == value)
        if self.pk is not None:
            stmt = stmt.order_by(self.pk)
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset:
            stmt = stmt.offset(offset)

        try:
            with self._engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
        except SQLAlchemyError as e:
            raise GatewayError(f"search on '{self.table_name}' failed: {e}") from e
        return [dict(row) for row in rows]

    def create(self, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a record and return it as stored."""
        values = self._known(data)
        try:
            with self._engine.begin() as conn:
                result = conn.execute(insert(self.table).values(**values))
                inserted = result.inserted_primary_key
        except SQLAlchemyError as e:
            raise GatewayError(f"insert into '{self.table_name}' failed: {e}") from e

        if self.pk is None:
            return values
        key = inserted[0] if inserted else values.get(self.pk.name)
        record = self.find_by_key(key) if key is not None else None
        return record if record is not None else values

    def update(self, key: Any, data: dict[str, Any]) -> int:
        """Apply changes to one record. Returns the affected row count."""
        key = self._coerce_key(key)
        if key is _NO_MATCH:
            return 0

        values = self._known(data)
        values.pop(self.pk.name, None)
        if not values:
            return 1 if self.find_by_key(key) is not None else 0

        stmt = update(self.table).where(self.pk == key).values(**values)
        try:
            with self._engine.begin() as conn:
                return conn.execute(stmt).rowcount
        except SQLAlchemyError as e:
            raise GatewayError(f"update on '{self.table_name}' failed: {e}") from e

    def destroy(self, key: Any) -> int:
        """Delete one record. Returns the affected row count."""
        key = self._coerce_key(key)
        if key is _NO_MATCH:
            return 0

        stmt = delete(self.table).where(self.pk == key)
        try:
            with self._engine.begin() as conn:
                return conn.execute(stmt).rowcount
        except SQLAlchemyError as e:
            raise GatewayError(f"delete on '{self.table_name}' failed: {e}") from e


class Database:
    """Owns the engine and hands out one gateway per table.

    Passed explicitly to create_app(); there is no process-wide instance.
    """

    def __init__(self, url: str, **engine_options: Any):
        self.url = url
        self.engine = create_engine(url, **engine_options)
        self._metadata = MetaData()
        self._gateways: dict[str, SqlGateway] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Any) -> Database:
        return cls(settings.sqlalchemy_url)

    def gateway(self, table_name: str) -> SqlGateway:
        """Return the gateway for a table or view, reflecting it on first use.

        Raises:
            ConfigurationError: If the table does not exist.
        """
        with self._lock:
            if table_name in self._gateways:
                return self._gateways[table_name]
            try:
                table = Table(table_name, self._metadata, autoload_with=self.engine)
            except NoSuchTableError as e:
                raise ConfigurationError(
                    f"Table '{table_name}' not found in {self.engine.url!r}"
                ) from e
            except SQLAlchemyError as e:
                raise ConfigurationError(
                    f"Unable to reflect table '{table_name}': {e}"
                ) from e
            gateway = SqlGateway(self.engine, table)
            self._gateways[table_name] = gateway
            logger.debug("Reflected table %s (%s)", table_name, ", ".join(gateway.columns))
            return gateway

    def close(self) -> None:
        self.engine.dispose()
