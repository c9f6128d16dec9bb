"""
SQLAlchemy implementation of the backend query interface.

Works on the tables registered in ``Base.metadata`` with SQLAlchemy Core, so
any engine SQLAlchemy supports can stand in for the hosted Postgres database
(tests use in-memory SQLite). After every committed write a ``ChangeEvent``
is published to the realtime feed, mirroring the hosted change stream.
"""
import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import DateTime, Table, delete, func, insert, or_, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from inventory_app.adapters.secondary.database.orm import Base
from inventory_app.core.exceptions import BackendError
from inventory_app.core.ports.backend import BackendPort, Filter, Query, Row, SelectResult
from inventory_app.core.ports.external import ChangeEvent, RealtimePort
from inventory_app.core.timeutils import parse_timestamp

logger = logging.getLogger(__name__)


class SqlBackend(BackendPort):
    def __init__(self, engine: Engine, realtime: Optional[RealtimePort] = None, metadata=Base.metadata):
        self.engine = engine
        self.realtime = realtime
        self.metadata = metadata

    # ========================================================================
    # HELPERS
    # ========================================================================

    def _table(self, name: str) -> Table:
        table = self.metadata.tables.get(name)
        if table is None:
            raise BackendError(f"Unknown table: {name}")
        return table

    def _column(self, table: Table, name: str):
        if name not in table.c:
            raise BackendError(f"Unknown column {table.name}.{name}")
        return table.c[name]

    def _coerce(self, column, value: Any) -> Any:
        if isinstance(column.type, DateTime) and isinstance(value, str):
            return parse_timestamp(value)
        return value

    def _values(self, table: Table, values: Row) -> Dict[str, Any]:
        return {
            name: self._coerce(self._column(table, name), value)
            for name, value in values.items()
        }

    def _condition(self, table: Table, flt: Filter):
        column = self._column(table, flt.column)
        value = flt.value
        if flt.op == "eq":
            return column.is_(None) if value is None else column == self._coerce(column, value)
        if flt.op == "neq":
            return column.is_not(None) if value is None else column != self._coerce(column, value)
        if flt.op == "gt":
            return column > self._coerce(column, value)
        if flt.op == "gte":
            return column >= self._coerce(column, value)
        if flt.op == "lt":
            return column < self._coerce(column, value)
        if flt.op == "lte":
            return column <= self._coerce(column, value)
        if flt.op == "like":
            return column.like(value)
        if flt.op == "ilike":
            return column.ilike(value)
        if flt.op == "in":
            return column.in_([self._coerce(column, v) for v in value])
        if flt.op == "is_null":
            return column.is_(None)
        if flt.op == "not_null":
            return column.is_not(None)
        raise BackendError(f"Unsupported filter operator: {flt.op}")

    def _where(self, table: Table, query: Optional[Query]) -> list:
        if query is None:
            return []
        clauses = [self._condition(table, flt) for flt in query.filters]
        if query.search_term:
            pattern = f"%{query.search_term}%"
            clauses.append(
                or_(*[self._column(table, name).ilike(pattern) for name in query.search_columns])
            )
        return clauses

    def _rows_by_id(self, conn, table: Table, ids: List[Any]) -> List[Row]:
        if not ids:
            return []
        result = conn.execute(select(table).where(table.c.id.in_(ids)))
        return [dict(row._mapping) for row in result]

    def _publish(self, events: List[ChangeEvent]) -> None:
        if self.realtime is None:
            return
        for event in events:
            self.realtime.publish(event)

    # ========================================================================
    # QUERIES
    # ========================================================================

    def select(self, table: str, query: Optional[Query] = None) -> SelectResult:
        tbl = self._table(table)
        clauses = self._where(tbl, query)
        stmt = select(tbl).where(*clauses)

        if query is not None:
            for name, ascending in query.order_by:
                column = self._column(tbl, name)
                stmt = stmt.order_by(column.asc() if ascending else column.desc())
            if query.offset:
                stmt = stmt.offset(query.offset)
            if query.limit is not None:
                stmt = stmt.limit(query.limit)

        try:
            with self.engine.connect() as conn:
                rows = [dict(row._mapping) for row in conn.execute(stmt)]
                count = None
                if query is not None and query.with_count:
                    count_stmt = select(func.count()).select_from(tbl).where(*clauses)
                    count = conn.execute(count_stmt).scalar_one()
        except SQLAlchemyError as exc:
            raise BackendError(f"Database read from {table} failed: {getattr(exc, 'orig', None) or exc}") from exc

        return SelectResult(rows=rows, count=count)

    def insert(self, table: str, values: Row) -> Row:
        tbl = self._table(table)
        data = self._values(tbl, values)
        data.setdefault("id", str(uuid.uuid4()))

        try:
            with self.engine.begin() as conn:
                conn.execute(insert(tbl).values(**data))
                row = self._rows_by_id(conn, tbl, [data["id"]])[0]
        except SQLAlchemyError as exc:
            raise BackendError(f"Database insert into {table} failed: {getattr(exc, 'orig', None) or exc}") from exc

        logger.debug(f"Inserted {table} row {row['id']}")
        self._publish([ChangeEvent(table=table, event="INSERT", record=row)])
        return row

    def update(self, table: str, values: Row, query: Query) -> List[Row]:
        tbl = self._table(table)
        data = self._values(tbl, values)
        clauses = self._where(tbl, query)

        try:
            with self.engine.begin() as conn:
                before = [dict(row._mapping) for row in conn.execute(select(tbl).where(*clauses))]
                ids = [row["id"] for row in before]
                if ids:
                    conn.execute(update(tbl).where(tbl.c.id.in_(ids)).values(**data))
                after = self._rows_by_id(conn, tbl, ids)
        except SQLAlchemyError as exc:
            raise BackendError(f"Database update of {table} failed: {getattr(exc, 'orig', None) or exc}") from exc

        old_by_id = {row["id"]: row for row in before}
        self._publish([
            ChangeEvent(table=table, event="UPDATE", record=row, old_record=old_by_id.get(row["id"]))
            for row in after
        ])
        return after

    def delete(self, table: str, query: Query) -> List[Row]:
        tbl = self._table(table)
        clauses = self._where(tbl, query)

        try:
            with self.engine.begin() as conn:
                doomed = [dict(row._mapping) for row in conn.execute(select(tbl).where(*clauses))]
                ids = [row["id"] for row in doomed]
                if ids:
                    conn.execute(delete(tbl).where(tbl.c.id.in_(ids)))
        except SQLAlchemyError as exc:
            raise BackendError(f"Database delete from {table} failed: {getattr(exc, 'orig', None) or exc}") from exc

        self._publish([ChangeEvent(table=table, event="DELETE", old_record=row) for row in doomed])
        return doomed

    def upsert(self, table: str, rows: List[Row]) -> List[Row]:
        """Insert or update by primary key, in one transaction."""
        tbl = self._table(table)
        events: List[ChangeEvent] = []
        saved: List[Row] = []

        try:
            with self.engine.begin() as conn:
                for values in rows:
                    data = self._values(tbl, values)
                    data.setdefault("id", str(uuid.uuid4()))
                    existing = self._rows_by_id(conn, tbl, [data["id"]])
                    if existing:
                        conn.execute(update(tbl).where(tbl.c.id == data["id"]).values(**data))
                    else:
                        conn.execute(insert(tbl).values(**data))
                    row = self._rows_by_id(conn, tbl, [data["id"]])[0]
                    saved.append(row)
                    events.append(ChangeEvent(
                        table=table,
                        event="UPDATE" if existing else "INSERT",
                        record=row,
                        old_record=existing[0] if existing else None,
                    ))
        except SQLAlchemyError as exc:
            raise BackendError(f"Database upsert into {table} failed: {getattr(exc, 'orig', None) or exc}") from exc

        self._publish(events)
        return saved
