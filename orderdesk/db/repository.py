"""Single-statement read/write helpers.

Each helper checks out its own connection and returns it before returning;
none of them take part in a caller's transaction. Use
``ConnectionPool.run_in_transaction`` when several writes must be atomic.
"""
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Type, TypeVar

from sqlalchemy import delete, select, text, update
from sqlalchemy.orm import Session

from .models import utcnow
from .session import ConnectionPool

M = TypeVar('M')


@dataclass
class QueryResult:
    """Rows returned by a raw statement and the number of rows affected."""
    rows: List[Dict[str, Any]] = field(default_factory=list)
    row_count: int = 0


class Repository:
    """Generic helpers over the mapped models."""

    def __init__(self, pool: ConnectionPool):
        self.pool = pool
        self.logger = logging.getLogger(self.__class__.__name__)

    @contextmanager
    def session(self, commit: bool = False) -> Iterator[Session]:
        """Session on a freshly checked-out connection.

        Args:
            commit: Commit when the block exits cleanly
        """
        connection = self.pool.connect()
        session = self.pool.bind_session(connection)
        try:
            yield session
            if commit:
                session.commit()
                connection.commit()
        except Exception:
            session.rollback()
            connection.rollback()
            raise
        finally:
            session.close()
            connection.close()

    def query(self, statement: str, params: Optional[Dict[str, Any]] = None) -> QueryResult:
        """Execute a raw SQL statement with named parameters.

        Args:
            statement: SQL text using ``:name`` placeholders
            params: Parameter values

        Returns:
            QueryResult with mapping rows (empty for statements returning none)
        """
        connection = self.pool.connect()
        try:
            result = connection.execute(text(statement), params or {})
            rows = [dict(row) for row in result.mappings()] if result.returns_rows else []
            row_count = result.rowcount if result.rowcount >= 0 else len(rows)
            connection.commit()
            return QueryResult(rows=rows, row_count=row_count)
        except Exception:
            connection.rollback()
            raise
        finally:
            connection.close()

    def find_by_id(self, model: Type[M], record_id: Any) -> Optional[M]:
        """Fetch one row by primary key, or None."""
        self.logger.debug(f"Fetching {model.__tablename__} {record_id}")
        with self.session() as session:
            return session.get(model, record_id)

    def find_all(self, model: Type[M], limit: int = 100, offset: int = 0, order_by=None, **filters) -> List[M]:
        """Fetch a page of rows, optionally filtered by column equality."""
        self.logger.debug(f"Fetching {model.__tablename__} (limit={limit}, offset={offset}, filters={filters})")
        stmt = select(model).filter_by(**filters)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        stmt = stmt.limit(limit).offset(offset)
        with self.session() as session:
            return list(session.scalars(stmt))

    def insert(self, model: Type[M], values: Dict[str, Any]) -> M:
        """Insert one row and return it."""
        record = model(**values)
        with self.session(commit=True) as session:
            session.add(record)
        return record

    def update(self, model: Type[M], record_id: Any, values: Dict[str, Any]) -> Optional[M]:
        """Update one row by primary key and return the new state, or None if absent.

        Models with a ``modifiedAt`` column get it stamped unless ``values``
        sets it explicitly.
        """
        values = dict(values)
        if hasattr(model, 'modifiedAt'):
            values.setdefault('modifiedAt', utcnow())
        with self.session(commit=True) as session:
            result = session.execute(
                update(model).where(model.id == record_id).values(**values)
            )
            if result.rowcount == 0:
                return None
            return session.get(model, record_id, populate_existing=True)

    def delete(self, model: Type[M], record_id: Any) -> bool:
        """Delete one row by primary key. Returns whether a row was removed."""
        with self.session(commit=True) as session:
            result = session.execute(delete(model).where(model.id == record_id))
            return result.rowcount > 0
