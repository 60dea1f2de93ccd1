"""
SQL backend: table access through SQLAlchemy ORM sessions.

Writes go through the ORM so that committed changes reach the realtime
change feed via mapper events.
"""
import logging
from typing import Any, List, Optional

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError

from travel_site.db import create_db_engine, create_session_factory, init_db, session_scope
from travel_site.models import Base, MODELS_BY_TABLE
from travel_site.realtime import ChangeFeed, attach_orm_events

from .base import BackendError, Filters, Row, json_value

logger = logging.getLogger("backend.sql")


def row_to_dict(obj: Any, columns: Optional[List[str]] = None) -> Row:
    """Convert an ORM instance to a plain dict."""
    names = columns or [c.key for c in obj.__table__.columns]
    return {name: json_value(getattr(obj, name)) for name in names}


class SqlBackend:
    """
    Backend over a SQL database.

    Usage:
        backend = SqlBackend.from_url("sqlite:///./travel_site.db", feed=feed)
        rows = backend.select("packages", {"region": "Asia"}, order_by="created_at", descending=True)
    """

    is_configured = True

    def __init__(self, engine, feed: Optional[ChangeFeed] = None):
        self.engine = engine
        self.session_factory = create_session_factory(engine)
        self.feed = None
        if feed is not None:
            self.bind_feed(feed)

    def bind_feed(self, feed: ChangeFeed) -> None:
        """Publish committed changes made through this backend to ``feed``."""
        if self.feed is not None:
            raise BackendError("Backend already publishes to a change feed")
        self.feed = feed
        attach_orm_events(feed, Base, self.session_factory)

    @classmethod
    def from_url(
        cls,
        database_url: str,
        feed: Optional[ChangeFeed] = None,
        create_tables: bool = True,
    ) -> "SqlBackend":
        engine = create_db_engine(database_url)
        if create_tables:
            init_db(engine)
        return cls(engine, feed=feed)

    def _model(self, table: str):
        model = MODELS_BY_TABLE.get(table)
        if model is None:
            raise BackendError(f"Unknown table: {table}")
        return model

    def _query(self, session, model, filters: Optional[Filters]):
        query = session.query(model)
        for column, value in (filters or {}).items():
            if column not in model.__table__.columns:
                raise BackendError(f"Unknown column {column} on {model.__tablename__}")
            query = query.filter(getattr(model, column) == value)
        return query

    # ===== READS =====

    def select(
        self,
        table: str,
        filters: Optional[Filters] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        columns: Optional[List[str]] = None,
    ) -> List[Row]:
        model = self._model(table)
        try:
            with session_scope(self.session_factory) as session:
                query = self._query(session, model, filters)
                if order_by:
                    column = getattr(model, order_by)
                    query = query.order_by(desc(column) if descending else column)
                if limit is not None:
                    query = query.limit(limit)
                return [row_to_dict(obj, columns) for obj in query.all()]
        except SQLAlchemyError as e:
            logger.error(f"Select on {table} failed: {e}")
            raise BackendError(str(e)) from e

    def select_one(
        self,
        table: str,
        filters: Optional[Filters] = None,
        columns: Optional[List[str]] = None,
    ) -> Optional[Row]:
        rows = self.select(table, filters, limit=1, columns=columns)
        return rows[0] if rows else None

    # ===== WRITES =====

    def insert(self, table: str, values: Row) -> Row:
        model = self._model(table)
        try:
            with session_scope(self.session_factory) as session:
                obj = model(**values)
                session.add(obj)
                session.flush()
                return row_to_dict(obj)
        except (SQLAlchemyError, TypeError) as e:
            logger.error(f"Insert into {table} failed: {e}")
            raise BackendError(str(e)) from e

    def update(self, table: str, row_id: str, values: Row) -> Optional[Row]:
        model = self._model(table)
        try:
            with session_scope(self.session_factory) as session:
                obj = session.get(model, row_id)
                if obj is None:
                    return None
                for column, value in values.items():
                    setattr(obj, column, value)
                session.flush()
                return row_to_dict(obj)
        except SQLAlchemyError as e:
            logger.error(f"Update of {table}/{row_id} failed: {e}")
            raise BackendError(str(e)) from e

    def upsert(self, table: str, values: Row, on_conflict: str = "id") -> Row:
        """Insert, or update the row whose ``on_conflict`` column matches."""
        model = self._model(table)
        conflict_value = values.get(on_conflict)
        try:
            with session_scope(self.session_factory) as session:
                obj = None
                if conflict_value is not None:
                    obj = self._query(session, model, {on_conflict: conflict_value}).first()
                if obj is None:
                    obj = model(**values)
                    session.add(obj)
                else:
                    for column, value in values.items():
                        if column != "id":
                            setattr(obj, column, value)
                session.flush()
                return row_to_dict(obj)
        except (SQLAlchemyError, TypeError) as e:
            logger.error(f"Upsert into {table} failed: {e}")
            raise BackendError(str(e)) from e

    def delete(self, table: str, row_id: str) -> bool:
        model = self._model(table)
        try:
            with session_scope(self.session_factory) as session:
                obj = session.get(model, row_id)
                if obj is None:
                    return False
                session.delete(obj)
                return True
        except SQLAlchemyError as e:
            logger.error(f"Delete of {table}/{row_id} failed: {e}")
            raise BackendError(str(e)) from e
