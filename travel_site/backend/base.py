"""
Backend interface for table reads and admin writes.

The provider pattern lets the site run against a local SQL database or a
hosted PostgREST-style service without changing the resource queries.
"""
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Protocol

Row = Dict[str, Any]
Filters = Dict[str, Any]


class BackendError(Exception):
    """A backend read or write failed. The message is shown to consumers."""


class Backend(Protocol):
    """
    Interface for table access.

    Implementations:
    - SqlBackend: SQLAlchemy session against a SQL database
    - RestBackend: PostgREST over HTTP (hosted database)
    """

    is_configured: bool

    def select(
        self,
        table: str,
        filters: Optional[Filters] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        columns: Optional[List[str]] = None,
    ) -> List[Row]:
        """
        Read rows matching all equality filters.

        Args:
            table: Table name
            filters: column -> value equality filters (ANDed)
            order_by: Column to sort by
            descending: Sort direction
            limit: Maximum number of rows
            columns: Subset of columns to return (all when None)

        Returns:
            Rows as plain dicts with JSON-friendly values
        """
        ...

    def select_one(
        self,
        table: str,
        filters: Optional[Filters] = None,
        columns: Optional[List[str]] = None,
    ) -> Optional[Row]:
        """First matching row, or None."""
        ...

    def insert(self, table: str, values: Row) -> Row:
        ...

    def update(self, table: str, row_id: str, values: Row) -> Optional[Row]:
        ...

    def upsert(self, table: str, values: Row, on_conflict: str = "id") -> Row:
        ...

    def delete(self, table: str, row_id: str) -> bool:
        ...

    def bind_feed(self, feed: Any) -> None:
        """Publish changes written through this backend to a change feed."""
        ...


def json_value(value: Any) -> Any:
    """Render dates the way a REST backend would (ISO strings)."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value
