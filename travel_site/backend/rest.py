"""
REST backend for a hosted PostgREST-compatible database.
"""
import logging
from typing import Any, Dict, List, Optional

import requests

from travel_site.realtime import ChangeEvent, ChangeFeed, ChangeType

from .base import BackendError, Filters, Row

logger = logging.getLogger("backend.rest")

CLIENT_INFO = "travel-site/1.0.0"


def _eq(value: Any) -> str:
    """PostgREST equality operand."""
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    if value is None:
        return "is.null"
    return f"eq.{value}"


class RestBackend:
    """
    Backend over the hosted database's REST interface.

    The hosted service pushes its own change notifications to browsers; in
    process we only learn about writes made through this backend, so those
    are published to the feed after each successful write.
    """

    is_configured = True

    def __init__(
        self,
        base_url: str,
        api_key: str,
        feed: Optional[ChangeFeed] = None,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.feed = feed
        self.timeout = timeout
        self._session = session or requests.Session()

    def bind_feed(self, feed: ChangeFeed) -> None:
        self.feed = feed

    def _get_headers(self, prefer: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
            "x-client-info": CLIENT_INFO,
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _url(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    def _request(
        self,
        method: str,
        table: str,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        prefer: Optional[str] = None,
    ) -> Any:
        try:
            response = self._session.request(
                method,
                self._url(table),
                params=params,
                json=json,
                headers=self._get_headers(prefer),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"REST {method} {table} failed: {e}")
            raise BackendError(str(e)) from e
        if not response.content:
            return []
        return response.json()

    def _publish(self, change_type: ChangeType, table: str, new: Row = None, old: Row = None) -> None:
        if self.feed is None:
            return
        self.feed.publish(ChangeEvent(event=change_type, table=table, new=new or {}, old=old or {}))

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
        params = {"select": ",".join(columns) if columns else "*"}
        for column, value in (filters or {}).items():
            params[column] = _eq(value)
        if order_by:
            params["order"] = f"{order_by}.{'desc' if descending else 'asc'}"
        if limit is not None:
            params["limit"] = str(limit)
        return self._request("GET", table, params=params)

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
        rows = self._request("POST", table, json=values, prefer="return=representation")
        row = rows[0] if rows else dict(values)
        self._publish(ChangeType.INSERT, table, new=row)
        return row

    def update(self, table: str, row_id: str, values: Row) -> Optional[Row]:
        rows = self._request(
            "PATCH", table, params={"id": _eq(row_id)}, json=values,
            prefer="return=representation",
        )
        if not rows:
            return None
        self._publish(ChangeType.UPDATE, table, new=rows[0])
        return rows[0]

    def upsert(self, table: str, values: Row, on_conflict: str = "id") -> Row:
        rows = self._request(
            "POST", table, params={"on_conflict": on_conflict}, json=values,
            prefer="resolution=merge-duplicates,return=representation",
        )
        row = rows[0] if rows else dict(values)
        self._publish(ChangeType.UPDATE, table, new=row)
        return row

    def delete(self, table: str, row_id: str) -> bool:
        rows = self._request(
            "DELETE", table, params={"id": _eq(row_id)}, prefer="return=representation",
        )
        if not rows:
            return False
        self._publish(ChangeType.DELETE, table, old=rows[0])
        return True
