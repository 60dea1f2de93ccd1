"""
Realtime change feed.

Row-level insert/update/delete notifications are published to named
channels. Consumers only use them to invalidate cached queries; nothing is
patched in place.

The provider pattern mirrors a hosted database's push channels: the SQL
backend feeds it from SQLAlchemy ORM events, the REST backend publishes
after its own writes.
"""
import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy import event
from sqlalchemy.orm import Mapper, object_session

from travel_site.cache import QueryCache

logger = logging.getLogger("realtime")

PENDING_CHANGES_KEY = "pending_changes"


class ChangeType(Enum):
    """Kinds of row changes."""
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass
class ChangeEvent:
    """A single row change on a table."""
    event: ChangeType
    table: str
    new: Dict[str, Any] = field(default_factory=dict)
    old: Dict[str, Any] = field(default_factory=dict)

    @property
    def record(self) -> Dict[str, Any]:
        """The row the change refers to (old row for deletes)."""
        return self.old if self.event == ChangeType.DELETE else self.new


ChangeCallback = Callable[[ChangeEvent], None]


@dataclass
class _Binding:
    table: str
    callback: ChangeCallback
    # (column, value) equality filter
    filter: Optional[Tuple[str, Any]] = None

    def accepts(self, change: ChangeEvent) -> bool:
        if change.table != self.table:
            return False
        if self.filter is None:
            return True
        column, value = self.filter
        return change.record.get(column) == value


class Channel:
    """
    A named subscription on the feed.

    Usage:
        channel = feed.channel("packages-changes")
        channel.on("packages", handle_change).subscribe()
        ...
        feed.remove_channel(channel)
    """

    def __init__(self, feed: "ChangeFeed", name: str):
        self.feed = feed
        self.name = name
        self._bindings: List[_Binding] = []
        self.subscribed = False

    def on(
        self,
        table: str,
        callback: ChangeCallback,
        filter: Optional[Tuple[str, Any]] = None,
    ) -> "Channel":
        self._bindings.append(_Binding(table=table, callback=callback, filter=filter))
        return self

    def subscribe(self) -> "Channel":
        self.feed._add(self)
        self.subscribed = True
        return self

    def deliver(self, change: ChangeEvent) -> None:
        for binding in self._bindings:
            if not binding.accepts(change):
                continue
            try:
                binding.callback(change)
            except Exception as e:
                logger.error(f"Change handler on channel {self.name} failed: {e}")


class ChangeFeed:
    """In-process publish/subscribe hub for row changes."""

    def __init__(self):
        self._channels: List[Channel] = []
        self._lock = threading.Lock()

    def channel(self, name: str) -> Channel:
        return Channel(self, name)

    def _add(self, channel: Channel) -> None:
        with self._lock:
            if channel not in self._channels:
                self._channels.append(channel)
        logger.debug(f"Channel subscribed: {channel.name}")

    def remove_channel(self, channel: Channel) -> None:
        with self._lock:
            if channel in self._channels:
                self._channels.remove(channel)
        channel.subscribed = False
        logger.debug(f"Channel removed: {channel.name}")

    def publish(self, change: ChangeEvent) -> None:
        """Deliver a change to every subscribed channel bound to its table."""
        with self._lock:
            channels = list(self._channels)
        logger.debug(f"Change on {change.table}: {change.event.value}")
        for channel in channels:
            channel.deliver(change)

    @property
    def channel_names(self) -> List[str]:
        with self._lock:
            return [c.name for c in self._channels]


class CacheInvalidator:
    """
    Subscribe to one table's changes and invalidate its cached queries.

    Usable as a context manager; leaving the block unsubscribes.
    """

    def __init__(
        self,
        feed: ChangeFeed,
        cache: QueryCache,
        table: str,
        filter: Optional[Tuple[str, Any]] = None,
        channel_name: Optional[str] = None,
    ):
        self.feed = feed
        self.cache = cache
        self.table = table
        self.filter = filter
        self.channel_name = channel_name or default_channel_name(table, filter)
        self._channel: Optional[Channel] = None

    def _handle(self, change: ChangeEvent) -> None:
        logger.info(f"Realtime {self.table} change detected ({change.event.value}), invalidating")
        self.cache.invalidate(self.table)

    def open(self) -> "CacheInvalidator":
        if self._channel is None:
            self._channel = (
                self.feed.channel(self.channel_name)
                .on(self.table, self._handle, filter=self.filter)
                .subscribe()
            )
        return self

    def close(self) -> None:
        if self._channel is not None:
            self.feed.remove_channel(self._channel)
            self._channel = None

    def __enter__(self) -> "CacheInvalidator":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def default_channel_name(table: str, filter: Optional[Tuple[str, Any]] = None) -> str:
    """``blog_posts`` -> ``blog-posts-changes``; filtered channels get the value appended."""
    name = table.replace("_", "-")
    if filter is not None:
        return f"{name}-{filter[1]}"
    return f"{name}-changes"


def invalidate_on_change(
    feed: ChangeFeed,
    cache: QueryCache,
    table: str,
    filter: Optional[Tuple[str, Any]] = None,
    channel_name: Optional[str] = None,
) -> CacheInvalidator:
    """Build an (unopened) subscribe-and-invalidate binding for a table."""
    return CacheInvalidator(feed, cache, table, filter=filter, channel_name=channel_name)


# =============================================================================
# SQLAlchemy bridge
# =============================================================================

def _queue_change(change_type: ChangeType) -> Callable[[Mapper, Any, Any], None]:
    def listener(mapper: Mapper, connection: Any, target: Any) -> None:
        session = object_session(target)
        if session is None:
            return
        snapshot = {c.key: getattr(target, c.key) for c in mapper.column_attrs}
        change = ChangeEvent(
            event=change_type,
            table=mapper.persist_selectable.name,
            new={} if change_type == ChangeType.DELETE else snapshot,
            old=snapshot if change_type == ChangeType.DELETE else {},
        )
        session.info.setdefault(PENDING_CHANGES_KEY, []).append(change)
    return listener


_MAPPER_LISTENERS = {
    "after_insert": _queue_change(ChangeType.INSERT),
    "after_update": _queue_change(ChangeType.UPDATE),
    "after_delete": _queue_change(ChangeType.DELETE),
}


def attach_orm_events(feed: ChangeFeed, base: Any, session_factory: Any) -> None:
    """
    Publish committed ORM row changes from one session factory to a feed.

    Mapper events queue changes on the session during flush; they are
    published after commit and dropped on rollback, so subscribers never see
    uncommitted rows.
    """
    for identifier, listener in _MAPPER_LISTENERS.items():
        if not event.contains(base, identifier, listener):
            event.listen(base, identifier, listener, propagate=True)

    def publish_pending(session: Any) -> None:
        for change in session.info.pop(PENDING_CHANGES_KEY, []):
            feed.publish(change)

    def drop_pending(session: Any) -> None:
        session.info.pop(PENDING_CHANGES_KEY, None)

    event.listen(session_factory, "after_commit", publish_pending)
    event.listen(session_factory, "after_rollback", drop_pending)
