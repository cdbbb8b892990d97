# critico/infrastructure/realtime/change_feed.py
"""In-process feed of row changes.

Writers publish after their transaction committed (see ``db_session`` /
``on_commit``). Readers subscribe per table with an equality filter, much
like a Postgres logical-replication channel, and get a ``Subscription``
handle they must release.
"""
from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Mapping

logger = logging.getLogger(__name__)


class ChangeKind(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    kind: ChangeKind
    row: dict[str, Any]
    actor_id: int | None = None


Callback = Callable[[ChangeEvent], None]
Predicate = Callable[[dict[str, Any]], bool]


@dataclass
class _Subscriber:
    id: int
    table: str
    kinds: frozenset[ChangeKind]
    filters: dict[str, Any]
    predicate: Predicate | None
    callback: Callback = field(repr=False)

    def wants(self, event: ChangeEvent) -> bool:
        if event.table != self.table or event.kind not in self.kinds:
            return False
        for column, expected in self.filters.items():
            value = event.row.get(column)
            if isinstance(expected, (set, frozenset)):
                if value not in expected:
                    return False
            elif value != expected:
                return False
        if self.predicate is not None and not self.predicate(event.row):
            return False
        return True


class Subscription:
    def __init__(self, feed: "ChangeFeed", subscriber_id: int) -> None:
        self._feed = feed
        self._id = subscriber_id
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._feed._remove(self._id)


class ChangeFeed:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: dict[int, _Subscriber] = {}
        self._ids = itertools.count(1)

    def subscribe(
        self,
        table: str,
        callback: Callback,
        *,
        kinds: Iterable[ChangeKind] = (ChangeKind.INSERT, ChangeKind.UPDATE),
        filters: Mapping[str, Any] | None = None,
        predicate: Predicate | None = None,
    ) -> Subscription:
        with self._lock:
            sub_id = next(self._ids)
            self._subscribers[sub_id] = _Subscriber(
                id=sub_id,
                table=table,
                kinds=frozenset(kinds),
                filters=dict(filters or {}),
                predicate=predicate,
                callback=callback,
            )
        return Subscription(self, sub_id)

    def _remove(self, sub_id: int) -> None:
        with self._lock:
            self._subscribers.pop(sub_id, None)

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def publish(self, event: ChangeEvent) -> None:
        with self._lock:
            targets = [s for s in self._subscribers.values() if s.wants(event)]

        # callbacks may (un)subscribe, so they run without the lock
        for sub in targets:
            try:
                sub.callback(event)
            except Exception:
                logger.exception("Change feed subscriber %s failed on %s %s", sub.id, event.table, event.kind.value)

    def clear(self) -> None:
        with self._lock:
            self._subscribers.clear()


change_feed = ChangeFeed()
