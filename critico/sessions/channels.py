# critico/sessions/channels.py
"""Scoped realtime subscriptions, at most one per logical slot.

``open(slot, scope, ...)`` keeps the live subscription when the scope did
not change and replaces it (release first, then subscribe) when it did.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Hashable, Iterable, Mapping

from critico.infrastructure.realtime.change_feed import (
    Callback,
    ChangeFeed,
    ChangeKind,
    Predicate,
    Subscription,
)

logger = logging.getLogger(__name__)


@dataclass
class _Channel:
    scope: Hashable
    subscription: Subscription


class ChannelRegistry:
    def __init__(self, feed: ChangeFeed) -> None:
        self._feed = feed
        self._lock = threading.Lock()
        self._channels: dict[str, _Channel] = {}

    def open(
        self,
        slot: str,
        scope: Hashable,
        *,
        table: str,
        callback: Callback,
        kinds: Iterable[ChangeKind] = (ChangeKind.INSERT, ChangeKind.UPDATE),
        filters: Mapping[str, Any] | None = None,
        predicate: Predicate | None = None,
    ) -> bool:
        """True when a new subscription was made, False when the live one was reused."""
        with self._lock:
            current = self._channels.get(slot)
            if current is not None and current.scope == scope and current.subscription.active:
                return False
            if current is not None:
                current.subscription.unsubscribe()
                logger.debug("Channel %s released (scope %s -> %s)", slot, current.scope, scope)

            sub = self._feed.subscribe(table, callback, kinds=kinds, filters=filters, predicate=predicate)
            self._channels[slot] = _Channel(scope=scope, subscription=sub)
        return True

    def scope_of(self, slot: str) -> Hashable | None:
        with self._lock:
            channel = self._channels.get(slot)
            return channel.scope if channel else None

    def is_open(self, slot: str) -> bool:
        with self._lock:
            channel = self._channels.get(slot)
            return channel is not None and channel.subscription.active

    def release(self, slot: str) -> None:
        with self._lock:
            channel = self._channels.pop(slot, None)
        if channel is not None:
            channel.subscription.unsubscribe()

    def close(self) -> None:
        with self._lock:
            channels = list(self._channels.values())
            self._channels.clear()
        for channel in channels:
            channel.subscription.unsubscribe()

    def slots(self) -> list[str]:
        with self._lock:
            return sorted(self._channels)
