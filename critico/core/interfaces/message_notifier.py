# critico/core/interfaces/message_notifier.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class MessageChangedEvent:
    kind: str  # "INSERT" | "UPDATE"
    row: dict[str, Any]
    actor_id: int | None = None


class MessageNotifier(Protocol):
    def notify_message_inserted(self, message: Any, *, actor_id: int | None) -> None:
        ...

    def notify_message_updated(self, message: Any, *, actor_id: int | None) -> None:
        ...
