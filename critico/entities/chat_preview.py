# critico/entities/chat_preview.py
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

NO_MESSAGES_YET = "Noch keine Nachrichten"


@dataclass(frozen=True)
class ChatPreview:
    chat_id: int
    partner_id: int
    partner_name: str
    partner_surname: str
    partner_picture: Optional[str]
    partner_trustlevel: int
    last_message: str
    last_message_time: datetime
    last_message_type: Optional[str]
    unread_count: int
    has_unread_request: bool

    @property
    def partner_full_name(self) -> str:
        return f"{self.partner_name} {self.partner_surname}".strip()

    def matches(self, q: str | None) -> bool:
        term = (q or "").strip().lower()
        if not term:
            return True
        return term in self.partner_full_name.lower() or term in (self.last_message or "").lower()


@dataclass(frozen=True)
class ConversationList:
    previews: list[ChatPreview]
    badge: int
