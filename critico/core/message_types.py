# critico/core/message_types.py
"""Message types and the test-request state machine.

A test request lives as a single row in tbMessages. Its ``message_type`` is
the request status:

    request --accept---------> request_accepted
    request --mark_qr_ready--> request_qr_ready --redeem--> request_accepted
    request --decline--------> request_declined

``request_accepted`` and ``request_declined`` are terminal.
"""
from __future__ import annotations

from enum import Enum

from critico.core.exceptions import InvalidTransitionError


class MessageType(str, Enum):
    DIRECT = "direct"
    REQUEST = "request"
    REQUEST_QR_READY = "request_qr_ready"
    REQUEST_ACCEPTED = "request_accepted"
    REQUEST_DECLINED = "request_declined"
    PRODUCT = "product"


class RequestAction(str, Enum):
    ACCEPT = "accept"
    MARK_QR_READY = "mark_qr_ready"
    DECLINE = "decline"
    REDEEM = "redeem"


REQUEST_FAMILY = frozenset(
    {
        MessageType.REQUEST,
        MessageType.REQUEST_QR_READY,
        MessageType.REQUEST_ACCEPTED,
        MessageType.REQUEST_DECLINED,
    }
)

# what a direct chat window shows; qr-ready and product comments stay out
CHAT_VISIBLE_TYPES = (
    MessageType.DIRECT,
    MessageType.REQUEST,
    MessageType.REQUEST_ACCEPTED,
    MessageType.REQUEST_DECLINED,
)

TERMINAL_REQUEST_STATES = frozenset({MessageType.REQUEST_ACCEPTED, MessageType.REQUEST_DECLINED})

_TRANSITIONS: dict[tuple[MessageType, RequestAction], MessageType] = {
    (MessageType.REQUEST, RequestAction.ACCEPT): MessageType.REQUEST_ACCEPTED,
    (MessageType.REQUEST, RequestAction.MARK_QR_READY): MessageType.REQUEST_QR_READY,
    (MessageType.REQUEST, RequestAction.DECLINE): MessageType.REQUEST_DECLINED,
    (MessageType.REQUEST_QR_READY, RequestAction.REDEEM): MessageType.REQUEST_ACCEPTED,
}


def parse_type(value: str | MessageType) -> MessageType:
    return value if isinstance(value, MessageType) else MessageType(value)


def next_state(current: str | MessageType, action: RequestAction) -> MessageType:
    """Target state for ``action`` or InvalidTransitionError (HTTP 409)."""
    state = parse_type(current)
    target = _TRANSITIONS.get((state, action))
    if target is None:
        raise InvalidTransitionError(state.value, action.value)
    return target


def can_transition(current: str | MessageType, action: RequestAction) -> bool:
    return (parse_type(current), action) in _TRANSITIONS


def is_request_family(value: str | MessageType) -> bool:
    return parse_type(value) in REQUEST_FAMILY


def is_terminal(value: str | MessageType) -> bool:
    return parse_type(value) in TERMINAL_REQUEST_STATES


def requires_product(value: str | MessageType) -> bool:
    """product_id must be set iff this is true."""
    t = parse_type(value)
    return t in REQUEST_FAMILY or t is MessageType.PRODUCT


def chat_visible_values() -> list[str]:
    return [t.value for t in CHAT_VISIBLE_TYPES]
