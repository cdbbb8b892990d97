# critico/sessions/session_store.py
from __future__ import annotations

import threading
from typing import Callable

from critico.core.exceptions import UnauthorizedError

Listener = Callable[[int | None], None]


class SessionStore:
    """Authenticated identity of one connection."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._user_id: int | None = None
        self._claims: dict = {}
        self._listeners: list[Listener] = []

    @property
    def user_id(self) -> int | None:
        return self._user_id

    @property
    def claims(self) -> dict:
        return dict(self._claims)

    def is_logged_in(self) -> bool:
        return self._user_id is not None

    def require_user_id(self) -> int:
        if self._user_id is None:
            raise UnauthorizedError()
        return self._user_id

    def login(self, user_id: int, claims: dict | None = None) -> None:
        with self._lock:
            changed = self._user_id != int(user_id)
            self._user_id = int(user_id)
            self._claims = dict(claims or {})
        if changed:
            self._notify()

    def logout(self) -> None:
        with self._lock:
            changed = self._user_id is not None
            self._user_id = None
            self._claims = {}
        if changed:
            self._notify()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._user_id)
