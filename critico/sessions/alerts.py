# critico/sessions/alerts.py
from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from critico.core.exceptions import AppError, ConflictError, ForbiddenError, NotFoundError, UnauthorizedError


@dataclass(frozen=True)
class Alert:
    kind: str  # forbidden | not_found | conflict | error
    message: str


def alert_for(exc: Exception) -> Alert:
    if isinstance(exc, (ForbiddenError, UnauthorizedError)):
        return Alert("forbidden", str(exc) or "Keine Berechtigung.")
    if isinstance(exc, NotFoundError):
        return Alert("not_found", str(exc))
    if isinstance(exc, ConflictError):
        return Alert("conflict", str(exc))
    if isinstance(exc, AppError):
        return Alert("error", str(exc))
    if isinstance(exc, SQLAlchemyError):
        return Alert("error", "Datenbankfehler. Bitte später erneut versuchen.")
    return Alert("error", "Unbekannter Fehler.")
