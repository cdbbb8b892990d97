# critico/core/exceptions.py

class AppError(Exception):
    def __init__(self, message: str, *, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(AppError):
    def __init__(self, message: str = "Nicht gefunden.") -> None:
        super().__init__(message, status_code=404)


class ConflictError(AppError):
    def __init__(self, message: str = "Konflikt.") -> None:
        super().__init__(message, status_code=409)


class UnauthorizedError(AppError):
    def __init__(self, message: str = "Nicht angemeldet.") -> None:
        super().__init__(message, status_code=401)


class ForbiddenError(AppError):
    def __init__(self, message: str = "Keine Berechtigung.") -> None:
        super().__init__(message, status_code=403)


class ValidationError(AppError):
    def __init__(self, message: str = "Ungültige Eingabe.") -> None:
        super().__init__(message, status_code=422)


class InvalidTransitionError(ConflictError):
    def __init__(self, current: str, action: str) -> None:
        super().__init__(f"Anfrage im Status '{current}' kann nicht '{action}' werden.")
        self.current = current
        self.action = action
