# critico/services/user_service.py

from critico.core.exceptions import ConflictError, NotFoundError, UnauthorizedError
from critico.infrastructure.database.base_model import utcnow
from critico.infrastructure.database.models.user_model import UserModel
from critico.infrastructure.security.password_hasher import PasswordHasher
from critico.repositories.message_repository import MessageRepository
from critico.repositories.user_repository import UserRepository


class UserService:
    def __init__(self, user_repository: UserRepository, msg_repo: MessageRepository | None = None) -> None:
        self._user_repository = user_repository
        self._msg_repo = msg_repo

    def signup(self, *, name: str, surname: str, email: str, password: str) -> UserModel:
        normalized = email.strip().lower()
        if self._user_repository.get_by_email(normalized) is not None:
            raise ConflictError("E-Mail ist bereits registriert.")

        password_hash, password_salt, algo, iterations = PasswordHasher.hash_password(password)

        model = UserModel(
            name=name.strip(),
            surname=surname.strip(),
            email=normalized,
            password_algo=algo,
            password_iterations=iterations,
            password_hash=password_hash,
            password_salt=password_salt,
            trustlevel=0,
            exp=0,
            is_deleted=False,
        )
        return self._user_repository.add(model)

    def authenticate(self, *, email: str, password: str) -> UserModel:
        user = self._user_repository.get_by_email(email.strip().lower())
        if user is None:
            raise UnauthorizedError("E-Mail oder Passwort falsch.")

        ok = PasswordHasher.verify_password(
            password,
            password_hash=user.password_hash,
            password_salt=user.password_salt,
            iterations=user.password_iterations,
            algo=user.password_algo,
        )
        if not ok:
            raise UnauthorizedError("E-Mail oder Passwort falsch.")

        user.last_login = utcnow()
        return user

    def get_user(self, user_id: int) -> UserModel:
        user = self._user_repository.get_by_id(user_id)
        if user is None:
            raise NotFoundError("Benutzer nicht gefunden.")
        return user

    def get_profile(self, user_id: int) -> tuple[UserModel, int]:
        """User plus the number of star reviews they wrote."""
        user = self.get_user(user_id)
        review_count = self._msg_repo.count_reviews_by_sender(sender_id=user.id) if self._msg_repo else 0
        return user, review_count

    def set_picture(self, *, user_id: int, picture_url: str) -> UserModel:
        user = self.get_user(user_id)
        user.picture = picture_url
        user.updated_at = utcnow()
        return user
