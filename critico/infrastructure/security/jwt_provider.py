# critico/infrastructure/security/jwt_provider.py

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt

from critico.config.settings import settings
from critico.core.exceptions import UnauthorizedError


class JwtProvider:
    def __init__(self) -> None:
        self._secret = settings.jwt_secret
        self._issuer = settings.jwt_issuer
        self._audience = settings.jwt_audience
        self._algorithm = "HS256"

    def issue_access_token(self, *, subject: str, payload: dict | None = None, minutes: int = 0) -> str:
        ttl = minutes if minutes and minutes > 0 else settings.jwt_access_minutes
        now = datetime.now(tz=timezone.utc)

        claims = {
            "iss": self._issuer,
            "aud": self._audience,
            "sub": str(subject),
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(minutes=ttl)).timestamp()),
            "jti": uuid4().hex,
            "typ": "access",
        }
        claims.update(payload or {})
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> dict:
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                audience=self._audience,
                issuer=self._issuer,
                options={"require": ["exp", "iat", "sub", "typ"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise UnauthorizedError("Sitzung abgelaufen.") from e
        except jwt.InvalidTokenError as e:
            raise UnauthorizedError("Ungültiges Token.") from e

        if claims.get("typ") != "access":
            raise UnauthorizedError("Ungültiges Token.")
        return claims

    def user_id_from(self, token: str) -> int:
        return int(self.decode(token)["sub"])
