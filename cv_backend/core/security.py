import base64
import hashlib
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import bcrypt
from jose import JWTError, jwt

from cv_backend.config import settings
from cv_backend.errors import InvalidToken


def _prehash(password: str) -> bytes:
    """Pre-hash to avoid bcrypt's 72-byte limit (base64 keeps NUL bytes out)."""
    return base64.b64encode(hashlib.sha256(password.encode()).digest())


def hash_password(password: str, rounds: int | None = None) -> str:
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(_prehash(password), salt).decode()


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_prehash(plain), hashed.encode())
    except ValueError:
        # Malformed stored hash
        return False


class TokenIssuer:
    """Issues and verifies signed, time-bounded tokens carrying a username."""

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 60 * 24):
        self._secret_key = secret_key
        self._algorithm = algorithm
        self.expire_minutes = expire_minutes

    @classmethod
    def from_settings(cls) -> "TokenIssuer":
        return cls(
            secret_key=settings.secret_key,
            algorithm=settings.algorithm,
            expire_minutes=settings.access_token_expire_minutes,
        )

    def issue(self, subject: str) -> str:
        now = datetime.now(timezone.utc)
        to_encode = {
            "sub": subject,
            "iat": now,
            "exp": now + timedelta(minutes=self.expire_minutes),
        }
        return jwt.encode(to_encode, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> str:
        """Return the token subject. Any failure raises InvalidToken."""
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except JWTError as e:
            raise InvalidToken() from e
        subject = payload.get("sub")
        if not subject or not isinstance(subject, str):
            raise InvalidToken()
        return subject


token_issuer = TokenIssuer.from_settings()


def create_access_token(subject: str) -> str:
    return token_issuer.issue(subject)


def verify_access_token(token: str) -> str:
    return token_issuer.verify(token)


def generate_id() -> str:
    return str(uuid4())
