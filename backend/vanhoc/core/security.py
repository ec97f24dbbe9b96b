# vanhoc/core/security.py
"""
Security module for password hashing and client session tokens.
Account records store only a password hash. The hashing scheme is pluggable so
the legacy rolling hash (used by every existing account file) can be swapped
for Argon2 without touching the account store.
Each HTTP client is identified by a signed session token (JWT) naming its
session id.
"""
import datetime as dt
import os
from abc import ABC, abstractmethod

import jwt  # PyJWT
from dotenv import load_dotenv
from passlib.context import CryptContext

load_dotenv()

# JWT configuration
JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret")  # Use a strong secret in production
SESSION_TOKEN_EXPIRE_MINUTES = int(os.getenv("SESSION_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 30)))
JWT_ALG = "HS256"


class PasswordHasher(ABC):
    """Password hashing interface used by the account store."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Scheme name (e.g., "rolling", "argon2")"""
        pass

    @abstractmethod
    def hash(self, plain: str) -> str:
        pass

    @abstractmethod
    def verify(self, plain: str, hashed: str) -> bool:
        pass


class RollingHasher(PasswordHasher):
    """
    32-bit multiplicative rolling hash (h = h * 31 + c) over UTF-16 code units.

    Output is the absolute value of the signed 32-bit result as lowercase hex,
    left-padded to 8 digits. This reproduces the hash stored in account files
    written by the browser client.

    NOT secure - no salt, trivially brute-forced. Kept for compatibility only.
    """

    @property
    def name(self) -> str:
        return "rolling"

    def hash(self, plain: str) -> str:
        data = plain.encode("utf-16-le")
        h = 0
        for i in range(0, len(data), 2):
            unit = data[i] | (data[i + 1] << 8)
            h = (h * 31 + unit) & 0xFFFFFFFF
        if h & 0x80000000:
            h -= 0x100000000  # back to signed int32
        return format(abs(h), "x").rjust(8, "0")

    def verify(self, plain: str, hashed: str) -> bool:
        return self.hash(plain) == hashed


class Argon2Hasher(PasswordHasher):
    """Salted Argon2 hashing via passlib."""

    def __init__(self):
        # Argon2 is a modern, secure password hashing algorithm
        self._context = CryptContext(schemes=["argon2"], deprecated="auto")

    @property
    def name(self) -> str:
        return "argon2"

    def hash(self, plain: str) -> str:
        return self._context.hash(plain)

    def verify(self, plain: str, hashed: str) -> bool:
        try:
            return self._context.verify(plain, hashed)
        except ValueError:
            # Hash written by another scheme (e.g. a legacy rolling hash)
            return False


_HASHERS = {
    "rolling": RollingHasher,
    "argon2": Argon2Hasher,
}


def get_password_hasher(name: str = "rolling") -> PasswordHasher:
    """
    Get a password hasher by scheme name.

    Args:
        name: "rolling" (default) or "argon2"

    Returns:
        PasswordHasher instance

    Raises:
        ValueError: If the scheme name is unknown
    """
    try:
        return _HASHERS[(name or "rolling").lower()]()
    except KeyError:
        raise ValueError(f"Unknown password hasher: {name!r}") from None


def create_session_token(session_id: str) -> str:
    """
    Create a signed token identifying one client session.

    Token payload includes:
        - sid: Session id (keys the client's session cache and settings)
        - iat: Issued at timestamp
        - exp: Expiration timestamp
    """
    now = dt.datetime.now(dt.timezone.utc)
    payload = {
        "sid": session_id,
        "iat": now,
        "exp": now + dt.timedelta(minutes=SESSION_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALG)


def decode_session_token(token: str) -> str:
    """
    Validate a session token and return its session id.

    Raises:
        jwt.InvalidTokenError: If the token is malformed, expired, badly
            signed or carries no session id
    """
    payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALG])
    session_id = payload.get("sid")
    if not isinstance(session_id, str) or not session_id:
        raise jwt.InvalidTokenError("missing sid")
    return session_id
