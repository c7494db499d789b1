import secrets
import string
from datetime import datetime, timedelta, timezone

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from signingconnect.config import settings

ph = PasswordHasher(time_cost=3, memory_cost=65536, parallelism=4)

_TEMP_PASSWORD_ALPHABET = string.ascii_letters + string.digits


def hash_password(password: str) -> str:
    return ph.hash(password)


def verify_password(stored_hash: str, password: str) -> bool:
    try:
        return ph.verify(stored_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def create_access_token(user_id: int, email: str, user_type: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "email": email,
        "userType": user_type,
        "iat": now,
        "exp": now + timedelta(days=settings.token_ttl_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    """Return the token claims; raises jwt.PyJWTError when invalid or expired."""
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])


def generate_reset_token() -> str:
    return secrets.token_hex(32)


def generate_temporary_password(length: int | None = None) -> str:
    length = length or settings.temp_password_length
    return "".join(secrets.choice(_TEMP_PASSWORD_ALPHABET) for _ in range(length))
