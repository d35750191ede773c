# crudsuite/services/auth.py
from datetime import datetime, timedelta
from typing import Optional
import hashlib
import secrets
from jose import jwt, JWTError, ExpiredSignatureError
from pydantic import BaseModel
from crudsuite.core.config import settings

# Password hashing using PBKDF2-HMAC-SHA256 (avoids bcrypt backend issues)
_PBKDF2_ITERATIONS = 100_000

ALGORITHM = "HS256"


class TokenData(BaseModel):
    sub: Optional[str] = None
    role: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None


class TokenExpired(Exception):
    pass


class TokenInvalid(Exception):
    pass


def hash_password(password: str) -> str:
    if password is None:
        password = ""
    salt = secrets.token_hex(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), _PBKDF2_ITERATIONS)
    return f"pbkdf2_sha256${_PBKDF2_ITERATIONS}${salt}${dk.hex()}"


def verify_password(plain: str, hashed: str) -> bool:
    if plain is None:
        plain = ""
    try:
        scheme, iterations, salt, hashhex = hashed.split("$")
        iterations = int(iterations)
    except (AttributeError, ValueError):
        return False
    dk = hashlib.pbkdf2_hmac("sha256", plain.encode("utf-8"), salt.encode("utf-8"), iterations)
    return secrets.compare_digest(dk.hex(), hashhex)


def create_access_token(user: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a token for a stored user document (already passed through ``to_id``)."""
    now = datetime.utcnow()
    exp = now + (expires_delta if expires_delta is not None else timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {
        "sub": str(user["id"]),
        "role": user.get("role"),
        "name": user.get("name"),
        "email": user.get("email"),
        "iat": now,
        "exp": exp,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> TokenData:
    """
    Verify signature and expiry. Raises TokenExpired or TokenInvalid so callers
    can tell the two apart.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError as exc:
        raise TokenExpired("Token has expired") from exc
    except JWTError as exc:
        raise TokenInvalid("Invalid token") from exc
    if not payload.get("sub"):
        raise TokenInvalid("Invalid token")
    return TokenData(
        sub=payload.get("sub"),
        role=payload.get("role"),
        name=payload.get("name"),
        email=payload.get("email"),
    )
