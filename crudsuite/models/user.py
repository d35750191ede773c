# crudsuite/models/user.py
from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class RegisterIn(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)
    role: Optional[str] = None


class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


def public_user(doc: dict) -> dict:
    """Strip secrets from a stored user (already converted with ``to_id``)."""
    out = dict(doc)
    out.pop("password_hash", None)
    return out
