# crudsuite/client/session.py
"""
Client-side session state.

The token lives on an explicit ``ClientSession`` that is handed to every
request. ``LocalStore`` persists it (plus cart / quiz progress) to a JSON file
so a restarted client picks up where it left off.
"""
import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from jose import jwt, JWTError

logger = logging.getLogger(__name__)


class LocalStore:
    """Tiny JSON key/value file."""

    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except ValueError:
            logger.warning("Ignoring unreadable store %s", self.path)
            return {}

    def _write(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")

    def get(self, key: str, default=None):
        return self.load().get(key, default)

    def set(self, key: str, value) -> None:
        data = self.load()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self.load()
        if key in data:
            del data[key]
            self._write(data)

    def clear(self) -> None:
        self._write({})


@dataclass
class ClientSession:
    base_url: str
    token: Optional[str] = None
    user: Optional[Dict[str, Any]] = None
    store: Optional[LocalStore] = field(default=None, repr=False)

    @classmethod
    def restore(cls, base_url: str, store: LocalStore) -> "ClientSession":
        return cls(base_url=base_url, token=store.get("token"), user=store.get("user"), store=store)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def login(self, token: str, user: Dict[str, Any]) -> None:
        self.token = token
        self.user = user
        if self.store is not None:
            self.store.set("token", token)
            self.store.set("user", user)

    def logout(self) -> None:
        self.token = None
        self.user = None
        if self.store is not None:
            self.store.remove("token")
            self.store.remove("user")

    def auth_headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def claims(self) -> Optional[Dict[str, Any]]:
        """Token payload read without checking the signature (display and routing only)."""
        if not self.token:
            return None
        try:
            return jwt.get_unverified_claims(self.token)
        except JWTError:
            return None

    def token_expired(self, now: Optional[float] = None) -> bool:
        claims = self.claims()
        if not claims:
            return True
        exp = claims.get("exp")
        return exp is not None and exp <= (now if now is not None else time.time())
