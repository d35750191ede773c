# crudsuite/core/security.py
"""Roles known to each deployment."""
from enum import Enum
from typing import Dict, FrozenSet, Optional

from crudsuite.core.config import Deployment


class Role(str, Enum):
    """User roles."""

    USER = "user"
    ADMIN = "admin"
    STUDENT = "student"
    RECRUITER = "recruiter"


# roles a visitor may pick for themselves at registration
SELF_ASSIGNABLE_ROLES: Dict[Deployment, FrozenSet[Role]] = {
    Deployment.SHOP: frozenset({Role.USER}),
    Deployment.QUIZ: frozenset({Role.USER}),
    Deployment.JOBS: frozenset({Role.STUDENT, Role.RECRUITER}),
}

# None means the client must choose
DEFAULT_ROLE: Dict[Deployment, Optional[Role]] = {
    Deployment.SHOP: Role.USER,
    Deployment.QUIZ: Role.USER,
    Deployment.JOBS: None,
}


def is_admin(role: str) -> bool:
    return role == Role.ADMIN.value
