from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from werkzeug.security import check_password_hash

from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login.

    Every service operation receives one of these as its ``actor``.
    """

    user_id: int
    full_name: str
    role: Role

    def to_session(self) -> dict:
        return {"user_id": self.user_id, "name": self.full_name, "role": self.role.value}

    @classmethod
    def from_session(cls, data: Mapping[str, Any]) -> "SessionUser":
        if "user_id" not in data or "role" not in data:
            raise AuthenticationError("Authentication required")
        try:
            return cls(user_id=int(data["user_id"]), full_name=str(data.get("name") or ""), role=Role(data["role"]))
        except (TypeError, ValueError):
            raise AuthenticationError("Authentication required")

    def to_dict(self) -> dict:
        return {"id": self.user_id, "name": self.full_name, "role": self.role.value}


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, username: str, password: str) -> SessionUser:
        username = require_non_empty(username, "username")
        user = self._users.get_by_username(username)
        if not user or not user.is_active:
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            logger.info("failed login for %s", username)
            raise AuthenticationError("Invalid username or password")

        return SessionUser(user_id=user.user_id, full_name=user.full_name, role=user.role)
