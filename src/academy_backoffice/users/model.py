from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an account (employee, faculty, student or admin).

    Note: plain data object, no DB access code here.
    """

    user_id: int
    full_name: str
    username: str
    password_hash: str
    role: Role
    email: Optional[str] = None
    is_active: bool = True

    def to_dict(self) -> dict:
        return {"id": self.user_id, "name": self.full_name, "email": self.email, "role": self.role.value}
