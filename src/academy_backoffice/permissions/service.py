from __future__ import annotations

import logging
from typing import Any, Sequence

from ..core.enums import Module, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..users.repository import UserRepository
from ..users.service import SessionUser
from .model import PermissionEntry
from .policy import AccessPolicy
from .repository import PermissionRepository

logger = logging.getLogger(__name__)


def _flag(raw: dict, key: str) -> bool:
    value = raw.get(key, False)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValidationError(f"{key} must be true or false")
    return value


class PermissionService:
    """Use cases around the per-user permission matrix."""

    def __init__(self, permissions: PermissionRepository, users: UserRepository, policy: AccessPolicy):
        self._permissions = permissions
        self._users = users
        self._policy = policy

    @staticmethod
    def list_modules() -> list[dict]:
        return [{"value": m.value, "label": m.label} for m in Module]

    def get_user_permissions(self, *, actor: SessionUser, user_id: int) -> dict:
        if actor.user_id != int(user_id) and not actor.role.is_privileged:
            raise AuthorizationError("You can only view your own permissions")

        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")

        target = SessionUser(user_id=user.user_id, full_name=user.full_name, role=user.role)
        explicit = self._permissions.list_for_user(user.user_id)
        effective = [self._policy.effective_entry(target, m) for m in Module]
        return {
            "permissions": [p.to_dict() for p in explicit],
            "effective": [p.to_dict() for p in effective],
        }

    def update_user_permissions(self, *, actor: SessionUser, user_id: int, entries: Any) -> Sequence[PermissionEntry]:
        if not actor.role.is_privileged:
            raise AuthorizationError("Only admins can update permissions")

        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")

        if user.role == Role.SUPERADMIN and actor.role != Role.SUPERADMIN:
            raise AuthorizationError("Cannot modify SuperAdmin permissions")

        if not isinstance(entries, list):
            raise ValidationError("Permissions must be an array")

        # Validate every entry before writing any of them.
        parsed: list[PermissionEntry] = []
        allowed = ", ".join(m.value for m in Module)
        for raw in entries:
            if not isinstance(raw, dict):
                raise ValidationError("Each permission must be an object")
            try:
                module = Module(raw.get("module"))
            except ValueError:
                raise ValidationError(f"Invalid module: {raw.get('module')}. Allowed modules: {allowed}")
            parsed.append(
                PermissionEntry(
                    user_id=user.user_id,
                    module=module,
                    can_view=_flag(raw, "canView"),
                    can_add=_flag(raw, "canAdd"),
                    can_edit=_flag(raw, "canEdit"),
                    can_delete=_flag(raw, "canDelete"),
                )
            )

        saved = [self._permissions.upsert(p) for p in parsed]
        logger.info(
            "permissions updated for user %s by %s: %s",
            user.user_id,
            actor.user_id,
            [p.module.value for p in saved],
        )
        return saved
