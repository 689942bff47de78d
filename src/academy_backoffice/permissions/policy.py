"""Single authorization check for every service operation.

Capabilities come from the per-user permission matrix when a row exists for
the module, otherwise from the role defaults below.
"""
from __future__ import annotations

from typing import Mapping

from ..core.enums import Capability, Module, Role
from ..core.exceptions import AuthorizationError
from ..users.service import SessionUser
from .model import PermissionEntry
from .repository import PermissionRepository

ALL = frozenset(Capability)
VIEW = frozenset({Capability.VIEW})
VIEW_ADD = frozenset({Capability.VIEW, Capability.ADD})
VIEW_ADD_EDIT = frozenset({Capability.VIEW, Capability.ADD, Capability.EDIT})

# Admins manage everything but do not punch themselves.
_ADMIN_DEFAULTS = {module: ALL for module in Module}
_ADMIN_DEFAULTS[Module.ATTENDANCE] = VIEW

ROLE_DEFAULTS: Mapping[Role, Mapping[Module, frozenset[Capability]]] = {
    Role.SUPERADMIN: dict(_ADMIN_DEFAULTS),
    Role.ADMIN: dict(_ADMIN_DEFAULTS),
    Role.EMPLOYEE: {Module.ATTENDANCE: VIEW_ADD_EDIT},
    Role.FACULTY: {Module.SESSIONS: VIEW_ADD_EDIT, Module.ATTENDANCE: VIEW, Module.BATCHES: VIEW},
    Role.STUDENT: {Module.PORTFOLIOS: VIEW_ADD, Module.SESSIONS: VIEW},
}


class AccessPolicy:
    def __init__(self, permissions: PermissionRepository):
        self._permissions = permissions

    def default_entry(self, actor: SessionUser, module: Module) -> PermissionEntry:
        caps = ROLE_DEFAULTS.get(actor.role, {}).get(module, frozenset())
        return PermissionEntry.from_capabilities(actor.user_id, module, caps)

    def effective_entry(self, actor: SessionUser, module: Module) -> PermissionEntry:
        override = self._permissions.get_for_user_module(actor.user_id, module)
        return override or self.default_entry(actor, module)

    def allows(self, actor: SessionUser, module: Module, capability: Capability) -> bool:
        return self.effective_entry(actor, module).allows(capability)

    def require(self, actor: SessionUser, module: Module, capability: Capability) -> None:
        if not self.allows(actor, module, capability):
            raise AuthorizationError(f"You do not have {capability.value} access to {module.label}")

    def require_privileged(self, actor: SessionUser, module: Module, capability: Capability) -> None:
        """Admin-level role plus the capability (cross-employee views)."""

        if not actor.role.is_privileged:
            raise AuthorizationError("Only admins can perform this action")
        self.require(actor, module, capability)
