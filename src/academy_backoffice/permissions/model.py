from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Capability, Module


@dataclass(frozen=True)
class PermissionEntry:
    """One row of the permission matrix: a user's capabilities on a module."""

    user_id: int
    module: Module
    can_view: bool = False
    can_add: bool = False
    can_edit: bool = False
    can_delete: bool = False

    def allows(self, capability: Capability) -> bool:
        return {
            Capability.VIEW: self.can_view,
            Capability.ADD: self.can_add,
            Capability.EDIT: self.can_edit,
            Capability.DELETE: self.can_delete,
        }[capability]

    @classmethod
    def from_capabilities(cls, user_id: int, module: Module, capabilities: frozenset[Capability]) -> "PermissionEntry":
        return cls(
            user_id=user_id,
            module=module,
            can_view=Capability.VIEW in capabilities,
            can_add=Capability.ADD in capabilities,
            can_edit=Capability.EDIT in capabilities,
            can_delete=Capability.DELETE in capabilities,
        )

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "module": self.module.value,
            "canView": self.can_view,
            "canAdd": self.can_add,
            "canEdit": self.can_edit,
            "canDelete": self.can_delete,
        }
