from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Module
from .model import PermissionEntry


class PermissionRepository(Protocol):
    def list_for_user(self, user_id: int) -> Sequence[PermissionEntry]:
        raise NotImplementedError

    def get_for_user_module(self, user_id: int, module: Module) -> Optional[PermissionEntry]:
        raise NotImplementedError

    def upsert(self, entry: PermissionEntry) -> PermissionEntry:
        """Insert or replace the row for (entry.user_id, entry.module)."""

        raise NotImplementedError
