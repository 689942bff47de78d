from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import Module
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import PermissionEntry
from .repository import PermissionRepository


def _to_entry(row: Dict[str, Any]) -> PermissionEntry:
    return PermissionEntry(
        user_id=int(row["user_id"]),
        module=Module(row["module"]),
        can_view=bool(row["can_view"]),
        can_add=bool(row["can_add"]),
        can_edit=bool(row["can_edit"]),
        can_delete=bool(row["can_delete"]),
    )


class MySQLPermissionRepository(PermissionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_user(self, user_id: int) -> Sequence[PermissionEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, module, can_view, can_add, can_edit, can_delete
                FROM permissions
                WHERE user_id=%s
                ORDER BY module ASC
                """,
                (int(user_id),),
            )
            return [_to_entry(r) for r in fetchall(cur)]

    def get_for_user_module(self, user_id: int, module: Module) -> Optional[PermissionEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, module, can_view, can_add, can_edit, can_delete
                FROM permissions
                WHERE user_id=%s AND module=%s
                """,
                (int(user_id), module.value),
            )
            row = fetchone(cur)
            return _to_entry(row) if row else None

    def upsert(self, entry: PermissionEntry) -> PermissionEntry:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO permissions(user_id, module, can_view, can_add, can_edit, can_delete)
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    can_view=VALUES(can_view),
                    can_add=VALUES(can_add),
                    can_edit=VALUES(can_edit),
                    can_delete=VALUES(can_delete)
                """,
                (
                    entry.user_id,
                    entry.module.value,
                    int(entry.can_view),
                    int(entry.can_add),
                    int(entry.can_edit),
                    int(entry.can_delete),
                ),
            )
        return entry
