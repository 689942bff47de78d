from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Iterable, Mapping, Optional

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import DETAIL_FIELDS, EmployeeProfile
from .repository import EmployeeProfileRepository

_INSERT_COLUMNS = ("user_id", "employee_code", *DETAIL_FIELDS)
_SELECT = f"SELECT profile_id, {', '.join(_INSERT_COLUMNS)}, created_at FROM employee_profiles"


def _to_profile(row: Dict[str, Any]) -> EmployeeProfile:
    return EmployeeProfile(
        profile_id=int(row["profile_id"]),
        user_id=int(row["user_id"]),
        employee_code=row["employee_code"],
        created_at=row.get("created_at"),
        **{f: row.get(f) for f in DETAIL_FIELDS},
    )


class MySQLEmployeeProfileRepository(EmployeeProfileRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_user_id(self, user_id: int) -> Optional[EmployeeProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _to_profile(row) if row else None

    def get_by_employee_code(self, employee_code: str) -> Optional[EmployeeProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE employee_code=%s", (employee_code,))
            row = fetchone(cur)
            return _to_profile(row) if row else None

    def create(self, profile: EmployeeProfile) -> EmployeeProfile:
        placeholders = ", ".join(["%s"] * len(_INSERT_COLUMNS))
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"INSERT INTO employee_profiles({', '.join(_INSERT_COLUMNS)}) VALUES({placeholders})",
                    tuple(getattr(profile, c) for c in _INSERT_COLUMNS),
                )
                return replace(profile, profile_id=int(cur.lastrowid))
        except IntegrityError as e:
            if e.errno == errorcode.ER_DUP_ENTRY:
                raise ConflictError("Employee profile already exists")
            raise

    def list_for_users(self, user_ids: Iterable[int]) -> Mapping[int, EmployeeProfile]:
        ids = sorted({int(u) for u in user_ids})
        if not ids:
            return {}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + f" WHERE user_id IN ({', '.join(['%s'] * len(ids))})", tuple(ids))
            return {p.user_id: p for p in map(_to_profile, fetchall(cur))}
