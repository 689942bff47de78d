from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.exceptions import AlreadyPunchedInError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json_column, fetchall, fetchone, load_json_column, to_decimal
from .breaks import parse_breaks, serialize_breaks
from .model import BreakInterval, GeoLocation, PunchEvidence, PunchRecord
from .repository import PunchRepository

_SELECT = """
    SELECT p.punch_id, p.user_id, u.full_name, p.work_date,
           p.punch_in_at, p.punch_out_at,
           p.punch_in_photo, p.punch_out_photo,
           p.punch_in_fingerprint, p.punch_out_fingerprint,
           p.punch_in_location, p.punch_out_location,
           p.breaks, p.effective_working_hours, p.version
    FROM employee_punches p
    LEFT JOIN users u ON u.user_id = p.user_id
"""


def _evidence(row: Dict[str, Any], prefix: str) -> PunchEvidence:
    return PunchEvidence(
        photo=row.get(f"{prefix}_photo"),
        fingerprint=row.get(f"{prefix}_fingerprint"),
        location=GeoLocation.from_stored(load_json_column(row.get(f"{prefix}_location"))),
    )


def _to_record(row: Dict[str, Any]) -> PunchRecord:
    return PunchRecord(
        punch_id=int(row["punch_id"]),
        user_id=int(row["user_id"]),
        user_name=row.get("full_name"),
        work_date=row["work_date"],
        punch_in_at=row.get("punch_in_at"),
        punch_out_at=row.get("punch_out_at"),
        punch_in_evidence=_evidence(row, "punch_in"),
        punch_out_evidence=_evidence(row, "punch_out"),
        breaks=parse_breaks(row.get("breaks")),
        effective_working_hours=to_decimal(row.get("effective_working_hours")),
        version=int(row.get("version") or 0),
    )


class MySQLPunchRepository(PunchRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[PunchRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE p.user_id=%s AND p.work_date=%s", (int(user_id), work_date))
            row = fetchone(cur)
            return _to_record(row) if row else None

    def create_punch_in(
        self,
        *,
        user_id: int,
        work_date: date,
        punch_in_at: datetime,
        evidence: PunchEvidence,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO employee_punches(
                        user_id, work_date, punch_in_at,
                        punch_in_photo, punch_in_fingerprint, punch_in_location, breaks, version
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,0)
                    """,
                    (
                        int(user_id),
                        work_date,
                        punch_in_at,
                        evidence.photo,
                        evidence.fingerprint,
                        dump_json_column(evidence.location_dict()),
                        dump_json_column([]),
                    ),
                )
                return int(cur.lastrowid)
        except IntegrityError as e:
            # Two punch-ins racing for the same (user, date).
            if e.errno == errorcode.ER_DUP_ENTRY:
                raise AlreadyPunchedInError()
            raise

    def record_punch_in(
        self,
        *,
        punch_id: int,
        expected_version: int,
        punch_in_at: datetime,
        evidence: PunchEvidence,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employee_punches
                SET punch_in_at=%s, punch_in_photo=%s, punch_in_fingerprint=%s, punch_in_location=%s,
                    version=version+1
                WHERE punch_id=%s AND version=%s AND punch_in_at IS NULL
                """,
                (
                    punch_in_at,
                    evidence.photo,
                    evidence.fingerprint,
                    dump_json_column(evidence.location_dict()),
                    int(punch_id),
                    int(expected_version),
                ),
            )
            return cur.rowcount > 0

    def record_punch_out(
        self,
        *,
        punch_id: int,
        expected_version: int,
        punch_out_at: datetime,
        evidence: PunchEvidence,
        effective_working_hours: Decimal,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employee_punches
                SET punch_out_at=%s, punch_out_photo=%s, punch_out_fingerprint=%s, punch_out_location=%s,
                    effective_working_hours=%s, version=version+1
                WHERE punch_id=%s AND version=%s AND punch_out_at IS NULL
                """,
                (
                    punch_out_at,
                    evidence.photo,
                    evidence.fingerprint,
                    dump_json_column(evidence.location_dict()),
                    effective_working_hours,
                    int(punch_id),
                    int(expected_version),
                ),
            )
            return cur.rowcount > 0

    def save_breaks(self, *, punch_id: int, expected_version: int, breaks: Sequence[BreakInterval]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employee_punches
                SET breaks=%s, version=version+1
                WHERE punch_id=%s AND version=%s
                """,
                (dump_json_column(serialize_breaks(breaks)), int(punch_id), int(expected_version)),
            )
            return cur.rowcount > 0

    def list_records(
        self,
        *,
        user_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[PunchRecord]:
        clauses: list[str] = []
        params: list[object] = []

        if user_id is not None:
            clauses.append("p.user_id=%s")
            params.append(int(user_id))
        if start_date is not None:
            clauses.append("p.work_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("p.work_date <= %s")
            params.append(end_date)

        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + where + " ORDER BY p.work_date DESC, p.user_id ASC", tuple(params))
            return [_to_record(r) for r in fetchall(cur)]
