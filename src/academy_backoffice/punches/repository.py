from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from .model import BreakInterval, PunchEvidence, PunchRecord


class PunchRepository(Protocol):
    """Storage for day records.

    Mutations take the ``version`` the caller read and return False when the
    row changed in between (optimistic lock).
    """

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[PunchRecord]:
        raise NotImplementedError

    def create_punch_in(
        self,
        *,
        user_id: int,
        work_date: date,
        punch_in_at: datetime,
        evidence: PunchEvidence,
    ) -> int:
        """Insert today's row; raises AlreadyPunchedInError if one exists."""

        raise NotImplementedError

    def record_punch_in(
        self,
        *,
        punch_id: int,
        expected_version: int,
        punch_in_at: datetime,
        evidence: PunchEvidence,
    ) -> bool:
        raise NotImplementedError

    def record_punch_out(
        self,
        *,
        punch_id: int,
        expected_version: int,
        punch_out_at: datetime,
        evidence: PunchEvidence,
        effective_working_hours: Decimal,
    ) -> bool:
        raise NotImplementedError

    def save_breaks(self, *, punch_id: int, expected_version: int, breaks: Sequence[BreakInterval]) -> bool:
        raise NotImplementedError

    def list_records(
        self,
        *,
        user_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[PunchRecord]:
        """Records newest first (then by user id), bounds inclusive."""

        raise NotImplementedError
