from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.enums import Capability, Module
from ..core.exceptions import (
    AlreadyPunchedInError,
    AlreadyPunchedOutError,
    BreakAlreadyEndedError,
    BreakNotFoundError,
    ConcurrentModificationError,
    NotPunchedInError,
)
from ..employees.repository import EmployeeProfileRepository
from ..permissions.policy import AccessPolicy
from ..users.service import SessionUser
from .breaks import build_break
from .calculator.base import WorkingHoursCalculator
from .calculator.standard_calculator import StandardWorkingHoursCalculator
from .model import BreakInterval, PunchEvidence, PunchRecord, TodayStatus
from .repository import PunchRepository

logger = logging.getLogger(__name__)


class PunchService:
    """Use cases of the attendance/time ledger (punch in/out and breaks)."""

    def __init__(
        self,
        punches: PunchRepository,
        policy: AccessPolicy,
        *,
        calculator: Optional[WorkingHoursCalculator] = None,
        profiles: Optional[EmployeeProfileRepository] = None,
    ):
        self._punches = punches
        self._policy = policy
        self._profiles = profiles
        self._calculator = calculator or StandardWorkingHoursCalculator()

    def _reload(self, user_id: int, work_date: date) -> PunchRecord:
        record = self._punches.get_for_user_and_date(user_id, work_date)
        if record is None:
            raise RuntimeError(f"punch record for user {user_id} on {work_date} vanished after write")
        return record

    @staticmethod
    def _require_open(record: Optional[PunchRecord]) -> PunchRecord:
        if record is None or record.punch_in_at is None:
            raise NotPunchedInError()
        if record.punch_out_at is not None:
            raise AlreadyPunchedOutError()
        return record

    def punch_in(self, actor: SessionUser, evidence: PunchEvidence, *, now: datetime | None = None) -> PunchRecord:
        self._policy.require(actor, Module.ATTENDANCE, Capability.ADD)
        now = now or now_local()
        today = now.date()

        existing = self._punches.get_for_user_and_date(actor.user_id, today)
        if existing and existing.punch_in_at is not None:
            raise AlreadyPunchedInError()

        if existing:
            ok = self._punches.record_punch_in(
                punch_id=existing.punch_id,
                expected_version=existing.version,
                punch_in_at=now,
                evidence=evidence,
            )
            if not ok:
                raise ConcurrentModificationError()
        else:
            self._punches.create_punch_in(user_id=actor.user_id, work_date=today, punch_in_at=now, evidence=evidence)

        logger.info("user %s punched in at %s", actor.user_id, now.isoformat())
        return self._reload(actor.user_id, today)

    def punch_out(self, actor: SessionUser, evidence: PunchEvidence, *, now: datetime | None = None) -> PunchRecord:
        self._policy.require(actor, Module.ATTENDANCE, Capability.ADD)
        now = now or now_local()
        today = now.date()

        record = self._require_open(self._punches.get_for_user_and_date(actor.user_id, today))
        hours = self._calculator.effective_hours(
            punch_in_at=record.punch_in_at,
            punch_out_at=now,
            breaks=record.breaks,
        )

        ok = self._punches.record_punch_out(
            punch_id=record.punch_id,
            expected_version=record.version,
            punch_out_at=now,
            evidence=evidence,
            effective_working_hours=hours,
        )
        if not ok:
            raise ConcurrentModificationError()

        logger.info("user %s punched out at %s (%s h)", actor.user_id, now.isoformat(), hours)
        return self._reload(actor.user_id, today)

    def add_break(
        self,
        actor: SessionUser,
        *,
        break_type: Any,
        reason: Any,
        start_time: Any = None,
        end_time: Any = None,
        now: datetime | None = None,
    ) -> tuple[BreakInterval, PunchRecord]:
        self._policy.require(actor, Module.ATTENDANCE, Capability.ADD)
        now = now or now_local()
        today = now.date()

        record = self._require_open(self._punches.get_for_user_and_date(actor.user_id, today))
        new_break = build_break(break_type=break_type, reason=reason, start_time=start_time, end_time=end_time, now=now)

        ok = self._punches.save_breaks(
            punch_id=record.punch_id,
            expected_version=record.version,
            breaks=[*record.breaks, new_break],
        )
        if not ok:
            raise ConcurrentModificationError()

        logger.info("user %s added break %s (%s)", actor.user_id, new_break.id, new_break.break_type)
        return new_break, self._reload(actor.user_id, today)

    def end_break(
        self,
        actor: SessionUser,
        break_id: str,
        *,
        now: datetime | None = None,
    ) -> tuple[BreakInterval, PunchRecord]:
        self._policy.require(actor, Module.ATTENDANCE, Capability.ADD)
        now = now or now_local()
        today = now.date()

        record = self._require_open(self._punches.get_for_user_and_date(actor.user_id, today))
        target = record.find_break(break_id)
        if target is None:
            logger.info(
                "break %s not found for user %s (available: %s)",
                break_id,
                actor.user_id,
                [b.id for b in record.breaks],
            )
            raise BreakNotFoundError(str(break_id))
        if not target.is_open:
            raise BreakAlreadyEndedError(target.id)

        ended = target.ended(now)
        ok = self._punches.save_breaks(
            punch_id=record.punch_id,
            expected_version=record.version,
            breaks=[ended if b.id == target.id else b for b in record.breaks],
        )
        if not ok:
            raise ConcurrentModificationError()

        logger.info("user %s ended break %s", actor.user_id, target.id)
        return ended, self._reload(actor.user_id, today)

    def get_today(self, actor: SessionUser, *, now: datetime | None = None) -> TodayStatus:
        self._policy.require(actor, Module.ATTENDANCE, Capability.VIEW)
        now = now or now_local()
        return TodayStatus(record=self._punches.get_for_user_and_date(actor.user_id, now.date()))

    def get_log(
        self,
        actor: SessionUser,
        *,
        target_user_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[PunchRecord]:
        self._policy.require(actor, Module.ATTENDANCE, Capability.VIEW)

        user_id = actor.user_id
        if target_user_id is not None and int(target_user_id) != actor.user_id and actor.role.is_privileged:
            self._policy.require(actor, Module.EMPLOYEES, Capability.VIEW)
            user_id = int(target_user_id)

        if start and end and start > end:
            return []
        return self._punches.list_records(user_id=user_id, start_date=start, end_date=end)

    def get_all(
        self,
        actor: SessionUser,
        *,
        user_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[PunchRecord]:
        self._policy.require_privileged(actor, Module.EMPLOYEES, Capability.VIEW)
        if start and end and start > end:
            return []
        records = self._punches.list_records(user_id=user_id, start_date=start, end_date=end)
        if self._profiles is None or not records:
            return records
        profiles = self._profiles.list_for_users(r.user_id for r in records)
        return [replace(r, employee_profile=profiles.get(r.user_id)) for r in records]
