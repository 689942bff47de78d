from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ..core.enums import Capability, Module
from ..core.exceptions import ValidationError
from ..permissions.policy import AccessPolicy
from ..punches.repository import PunchRepository
from ..users.service import SessionUser

CSV_FIELDS = [
    "work_date",
    "user_id",
    "full_name",
    "punch_in",
    "punch_out",
    "break_minutes",
    "effective_hours",
    "state",
]


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]
    monthly: list[dict]

    def to_dict(self) -> dict:
        return {"rows": self.rows, "summary": self.summary, "monthly": self.monthly, "total": len(self.rows)}


def _hours(value: Decimal) -> float:
    return float(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


class AttendanceReportService:
    """Aggregates punch records into per-day rows and per-employee totals."""

    def __init__(self, punches: PunchRepository, policy: AccessPolicy):
        self._punches = punches
        self._policy = policy

    def build_punch_report(
        self,
        actor: SessionUser,
        *,
        start: date,
        end: date,
        user_id: Optional[int] = None,
    ) -> ReportData:
        self._policy.require(actor, Module.REPORTS, Capability.VIEW)
        if start > end:
            raise ValidationError("from must not be after to")

        # Non-admins only ever see their own days.
        if not actor.role.is_privileged:
            user_id = actor.user_id

        records = self._punches.list_records(user_id=user_id, start_date=start, end_date=end)

        rows: list[dict] = []
        summary_map: dict[int, dict] = {}
        monthly_map: dict[tuple[int, str], dict] = {}

        for r in records:
            hours = r.effective_working_hours
            rows.append(
                {
                    "work_date": r.work_date.strftime("%Y-%m-%d"),
                    "user_id": r.user_id,
                    "full_name": r.user_name or "-",
                    "punch_in": r.punch_in_at.strftime("%H:%M") if r.punch_in_at else "-",
                    "punch_out": r.punch_out_at.strftime("%H:%M") if r.punch_out_at else "-",
                    "break_minutes": int(round(r.total_break_minutes())),
                    "effective_hours": _hours(hours) if hours is not None else "",
                    "state": r.state.value,
                }
            )

            s = summary_map.get(r.user_id)
            if not s:
                s = {
                    "user_id": r.user_id,
                    "full_name": r.user_name or "-",
                    "days_present": 0,
                    "closed_days": 0,
                    "total_hours": Decimal(0),
                }
                summary_map[r.user_id] = s

            month_key = (r.user_id, r.work_date.strftime("%Y-%m"))
            m = monthly_map.get(month_key)
            if not m:
                m = {"user_id": r.user_id, "month": month_key[1], "days_present": 0, "total_hours": Decimal(0)}
                monthly_map[month_key] = m

            if r.punch_in_at is not None:
                s["days_present"] += 1
                m["days_present"] += 1
            if hours is not None:
                s["closed_days"] += 1
                s["total_hours"] += hours
                m["total_hours"] += hours

        summary = []
        for s in summary_map.values():
            closed = s["closed_days"]
            summary.append(
                {
                    "user_id": s["user_id"],
                    "full_name": s["full_name"],
                    "days_present": s["days_present"],
                    "total_hours": _hours(s["total_hours"]),
                    "average_hours": _hours(s["total_hours"] / closed) if closed else 0.0,
                }
            )
        summary.sort(key=lambda x: x["total_hours"], reverse=True)

        monthly = [{**m, "total_hours": _hours(m["total_hours"])} for m in monthly_map.values()]
        monthly.sort(key=lambda x: (x["month"], x["user_id"]))

        return ReportData(rows=rows, summary=summary, monthly=monthly)
