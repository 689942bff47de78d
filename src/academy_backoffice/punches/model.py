from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from ..common.datetime_utils import minutes_between, to_iso
from ..common.validators import optional_text, require_float
from ..core.enums import BreakState, PunchState
from ..core.exceptions import ValidationError
from ..employees.model import EmployeeProfile


@dataclass(frozen=True)
class GeoLocation:
    latitude: float
    longitude: float
    address: Optional[str] = None

    @classmethod
    def from_payload(cls, raw: Any) -> Optional["GeoLocation"]:
        if raw is None:
            return None
        if not isinstance(raw, dict):
            raise ValidationError("location must be an object with latitude and longitude")
        if raw.get("latitude") is None or raw.get("longitude") is None:
            raise ValidationError("location requires latitude and longitude")
        latitude = require_float(raw.get("latitude"), "latitude")
        longitude = require_float(raw.get("longitude"), "longitude")
        if not -90 <= latitude <= 90 or not -180 <= longitude <= 180:
            raise ValidationError("location is out of range")
        return cls(latitude=latitude, longitude=longitude, address=optional_text(raw.get("address")))

    @classmethod
    def from_stored(cls, raw: Any) -> Optional["GeoLocation"]:
        """Lenient variant for rows already in the database."""
        if not isinstance(raw, dict):
            return None
        try:
            return cls(
                latitude=float(raw["latitude"]),
                longitude=float(raw["longitude"]),
                address=optional_text(raw.get("address")),
            )
        except (KeyError, TypeError, ValueError):
            return None

    def to_dict(self) -> dict:
        out: dict = {"latitude": self.latitude, "longitude": self.longitude}
        if self.address:
            out["address"] = self.address
        return out


@dataclass(frozen=True)
class PunchEvidence:
    """Proof attached to a punch: photo reference, fingerprint blob, position."""

    photo: Optional[str] = None
    fingerprint: Optional[str] = None
    location: Optional[GeoLocation] = None

    @classmethod
    def from_payload(cls, body: Any) -> "PunchEvidence":
        if body is None:
            return cls()
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")
        return cls(
            photo=optional_text(body.get("photo")),
            fingerprint=optional_text(body.get("fingerprint")),
            location=GeoLocation.from_payload(body.get("location")),
        )

    def location_dict(self) -> Optional[dict]:
        return self.location.to_dict() if self.location else None


@dataclass(frozen=True)
class BreakInterval:
    id: str
    break_type: str
    reason: str
    start_time: Optional[datetime]
    end_time: Optional[datetime] = None
    created_at: Optional[datetime] = None
    # Stored text we could not parse; kept so it survives the next save.
    raw_start: Optional[str] = None
    raw_end: Optional[str] = None

    @property
    def state(self) -> BreakState:
        return BreakState.OPEN if self.is_open else BreakState.CLOSED

    @property
    def is_open(self) -> bool:
        return self.end_time is None and not self.raw_end

    def duration_minutes(self) -> float:
        """Minutes counted as break; open or inverted intervals count as 0."""
        if self.start_time is None or self.end_time is None:
            return 0.0
        if self.end_time < self.start_time:
            return 0.0
        return minutes_between(self.start_time, self.end_time)

    def ended(self, at: datetime) -> "BreakInterval":
        return replace(self, end_time=at, raw_end=None)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "breakType": self.break_type,
            "reason": self.reason,
            "startTime": to_iso(self.start_time) or self.raw_start,
            "endTime": to_iso(self.end_time) or self.raw_end,
            "createdAt": to_iso(self.created_at),
            "state": self.state.value,
        }


@dataclass(frozen=True)
class PunchRecord:
    """Domain entity: one employee's attendance for one calendar day."""

    punch_id: int
    user_id: int
    work_date: date
    punch_in_at: Optional[datetime] = None
    punch_out_at: Optional[datetime] = None
    punch_in_evidence: PunchEvidence = field(default_factory=PunchEvidence)
    punch_out_evidence: PunchEvidence = field(default_factory=PunchEvidence)
    breaks: tuple[BreakInterval, ...] = ()
    effective_working_hours: Optional[Decimal] = None
    version: int = 0
    user_name: Optional[str] = None
    employee_profile: Optional[EmployeeProfile] = None

    @property
    def state(self) -> PunchState:
        if self.punch_in_at is None:
            return PunchState.NOT_STARTED
        if self.punch_out_at is None:
            return PunchState.PUNCHED_IN
        return PunchState.PUNCHED_OUT

    @property
    def can_punch_in(self) -> bool:
        return self.punch_in_at is None

    @property
    def can_punch_out(self) -> bool:
        return self.state == PunchState.PUNCHED_IN

    def find_break(self, break_id: str) -> Optional[BreakInterval]:
        for b in self.breaks:
            if str(b.id) == str(break_id):
                return b
        return None

    def total_break_minutes(self) -> float:
        return sum(b.duration_minutes() for b in self.breaks)

    def to_dict(self, *, with_profile: bool = False) -> dict:
        out = {
            "id": self.punch_id,
            "userId": self.user_id,
            "userName": self.user_name,
            "date": self.work_date.isoformat(),
            "state": self.state.value,
            "punchInAt": to_iso(self.punch_in_at),
            "punchOutAt": to_iso(self.punch_out_at),
            "punchInPhoto": self.punch_in_evidence.photo,
            "punchOutPhoto": self.punch_out_evidence.photo,
            "punchInLocation": self.punch_in_evidence.location_dict(),
            "punchOutLocation": self.punch_out_evidence.location_dict(),
            "breaks": [b.to_dict() for b in self.breaks],
            "effectiveWorkingHours": (
                float(self.effective_working_hours) if self.effective_working_hours is not None else None
            ),
        }
        if with_profile:
            out["employeeProfile"] = self.employee_profile.to_dict() if self.employee_profile else None
        return out


@dataclass(frozen=True)
class TodayStatus:
    record: Optional[PunchRecord]

    @property
    def can_punch_in(self) -> bool:
        return self.record is None or self.record.can_punch_in

    @property
    def can_punch_out(self) -> bool:
        return self.record is not None and self.record.can_punch_out

    def to_dict(self) -> dict:
        return {
            "punch": self.record.to_dict() if self.record else None,
            "canPunchIn": self.can_punch_in,
            "canPunchOut": self.can_punch_out,
        }
