from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from ..common.datetime_utils import parse_optional_date, to_iso
from ..common.validators import optional_text
from ..core.exceptions import MissingFieldError, ValidationError

GENDERS = ("Male", "Female", "Other")
MARITAL_STATUSES = ("Single", "Married", "Other")
EMPLOYMENT_TYPES = ("Full-Time", "Part-Time", "Contract", "Intern")

# attribute -> JSON key, allowed values
CHOICE_FIELDS = {
    "gender": ("gender", GENDERS),
    "marital_status": ("maritalStatus", MARITAL_STATUSES),
    "employment_type": ("employmentType", EMPLOYMENT_TYPES),
}
DATE_FIELDS = {
    "date_of_birth": "dateOfBirth",
    "date_of_joining": "dateOfJoining",
}
TEXT_FIELDS = {
    "nationality": "nationality",
    "department": "department",
    "designation": "designation",
    "reporting_manager": "reportingManager",
    "work_location": "workLocation",
    "bank_name": "bankName",
    "account_number": "accountNumber",
    "ifsc_code": "ifscCode",
    "branch": "branch",
    "pan_number": "panNumber",
    "city": "city",
    "state": "state",
    "postal_code": "postalCode",
}

# Optional columns, in table order.
DETAIL_FIELDS = (
    "gender",
    "date_of_birth",
    "nationality",
    "marital_status",
    "department",
    "designation",
    "date_of_joining",
    "employment_type",
    "reporting_manager",
    "work_location",
    "bank_name",
    "account_number",
    "ifsc_code",
    "branch",
    "pan_number",
    "city",
    "state",
    "postal_code",
)

_JSON_KEYS = {
    **{attr: key for attr, (key, _) in CHOICE_FIELDS.items()},
    **DATE_FIELDS,
    **TEXT_FIELDS,
}


def _user_id(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError("userId must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("userId must be an integer")


@dataclass(frozen=True)
class EmployeeProfile:
    """HR details of an employee account (one per user)."""

    user_id: int
    employee_code: str
    profile_id: Optional[int] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    nationality: Optional[str] = None
    marital_status: Optional[str] = None
    department: Optional[str] = None
    designation: Optional[str] = None
    date_of_joining: Optional[date] = None
    employment_type: Optional[str] = None
    reporting_manager: Optional[str] = None
    work_location: Optional[str] = None
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    ifsc_code: Optional[str] = None
    branch: Optional[str] = None
    pan_number: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_payload(cls, body: dict) -> "EmployeeProfile":
        user_id = body.get("userId")
        employee_code = optional_text(body.get("employeeId"))
        if user_id in (None, "", 0) or not employee_code:
            raise MissingFieldError("userId", "employeeId")

        values: dict = {}
        for attr, (key, allowed) in CHOICE_FIELDS.items():
            value = optional_text(body.get(key))
            if value is not None and value not in allowed:
                raise ValidationError(f"{key} must be one of: {', '.join(allowed)}")
            values[attr] = value
        for attr, key in DATE_FIELDS.items():
            values[attr] = parse_optional_date(optional_text(body.get(key)), key)
        for attr, key in TEXT_FIELDS.items():
            values[attr] = optional_text(body.get(key))

        return cls(user_id=_user_id(user_id), employee_code=employee_code, **values)

    def to_dict(self) -> dict:
        out: dict = {"id": self.profile_id, "userId": self.user_id, "employeeId": self.employee_code}
        for attr in DETAIL_FIELDS:
            value = getattr(self, attr)
            out[_JSON_KEYS[attr]] = value.isoformat() if isinstance(value, date) else value
        out["createdAt"] = to_iso(self.created_at)
        return out
