from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    FACULTY = "faculty"
    STUDENT = "student"
    EMPLOYEE = "employee"

    @property
    def is_privileged(self) -> bool:
        return self in (Role.SUPERADMIN, Role.ADMIN)


class Module(str, Enum):
    """Back-office areas a permission row can refer to."""

    BATCHES = "batches"
    STUDENTS = "students"
    FACULTY = "faculty"
    EMPLOYEES = "employees"
    SESSIONS = "sessions"
    ATTENDANCE = "attendance"
    PAYMENTS = "payments"
    PORTFOLIOS = "portfolios"
    REPORTS = "reports"
    APPROVALS = "approvals"
    USERS = "users"
    SOFTWARE_COMPLETIONS = "software_completions"
    STUDENT_LEAVES = "student_leaves"
    BATCH_EXTENSIONS = "batch_extensions"

    @property
    def label(self) -> str:
        return " ".join(word.capitalize() for word in self.value.split("_"))


class Capability(str, Enum):
    VIEW = "view"
    ADD = "add"
    EDIT = "edit"
    DELETE = "delete"


class PunchState(str, Enum):
    """Lifecycle of one employee's day record."""

    NOT_STARTED = "NOT_STARTED"
    PUNCHED_IN = "PUNCHED_IN"
    PUNCHED_OUT = "PUNCHED_OUT"


class BreakState(str, Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"
