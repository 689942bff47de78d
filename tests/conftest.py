from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from academy_backoffice import create_app
from academy_backoffice.container import assemble_container
from academy_backoffice.core.enums import Module, Role
from academy_backoffice.core.exceptions import AlreadyPunchedInError, ConflictError
from academy_backoffice.employees.model import EmployeeProfile
from academy_backoffice.permissions.model import PermissionEntry
from academy_backoffice.punches.breaks import parse_breaks, serialize_breaks
from academy_backoffice.punches.model import PunchEvidence, PunchRecord
from academy_backoffice.users.model import User
from academy_backoffice.users.service import SessionUser


@dataclass
class InMemoryUsers:
    users_by_id: dict[int, User] = field(default_factory=dict)

    def add(self, user: User) -> User:
        self.users_by_id[user.user_id] = user
        return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users_by_id.get(int(user_id))

    def get_by_username(self, username: str) -> Optional[User]:
        for u in self.users_by_id.values():
            if u.username == username:
                return u
        return None


@dataclass
class InMemoryPermissions:
    rows: dict[tuple[int, Module], PermissionEntry] = field(default_factory=dict)

    def list_for_user(self, user_id: int):
        return sorted((p for (uid, _), p in self.rows.items() if uid == user_id), key=lambda p: p.module.value)

    def get_for_user_module(self, user_id: int, module: Module) -> Optional[PermissionEntry]:
        return self.rows.get((int(user_id), module))

    def upsert(self, entry: PermissionEntry) -> PermissionEntry:
        self.rows[(entry.user_id, entry.module)] = entry
        return entry


class InMemoryProfiles:
    def __init__(self):
        self.by_user: dict[int, EmployeeProfile] = {}
        self._id = 0

    def get_by_user_id(self, user_id: int) -> Optional[EmployeeProfile]:
        return self.by_user.get(int(user_id))

    def get_by_employee_code(self, employee_code: str) -> Optional[EmployeeProfile]:
        return next((p for p in self.by_user.values() if p.employee_code == employee_code), None)

    def create(self, profile: EmployeeProfile) -> EmployeeProfile:
        if profile.user_id in self.by_user or self.get_by_employee_code(profile.employee_code):
            raise ConflictError("Employee profile already exists")
        self._id += 1
        saved = replace(profile, profile_id=self._id, created_at=datetime(2026, 3, 1, 8, 0))
        self.by_user[saved.user_id] = saved
        return saved

    def list_for_users(self, user_ids):
        return {u: self.by_user[u] for u in set(user_ids) if u in self.by_user}


class InMemoryPunches:
    """Keeps rows the way MySQL does: breaks as a JSON string, a version counter."""

    def __init__(self, users: Optional[InMemoryUsers] = None):
        self.rows: dict[int, dict] = {}
        self._id = 0
        self._users = users
        self.fail_next_write = False

    def seed(self, *, user_id: int, work_date: date, **values) -> int:
        self._id += 1
        row = {
            "punch_id": self._id,
            "user_id": user_id,
            "work_date": work_date,
            "punch_in_at": None,
            "punch_out_at": None,
            "punch_in_evidence": PunchEvidence(),
            "punch_out_evidence": PunchEvidence(),
            "breaks": "[]",
            "effective_working_hours": None,
            "version": 0,
        }
        row.update(values)
        self.rows[self._id] = row
        return self._id

    def _to_record(self, row: dict) -> PunchRecord:
        user = self._users.get_by_id(row["user_id"]) if self._users else None
        return PunchRecord(
            punch_id=row["punch_id"],
            user_id=row["user_id"],
            user_name=user.full_name if user else None,
            work_date=row["work_date"],
            punch_in_at=row["punch_in_at"],
            punch_out_at=row["punch_out_at"],
            punch_in_evidence=row["punch_in_evidence"],
            punch_out_evidence=row["punch_out_evidence"],
            breaks=parse_breaks(row["breaks"]),
            effective_working_hours=row["effective_working_hours"],
            version=row["version"],
        )

    def _find(self, user_id: int, work_date: date) -> Optional[dict]:
        for row in self.rows.values():
            if row["user_id"] == user_id and row["work_date"] == work_date:
                return row
        return None

    def _writable(self, punch_id: int, expected_version: int) -> Optional[dict]:
        if self.fail_next_write:
            self.fail_next_write = False
            return None
        row = self.rows.get(punch_id)
        if not row or row["version"] != expected_version:
            return None
        return row

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[PunchRecord]:
        row = self._find(user_id, work_date)
        return self._to_record(row) if row else None

    def create_punch_in(self, *, user_id: int, work_date: date, punch_in_at: datetime, evidence: PunchEvidence) -> int:
        if self._find(user_id, work_date):
            raise AlreadyPunchedInError()
        return self.seed(user_id=user_id, work_date=work_date, punch_in_at=punch_in_at, punch_in_evidence=evidence)

    def record_punch_in(self, *, punch_id: int, expected_version: int, punch_in_at: datetime, evidence: PunchEvidence) -> bool:
        row = self._writable(punch_id, expected_version)
        if not row or row["punch_in_at"] is not None:
            return False
        row.update(punch_in_at=punch_in_at, punch_in_evidence=evidence, version=row["version"] + 1)
        return True

    def record_punch_out(
        self,
        *,
        punch_id: int,
        expected_version: int,
        punch_out_at: datetime,
        evidence: PunchEvidence,
        effective_working_hours: Decimal,
    ) -> bool:
        row = self._writable(punch_id, expected_version)
        if not row or row["punch_out_at"] is not None:
            return False
        row.update(
            punch_out_at=punch_out_at,
            punch_out_evidence=evidence,
            effective_working_hours=effective_working_hours,
            version=row["version"] + 1,
        )
        return True

    def save_breaks(self, *, punch_id: int, expected_version: int, breaks) -> bool:
        row = self._writable(punch_id, expected_version)
        if not row:
            return False
        row.update(breaks=json.dumps(serialize_breaks(breaks)), version=row["version"] + 1)
        return True

    def list_records(self, *, user_id=None, start_date=None, end_date=None):
        out = []
        for row in self.rows.values():
            if user_id is not None and row["user_id"] != user_id:
                continue
            if start_date is not None and row["work_date"] < start_date:
                continue
            if end_date is not None and row["work_date"] > end_date:
                continue
            out.append(self._to_record(row))
        out.sort(key=lambda r: (-r.work_date.toordinal(), r.user_id))
        return out


def _user(user_id: int, username: str, role: Role, full_name: str) -> User:
    return User(
        user_id=user_id,
        full_name=full_name,
        username=username,
        email=f"{username}@academy.test",
        password_hash=generate_password_hash(f"{username}-pw"),
        role=role,
    )


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 2, 9, 0, 0)


@pytest.fixture
def users() -> InMemoryUsers:
    repo = InMemoryUsers()
    repo.add(_user(1, "root", Role.SUPERADMIN, "Super Admin"))
    repo.add(_user(2, "admin", Role.ADMIN, "Office Admin"))
    repo.add(_user(3, "emp", Role.EMPLOYEE, "Employee One"))
    repo.add(_user(4, "emp2", Role.EMPLOYEE, "Employee Two"))
    repo.add(_user(5, "student", Role.STUDENT, "Student One"))
    repo.add(_user(6, "faculty", Role.FACULTY, "Faculty One"))
    return repo


@pytest.fixture
def actors(users: InMemoryUsers) -> dict[str, SessionUser]:
    return {
        u.username: SessionUser(user_id=u.user_id, full_name=u.full_name, role=u.role)
        for u in users.users_by_id.values()
    }


@pytest.fixture
def permissions() -> InMemoryPermissions:
    return InMemoryPermissions()


@pytest.fixture
def punches(users: InMemoryUsers) -> InMemoryPunches:
    return InMemoryPunches(users)


@pytest.fixture
def profiles() -> InMemoryProfiles:
    return InMemoryProfiles()


@pytest.fixture
def container(users, permissions, punches, profiles):
    return assemble_container(
        users_repo=users,
        permissions_repo=permissions,
        punches_repo=punches,
        profiles_repo=profiles,
    )


@pytest.fixture
def app(container):
    return create_app(container, settings_module="config.testing")


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login_as(client, actors):
    def _login(username: str) -> None:
        actor = actors[username]
        with client.session_transaction() as sess:
            sess.update(actor.to_session())

    return _login
