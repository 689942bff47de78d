from __future__ import annotations

from dataclasses import replace

import pytest

from academy_backoffice.core.enums import Role
from academy_backoffice.core.exceptions import AuthenticationError, MissingFieldError
from academy_backoffice.users.service import AuthService, SessionUser


def test_authenticate_success(users):
    s_user = AuthService(users).authenticate("emp", "emp-pw")

    assert s_user == SessionUser(user_id=3, full_name="Employee One", role=Role.EMPLOYEE)


def test_authenticate_wrong_password(users):
    with pytest.raises(AuthenticationError):
        AuthService(users).authenticate("emp", "nope")


def test_authenticate_unknown_or_inactive_user(users):
    users.add(replace(users.get_by_id(4), is_active=False))
    service = AuthService(users)

    with pytest.raises(AuthenticationError):
        service.authenticate("ghost", "x")
    with pytest.raises(AuthenticationError):
        service.authenticate("emp2", "emp2-pw")


def test_authenticate_requires_username(users):
    with pytest.raises(MissingFieldError):
        AuthService(users).authenticate("  ", "x")


def test_placeholder_hash_never_matches(users):
    users.add(replace(users.get_by_id(3), password_hash="CHANGE_ME"))

    with pytest.raises(AuthenticationError):
        AuthService(users).authenticate("emp", "CHANGE_ME")


def test_session_roundtrip():
    s_user = SessionUser(user_id=7, full_name="Asha", role=Role.FACULTY)

    assert SessionUser.from_session(s_user.to_session()) == s_user

    with pytest.raises(AuthenticationError):
        SessionUser.from_session({"user_id": 7, "role": "janitor"})
    with pytest.raises(AuthenticationError):
        SessionUser.from_session({})
