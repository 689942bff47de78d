from __future__ import annotations

import pytest

from academy_backoffice.core.enums import Capability, Module
from academy_backoffice.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from academy_backoffice.permissions.model import PermissionEntry


@pytest.fixture
def policy(container):
    return container.policy


@pytest.fixture
def service(container):
    return container.permission_service


def test_role_defaults(policy, actors):
    assert policy.allows(actors["emp"], Module.ATTENDANCE, Capability.ADD)
    assert not policy.allows(actors["emp"], Module.ATTENDANCE, Capability.DELETE)
    assert not policy.allows(actors["emp"], Module.REPORTS, Capability.VIEW)

    assert policy.allows(actors["admin"], Module.PAYMENTS, Capability.DELETE)
    assert policy.allows(actors["admin"], Module.ATTENDANCE, Capability.VIEW)
    assert not policy.allows(actors["admin"], Module.ATTENDANCE, Capability.ADD)

    assert policy.allows(actors["faculty"], Module.SESSIONS, Capability.EDIT)
    assert not policy.allows(actors["faculty"], Module.ATTENDANCE, Capability.ADD)

    assert policy.allows(actors["student"], Module.PORTFOLIOS, Capability.ADD)
    assert not policy.allows(actors["student"], Module.ATTENDANCE, Capability.VIEW)


def test_explicit_row_replaces_role_default(policy, permissions, actors):
    emp = actors["emp"]
    permissions.upsert(PermissionEntry(user_id=emp.user_id, module=Module.ATTENDANCE, can_view=True))

    assert policy.allows(emp, Module.ATTENDANCE, Capability.VIEW)
    assert not policy.allows(emp, Module.ATTENDANCE, Capability.ADD)


def test_require_privileged_rejects_regular_roles(policy, actors):
    with pytest.raises(AuthorizationError):
        policy.require_privileged(actors["faculty"], Module.EMPLOYEES, Capability.VIEW)

    policy.require_privileged(actors["root"], Module.EMPLOYEES, Capability.VIEW)


def test_list_modules(service):
    modules = service.list_modules()

    assert {"value": "attendance", "label": "Attendance"} in modules
    assert {"value": "software_completions", "label": "Software Completions"} in modules
    assert len(modules) == len(Module)


def test_user_can_read_own_permissions_only(service, actors):
    data = service.get_user_permissions(actor=actors["emp"], user_id=actors["emp"].user_id)

    assert data["permissions"] == []
    attendance = next(p for p in data["effective"] if p["module"] == "attendance")
    assert attendance["canAdd"] is True

    with pytest.raises(AuthorizationError):
        service.get_user_permissions(actor=actors["emp"], user_id=actors["emp2"].user_id)


def test_admin_reads_unknown_user(service, actors):
    with pytest.raises(NotFoundError):
        service.get_user_permissions(actor=actors["admin"], user_id=999)


def test_update_permissions_upserts_rows(service, permissions, actors):
    emp = actors["emp"]

    saved = service.update_user_permissions(
        actor=actors["admin"],
        user_id=emp.user_id,
        entries=[{"module": "reports", "canView": True}, {"module": "attendance", "canView": True, "canAdd": True}],
    )

    assert [p.module for p in saved] == [Module.REPORTS, Module.ATTENDANCE]
    assert permissions.get_for_user_module(emp.user_id, Module.REPORTS).can_view

    service.update_user_permissions(
        actor=actors["admin"],
        user_id=emp.user_id,
        entries=[{"module": "reports", "canView": False}],
    )
    assert not permissions.get_for_user_module(emp.user_id, Module.REPORTS).can_view
    assert len(permissions.list_for_user(emp.user_id)) == 2


def test_update_permissions_rules(service, permissions, actors):
    with pytest.raises(AuthorizationError):
        service.update_user_permissions(actor=actors["emp"], user_id=actors["emp2"].user_id, entries=[])

    with pytest.raises(AuthorizationError):
        service.update_user_permissions(actor=actors["admin"], user_id=actors["root"].user_id, entries=[])

    with pytest.raises(ValidationError):
        service.update_user_permissions(actor=actors["admin"], user_id=actors["emp"].user_id, entries={"module": "x"})

    with pytest.raises(ValidationError) as exc:
        service.update_user_permissions(
            actor=actors["admin"],
            user_id=actors["emp"].user_id,
            entries=[{"module": "reports", "canView": True}, {"module": "canteen", "canView": True}],
        )
    assert "Invalid module: canteen" in str(exc.value)
    assert permissions.rows == {}

    saved = service.update_user_permissions(
        actor=actors["root"],
        user_id=actors["root"].user_id,
        entries=[{"module": "attendance", "canView": True, "canAdd": True}],
    )
    assert saved[0].can_add


@pytest.mark.parametrize("value", ["false", "true", 1, 0, "yes"])
def test_update_permissions_requires_real_booleans(service, permissions, actors, value):
    with pytest.raises(ValidationError) as exc:
        service.update_user_permissions(
            actor=actors["admin"],
            user_id=actors["emp"].user_id,
            entries=[{"module": "reports", "canView": value}],
        )

    assert str(exc.value) == "canView must be true or false"
    assert permissions.rows == {}


def test_update_permissions_missing_or_null_flags_default_to_false(service, actors):
    (saved,) = service.update_user_permissions(
        actor=actors["admin"],
        user_id=actors["emp"].user_id,
        entries=[{"module": "reports", "canView": True, "canAdd": None}],
    )

    assert saved.can_view is True
    assert saved.can_add is False
    assert saved.can_delete is False
