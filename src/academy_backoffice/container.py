from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_profile_repository import MySQLEmployeeProfileRepository
from .employees.repository import EmployeeProfileRepository
from .employees.service import EmployeeProfileService
from .permissions.mysql_permission_repository import MySQLPermissionRepository
from .permissions.policy import AccessPolicy
from .permissions.repository import PermissionRepository
from .permissions.service import PermissionService
from .punches.calculator.standard_calculator import StandardWorkingHoursCalculator
from .punches.mysql_punch_repository import MySQLPunchRepository
from .punches.repository import PunchRepository
from .punches.service import PunchService
from .reports.service import AttendanceReportService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    permissions_repo: PermissionRepository
    punches_repo: PunchRepository
    profiles_repo: EmployeeProfileRepository

    policy: AccessPolicy
    auth_service: AuthService
    permission_service: PermissionService
    employee_service: EmployeeProfileService
    punch_service: PunchService
    report_service: AttendanceReportService

    conn: Optional[DatabaseConnection] = None


def assemble_container(
    *,
    users_repo: UserRepository,
    permissions_repo: PermissionRepository,
    punches_repo: PunchRepository,
    profiles_repo: EmployeeProfileRepository,
    clamp_negative_hours: bool = True,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services on top of any repository implementations (MySQL or in-memory)."""

    policy = AccessPolicy(permissions_repo)
    return Container(
        users_repo=users_repo,
        permissions_repo=permissions_repo,
        punches_repo=punches_repo,
        profiles_repo=profiles_repo,
        policy=policy,
        auth_service=AuthService(users_repo),
        permission_service=PermissionService(permissions_repo, users_repo, policy),
        employee_service=EmployeeProfileService(profiles_repo, users_repo, policy),
        punch_service=PunchService(
            punches_repo,
            policy,
            calculator=StandardWorkingHoursCalculator(clamp_negative=clamp_negative_hours),
            profiles=profiles_repo,
        ),
        report_service=AttendanceReportService(punches_repo, policy),
        conn=conn,
    )


def build_container(*, db_config: dict, clamp_negative_hours: bool = True) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return assemble_container(
        users_repo=MySQLUserRepository(conn),
        permissions_repo=MySQLPermissionRepository(conn),
        punches_repo=MySQLPunchRepository(conn),
        profiles_repo=MySQLEmployeeProfileRepository(conn),
        clamp_negative_hours=clamp_negative_hours,
        conn=conn,
    )
