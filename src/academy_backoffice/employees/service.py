from __future__ import annotations

import logging
from typing import Any

from ..core.enums import Capability, Module, Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..permissions.policy import AccessPolicy
from ..users.model import User
from ..users.repository import UserRepository
from ..users.service import SessionUser
from .model import EmployeeProfile
from .repository import EmployeeProfileRepository

logger = logging.getLogger(__name__)


class EmployeeProfileService:
    """Use cases: create and read an employee's HR profile."""

    def __init__(self, profiles: EmployeeProfileRepository, users: UserRepository, policy: AccessPolicy):
        self._profiles = profiles
        self._users = users
        self._policy = policy

    def create_profile(self, actor: SessionUser, body: Any) -> tuple[EmployeeProfile, User]:
        self._policy.require_privileged(actor, Module.EMPLOYEES, Capability.ADD)
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")

        profile = EmployeeProfile.from_payload(body)

        user = self._users.get_by_id(profile.user_id)
        if not user:
            raise NotFoundError("User not found")
        if user.role != Role.EMPLOYEE:
            raise ValidationError("User must have an employee role to create an employee profile")
        if self._profiles.get_by_user_id(user.user_id):
            raise ConflictError("Employee profile already exists for this user")
        if self._profiles.get_by_employee_code(profile.employee_code):
            raise ConflictError("Employee ID already exists")

        created = self._profiles.create(profile)
        logger.info("employee profile %s created for user %s by %s", created.employee_code, user.user_id, actor.user_id)
        return self._profiles.get_by_user_id(user.user_id) or created, user

    def get_profile(self, actor: SessionUser, user_id: int) -> tuple[EmployeeProfile, User]:
        if actor.user_id != int(user_id):
            if not actor.role.is_privileged:
                raise AuthorizationError("You can only view your own employee profile unless you are an admin")
            self._policy.require(actor, Module.EMPLOYEES, Capability.VIEW)

        profile = self._profiles.get_by_user_id(int(user_id))
        user = self._users.get_by_id(int(user_id))
        if not profile or not user:
            raise NotFoundError("Employee profile not found")
        return profile, user
