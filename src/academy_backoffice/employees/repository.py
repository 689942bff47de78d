from __future__ import annotations

from typing import Iterable, Mapping, Optional, Protocol

from .model import EmployeeProfile


class EmployeeProfileRepository(Protocol):
    def get_by_user_id(self, user_id: int) -> Optional[EmployeeProfile]:
        raise NotImplementedError

    def get_by_employee_code(self, employee_code: str) -> Optional[EmployeeProfile]:
        raise NotImplementedError

    def create(self, profile: EmployeeProfile) -> EmployeeProfile:
        """Insert; raises ConflictError if the user or employee code already has a profile."""

        raise NotImplementedError

    def list_for_users(self, user_ids: Iterable[int]) -> Mapping[int, EmployeeProfile]:
        raise NotImplementedError
