from __future__ import annotations

from flask import Flask

from ..common.http import current_actor, json_body, login_required, success
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.employee_service

    def _profile_payload(profile, user) -> dict:
        return {"employeeProfile": {**profile.to_dict(), "user": user.to_dict()}}

    @app.route("/api/employees", methods=["POST"], endpoint="create_employee_profile")
    @login_required
    def create_profile():
        profile, user = service.create_profile(current_actor(), json_body())
        return success(_profile_payload(profile, user), message="Employee profile created successfully", status=201)

    @app.route("/api/employees/<int:user_id>", methods=["GET"], endpoint="employee_profile")
    @login_required
    def get_profile(user_id: int):
        profile, user = service.get_profile(current_actor(), user_id)
        return success(_profile_payload(profile, user))
