from __future__ import annotations

from flask import Flask

from ..common.http import current_actor, json_body, login_required, success
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.permission_service

    @app.route("/api/permissions/modules", methods=["GET"], endpoint="permission_modules")
    @login_required
    def modules():
        return success({"modules": service.list_modules()})

    @app.route("/api/permissions/users/<int:user_id>", methods=["GET"], endpoint="user_permissions")
    @login_required
    def get_permissions(user_id: int):
        return success(service.get_user_permissions(actor=current_actor(), user_id=user_id))

    @app.route("/api/permissions/users/<int:user_id>", methods=["PUT"], endpoint="update_user_permissions")
    @login_required
    def update_permissions(user_id: int):
        saved = service.update_user_permissions(
            actor=current_actor(),
            user_id=user_id,
            entries=json_body().get("permissions"),
        )
        return success({"permissions": [p.to_dict() for p in saved]}, message="Permissions updated successfully")
