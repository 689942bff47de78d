from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_optional_date
from ..common.http import current_actor, json_body, login_required, optional_int_arg, success
from ..container import Container
from .model import PunchEvidence


def register(app: Flask, container: Container) -> None:
    prefix = "/api/employee-attendance"
    service = container.punch_service

    def _range():
        return (
            parse_optional_date(request.args.get("from"), "from"),
            parse_optional_date(request.args.get("to"), "to"),
        )

    @app.route(f"{prefix}/punch-in", methods=["POST"], endpoint="punch_in")
    @login_required
    def punch_in():
        evidence = PunchEvidence.from_payload(json_body())
        record = service.punch_in(current_actor(), evidence)
        return success(
            {"punchInAt": record.to_dict()["punchInAt"], "location": evidence.location_dict(), "punch": record.to_dict()},
            message="Punched in successfully",
        )

    @app.route(f"{prefix}/punch-out", methods=["POST"], endpoint="punch_out")
    @login_required
    def punch_out():
        evidence = PunchEvidence.from_payload(json_body())
        record = service.punch_out(current_actor(), evidence)
        data = record.to_dict()
        return success(
            {
                "punchOutAt": data["punchOutAt"],
                "effectiveWorkingHours": data["effectiveWorkingHours"],
                "location": evidence.location_dict(),
                "punch": data,
            },
            message="Punched out successfully",
        )

    @app.route(f"{prefix}/today", methods=["GET"], endpoint="punch_today")
    @login_required
    def today():
        return success(service.get_today(current_actor()).to_dict())

    @app.route(f"{prefix}/daily-log", methods=["GET"], endpoint="punch_daily_log")
    @login_required
    def daily_log():
        start, end = _range()
        records = service.get_log(current_actor(), target_user_id=optional_int_arg("userId"), start=start, end=end)
        return success({"punches": [r.to_dict() for r in records], "total": len(records)})

    @app.route(f"{prefix}/break", methods=["POST"], endpoint="punch_add_break")
    @login_required
    def add_break():
        body = json_body()
        new_break, record = service.add_break(
            current_actor(),
            break_type=body.get("breakType"),
            reason=body.get("reason"),
            start_time=body.get("startTime"),
            end_time=body.get("endTime"),
        )
        return success(
            {"break": new_break.to_dict(), "breaks": [b.to_dict() for b in record.breaks]},
            message="Break added successfully",
        )

    @app.route(f"{prefix}/break/<break_id>/end", methods=["POST"], endpoint="punch_end_break")
    @login_required
    def end_break(break_id: str):
        ended, record = service.end_break(current_actor(), break_id)
        return success(
            {"break": ended.to_dict(), "breaks": [b.to_dict() for b in record.breaks]},
            message="Break ended successfully",
        )

    @app.route(f"{prefix}/all", methods=["GET"], endpoint="punch_all")
    @login_required
    def all_attendance():
        start, end = _range()
        records = service.get_all(current_actor(), user_id=optional_int_arg("userId"), start=start, end=end)
        return success({"punches": [r.to_dict(with_profile=True) for r in records], "total": len(records)})
