from __future__ import annotations

import csv
import io
from datetime import date, timedelta

from flask import Flask, request

from ..common.datetime_utils import parse_optional_date
from ..common.http import current_actor, login_required, optional_int_arg, success
from ..container import Container
from ..core.constants import DEFAULT_REPORT_DAYS
from .service import CSV_FIELDS, ReportData


def register(app: Flask, container: Container) -> None:
    service = container.report_service

    def _range() -> tuple[date, date]:
        today = date.today()
        start = parse_optional_date(request.args.get("from"), "from") or today - timedelta(days=DEFAULT_REPORT_DAYS)
        end = parse_optional_date(request.args.get("to"), "to") or today
        return start, end

    def _write_report_csv(*, data: ReportData, filename: str):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for row in data.rows:
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/reports/employee-attendance", methods=["GET"], endpoint="employee_attendance_report")
    @login_required
    def employee_attendance_report():
        start, end = _range()
        data = service.build_punch_report(current_actor(), start=start, end=end, user_id=optional_int_arg("userId"))
        return success({"from": start.isoformat(), "to": end.isoformat(), **data.to_dict()})

    @app.route("/api/reports/employee-attendance.csv", methods=["GET"], endpoint="employee_attendance_report_csv")
    @login_required
    def employee_attendance_report_csv():
        start, end = _range()
        data = service.build_punch_report(current_actor(), start=start, end=end, user_id=optional_int_arg("userId"))
        filename = f"employee_attendance_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.csv"
        return _write_report_csv(data=data, filename=filename)
