from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file

from ..common.datetime_utils import DateWindow, month_and_year
from ..common.http import api_endpoint
from ..core.constants import XLSX_MIMETYPE
from ..core.enums import Capability, Role, SubjectKind
from ..core.exceptions import AuthorizationError, ValidationError
from ..container import Container
from ..reports.export import build_workbook, export_filename


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/mark", methods=["POST"], endpoint="mark_student_attendance")
    @api_endpoint(Capability.MARK_STUDENT_ATTENDANCE)
    def mark_student_attendance(actor):
        payload = request.get_json(silent=True) or {}
        result = container.normalizer.submit(SubjectKind.STUDENT, payload.get("attendanceData"), actor=actor)
        return jsonify(result.to_dict()), 200

    @app.route("/api/attendance/monthly-export", methods=["GET"], endpoint="monthly_attendance_export")
    @api_endpoint(Capability.VIEW_ROSTER_REPORTS)
    def monthly_attendance_export(actor):
        month, year = month_and_year(request.args.get("month"), request.args.get("year"))
        scope = container.scope_resolver.student_scope(actor)
        report = container.report_service.monthly_sheets(scope, DateWindow.for_month(year, month))

        return send_file(
            io.BytesIO(build_workbook(report)),
            mimetype=XLSX_MIMETYPE,
            as_attachment=True,
            download_name=export_filename(month, year),
        )

    @app.route("/api/attendance/daily-summary", methods=["GET"], endpoint="daily_student_summary")
    @api_endpoint(Capability.VIEW_ROSTER_REPORTS)
    def daily_student_summary(actor):
        raw_day = request.args.get("date")
        if not raw_day:
            raise ValidationError("Date is required")

        day = container.calendar.normalize(raw_day)
        scope = container.scope_resolver.student_scope(actor)
        summary = container.report_service.daily_student_summary(
            scope,
            day.day,
            class_filter=request.args.get("class"),
            section_filter=request.args.get("section"),
        )
        return jsonify(summary), 200

    @app.route("/api/attendance/student", methods=["GET"], endpoint="student_attendance")
    @api_endpoint(Capability.VIEW_OWN_ATTENDANCE)
    def student_attendance(actor):
        if actor.role != Role.STUDENT or not actor.student_id:
            raise AuthorizationError("Access denied")

        month, year = month_and_year(request.args.get("month"), request.args.get("year"))
        summary = container.report_service.student_summary(actor.student_id, DateWindow.for_month(year, month))
        return jsonify({"month": month, "year": year, **summary}), 200

    @app.route("/api/attendance/parent", methods=["GET"], endpoint="parent_attendance")
    @api_endpoint(Capability.VIEW_CHILDREN_ATTENDANCE)
    def parent_attendance(actor):
        month, year = month_and_year(request.args.get("month"), request.args.get("year"))
        if not actor.parent_id:
            return jsonify([]), 200
        summaries = container.report_service.guardian_summaries(actor.parent_id, DateWindow.for_month(year, month))
        return jsonify(summaries), 200
