from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import DateWindow, month_and_year, one_month_before
from ..common.http import api_endpoint
from ..common.validators import positive_int, require_status
from ..core.constants import DEFAULT_PAGE_LIMIT
from ..core.enums import Capability, Role, SubjectKind
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..container import Container
from .service import HistoryFilter


def register(app: Flask, container: Container) -> None:
    calendar = container.calendar

    def _day(name: str, *, required: bool = False):
        value = request.args.get(name)
        if not value:
            if required:
                raise ValidationError(f"{name} is required")
            return None
        return calendar.normalize(value).day

    def _page_args() -> tuple[int, int]:
        return (
            positive_int(request.args.get("page"), "page", default=1),
            positive_int(request.args.get("limit"), "limit", default=DEFAULT_PAGE_LIMIT),
        )

    def _own_teacher_id(actor) -> str:
        if actor.role != Role.TEACHER:
            raise AuthorizationError("Access denied")
        if not actor.teacher_id or not container.teachers_repo.get_by_id(actor.teacher_id):
            raise NotFoundError("Teacher not found")
        return actor.teacher_id

    # ===== ADMIN =====

    @app.route("/api/teacher-attendance/mark", methods=["POST"], endpoint="mark_teacher_attendance")
    @api_endpoint(Capability.MANAGE_TEACHER_ATTENDANCE)
    def mark_teacher_attendance(actor):
        payload = request.get_json(silent=True) or {}
        result = container.normalizer.submit(SubjectKind.TEACHER, payload.get("attendanceData"), actor=actor)
        return jsonify({"success": True, **result.to_dict()}), 200

    @app.route("/api/teacher-attendance", methods=["GET"], endpoint="teacher_attendance_history")
    @api_endpoint(Capability.MANAGE_TEACHER_ATTENDANCE)
    def teacher_attendance_history(actor):
        status = request.args.get("status")
        filters = HistoryFilter(
            start=_day("startDate"),
            end=_day("endDate"),
            teacher_id=request.args.get("teacherId") or None,
            status=require_status(status) if status else None,
            subject=request.args.get("subject") or None,
        )
        page, limit = _page_args()
        return jsonify(container.teacher_attendance_service.history(filters, page=page, limit=limit).to_dict()), 200

    @app.route("/api/teacher-attendance/<record_id>", methods=["PUT"], endpoint="update_teacher_attendance")
    @api_endpoint(Capability.MANAGE_TEACHER_ATTENDANCE)
    def update_teacher_attendance(record_id, actor):
        payload = request.get_json(silent=True) or {}
        record = container.teacher_attendance_service.amend(
            record_id,
            actor=actor,
            status=payload.get("status"),
            reason=payload.get("reason"),
            notes=payload.get("notes"),
            modification_reason=payload.get("modificationReason"),
        )
        return jsonify({"success": True, "message": "Attendance updated successfully", "data": record}), 200

    @app.route("/api/teacher-attendance/<record_id>", methods=["DELETE"], endpoint="delete_teacher_attendance")
    @api_endpoint(Capability.MANAGE_TEACHER_ATTENDANCE)
    def delete_teacher_attendance(record_id, actor):
        container.teacher_attendance_service.delete(record_id)
        return jsonify({"success": True, "message": "Attendance record deleted successfully"}), 200

    @app.route(
        "/api/teacher-attendance/without-attendance", methods=["GET"], endpoint="teachers_without_attendance"
    )
    @api_endpoint(Capability.MANAGE_TEACHER_ATTENDANCE)
    def teachers_without_attendance(actor):
        day = _day("date") or calendar.today().day
        teachers = container.report_service.teachers_without_attendance(day)
        data = [
            {"teacherId": t.teacher_id, "name": t.name, "employeeCode": t.employee_code, "subject": t.subject}
            for t in teachers
        ]
        return jsonify({"success": True, "data": data, "count": len(data), "date": day.isoformat()}), 200

    @app.route("/api/teacher-attendance/monthly-report", methods=["GET"], endpoint="teacher_monthly_report")
    @api_endpoint(Capability.MANAGE_TEACHER_ATTENDANCE)
    def teacher_monthly_report(actor):
        month, year = month_and_year(request.args.get("month"), request.args.get("year"))
        return jsonify({"success": True, **container.report_service.teacher_monthly_report(year, month)}), 200

    @app.route("/api/teacher-attendance/daily-summary", methods=["GET"], endpoint="daily_teacher_summary")
    @api_endpoint(Capability.MANAGE_TEACHER_ATTENDANCE)
    def daily_teacher_summary(actor):
        day = _day("date", required=True)
        return jsonify(container.report_service.daily_teacher_summary(day)), 200

    @app.route("/api/teacher-attendance/summary", methods=["GET"], endpoint="teacher_attendance_overview")
    @api_endpoint(Capability.MANAGE_TEACHER_ATTENDANCE)
    def teacher_attendance_overview(actor):
        overview = container.report_service.teacher_window_overview(_day("startDate"), _day("endDate"))
        return jsonify({"success": True, "data": overview}), 200

    @app.route("/api/teacher-attendance/statistics", methods=["GET"], endpoint="teacher_attendance_statistics")
    @api_endpoint(Capability.MANAGE_TEACHER_ATTENDANCE)
    def teacher_attendance_statistics(actor):
        return jsonify({"success": True, "data": container.report_service.teacher_statistics()}), 200

    # ===== TEACHER SELF-SERVICE =====

    @app.route("/api/teacher-attendance/me/history", methods=["GET"], endpoint="my_attendance_history")
    @api_endpoint(Capability.VIEW_OWN_ATTENDANCE)
    def my_attendance_history(actor):
        page, limit = _page_args()
        history = container.teacher_attendance_service.own_history(
            _own_teacher_id(actor),
            start=_day("startDate"),
            end=_day("endDate"),
            page=page,
            limit=limit,
        )
        return jsonify(history.to_dict()), 200

    @app.route("/api/teacher-attendance/me/summary", methods=["GET"], endpoint="my_attendance_summary")
    @api_endpoint(Capability.VIEW_OWN_ATTENDANCE)
    def my_attendance_summary(actor):
        teacher_id = _own_teacher_id(actor)
        today = calendar.today().day

        if request.args.get("month") and request.args.get("year"):
            month, year = month_and_year(request.args.get("month"), request.args.get("year"))
            window = DateWindow.for_month(year, month)
        else:
            # Without a month the window starts one month before startDate (default today).
            month, year = today.month, today.year
            start = one_month_before(_day("startDate") or today)
            window = DateWindow.inclusive(start, _day("endDate") or today)

        summary = container.report_service.teacher_summary(teacher_id, window)
        return jsonify({"month": month, "year": year, **summary}), 200

    @app.route("/api/teacher-attendance/me/today", methods=["GET"], endpoint="my_attendance_today")
    @api_endpoint(Capability.VIEW_OWN_ATTENDANCE)
    def my_attendance_today(actor):
        record = container.teacher_attendance_service.today_status(_own_teacher_id(actor))
        return jsonify({"success": True, "data": record}), 200
