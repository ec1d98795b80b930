from __future__ import annotations

from datetime import date, timedelta

from flask import Flask, jsonify, request

from ..common.web import (
    admin_required,
    current_role,
    current_user_id,
    date_field,
    int_arg,
    json_body,
    login_required,
)
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import UserRole
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _target_user_id() -> int:
        """Employees only see their own attendance; admins may pass ?user_id=."""

        if current_role() == UserRole.EMPLOYEE:
            return current_user_id()
        return int_arg("user_id", current_user_id())

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="checkin")
    @login_required
    def checkin():
        data = request.get_json(silent=True) or {}
        record = container.attendance_service.check_in(
            current_user_id(),
            attendance_type=data.get("attendance_type") or "office",
            remarks=data.get("remarks"),
        )
        return jsonify(record.to_dict()), 201

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="checkout")
    @login_required
    def checkout():
        data = request.get_json(silent=True) or {}
        record = container.attendance_service.check_out(current_user_id(), remarks=data.get("remarks"))
        return jsonify(record.to_dict())

    @app.route("/api/attendance", endpoint="attendance_list")
    @login_required
    def attendance_list():
        today = date.today()
        end = date_field(request.args, "end", required=False) or today
        start = date_field(request.args, "start", required=False) or end - timedelta(days=DEFAULT_HISTORY_LIMIT - 1)

        if current_role() == UserRole.EMPLOYEE:
            user_id = current_user_id()
        else:
            user_id = int_arg("user_id")

        records = container.attendance_service.list_records(start, end, user_id=user_id)
        return jsonify([r.to_dict() for r in records])

    @app.route("/api/attendance/summary", endpoint="attendance_summary")
    @login_required
    def attendance_summary():
        today = date.today()
        summary = container.attendance_service.get_monthly_summary(
            _target_user_id(),
            int_arg("month", today.month),
            int_arg("year", today.year),
        )
        return jsonify(summary.to_dict())

    @app.route("/api/attendance/policies", methods=["GET"], endpoint="attendance_policies")
    @login_required
    def attendance_policies():
        return jsonify([p.to_dict() for p in container.attendance_service.list_policies()])

    @app.route("/api/attendance/policies", methods=["POST"], endpoint="create_attendance_policy")
    @admin_required
    def create_attendance_policy():
        data = json_body()
        policy_id = container.attendance_service.create_policy(
            name=data.get("name", ""),
            check_in_time=data.get("check_in_time", ""),
            check_out_time=data.get("check_out_time", ""),
            department=data.get("department"),
            designation=data.get("designation"),
            late_mark_after_minutes=data.get("late_mark_after_minutes"),
            half_day_mark_after_minutes=data.get("half_day_mark_after_minutes"),
            overtime_allowed=data.get("overtime_allowed", True),
            max_overtime_hours=data.get("max_overtime_hours"),
            weekend_days=data.get("weekend_days"),
        )
        return jsonify({"policy_id": policy_id}), 201
