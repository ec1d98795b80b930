from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import admin_required, current_role, current_user_id, date_field, json_body, login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/leaves", methods=["GET"], endpoint="my_leaves")
    @login_required
    def my_leaves():
        leaves = container.leave_service.list_for_user(current_user_id())
        return jsonify([lv.to_dict() for lv in leaves])

    @app.route("/api/leaves", methods=["POST"], endpoint="request_leave")
    @login_required
    def request_leave():
        data = json_body()
        leave_id = container.leave_service.request_leave(
            user_id=current_user_id(),
            start_date=date_field(data, "start_date"),
            end_date=date_field(data, "end_date"),
            reason=data.get("reason", ""),
        )
        return jsonify({"leave_id": leave_id}), 201

    @app.route("/api/leaves/pending", endpoint="pending_leaves")
    @admin_required
    def pending_leaves():
        return jsonify([lv.to_dict() for lv in container.leave_service.list_pending()])

    @app.route("/api/leaves/<int:leave_id>/approve", methods=["POST"], endpoint="approve_leave")
    @admin_required
    def approve_leave(leave_id: int):
        data = request.get_json(silent=True) or {}
        created = container.leave_service.approve(
            current_role=current_role(),
            admin_user_id=current_user_id(),
            leave_id=leave_id,
            admin_note=data.get("admin_note", ""),
        )
        return jsonify({"message": "Leave approved", "attendance_records": created})

    @app.route("/api/leaves/<int:leave_id>/reject", methods=["POST"], endpoint="reject_leave")
    @admin_required
    def reject_leave(leave_id: int):
        data = request.get_json(silent=True) or {}
        container.leave_service.reject(
            current_role=current_role(),
            admin_user_id=current_user_id(),
            leave_id=leave_id,
            admin_note=data.get("admin_note", ""),
        )
        return jsonify({"message": "Leave rejected"})
