from __future__ import annotations

import logging
from datetime import timedelta

from flask import Flask, jsonify, request, session

from ..common.logging_utils import mask_email
from ..common.web import (
    admin_required,
    current_role,
    current_user_id,
    date_field,
    int_arg,
    json_body,
    login_required,
)
from ..core.constants import DEFAULT_SESSION_DAYS
from ..core.enums import UserRole
from ..core.exceptions import AuthorizationError
from ..container import Container
from .organization import organization_overview

logger = logging.getLogger(__name__)

_PROFILE_KEYS = ("department", "designation", "employee_id", "reporting_manager_id", "payroll_grade")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        s_user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))

        session.clear()
        session.permanent = bool(data.get("remember_me"))
        app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)

        session["user_id"] = s_user.user_id
        session["name"] = s_user.display_name
        session["role"] = s_user.role.value
        session["department"] = s_user.department.value if s_user.department else None
        session["designation"] = s_user.designation.value if s_user.designation else None

        logger.info("User %s logged in (%s)", s_user.user_id, mask_email(data.get("email", "")))
        return jsonify({"user_id": s_user.user_id, "display_name": s_user.display_name, "role": s_user.role.value})

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"message": "Logged out"})

    @app.route("/api/me", endpoint="me")
    @login_required
    def me():
        user = container.user_service.get_user(current_user_id())
        payload = user.to_public_dict()
        payload["permissions"] = sorted(container.permission_service.get_effective_permissions(user.user_id))
        return jsonify(payload)

    @app.route("/api/users", methods=["GET"], endpoint="list_users")
    @admin_required
    def list_users():
        users = container.user_service.list_users(
            department=request.args.get("department"),
            designation=request.args.get("designation"),
            reporting_manager_id=int_arg("reporting_manager_id"),
            active_only=request.args.get("active") in ("1", "true"),
        )
        return jsonify([u.to_public_dict() for u in users])

    @app.route("/api/users", methods=["POST"], endpoint="create_user")
    @admin_required
    def create_user():
        data = json_body()
        user_id = container.user_service.create_user(
            current_role=current_role(),
            email=data.get("email", ""),
            display_name=data.get("display_name", ""),
            password=data.get("password", ""),
            role=data.get("role") or UserRole.EMPLOYEE.value,
            join_date=date_field(data, "join_date", required=False),
            **{k: data.get(k) for k in _PROFILE_KEYS},
        )
        return jsonify({"user_id": user_id}), 201

    @app.route("/api/users/<int:user_id>", methods=["GET"], endpoint="get_user")
    @login_required
    def get_user(user_id: int):
        # Employees may only read their own profile.
        if current_role() == UserRole.EMPLOYEE and user_id != current_user_id():
            raise AuthorizationError("Access denied")
        return jsonify(container.user_service.get_user(user_id).to_public_dict())

    @app.route("/api/users/<int:user_id>", methods=["PATCH"], endpoint="update_user")
    @admin_required
    def update_user(user_id: int):
        data = json_body()
        changes = dict(data)
        if "join_date" in data:
            changes["join_date"] = date_field(data, "join_date", required=False)
        user = container.user_service.update_user(current_role=current_role(), user_id=user_id, changes=changes)
        return jsonify(user.to_public_dict())

    @app.route("/api/users/<int:user_id>/activate", methods=["POST"], endpoint="activate_user")
    @admin_required
    def activate_user(user_id: int):
        container.user_service.set_active(user_id=user_id, is_active=True)
        return jsonify({"message": "User activated"})

    @app.route("/api/users/<int:user_id>/deactivate", methods=["POST"], endpoint="deactivate_user")
    @admin_required
    def deactivate_user(user_id: int):
        container.user_service.set_active(user_id=user_id, is_active=False)
        return jsonify({"message": "User deactivated"})

    @app.route("/api/organization", endpoint="organization")
    @login_required
    def organization():
        return jsonify(organization_overview())
