from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Optional

from flask import Flask, jsonify, request

from ..common.web import current_role, current_user_id, int_arg, json_body, login_required, master_admin_required
from ..core.constants import AUDIT_LOG_LIMIT
from ..core.enums import UserRole
from ..core.exceptions import AuthorizationError, ValidationError
from ..container import Container


def _datetime_field(data, key: str) -> Optional[datetime]:
    value = data.get(key)
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(f"{key} must be an ISO date/time")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/permissions/effective/<int:user_id>", endpoint="effective_permissions")
    @login_required
    def effective_permissions(user_id: int):
        if current_role() != UserRole.MASTER_ADMIN and user_id != current_user_id():
            raise AuthorizationError("Access denied")
        service = container.permission_service
        return jsonify(
            {
                "user_id": user_id,
                "permissions": sorted(service.get_effective_permissions(user_id)),
                "approval_limits": asdict(service.get_effective_approval_limits(user_id)),
                "overrides": [o.to_dict() for o in service.list_overrides(user_id)],
            }
        )

    @app.route("/api/roles", methods=["GET"], endpoint="roles")
    @master_admin_required
    def roles():
        return jsonify([r.to_dict() for r in container.permission_service.list_roles()])

    @app.route("/api/roles", methods=["POST"], endpoint="create_role")
    @master_admin_required
    def create_role():
        data = json_body()
        role_id = container.permission_service.create_role(
            name=data.get("name", ""),
            permissions=data.get("permissions") or [],
            description=data.get("description"),
            is_system_role=bool(data.get("is_system_role")),
            approval_limits=data.get("approval_limits"),
        )
        container.audit_service.log(
            user_id=current_user_id(),
            action="role_created",
            entity_type="role",
            entity_id=str(role_id),
            changes={"name": data.get("name"), "permissions": data.get("permissions")},
        )
        return jsonify({"role_id": role_id}), 201

    @app.route("/api/roles/<int:role_id>", methods=["DELETE"], endpoint="delete_role")
    @master_admin_required
    def delete_role(role_id: int):
        container.permission_service.delete_role(role_id)
        container.audit_service.log(
            user_id=current_user_id(),
            action="role_deleted",
            entity_type="role",
            entity_id=str(role_id),
        )
        return jsonify({"message": "Role deleted"})

    @app.route("/api/users/<int:user_id>/roles", methods=["POST"], endpoint="assign_role")
    @master_admin_required
    def assign_role(user_id: int):
        data = json_body()
        assignment_id = container.permission_service.assign_role(
            user_id=user_id,
            role_id=data.get("role_id"),
            assigned_by=current_user_id(),
            effective_from=_datetime_field(data, "effective_from"),
            effective_to=_datetime_field(data, "effective_to"),
        )
        container.audit_service.log(
            user_id=current_user_id(),
            action="role_assigned",
            entity_type="user",
            entity_id=str(user_id),
            changes={"role_id": data.get("role_id")},
        )
        return jsonify({"assignment_id": assignment_id}), 201

    @app.route("/api/users/<int:user_id>/roles/<int:role_id>", methods=["DELETE"], endpoint="revoke_role")
    @master_admin_required
    def revoke_role(user_id: int, role_id: int):
        container.permission_service.revoke_role(user_id=user_id, role_id=role_id)
        container.audit_service.log(
            user_id=current_user_id(),
            action="role_revoked",
            entity_type="user",
            entity_id=str(user_id),
            changes={"role_id": role_id},
        )
        return jsonify({"message": "Role revoked"})

    @app.route("/api/permission-overrides", methods=["POST"], endpoint="create_permission_override")
    @master_admin_required
    def create_permission_override():
        data = json_body()
        override_id = container.permission_service.create_override(
            user_id=data.get("user_id"),
            permission=data.get("permission", ""),
            granted=bool(data.get("granted", True)),
            reason=data.get("reason", ""),
            granted_by=current_user_id(),
            effective_from=_datetime_field(data, "effective_from"),
            effective_to=_datetime_field(data, "effective_to"),
        )
        container.audit_service.log(
            user_id=current_user_id(),
            action="permission_override_created",
            entity_type="user",
            entity_id=str(data.get("user_id")),
            changes={"permission": data.get("permission"), "granted": bool(data.get("granted", True))},
        )
        return jsonify({"override_id": override_id}), 201

    @app.route("/api/permission-overrides/<int:override_id>", methods=["DELETE"], endpoint="delete_permission_override")
    @master_admin_required
    def delete_permission_override(override_id: int):
        container.permission_service.delete_override(override_id)
        container.audit_service.log(
            user_id=current_user_id(),
            action="permission_override_deleted",
            entity_type="permission_override",
            entity_id=str(override_id),
        )
        return jsonify({"message": "Permission override removed"})

    @app.route("/api/audit-logs", endpoint="audit_logs")
    @master_admin_required
    def audit_logs():
        logs = container.audit_service.list_logs(
            user_id=int_arg("user_id"),
            entity_type=request.args.get("entity_type"),
            start=_datetime_field(request.args, "start"),
            end=_datetime_field(request.args, "end"),
            limit=int_arg("limit", AUDIT_LOG_LIMIT),
        )
        return jsonify([log.to_dict() for log in logs])
