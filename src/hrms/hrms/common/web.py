"""Shared Flask helpers: session guards, JSON parsing and error mapping."""

from __future__ import annotations

import logging
from datetime import date
from functools import wraps
from typing import Any

import mysql.connector
from flask import Flask, jsonify, request, session

from ..core.enums import UserRole
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            raise AuthenticationError("Please log in to continue")
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: UserRole):
    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                raise AuthenticationError("Please log in to continue")
            if session.get("role") not in allowed:
                raise AuthorizationError("Access denied")
            return view(*args, **kwargs)

        return wrapper

    return decorator


master_admin_required = roles_required(UserRole.MASTER_ADMIN)
admin_required = roles_required(UserRole.MASTER_ADMIN, UserRole.ADMIN)


def current_user_id() -> int:
    return int(session["user_id"])


def current_role() -> UserRole:
    return UserRole(session.get("role"))


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def date_field(data: dict, key: str, *, required: bool = True) -> date | None:
    value = data.get(key)
    if not value:
        if required:
            raise ValidationError(f"{key} is required")
        return None
    try:
        return parse_iso_date(str(value))
    except ValueError:
        raise ValidationError(f"{key} must be YYYY-MM-DD")


def int_arg(name: str, default: int | None = None) -> int | None:
    value = request.args.get(name)
    if value in (None, ""):
        return default
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        for cls, status in _STATUS_BY_ERROR:
            if isinstance(exc, cls):
                return jsonify({"message": str(exc)}), status
        return jsonify({"message": str(exc)}), 400

    @app.errorhandler(mysql.connector.Error)
    def handle_store_error(exc: mysql.connector.Error):
        logger.exception("Database error on %s %s", request.method, request.path)
        return jsonify({"message": "Database error"}), 500
