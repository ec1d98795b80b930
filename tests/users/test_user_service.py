from __future__ import annotations

from dataclasses import replace

import pytest

from src.hrms.hrms.core.enums import Department, UserRole
from src.hrms.hrms.core.exceptions import AuthenticationError, AuthorizationError, ValidationError

from tests.fakes import PASSWORD


def test_authenticate_returns_session_user(container):
    s_user = container.auth_service.authenticate("USER3@example.com ", PASSWORD)

    assert s_user.user_id == 3
    assert s_user.role == UserRole.EMPLOYEE
    assert s_user.department == Department.SALES


def test_authenticate_rejects_bad_password(container):
    with pytest.raises(AuthenticationError):
        container.auth_service.authenticate("user3@example.com", "wrong")


def test_authenticate_rejects_inactive_user(container, repos):
    repos.users.set_active(3, is_active=False)

    with pytest.raises(AuthenticationError):
        container.auth_service.authenticate("user3@example.com", PASSWORD)


def test_authenticate_rejects_placeholder_hash(container, repos):
    repos.users.users[3] = replace(repos.users.users[3], password_hash="CHANGE_ME")

    with pytest.raises(AuthenticationError):
        container.auth_service.authenticate("user3@example.com", PASSWORD)


def test_create_user_stores_hashed_password(container, repos):
    user_id = container.user_service.create_user(
        current_role=UserRole.ADMIN,
        email="New.Person@example.com",
        display_name="New Person",
        password="longpass",
        department="hr",
        designation="officer",
    )

    user = repos.users.get_by_id(user_id)
    assert user.email == "new.person@example.com"
    assert user.password_hash != "longpass"
    assert user.department == Department.HR
    assert container.auth_service.authenticate("new.person@example.com", "longpass").user_id == user_id


def test_create_user_rejects_duplicate_email(container):
    with pytest.raises(ValidationError):
        container.user_service.create_user(
            current_role=UserRole.ADMIN, email="user3@example.com", display_name="Copy", password="longpass"
        )


@pytest.mark.parametrize(
    "display_name,password",
    [("A", "longpass"), ("Valid Name", "123")],
)
def test_create_user_validates_name_and_password(container, display_name, password):
    with pytest.raises(ValidationError):
        container.user_service.create_user(
            current_role=UserRole.ADMIN, email="x@example.com", display_name=display_name, password=password
        )


def test_only_master_admin_creates_master_admins(container):
    with pytest.raises(AuthorizationError):
        container.user_service.create_user(
            current_role=UserRole.ADMIN,
            email="boss@example.com",
            display_name="Boss",
            password="longpass",
            role="master_admin",
        )


def test_unknown_payroll_grade_is_rejected(container):
    with pytest.raises(ValidationError):
        container.user_service.update_user(current_role=UserRole.ADMIN, user_id=3, changes={"payroll_grade": "Z9"})


def test_master_admin_cannot_be_deactivated(container):
    with pytest.raises(ValidationError):
        container.user_service.set_active(user_id=1, is_active=False)

    container.user_service.set_active(user_id=3, is_active=False)
    assert container.user_service.get_user(3).is_active is False
