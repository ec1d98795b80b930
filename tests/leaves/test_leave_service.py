from __future__ import annotations

from datetime import date

import pytest

from src.hrms.hrms.core.enums import AttendanceStatus, LeaveStatus, UserRole
from src.hrms.hrms.core.exceptions import AuthorizationError, NotFoundError, ValidationError


def _request(container, start=date(2024, 3, 8), end=date(2024, 3, 12)):
    return container.leave_service.request_leave(user_id=3, start_date=start, end_date=end, reason="Family trip")


def test_request_leave_validates_dates_and_reason(container):
    with pytest.raises(ValidationError):
        _request(container, start=date(2024, 3, 12), end=date(2024, 3, 8))

    with pytest.raises(ValidationError):
        container.leave_service.request_leave(
            user_id=3, start_date=date(2024, 3, 8), end_date=date(2024, 3, 8), reason="   "
        )


def test_new_leave_is_pending(container):
    leave_id = _request(container)

    leave = container.leave_service.get_leave(leave_id)
    assert leave.status == LeaveStatus.PENDING
    assert leave.days == 5
    assert [lv.leave_id for lv in container.leave_service.list_pending()] == [leave_id]


def test_approve_marks_weekdays_only(container, repos):
    leave_id = _request(container)

    created = container.leave_service.approve(
        current_role=UserRole.ADMIN, admin_user_id=2, leave_id=leave_id, admin_note="ok"
    )

    assert created == 3
    marked = sorted(r.work_date for r in repos.attendance.list_between_dates(date(2024, 3, 8), date(2024, 3, 12), user_id=3))
    assert marked == [date(2024, 3, 8), date(2024, 3, 11), date(2024, 3, 12)]
    assert all(r.status == AttendanceStatus.LEAVE for r in repos.attendance.records.values())
    assert container.leave_service.get_leave(leave_id).status == LeaveStatus.APPROVED
    assert container.leave_service.list_pending() == []


def test_approve_keeps_existing_attendance(container, repos):
    repos.attendance.add(3, date(2024, 3, 11), AttendanceStatus.PRESENT)
    leave_id = _request(container)

    created = container.leave_service.approve(current_role=UserRole.MASTER_ADMIN, admin_user_id=1, leave_id=leave_id)

    assert created == 2
    assert repos.attendance.get_for_user_and_date(3, date(2024, 3, 11)).status == AttendanceStatus.PRESENT


def test_reject_leaves_attendance_untouched(container, repos):
    leave_id = _request(container)

    container.leave_service.reject(current_role=UserRole.ADMIN, admin_user_id=2, leave_id=leave_id, admin_note="busy")

    assert container.leave_service.get_leave(leave_id).status == LeaveStatus.REJECTED
    assert repos.attendance.records == {}


def test_employee_cannot_decide(container):
    leave_id = _request(container)

    with pytest.raises(AuthorizationError):
        container.leave_service.approve(current_role=UserRole.EMPLOYEE, admin_user_id=3, leave_id=leave_id)


def test_leave_can_only_be_decided_once(container):
    leave_id = _request(container)
    container.leave_service.reject(current_role=UserRole.ADMIN, admin_user_id=2, leave_id=leave_id)

    with pytest.raises(ValidationError):
        container.leave_service.approve(current_role=UserRole.ADMIN, admin_user_id=2, leave_id=leave_id)


def test_unknown_leave(container):
    with pytest.raises(NotFoundError):
        container.leave_service.get_leave(99)


def test_approval_for_unknown_employee_stays_pending(container, repos):
    leave_id = _request(container)
    del repos.users.users[3]

    with pytest.raises(NotFoundError):
        container.leave_service.approve(current_role=UserRole.ADMIN, admin_user_id=2, leave_id=leave_id)

    assert container.leave_service.get_leave(leave_id).status == LeaveStatus.PENDING
    assert repos.attendance.records == {}


def test_failed_marking_can_be_retried(container, repos, monkeypatch):
    leave_id = _request(container)
    create_record = repos.attendance.create_record
    calls = []

    def flaky_create_record(**kwargs):
        calls.append(kwargs["work_date"])
        if len(calls) == 2:
            raise RuntimeError("connection lost")
        return create_record(**kwargs)

    monkeypatch.setattr(repos.attendance, "create_record", flaky_create_record)
    with pytest.raises(RuntimeError):
        container.leave_service.approve(current_role=UserRole.ADMIN, admin_user_id=2, leave_id=leave_id)
    assert container.leave_service.get_leave(leave_id).status == LeaveStatus.PENDING

    created = container.leave_service.approve(current_role=UserRole.ADMIN, admin_user_id=2, leave_id=leave_id)

    assert created == 2
    assert len(repos.attendance.records) == 3
    assert container.leave_service.get_leave(leave_id).status == LeaveStatus.APPROVED
