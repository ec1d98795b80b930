from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """Top-level account role used for route gating."""

    MASTER_ADMIN = "master_admin"
    ADMIN = "admin"
    EMPLOYEE = "employee"


class Department(str, Enum):
    OPERATIONS = "operations"
    ADMIN = "admin"
    HR = "hr"
    MARKETING = "marketing"
    SALES = "sales"
    TECHNICAL = "technical"
    HOUSEKEEPING = "housekeeping"


class Designation(str, Enum):
    CEO = "ceo"
    GM = "gm"
    OFFICER = "officer"
    EXECUTIVE = "executive"
    CRE = "cre"
    TEAM_LEADER = "team_leader"
    TECHNICIAN = "technician"
    WELDER = "welder"
    HOUSE_MAN = "house_man"


class AttendanceStatus(str, Enum):
    """Attendance status as stored in the database."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    LEAVE = "leave"
    HOLIDAY = "holiday"
    HALF_DAY = "half_day"


class AttendanceType(str, Enum):
    OFFICE = "office"
    REMOTE = "remote"
    FIELD_WORK = "field_work"


class LeaveStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class PayrollStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    PAID = "paid"
    CANCELLED = "cancelled"


class AdvanceStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"
