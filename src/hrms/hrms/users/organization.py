"""Static organization structure: departments, designations and their levels."""

from __future__ import annotations

from ..core.enums import Department, Designation

# Higher number = more authority.
DESIGNATION_LEVELS: dict[Designation, int] = {
    Designation.CEO: 9,
    Designation.GM: 8,
    Designation.OFFICER: 7,
    Designation.TEAM_LEADER: 6,
    Designation.EXECUTIVE: 5,
    Designation.CRE: 4,
    Designation.TECHNICIAN: 3,
    Designation.WELDER: 2,
    Designation.HOUSE_MAN: 1,
}

PAYROLL_GRADES = ("A1", "A2", "B1", "B2", "C1", "C2", "D1", "D2")


def designation_level(designation: Designation) -> int:
    return DESIGNATION_LEVELS[designation]


def can_approve_for_designation(approver: Designation, target: Designation) -> bool:
    return designation_level(approver) > designation_level(target)


def organization_overview() -> dict:
    return {
        "departments": [d.value for d in Department],
        "designations": [
            {"name": d.value, "level": level}
            for d, level in sorted(DESIGNATION_LEVELS.items(), key=lambda kv: kv[1], reverse=True)
        ],
        "payroll_grades": list(PAYROLL_GRADES),
    }
