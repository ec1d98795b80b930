from __future__ import annotations

import pytest

from src.hrms.hrms.container import build_services
from src.hrms.hrms.core.enums import Department, Designation, UserRole

from tests.fakes import FIXED_NOW, make_repositories, make_user


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def users():
    return [
        make_user(1, UserRole.MASTER_ADMIN, department=Department.OPERATIONS, designation=Designation.CEO),
        make_user(2, UserRole.ADMIN, department=Department.HR, designation=Designation.OFFICER),
        make_user(3),
    ]


@pytest.fixture
def repos(users):
    return make_repositories(*users)


@pytest.fixture
def container(repos):
    return build_services(repos)
