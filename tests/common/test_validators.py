from __future__ import annotations

import pytest

from src.hrms.hrms.common.validators import require_int, require_month_year
from src.hrms.hrms.core.exceptions import ValidationError


@pytest.mark.parametrize("value", [None, "", "abc", [1], True])
def test_require_int_rejects_non_integers(value):
    with pytest.raises(ValidationError):
        require_int(value, "User id")


def test_require_int_accepts_numeric_strings():
    assert require_int("7", "User id") == 7
    assert require_int(7, "User id") == 7


@pytest.mark.parametrize("month,year", [(0, 2024), (13, 2024), (1, 0), (1, 10000), (None, 2024)])
def test_require_month_year_rejects_out_of_range(month, year):
    with pytest.raises(ValidationError):
        require_month_year(month, year)


def test_require_month_year_normalizes_strings():
    assert require_month_year("2", "2024") == (2, 2024)
