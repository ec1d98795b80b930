"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_HISTORY_LIMIT = 31
AUDIT_LOG_LIMIT = 1000

# Payroll fallbacks when no settings row exists. Rates are percentages.
DEFAULT_PF_RATE = 12.0
DEFAULT_ESI_RATE = 0.75
DEFAULT_TDS_RATE = 10.0
DEFAULT_OVERTIME_MULTIPLIER = 1.5
DEFAULT_STANDARD_WORKING_DAYS = 22
DEFAULT_STANDARD_WORKING_HOURS = 8
DEFAULT_PF_APPLICABLE_FROM = 15000.0
DEFAULT_ESI_APPLICABLE_FROM = 21000.0
DEFAULT_COMPANY_NAME = "Prakash Greens Energy"

MIN_PAYROLL_YEAR = 2020

# Attendance policy fallbacks.
DEFAULT_CHECK_IN = "09:30"
DEFAULT_CHECK_OUT = "18:30"
DEFAULT_LATE_MARK_MINUTES = 15
DEFAULT_HALF_DAY_MARK_MINUTES = 240
DEFAULT_MAX_OVERTIME_HOURS = 4.0
DEFAULT_WEEKEND_DAYS = (5, 6)
