"""HRMS package.

Organized by feature modules (users, attendance, leaves, payroll, permissions)
with a thin Flask controller layer on top of service/repository layers.
"""
