"""Helpers for keeping personal data out of log lines."""

from __future__ import annotations


def mask_email(email: str) -> str:
    """Mask an email address for logging (e.g. a***@example.com)."""
    if not email or "@" not in email:
        return "[invalid_email]"

    username, domain = email.split("@", 1)
    if len(username) <= 1:
        return f"*@{domain}"

    return f"{username[0]}***@{domain}"
