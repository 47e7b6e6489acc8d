"""
Enum definitions for the Quick Notes client.
"""
import re
from enum import Enum


class SessionStatus(str, Enum):
    """Authentication lifecycle state of the client session."""
    ANONYMOUS = "anonymous"
    OTP_PENDING = "otp_pending"
    AUTHENTICATED = "authenticated"


class ErrorKind(str, Enum):
    """Why an operation did not succeed."""
    VALIDATION = "validation"
    INVALID_STATE = "invalid_state"
    NOT_FOUND = "not_found"
    REMOTE = "remote"
    STALE = "stale"


_EMAIL_RE = re.compile(r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$", flags=re.IGNORECASE)


def normalize_email(email: str | None) -> str:
    """
    Normalize an email address for comparison.

    Examples:
        " A@B.com " -> "a@b.com"
    """
    return (email or "").strip().lower()


def is_valid_email(email: str | None) -> bool:
    return bool(_EMAIL_RE.match((email or "").strip()))
