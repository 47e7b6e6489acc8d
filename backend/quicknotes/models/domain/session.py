"""Session domain model."""

from pydantic import BaseModel, model_validator
from typing import Optional

from quicknotes.models.enums import SessionStatus


class User(BaseModel):
    """The identity behind an authenticated session."""
    id: str
    email: str


class Session(BaseModel):
    """
    Snapshot of the client's authentication state.

    ``pending_email`` is set only while a code is outstanding and ``user`` only
    once the session is authenticated.
    """
    status: SessionStatus = SessionStatus.ANONYMOUS
    pending_email: Optional[str] = None
    user: Optional[User] = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_status_fields(self):
        if (self.pending_email is not None) != (self.status == SessionStatus.OTP_PENDING):
            raise ValueError("pending_email must be set exactly when status is otp_pending")
        if (self.user is not None) != (self.status == SessionStatus.AUTHENTICATED):
            raise ValueError("user must be set exactly when status is authenticated")
        return self

    @classmethod
    def anonymous(cls) -> "Session":
        return cls()

    @classmethod
    def otp_pending(cls, email: str) -> "Session":
        return cls(status=SessionStatus.OTP_PENDING, pending_email=email)

    @classmethod
    def authenticated(cls, user: User) -> "Session":
        return cls(status=SessionStatus.AUTHENTICATED, user=user)

    @property
    def is_authenticated(self) -> bool:
        return self.status == SessionStatus.AUTHENTICATED


class CodeRequest(BaseModel):
    """Payload for asking the identity service to send a login code."""
    email: str


class CodeVerification(BaseModel):
    """Payload for exchanging a login code for a session."""
    email: Optional[str] = None
    code: str
