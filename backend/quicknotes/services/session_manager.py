"""
OTP session state machine.

Anonymous -> OtpPending(email) -> Authenticated(user) -> Anonymous.

Email policy for ``verify_code``: the address must match the pending one
(case-insensitive, surrounding whitespace ignored). A mismatch is rejected
locally before any request is sent; passing ``None`` means the pending address.
"""

import asyncio

from quicknotes.logging import get_logger
from quicknotes.models import (
    ErrorKind,
    Session,
    SessionResult,
    SessionSnapshot,
    SessionStatus,
    is_valid_email,
    normalize_email,
)
from quicknotes.services.collaborators import IdentityProvider

logger = get_logger('services.session_manager')


class SessionManager:
    """Owns the authentication lifecycle and the identity of the current user."""

    def __init__(self, identity: IdentityProvider):
        self.identity = identity
        self._session = Session.anonymous()
        self._generation = 0
        self._ready = False
        self._lock = asyncio.Lock()

    @property
    def session(self) -> Session:
        return self._session

    @property
    def generation(self) -> int:
        """Bumped every time an authenticated session ends."""
        return self._generation

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def is_authenticated(self) -> bool:
        return self._session.is_authenticated

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(session=self._session, ready=self._ready)

    def _set(self, session: Session) -> None:
        if self._session.is_authenticated and not session.is_authenticated:
            self._generation += 1
        logger.debug(f"Session {self._session.status.value} -> {session.status.value}")
        self._session = session

    def _ok(self, established: bool = False) -> SessionResult:
        return SessionResult(success=True, session=self._session, established=established)

    def _fail(self, kind: ErrorKind, error: str) -> SessionResult:
        return SessionResult(success=False, error=error, error_kind=kind, session=self._session)

    def _expect(self, status: SessionStatus, operation: str) -> SessionResult | None:
        if self._session.status != status:
            return self._fail(
                ErrorKind.INVALID_STATE,
                f"Cannot {operation} while session is {self._session.status.value}",
            )
        return None

    async def request_code(self, email: str) -> SessionResult:
        async with self._lock:
            rejected = self._expect(SessionStatus.ANONYMOUS, "request a code")
            if rejected:
                return rejected

            email = (email or "").strip()
            if not is_valid_email(email):
                return self._fail(ErrorKind.VALIDATION, f"Invalid email address: {email!r}")

            try:
                result = await self.identity.request_code(email)
            except Exception as e:
                logger.error(f"Identity request_code raised: {e}")
                return self._fail(ErrorKind.REMOTE, str(e) or type(e).__name__)

            if not result.success:
                return self._fail(ErrorKind.REMOTE, result.error or "Could not send login code")

            self._set(Session.otp_pending(email))
            return self._ok()

    async def verify_code(self, email: str | None, code: str) -> SessionResult:
        async with self._lock:
            rejected = self._expect(SessionStatus.OTP_PENDING, "verify a code")
            if rejected:
                return rejected

            pending_email = self._session.pending_email
            if email is not None and normalize_email(email) != normalize_email(pending_email):
                return self._fail(
                    ErrorKind.VALIDATION,
                    f"Email {email.strip()!r} does not match the address the code was sent to",
                )
            code = (code or "").strip()
            if not code:
                return self._fail(ErrorKind.VALIDATION, "Code must not be empty")

            try:
                result = await self.identity.verify_code(pending_email, code)
            except Exception as e:
                logger.error(f"Identity verify_code raised: {e}")
                return self._fail(ErrorKind.REMOTE, str(e) or type(e).__name__)

            if not result.success or result.user is None:
                return self._fail(ErrorKind.REMOTE, result.error or "Invalid or expired code")

            self._set(Session.authenticated(result.user))
            logger.info(f"Session established for {result.user.email}")
            return self._ok(established=True)

    async def cancel_pending(self) -> SessionResult:
        async with self._lock:
            rejected = self._expect(SessionStatus.OTP_PENDING, "cancel a pending code")
            if rejected:
                return rejected
            self._set(Session.anonymous())
            return self._ok()

    async def logout(self) -> SessionResult:
        async with self._lock:
            # Drop local state first so nothing can observe the old user while the
            # credential is being revoked.
            was = self._session
            self._set(Session.anonymous())
            try:
                await self.identity.clear_persisted_session()
            except Exception as e:
                logger.error(f"Failed to clear persisted session: {e}")
                return self._fail(ErrorKind.REMOTE, str(e) or type(e).__name__)

            if was.is_authenticated:
                logger.info(f"Logged out {was.user.email}")
            return self._ok()

    async def restore(self) -> SessionResult:
        async with self._lock:
            if self._ready:
                return self._ok(established=self._session.is_authenticated)

            try:
                result = await self.identity.get_persisted_session()
            except Exception as e:
                logger.error(f"Identity get_persisted_session raised: {e}")
                self._ready = True
                return self._fail(ErrorKind.REMOTE, str(e) or type(e).__name__)

            self._ready = True
            if not result.success:
                return self._fail(ErrorKind.REMOTE, result.error or "Could not restore session")
            if result.user is None:
                return self._ok()

            if self._session.status == SessionStatus.ANONYMOUS:
                self._set(Session.authenticated(result.user))
                logger.info(f"Restored session for {result.user.email}")
            return self._ok(established=self._session.is_authenticated)
