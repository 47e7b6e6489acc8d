"""
Passwordless identity service.

Sends and verifies one-time login codes against the auth API and keeps the
resulting credential in the local session store.
"""

from typing import Any

import httpx
from pydantic import ValidationError

from quicknotes.logging import get_logger
from quicknotes.models import CodeRequested, CodeVerified, PersistedSession, User
from quicknotes.services.remote import RemoteError, RemoteService
from quicknotes.services.session_store import SessionStore

logger = get_logger('services.identity')

_UNAUTHORIZED = {401, 403}


def _parse_user(body: Any) -> User:
    if isinstance(body, dict) and isinstance(body.get("user"), dict):
        body = body["user"]
    try:
        return User.model_validate(body)
    except ValidationError as e:
        raise RemoteError(f"Malformed user payload: {e.error_count()} invalid field(s)") from e


class IdentityService(RemoteService):
    """Identity collaborator backed by the HTTP auth API."""

    def __init__(
        self,
        base_url: str,
        store: SessionStore,
        api_key: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(base_url, api_key=api_key, transport=transport)
        self.store = store

    async def request_code(self, email: str) -> CodeRequested:
        try:
            await self._request("POST", "/auth/otp", json={"email": email}, idempotent=False)
            logger.info(f"Login code sent to {email}")
            return CodeRequested(success=True)
        except RemoteError as e:
            logger.error(f"Failed to send login code to {email}: {e}")
            return CodeRequested(success=False, error=str(e))

    async def verify_code(self, email: str, code: str) -> CodeVerified:
        try:
            body = await self._request(
                "POST",
                "/auth/otp/verify",
                json={"email": email, "code": code},
                idempotent=False,
            )
            user = _parse_user(body)
            token = (body or {}).get("accessToken") or (body or {}).get("access_token")
            if not token:
                raise RemoteError("Verification response carried no access token")
        except RemoteError as e:
            logger.error(f"Code verification failed for {email}: {e}")
            return CodeVerified(success=False, error=str(e))

        await self.store.save(user, token)
        logger.info(f"Verified login for {user.email} ({user.id[:8]})")
        return CodeVerified(success=True, user=user)

    async def get_persisted_session(self) -> PersistedSession:
        credential = await self.store.load()
        if not credential:
            return PersistedSession(success=True)

        try:
            body = await self._request("GET", "/auth/me", token=credential.access_token)
            user = _parse_user(body)
        except RemoteError as e:
            if e.status_code in _UNAUTHORIZED:
                logger.info(f"Stored session for {credential.user.email} is no longer valid")
                await self.store.clear()
                return PersistedSession(success=True)
            logger.error(f"Failed to validate stored session: {e}")
            return PersistedSession(success=False, error=str(e))

        return PersistedSession(success=True, user=user)

    async def clear_persisted_session(self) -> None:
        token = await self.store.get_access_token()
        await self.store.clear()
        if not token:
            return

        try:
            await self._request("POST", "/auth/logout", token=token)
        except RemoteError as e:
            # Local credential is already gone; the server token will expire on its own.
            logger.warning(f"Remote logout failed: {e}")
