"""
Shared HTTP transport for the remote identity and document-store APIs.

Owns the httpx client, auth headers, error normalization and retry policy.
Endpoint-specific logic lives in the services built on top of it.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import httpx

from quicknotes.config import settings
from quicknotes.logging import get_logger

logger = get_logger('services.remote')
_T = TypeVar("_T")

TokenProvider = Callable[[], Awaitable[str | None]]

_TRANSIENT_STATUS = {429, 502, 503, 504}


class RemoteError(Exception):
    """A remote call failed; carries the HTTP status when there was one."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        detail = body.get("error") or body.get("message") or body.get("detail")
        if detail:
            return f"{response.status_code}: {detail}"
    if response.status_code == 429:
        return "429: rate limited, try again later"
    return f"{response.status_code}: {response.reason_phrase or 'request failed'}"


class RemoteService:
    """Base class for services talking to the notes backend over HTTP."""

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        token_provider: TokenProvider | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.token_provider = token_provider
        self._transport = transport
        self.client: httpx.AsyncClient | None = None

    async def initialize(self):
        if self.client is not None:
            return
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(settings.REMOTE_TIMEOUT_SECONDS),
            transport=self._transport,
        )
        logger.info(f"{type(self).__name__} client initialized for {self.base_url}")

    async def close(self):
        if self.client is not None:
            await self.client.aclose()
            self.client = None

    async def _headers(self, token: str | None = None) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["X-Api-Key"] = self.api_key
        if token is None and self.token_provider is not None:
            token = await self.token_provider()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _is_transient_error(self, error: Exception, idempotent: bool) -> bool:
        if isinstance(error, httpx.ConnectError):
            return True
        if not idempotent:
            # Anything past a failed connect may have reached the server.
            return False
        if isinstance(error, (httpx.TimeoutException, httpx.TransportError, asyncio.TimeoutError)):
            return True
        return isinstance(error, RemoteError) and error.status_code in _TRANSIENT_STATUS

    async def _run_with_retry(
        self,
        operation_name: str,
        operation: Callable[[], Awaitable[_T]],
        idempotent: bool = True,
    ) -> _T:
        max_retries = max(int(settings.REMOTE_MAX_RETRIES), 0)
        total_attempts = max_retries + 1
        base_delay = max(float(settings.REMOTE_RETRY_BASE_SECONDS), 0.0)
        max_delay = max(float(settings.REMOTE_RETRY_MAX_SECONDS), base_delay)

        attempt = 1
        while True:
            try:
                return await operation()
            except Exception as error:
                should_retry = attempt < total_attempts and self._is_transient_error(error, idempotent)
                if not should_retry:
                    raise

                delay = min(base_delay * (2 ** (attempt - 1)), max_delay)
                logger.warning(
                    "Remote %s failed (attempt %d/%d): %s. Retrying in %.2fs",
                    operation_name,
                    attempt,
                    total_attempts,
                    error,
                    delay,
                )
                if delay > 0:
                    await asyncio.sleep(delay)
                attempt += 1

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        token: str | None = None,
        idempotent: bool = True,
    ) -> Any:
        """
        Send one request and return the decoded JSON body (None when empty).

        :raises RemoteError: on any transport failure or non-2xx response
        """
        await self.initialize()

        async def send() -> httpx.Response:
            response = await self.client.request(
                method,
                path,
                json=json,
                params=params,
                headers=await self._headers(token),
            )
            if response.is_error:
                raise RemoteError(_error_message(response), status_code=response.status_code)
            return response

        operation_name = f"{method} {path}"
        try:
            response = await self._run_with_retry(operation_name, send, idempotent=idempotent)
        except httpx.HTTPError as e:
            raise RemoteError(f"{operation_name} failed: {str(e) or type(e).__name__}") from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(f"{operation_name} returned invalid JSON") from e
