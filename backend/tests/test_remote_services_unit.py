import asyncio
import json

import httpx
import pytest

from quicknotes.config import settings
from quicknotes.models import User
from quicknotes.services.document_store import DocumentStoreService
from quicknotes.services.identity import IdentityService
from quicknotes.services.session_store import SessionStore

BASE_URL = "http://notes.test/api"


@pytest.fixture(autouse=True)
def _no_retry_delay(monkeypatch) -> None:
    monkeypatch.setattr(settings, "REMOTE_RETRY_BASE_SECONDS", 0.0)
    monkeypatch.setattr(settings, "REMOTE_MAX_RETRIES", 2)


@pytest.fixture
def store(tmp_path) -> SessionStore:
    return SessionStore(str(tmp_path / "session.db"))


class Recorder:
    def __init__(self, responses: dict[tuple[str, str], list[httpx.Response]]):
        self.responses = responses
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.responses.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"error": "no route"})
        if len(queue) > 1:
            return queue.pop(0)
        return queue[0]


def test_session_store_round_trip(store) -> None:
    async def scenario():
        assert await store.load() is None
        await store.save(User(id="u1", email="a@b.com"), "tok-1")
        saved = await store.load()
        token = await store.get_access_token()
        cleared = await store.clear()
        return saved, token, cleared, await store.load()

    saved, token, cleared, after = asyncio.run(scenario())
    assert saved.user == User(id="u1", email="a@b.com")
    assert token == "tok-1"
    assert cleared
    assert after is None


def test_request_code_posts_email(store) -> None:
    recorder = Recorder({("POST", "/api/auth/otp"): [httpx.Response(204)]})
    identity = IdentityService(BASE_URL, store, api_key="k-1", transport=httpx.MockTransport(recorder))

    result = asyncio.run(identity.request_code("a@b.com"))
    assert result.success
    request = recorder.requests[0]
    assert json.loads(request.content) == {"email": "a@b.com"}
    assert request.headers["X-Api-Key"] == "k-1"


def test_request_code_reports_rate_limit_without_retrying(store) -> None:
    recorder = Recorder({("POST", "/api/auth/otp"): [httpx.Response(429, json={"error": "slow down"})]})
    identity = IdentityService(BASE_URL, store, transport=httpx.MockTransport(recorder))
    identity_result = asyncio.run(identity.request_code("a@b.com"))

    assert not identity_result.success
    assert "slow down" in identity_result.error
    assert len(recorder.requests) == 1


def test_verify_code_persists_credential(store) -> None:
    body = {"user": {"id": "u1", "email": "a@b.com"}, "accessToken": "tok-1"}
    recorder = Recorder({("POST", "/api/auth/otp/verify"): [httpx.Response(200, json=body)]})
    identity = IdentityService(BASE_URL, store, transport=httpx.MockTransport(recorder))

    async def scenario():
        result = await identity.verify_code("a@b.com", "123456")
        return result, await store.load()

    result, credential = asyncio.run(scenario())
    assert result.success
    assert result.user == User(id="u1", email="a@b.com")
    assert credential.access_token == "tok-1"


def test_verify_code_wrong_code_persists_nothing(store) -> None:
    recorder = Recorder({("POST", "/api/auth/otp/verify"): [httpx.Response(401, json={"error": "invalid code"})]})
    identity = IdentityService(BASE_URL, store, transport=httpx.MockTransport(recorder))

    async def scenario():
        result = await identity.verify_code("a@b.com", "000000")
        return result, await store.load()

    result, credential = asyncio.run(scenario())
    assert not result.success
    assert "invalid code" in result.error
    assert credential is None


def test_persisted_session_is_validated_remotely(store) -> None:
    recorder = Recorder({("GET", "/api/auth/me"): [httpx.Response(200, json={"id": "u1", "email": "a@b.com"})]})
    identity = IdentityService(BASE_URL, store, transport=httpx.MockTransport(recorder))

    async def scenario():
        await store.save(User(id="u1", email="a@b.com"), "tok-1")
        return await identity.get_persisted_session()

    result = asyncio.run(scenario())
    assert result.success
    assert result.user == User(id="u1", email="a@b.com")
    assert recorder.requests[0].headers["Authorization"] == "Bearer tok-1"


def test_rejected_persisted_session_is_cleared(store) -> None:
    recorder = Recorder({("GET", "/api/auth/me"): [httpx.Response(401)]})
    identity = IdentityService(BASE_URL, store, transport=httpx.MockTransport(recorder))

    async def scenario():
        await store.save(User(id="u1", email="a@b.com"), "expired")
        result = await identity.get_persisted_session()
        return result, await store.load()

    result, credential = asyncio.run(scenario())
    assert result.success
    assert result.user is None
    assert credential is None


def test_no_persisted_session_makes_no_request(store) -> None:
    recorder = Recorder({})
    identity = IdentityService(BASE_URL, store, transport=httpx.MockTransport(recorder))

    result = asyncio.run(identity.get_persisted_session())
    assert result.success
    assert result.user is None
    assert recorder.requests == []


def test_clear_persisted_session_survives_remote_logout_failure(store) -> None:
    recorder = Recorder({("POST", "/api/auth/logout"): [httpx.Response(500)]})
    identity = IdentityService(BASE_URL, store, transport=httpx.MockTransport(recorder))

    async def scenario():
        await store.save(User(id="u1", email="a@b.com"), "tok-1")
        await identity.clear_persisted_session()
        return await store.load()

    assert asyncio.run(scenario()) is None
    assert recorder.requests[0].headers["Authorization"] == "Bearer tok-1"


def test_read_documents_retries_transient_errors(store) -> None:
    documents = [{"id": "n1", "data": {"title": "Shopping", "content": "milk", "createdAt": "2024-01-01T00:00:00Z"}}]
    recorder = Recorder({
        ("GET", "/api/collections/notes/documents"): [
            httpx.Response(503),
            httpx.Response(200, json={"documents": documents}),
        ]
    })

    async def token() -> str:
        return "tok-1"

    service = DocumentStoreService(BASE_URL, token_provider=token, transport=httpx.MockTransport(recorder))
    result = asyncio.run(service.read_documents("notes"))

    assert result.success
    assert [d.id for d in result.documents] == ["n1"]
    assert result.documents[0].data["title"] == "Shopping"
    assert len(recorder.requests) == 2
    assert recorder.requests[-1].headers["Authorization"] == "Bearer tok-1"


def test_read_documents_reports_malformed_payload() -> None:
    recorder = Recorder({("GET", "/api/collections/notes/documents"): [httpx.Response(200, json={"documents": [{"data": {}}]})]})
    service = DocumentStoreService(BASE_URL, transport=httpx.MockTransport(recorder))

    result = asyncio.run(service.read_documents("notes"))
    assert not result.success
    assert "Malformed document" in result.error


def test_read_documents_rejects_list_payload() -> None:
    recorder = Recorder({("GET", "/api/collections/notes/documents"): [httpx.Response(200, json=[{"id": "n1", "data": {}}])]})
    service = DocumentStoreService(BASE_URL, transport=httpx.MockTransport(recorder))

    result = asyncio.run(service.read_documents("notes"))
    assert not result.success
    assert "Malformed documents payload" in result.error


def test_create_document_sends_data_once_on_server_error() -> None:
    recorder = Recorder({("POST", "/api/collections/notes/documents"): [httpx.Response(502)]})
    service = DocumentStoreService(BASE_URL, transport=httpx.MockTransport(recorder))

    result = asyncio.run(service.create_document("notes", {"title": "x"}))
    assert not result.success
    assert len(recorder.requests) == 1


def test_create_update_and_soft_delete_requests() -> None:
    created = {"id": "n1", "data": {"title": "Shopping", "content": "milk"}}
    recorder = Recorder({
        ("POST", "/api/collections/notes/documents"): [httpx.Response(201, json=created)],
        ("PATCH", "/api/documents/n1"): [httpx.Response(200, json={"document": created})],
        ("DELETE", "/api/documents/n1"): [httpx.Response(204)],
    })
    service = DocumentStoreService(BASE_URL, transport=httpx.MockTransport(recorder))

    async def scenario():
        made = await service.create_document("notes", {"title": "Shopping", "content": "milk"})
        updated = await service.update_document("n1", {"title": "Groceries"})
        deleted = await service.delete_document("n1", permanent=False)
        await service.close()
        return made, updated, deleted

    made, updated, deleted = asyncio.run(scenario())
    assert made.success and made.document.id == "n1"
    assert updated.success
    assert deleted.success

    create_req, update_req, delete_req = recorder.requests
    assert json.loads(create_req.content) == {"data": {"title": "Shopping", "content": "milk"}}
    assert json.loads(update_req.content) == {"data": {"title": "Groceries"}}
    assert delete_req.url.params["permanent"] == "false"


def test_connect_error_becomes_failed_result() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    service = DocumentStoreService(BASE_URL, transport=httpx.MockTransport(handler))
    result = asyncio.run(service.read_documents("notes"))
    assert not result.success
    assert "connection refused" in result.error
