import asyncio
import json

import httpx
import pytest

from candidate_sync.exceptions import ApiError, RemoteUnavailableError, SessionExpiredError
from candidate_sync.services.api_client import CandidateApiClient, extract_error_message

BASE_URL = "http://api.test/api/candidates"


def _client(handler, token="secret-token"):
    return CandidateApiClient(token=token, base_url=BASE_URL, transport=httpx.MockTransport(handler))


def _run(handler, call, token="secret-token"):
    async def scenario():
        async with _client(handler, token) as client:
            return await call(client)

    return asyncio.run(scenario())


@pytest.mark.parametrize(
    "data, expected",
    [
        ({"detail": "Not found."}, "Not found."),
        ({"error": "Slug taken"}, "Slug taken"),
        ({"name": ["This field is required."], "issue_date": ["Invalid date."]},
         "name: This field is required.. issue_date: Invalid date."),
        ("plain text", "plain text"),
        (None, "fallback"),
        ([1, 2], "fallback"),
        ({"detail": ""}, "fallback"),
    ],
)
def test_extract_error_message(data, expected):
    assert extract_error_message(data, "fallback") == expected


def test_requests_carry_bearer_token_and_hit_collection_paths():
    seen = []

    def handler(request):
        seen.append((request.method, request.url.path, request.headers.get("Authorization")))
        if request.method == "DELETE":
            return httpx.Response(204)
        body = json.loads(request.content) if request.content else {}
        return httpx.Response(200, json={"id": 12, **body})

    async def calls(client):
        created = await client.create("work-experience", {"company": "Acme"})
        await client.update("work-experience", 12, {"role": "Lead"})
        deleted = await client.delete("work-experience", 12)
        return created, deleted

    created, deleted = _run(handler, calls)

    assert created == {"id": 12, "company": "Acme"}
    assert deleted is None
    assert seen == [
        ("POST", "/api/candidates/work-experience/", "Bearer secret-token"),
        ("PATCH", "/api/candidates/work-experience/12/", "Bearer secret-token"),
        ("DELETE", "/api/candidates/work-experience/12/", "Bearer secret-token"),
    ]


def test_profile_endpoints():
    seen = []

    def handler(request):
        seen.append((request.method, request.url.path, dict(request.url.params)))
        return httpx.Response(200, json={"parsing_status": "parsing"})

    async def calls(client):
        await client.fetch_full_profile("jane-doe")
        await client.update_profile("jane-doe", {"first_name": "Jane"})
        await client.trigger_parse("jane-doe")
        return await client.get_parsing_status("jane-doe")

    status = _run(handler, calls)

    assert status == {"parsing_status": "parsing"}
    assert seen == [
        ("GET", "/api/candidates/profiles/jane-doe/full/", {}),
        ("PATCH", "/api/candidates/profiles/jane-doe/", {}),
        ("POST", "/api/candidates/profiles/jane-doe/parse-resume/", {}),
        ("GET", "/api/candidates/profiles/jane-doe/parsing-status/", {"include_resume": "true"}),
    ]


def test_no_authorization_header_without_token():
    seen = []

    def handler(request):
        seen.append(request.headers.get("Authorization"))
        return httpx.Response(200, json={})

    _run(handler, lambda client: client.fetch_full_profile("jane-doe"), token=None)

    assert seen == [None]


def test_401_raises_session_expired():
    def handler(request):
        return httpx.Response(401, json={"detail": "Token expired"})

    with pytest.raises(SessionExpiredError) as exc_info:
        _run(handler, lambda client: client.fetch_full_profile("jane-doe"))

    assert exc_info.value.status_code == 401
    assert exc_info.value.data == {"detail": "Token expired"}


def test_error_status_raises_api_error_with_message():
    def handler(request):
        return httpx.Response(400, json={"name": ["Already exists."]})

    with pytest.raises(ApiError) as exc_info:
        _run(handler, lambda client: client.create("skills", {"name": "Python"}))

    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "name: Already exists."
    assert not isinstance(exc_info.value, SessionExpiredError)


def test_error_without_body_uses_status_fallback():
    def handler(request):
        return httpx.Response(503)

    with pytest.raises(ApiError) as exc_info:
        _run(handler, lambda client: client.delete("skills", 3))

    assert exc_info.value.message == "Request failed with status 503"


def test_connection_failure_raises_remote_unavailable():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(RemoteUnavailableError):
        _run(handler, lambda client: client.fetch_full_profile("jane-doe"))
