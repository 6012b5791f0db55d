from __future__ import annotations

import httpx
import pytest

from case_trainer.api_client import ApiClient, ApiRequestError
from case_trainer.config import TrainerConfig
from case_trainer.session_context import AuthContext


def _mock_client(handler) -> ApiClient:
    return ApiClient(
        http_client=httpx.Client(
            base_url="http://trainer.test/api",
            transport=httpx.MockTransport(handler),
        )
    )


def test_get_sends_bearer_token_and_parses_json(api, auth, backend) -> None:
    data = api.get("/sessions/1", auth)
    assert data["id"] == 1
    assert backend.requests[-1] == ("GET", "/sessions/1", "Bearer test-token")


def test_get_passes_query_params(api, auth) -> None:
    users = api.get("/users", auth, params={"role": "student"})
    assert {user["role"] for user in users} == {"student"}


def test_missing_token_collapses_to_request_error(api) -> None:
    with pytest.raises(ApiRequestError) as excinfo:
        api.get("/sessions", AuthContext())
    assert excinfo.value.status_code == 401
    assert excinfo.value.detail == "Not authenticated."


def test_non_2xx_response_raises_request_error(api, auth) -> None:
    with pytest.raises(ApiRequestError) as excinfo:
        api.get("/sessions/999", auth)
    assert excinfo.value.status_code == 404
    assert excinfo.value.method == "GET"
    assert excinfo.value.path == "/sessions/999"


def test_delete_with_empty_body_returns_none(api, auth, backend) -> None:
    assert api.delete("/cases/1", auth) is None
    assert 1 not in backend.cases


def test_base_url_path_is_kept_for_relative_paths() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, json={"ok": True})

    client = _mock_client(handler)
    assert client.put("/cases/3", {"title": "x"}, AuthContext(token="t")) == {"ok": True}
    assert seen == ["http://trainer.test/api/cases/3"]


def test_malformed_body_raises_request_error() -> None:
    client = _mock_client(lambda request: httpx.Response(200, content=b"<html>oops"))
    with pytest.raises(ApiRequestError) as excinfo:
        client.get("/cases", AuthContext(token="t"))
    assert excinfo.value.status_code == 200
    assert "Malformed" in excinfo.value.detail


def test_transport_failure_raises_request_error_without_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _mock_client(handler)
    with pytest.raises(ApiRequestError) as excinfo:
        client.post("/dialogues", {"message": "hi"}, AuthContext(token="t"))
    assert excinfo.value.status_code is None
    assert "connection refused" in str(excinfo.value)


def test_from_config_uses_base_url_and_timeout() -> None:
    config = TrainerConfig(api_base_url="http://example.test/api", request_timeout_seconds=3.5)
    with ApiClient.from_config(config) as client:
        assert client.base_url == "http://example.test/api"
        assert client.http_client.timeout.read == 3.5
