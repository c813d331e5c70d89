from types import SimpleNamespace
import json
import logging

import httpx
import pytest

from ai_paralegal_sdk._client import (
    AiParalegalHttpClient,
    HttpConfig,
    _parse_error_response,
    _redact_headers,
    to_multipart_files,
)
from ai_paralegal_sdk._errors import AiParalegalAPIError, AiParalegalError
from ai_paralegal_sdk.client import AiParalegalClient


def test_httpconfig_initialization():
    cfg = HttpConfig(base_url="https://example.com", timeout_s=10.0)

    assert cfg.base_url == "https://example.com"
    assert cfg.timeout_s == 10.0


def make_http(api_key: str | None = "sk-test") -> AiParalegalHttpClient:
    return AiParalegalHttpClient(config=HttpConfig(base_url="https://example.com", timeout_s=5.0), api_key=api_key)


def test_url_appends_path():
    http = make_http()

    assert http.url("/api/sdk/v1/ai/ask") == "https://example.com/api/sdk/v1/ai/ask"
    assert http.url("") == "https://example.com"


def test_api_key_headers():
    headers = make_http().api_key_headers()

    assert headers == {
        "X-API-KEY": "sk-test",
        "Content-Type": "application/json",
        "Accept": "application/json",
    }


def test_api_key_headers_without_key_raises():
    with pytest.raises(AiParalegalError, match="apiKey is required"):
        make_http(api_key=None).api_key_headers()


def test_session_headers_use_bearer_token():
    headers = AiParalegalHttpClient.session_headers("sess-abc")

    assert headers["Authorization"] == "Bearer sess-abc"
    assert headers["Content-Type"] == "application/json"
    assert "X-API-KEY" not in headers


def test_multipart_session_headers_leave_content_type_to_httpx():
    headers = AiParalegalHttpClient.multipart_session_headers("sess-abc")

    assert headers["Authorization"] == "Bearer sess-abc"
    assert "Content-Type" not in headers


def test_redact_headers_hides_credentials():
    out = _redact_headers({"Authorization": "Bearer x", "x-api-key": "k", "accept": "application/json"})

    assert out["Authorization"] == "***REDACTED***"
    assert out["x-api-key"] == "***REDACTED***"
    assert out["accept"] == "application/json"


def test_raise_for_status_success():
    resp = SimpleNamespace(status_code=204, text="")

    # 2xx never raises.
    AiParalegalHttpClient.raise_for_status(resp)


def test_raise_for_status_uses_server_message():
    resp = SimpleNamespace(status_code=401, text='{"message": "Invalid exchange token"}')

    with pytest.raises(AiParalegalAPIError) as exc:
        AiParalegalHttpClient.raise_for_status(resp, "Token exchange")

    assert exc.value.status_code == 401
    assert str(exc.value) == "Invalid exchange token"


def test_raise_for_status_falls_back_to_action_message():
    resp = SimpleNamespace(status_code=500, text="<html>oops</html>")

    with pytest.raises(AiParalegalAPIError) as exc:
        AiParalegalHttpClient.raise_for_status(resp, "Token exchange")

    assert exc.value.message == "Token exchange failed with status 500"
    assert exc.value.body == "<html>oops</html>"


def test_raise_for_status_reads_unread_streaming_body():
    resp = httpx.Response(
        502,
        content=iter([b'{"message": ', b'"upstream down"}']),
        request=httpx.Request("POST", "https://example.com/api/sdk/v1/llm/stream"),
    )

    with pytest.raises(AiParalegalAPIError) as exc:
        AiParalegalHttpClient.raise_for_status(resp, "LLM stream")

    assert exc.value.message == "upstream down"


def test_parse_error_response_empty_body():
    err = _parse_error_response(503, "", "Request")

    assert err.message == "Request failed with status 503"
    assert err.body is None


def test_parse_error_response_string_error_field():
    err = _parse_error_response(400, '{"error": "bad prompt"}', "LLM request")

    assert err.message == "bad prompt"


def test_parse_error_response_validation_errors_become_details():
    err = _parse_error_response(422, '{"message": "Invalid", "errors": {"prompt": ["required"]}}')

    assert err.message == "Invalid"
    assert err.details == {"prompt": ["required"]}


def test_request_sends_json_and_returns_response(make_client, requests_seen):
    client = make_client(lambda request: httpx.Response(200, json={"ok": True}))

    resp = client.http.request(
        "POST",
        "/api/sdk/v1/ai/ask",
        headers=client.http.api_key_headers(),
        json={"prompt": "hi"},
    )

    assert resp.json() == {"ok": True}
    sent = requests_seen[0]
    assert sent.method == "POST"
    assert str(sent.url) == "https://paralegal.test/api/sdk/v1/ai/ask"
    assert sent.headers["X-API-KEY"] == "sk-test"
    assert json.loads(sent.content) == {"prompt": "hi"}


def test_request_raises_structured_error(make_client):
    client = make_client(lambda request: httpx.Response(403, json={"message": "Forbidden matter"}))

    with pytest.raises(AiParalegalAPIError) as exc:
        client.http.request("GET", "/api/sdk/v1/docs", headers={}, action="Document list")

    assert exc.value.is_auth_error
    assert exc.value.message == "Forbidden matter"


@pytest.mark.asyncio
async def test_arequest_raises_structured_error(make_client):
    client = make_client(lambda request: httpx.Response(500, text="boom"))

    with pytest.raises(AiParalegalAPIError) as exc:
        await client.http.arequest("GET", "/api/sdk/v1/docs", headers={}, action="Document list")

    assert exc.value.is_server_error
    assert exc.value.message == "Document list failed with status 500"


def test_stream_requests_event_stream(make_client, requests_seen):
    client = make_client(
        lambda request: httpx.Response(200, headers={"content-type": "text/event-stream"}, content=b"")
    )

    with client.http.stream("POST", "/api/sdk/v1/llm/stream", headers={"Accept": "application/json"}, json={}) as r:
        assert r.status_code == 200

    assert requests_seen[0].headers["Accept"] == "text/event-stream"


def test_to_multipart_files_accepts_tuples_and_paths(tmp_path):
    doc = tmp_path / "brief.txt"
    doc.write_bytes(b"hello")

    out = to_multipart_files("files[]", [("scan.png", b"\x89PNG", "image/png"), doc, str(doc)])

    assert out[0] == ("files[]", ("scan.png", b"\x89PNG", "image/png"))
    assert out[1] == ("files[]", ("brief.txt", b"hello"))
    assert out[2] == ("files[]", ("brief.txt", b"hello"))


def test_debug_logging_redacts_credentials(monkeypatch, caplog):
    monkeypatch.setenv("AI_PARALEGAL_HTTP_DEBUG", "1")
    client = AiParalegalClient(base_url="https://paralegal.test", api_key="sk-secret")
    hooks = client.http._client.event_hooks
    client.http._client = httpx.Client(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"ok": True})),
        event_hooks=hooks,
    )

    with caplog.at_level(logging.WARNING):
        client.http.request("POST", "/api/sdk/v1/token/exchange", headers=client.http.api_key_headers(), json={})

    assert "HTTPX REQUEST POST https://paralegal.test/api/sdk/v1/token/exchange" in caplog.text
    assert "sk-secret" not in caplog.text
    assert "***REDACTED***" in caplog.text


def test_client_context_manager_closes_transport():
    with AiParalegalClient(base_url="https://paralegal.test") as client:
        inner = client.http._client

    assert inner.is_closed
