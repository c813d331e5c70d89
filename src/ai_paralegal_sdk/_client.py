from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Sequence, Union

import httpx

from ai_paralegal_sdk._errors import AiParalegalAPIError, AiParalegalError

ENV_HTTP_DEBUG = "AI_PARALEGAL_HTTP_DEBUG"

_REDACTED_HEADERS = ("authorization", "x-api-key")


@dataclass(frozen=True, slots=True)
class HttpConfig:
    base_url: str
    timeout_s: float = 120.0


def _parse_error_response(status_code: int, body_text: str, action: str = "Request") -> AiParalegalAPIError:
    """
    Build an AiParalegalAPIError from a failed response body.

    Uses the top level `message` when present, then the `error` envelope.
    Anything else falls back to "<action> failed with status <code>".
    """
    message = f"{action} failed with status {status_code}"
    error_code: str | None = None
    request_id: str | None = None
    details: dict[str, Any] | None = None

    try:
        data = json.loads(body_text) if body_text else None
    except ValueError:
        data = None

    if isinstance(data, dict):
        msg = data.get("message")
        error_obj = data.get("error")

        if isinstance(msg, str) and msg.strip():
            message = msg.strip()
        elif isinstance(error_obj, dict):
            nested = error_obj.get("message")
            if isinstance(nested, str) and nested.strip():
                message = nested.strip()
        elif isinstance(error_obj, str) and error_obj.strip():
            message = error_obj.strip()

        if isinstance(error_obj, dict):
            code = error_obj.get("code")
            if isinstance(code, str) and code.strip():
                error_code = code.strip()

            req_id = error_obj.get("requestId")
            if isinstance(req_id, str) and req_id.strip():
                request_id = req_id.strip()

            det = error_obj.get("details")
            if isinstance(det, dict):
                details = det

        errors = data.get("errors")
        if details is None and isinstance(errors, dict):
            details = errors

    return AiParalegalAPIError(
        status_code=status_code,
        message=message,
        body=body_text or None,
        error_code=error_code,
        request_id=request_id,
        details=details,
    )


def _redact_headers(headers: dict[str, Any]) -> dict[str, Any]:
    out = dict(headers)
    for k in list(out):
        if k.lower() in _REDACTED_HEADERS:
            out[k] = "***REDACTED***"
    return out


class AiParalegalHttpClient:
    """
    Thin HTTPX wrapper with:
    - header selection for API-key and session-token auth
    - JSON and multipart requests
    - event-stream requests via httpx.Client.stream / AsyncClient.stream
    - optional debug logging (AI_PARALEGAL_HTTP_DEBUG=1)
    """

    def __init__(self, *, config: HttpConfig, api_key: str | None = None) -> None:
        self._config = config
        self._api_key = api_key
        self._debug_http = os.getenv(ENV_HTTP_DEBUG, "").lower() in {"1", "true", "yes", "on"}

        def _log_request(request: httpx.Request) -> None:
            if not self._debug_http:
                return
            logging.warning("HTTPX REQUEST %s %s", request.method, request.url)
            logging.warning("HTTPX REQUEST headers=%s", _redact_headers(dict(request.headers)))
            try:
                content = request.content
            except httpx.RequestNotRead:
                logging.warning("HTTPX REQUEST body=(streamed; not auto-logged)")
                return
            if content:
                ctype = request.headers.get("content-type", "")
                if "multipart/form-data" in ctype:
                    logging.warning("HTTPX REQUEST body=(multipart) len=%s", len(content))
                else:
                    logging.warning("HTTPX REQUEST body=%s", content.decode("utf-8", "ignore"))

        def _log_response_head(response: httpx.Response) -> bool:
            req = response.request
            logging.warning("HTTPX RESPONSE %s %s -> %s", req.method, req.url, response.status_code)
            logging.warning("HTTPX RESPONSE headers=%s", dict(response.headers))
            if "text/event-stream" in response.headers.get("content-type", ""):
                logging.warning("HTTPX RESPONSE body=(event-stream; not auto-logged)")
                return False
            return True

        def _log_response_sync(response: httpx.Response) -> None:
            if not self._debug_http or not _log_response_head(response):
                return
            try:
                response.read()
                logging.warning("HTTPX RESPONSE body=%s", response.text)
            except httpx.HTTPError as e:
                logging.warning("HTTPX RESPONSE body=(unreadable) err=%r", e)

        async def _log_request_async(request: httpx.Request) -> None:
            _log_request(request)

        async def _log_response_async(response: httpx.Response) -> None:
            if not self._debug_http or not _log_response_head(response):
                return
            try:
                await response.aread()
                logging.warning("HTTPX RESPONSE body=%s", response.text)
            except httpx.HTTPError as e:
                logging.warning("HTTPX RESPONSE body=(unreadable) err=%r", e)

        EventHooksDict = dict[str, list[Callable[..., Any]]]

        hooks_sync: EventHooksDict = {"request": [_log_request], "response": [_log_response_sync]}
        hooks_async: EventHooksDict = {"request": [_log_request_async], "response": [_log_response_async]}

        self._client = httpx.Client(timeout=httpx.Timeout(config.timeout_s), event_hooks=hooks_sync)
        self._aclient = httpx.AsyncClient(timeout=httpx.Timeout(config.timeout_s), event_hooks=hooks_async)

    @property
    def base_url(self) -> str:
        return self._config.base_url

    def close(self) -> None:
        self._client.close()

    async def aclose(self) -> None:
        await self._aclient.aclose()

    def url(self, path: str) -> str:
        return f"{self._config.base_url}{path}"

    def api_key_headers(self) -> dict[str, str]:
        if not self._api_key:
            raise AiParalegalError("AiParalegalClient: apiKey is required for API-key authenticated requests")
        return {
            "X-API-KEY": self._api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    @staticmethod
    def session_headers(session_token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {session_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    @staticmethod
    def multipart_session_headers(session_token: str) -> dict[str, str]:
        # Content-Type is left to httpx so it can add the multipart boundary.
        return {
            "Authorization": f"Bearer {session_token}",
            "Accept": "application/json",
        }

    @staticmethod
    def raise_for_status(resp: httpx.Response, action: str = "Request") -> None:
        """Check the status and raise a structured AiParalegalAPIError."""
        if 200 <= resp.status_code < 300:
            return

        body_text: str | None
        try:
            body_text = resp.text
        except httpx.ResponseNotRead:
            try:
                resp.read()
                body_text = resp.text
            except httpx.HTTPError:
                body_text = None

        raise _parse_error_response(resp.status_code, body_text or "", action)

    @staticmethod
    async def araise_for_status(resp: httpx.Response, action: str = "Request") -> None:
        if 200 <= resp.status_code < 300:
            return

        body_text: str | None
        try:
            body_text = resp.text
        except httpx.ResponseNotRead:
            try:
                await resp.aread()
                body_text = resp.text
            except httpx.HTTPError:
                body_text = None

        raise _parse_error_response(resp.status_code, body_text or "", action)

    def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str],
        json: Any = None,
        data: dict[str, Any] | None = None,
        files: list[tuple[str, Any]] | None = None,
        action: str = "Request",
    ) -> httpx.Response:
        resp = self._client.request(method, self.url(path), headers=headers, json=json, data=data, files=files)
        self.raise_for_status(resp, action)
        return resp

    async def arequest(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str],
        json: Any = None,
        data: dict[str, Any] | None = None,
        files: list[tuple[str, Any]] | None = None,
        action: str = "Request",
    ) -> httpx.Response:
        resp = await self._aclient.request(method, self.url(path), headers=headers, json=json, data=data, files=files)
        await self.araise_for_status(resp, action)
        return resp

    def stream(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str],
        json: Any = None,
        data: dict[str, Any] | None = None,
        files: list[tuple[str, Any]] | None = None,
    ) -> Any:
        """
        Return an httpx streaming context manager for an event-stream endpoint.

        Usage:
            with client.stream("POST", path, headers=h, json=payload) as r:
                client.raise_for_status(r, "LLM stream")
                consume_event_stream(r, on_event)
        """
        headers = {**headers, "Accept": "text/event-stream"}
        return self._client.stream(method, self.url(path), headers=headers, json=json, data=data, files=files)

    def astream(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str],
        json: Any = None,
        data: dict[str, Any] | None = None,
        files: list[tuple[str, Any]] | None = None,
    ) -> Any:
        """
        Async streaming context manager.

        Usage:
            async with client.astream("POST", path, headers=h, json=payload) as r:
                await client.araise_for_status(r, "LLM stream")
                await aconsume_event_stream(r, on_event)
        """
        headers = {**headers, "Accept": "text/event-stream"}
        return self._aclient.stream(method, self.url(path), headers=headers, json=json, data=data, files=files)


FileInput = Union[str, os.PathLike, tuple[str, Any], tuple[str, Any, str]]


def to_multipart_files(field: str, files: Sequence[FileInput]) -> list[tuple[str, Any]]:
    """
    Convert file inputs to the httpx `files=` list under one form field.

    Accepts filesystem paths, `(filename, content)` or
    `(filename, content, content_type)` tuples; content may be bytes or a
    binary file object.
    """
    out: list[tuple[str, Any]] = []
    for f in files:
        if isinstance(f, tuple):
            out.append((field, f))
            continue
        path = Path(f)
        out.append((field, (path.name, path.read_bytes())))
    return out
