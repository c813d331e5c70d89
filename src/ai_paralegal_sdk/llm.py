"""
LLM text generation on the host, with optional provider/model selection and
file attachments for multimodal input.

`ask` waits for the full answer; `stream` consumes the host's event stream
and reports tokens as they arrive.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ai_paralegal_sdk._client import AiParalegalHttpClient, FileInput, to_multipart_files
from ai_paralegal_sdk._errors import AiParalegalStreamError
from ai_paralegal_sdk._sse import CancellationToken, aconsume_event_stream, consume_event_stream

if TYPE_CHECKING:
    from ai_paralegal_sdk.client import AiParalegalClient

LLM_ASK_PATH = "/api/sdk/v1/llm/ask"
LLM_STREAM_PATH = "/api/sdk/v1/llm/stream"


class LlmRequestOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")
    system_instructions: Optional[str] = None
    provider: Optional[str] = None
    model: Optional[str] = None
    temperature: Optional[float] = Field(default=None, ge=0, le=2)
    max_tokens: Optional[int] = Field(default=None, ge=1)

    def to_form(self) -> dict[str, str]:
        return {k: str(v) for k, v in self.model_dump(exclude_none=True).items()}


class LlmUsage(BaseModel):
    model_config = ConfigDict(extra="allow")
    prompt_tokens: int = 0
    completion_tokens: int = 0


class LlmResponseData(BaseModel):
    model_config = ConfigDict(extra="allow")
    text: str = ""
    usage: Optional[LlmUsage] = None


class LlmResponse(BaseModel):
    model_config = ConfigDict(extra="allow")
    data: LlmResponseData


def usage_from_payload(value: Any) -> LlmUsage | None:
    """Usage block of a stream frame, or None when it is missing or malformed."""
    if not isinstance(value, dict):
        return None
    try:
        return LlmUsage.model_validate(value)
    except ValidationError:
        logging.debug("LLM usage %r ignored: unexpected shape", value)
        return None


@dataclass(slots=True)
class LlmStreamCallbacks:
    on_chunk: Optional[Callable[[str], None]] = None
    on_complete: Optional[Callable[[LlmResponse], None]] = None
    on_error: Optional[Callable[[AiParalegalStreamError], None]] = None


@dataclass(slots=True)
class _LlmStreamAdapter:
    """Maps `text_delta` / `complete` / `error` frames to the callbacks."""
    callbacks: LlmStreamCallbacks
    response: LlmResponse | None = field(default=None)

    def __call__(self, event: str, data: Any) -> None:
        payload = data if isinstance(data, dict) else {}

        if event == "text_delta" and isinstance(payload.get("delta"), str):
            if self.callbacks.on_chunk:
                self.callbacks.on_chunk(payload["delta"])
        elif event == "complete":
            text = payload.get("text")
            self.response = LlmResponse(
                data=LlmResponseData(
                    text=text if isinstance(text, str) else "",
                    usage=usage_from_payload(payload.get("usage")),
                )
            )
            if self.callbacks.on_complete:
                self.callbacks.on_complete(self.response)
        elif event == "error":
            err = AiParalegalStreamError(payload.get("message") or "Stream error", payload)
            if self.callbacks.on_error is None:
                raise err
            self.callbacks.on_error(err)


def llm_request_kwargs(
    session_token: str,
    http: AiParalegalHttpClient,
    prompt: str,
    options: LlmRequestOptions | None,
    attachments: Sequence[FileInput] | None,
) -> dict[str, Any]:
    opts = options or LlmRequestOptions()
    if attachments:
        return {
            "headers": http.multipart_session_headers(session_token),
            "data": {"prompt": prompt, **opts.to_form()},
            "files": to_multipart_files("attachments[]", attachments),
        }
    return {
        "headers": http.session_headers(session_token),
        "json": {"prompt": prompt, **opts.model_dump(exclude_none=True)},
    }


@dataclass(slots=True)
class LLM:
    """Session scoped access to the host LLM endpoints."""
    client: AiParalegalClient
    session_token: str

    def ask(
        self,
        prompt: str,
        options: LlmRequestOptions | None = None,
        attachments: Sequence[FileInput] | None = None,
    ) -> LlmResponse:
        """
        Send a prompt and wait for the full answer.

        Args:
            prompt: The user prompt.
            options: Provider, model, system instructions, temperature, max tokens.
            attachments: Files for multimodal input; switches the body to multipart.

        Returns:
            The parsed LlmResponse.
        """
        http = self.client.http
        kwargs = llm_request_kwargs(self.session_token, http, prompt, options, attachments)
        resp = http.request("POST", LLM_ASK_PATH, action="LLM request", **kwargs)
        return LlmResponse.model_validate(resp.json())

    async def aask(
        self,
        prompt: str,
        options: LlmRequestOptions | None = None,
        attachments: Sequence[FileInput] | None = None,
    ) -> LlmResponse:
        http = self.client.http
        kwargs = llm_request_kwargs(self.session_token, http, prompt, options, attachments)
        resp = await http.arequest("POST", LLM_ASK_PATH, action="LLM request", **kwargs)
        return LlmResponse.model_validate(resp.json())

    def stream(
        self,
        prompt: str,
        options: LlmRequestOptions | None = None,
        attachments: Sequence[FileInput] | None = None,
        callbacks: LlmStreamCallbacks | None = None,
        cancel: CancellationToken | None = None,
    ) -> LlmResponse | None:
        """
        Stream the answer token by token.

        `callbacks.on_chunk` receives each text delta in order. Without an
        `on_error` callback a server `error` event is raised as
        AiParalegalStreamError.

        Returns:
            The `complete` response, or None if the stream ended or was
            cancelled before it.
        """
        http = self.client.http
        adapter = _LlmStreamAdapter(callbacks or LlmStreamCallbacks())
        kwargs = llm_request_kwargs(self.session_token, http, prompt, options, attachments)
        with http.stream("POST", LLM_STREAM_PATH, **kwargs) as resp:
            http.raise_for_status(resp, "LLM stream")
            consume_event_stream(resp, adapter, cancel)
        return adapter.response

    async def astream(
        self,
        prompt: str,
        options: LlmRequestOptions | None = None,
        attachments: Sequence[FileInput] | None = None,
        callbacks: LlmStreamCallbacks | None = None,
        cancel: CancellationToken | None = None,
    ) -> LlmResponse | None:
        http = self.client.http
        adapter = _LlmStreamAdapter(callbacks or LlmStreamCallbacks())
        kwargs = llm_request_kwargs(self.session_token, http, prompt, options, attachments)
        async with http.astream("POST", LLM_STREAM_PATH, **kwargs) as resp:
            await http.araise_for_status(resp, "LLM stream")
            await aconsume_event_stream(resp, adapter, cancel)
        return adapter.response
