from __future__ import annotations

from contextlib import aclosing, closing
from typing import Any, AsyncIterator, Iterator, Optional

from langchain_core.callbacks import AsyncCallbackManagerForLLMRun, CallbackManagerForLLMRun
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, AIMessageChunk, BaseMessage, SystemMessage
from langchain_core.messages.ai import UsageMetadata
from langchain_core.outputs import ChatGeneration, ChatGenerationChunk, ChatResult
from pydantic import ConfigDict, Field, PrivateAttr

from ai_paralegal_sdk._errors import AiParalegalStreamError
from ai_paralegal_sdk._sse import SSEEvent, aiter_event_stream, iter_event_stream
from ai_paralegal_sdk.client import AiParalegalClient
from ai_paralegal_sdk.llm import (
    LLM,
    LLM_STREAM_PATH,
    LlmRequestOptions,
    LlmUsage,
    llm_request_kwargs,
    usage_from_payload,
)

# ---------------------------------------------------------------------------
# Message conversion helpers
# ---------------------------------------------------------------------------


def _text_from_content(content: Any) -> str:
    """
    Plain text of a message content: the string itself, or the `text` blocks
    of a content block list (other block types are skipped).
    """
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return ""

    parts: list[str] = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            txt = block.get("text")
            if isinstance(txt, str) and txt:
                parts.append(txt)
    return "".join(parts)


def _prompt_from_messages(messages: list[BaseMessage]) -> tuple[str, str | None]:
    """
    Flatten a conversation for the single-prompt LLM endpoint.

    System messages become the system instructions. A lone remaining message
    is sent as is; a longer conversation is rendered as "<role>: <text>" lines.
    """
    system_parts: list[str] = []
    turns: list[BaseMessage] = []
    for m in messages:
        if isinstance(m, SystemMessage):
            system_parts.append(_text_from_content(m.content))
        else:
            turns.append(m)

    if len(turns) == 1:
        prompt = _text_from_content(turns[0].content)
    else:
        prompt = "\n\n".join(f"{m.type}: {_text_from_content(m.content)}" for m in turns)

    system = "\n\n".join(p for p in system_parts if p) or None
    return prompt, system


def _usage_metadata_from_usage(usage: LlmUsage | None) -> UsageMetadata | None:
    if usage is None:
        return None
    prompt_i = max(usage.prompt_tokens, 0)
    completion_i = max(usage.completion_tokens, 0)
    return UsageMetadata(
        input_tokens=prompt_i,
        output_tokens=completion_i,
        total_tokens=prompt_i + completion_i,
    )


# ------------------------------------------------------------------------------------
# Chat wrapper over /api/sdk/v1/llm, real streaming via .stream/.astream
# ------------------------------------------------------------------------------------


class ChatAiParalegal(BaseChatModel):
    """
    LangChain ChatModel for the AI Paralegal host LLM endpoint.

    Streaming contract:
    - .invoke/.ainvoke call /api/sdk/v1/llm/ask
    - .stream/.astream consume /api/sdk/v1/llm/stream and emit one chunk per
      `text_delta`, then a final empty chunk carrying usage from `complete`
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    session_token: str = Field(exclude=True, repr=False)
    api_key: Optional[str] = Field(default=None, exclude=True, repr=False)
    base_url: Optional[str] = None
    timeout_s: float = 120.0

    provider: Optional[str] = None
    model: Optional[str] = None
    temperature: Optional[float] = Field(default=None, ge=0, le=2)
    max_tokens: Optional[int] = Field(default=None, ge=1)

    _client: AiParalegalClient = PrivateAttr()

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._client = AiParalegalClient(base_url=self.base_url, api_key=self.api_key, timeout_s=self.timeout_s)
        self.base_url = self._client.base_url

    @property
    def _llm_type(self) -> str:
        return "ai-paralegal-chat"

    @property
    def _identifying_params(self) -> dict[str, Any]:
        return {
            "provider": self.provider or "",
            "model": self.model or "",
            "base_url": self.base_url,
            "timeout_s": self.timeout_s,
        }

    def _build_request(
        self, messages: list[BaseMessage], stop: list[str] | None, **kwargs: Any
    ) -> tuple[str, LlmRequestOptions]:
        if stop:
            raise ValueError("Stop sequences are not supported by the AI Paralegal LLM endpoint.")

        prompt, system = _prompt_from_messages(messages)
        defaults = {
            "system_instructions": system,
            "provider": self.provider,
            "model": self.model,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        overrides = {k: v for k, v in kwargs.items() if k in LlmRequestOptions.model_fields}
        return prompt, LlmRequestOptions(**{**defaults, **overrides})

    def _chunk_from_frame(self, frame: SSEEvent) -> ChatGenerationChunk | None:
        payload = frame.data if isinstance(frame.data, dict) else {}

        if frame.event == "text_delta":
            delta = payload.get("delta")
            if not isinstance(delta, str):
                return None
            return ChatGenerationChunk(message=AIMessageChunk(content=delta))

        if frame.event == "complete":
            usage_md = _usage_metadata_from_usage(usage_from_payload(payload.get("usage")))
            msg_chunk = AIMessageChunk(
                content="",
                response_metadata={"model_name": self.model or "", "provider": self.provider or ""},
                usage_metadata=usage_md,
            )
            return ChatGenerationChunk(message=msg_chunk, generation_info={"finish_reason": "stop"})

        if frame.event == "error":
            raise AiParalegalStreamError(payload.get("message") or "Stream error", payload)

        return None

    def _generate(
        self,
        messages: list[BaseMessage],
        stop: list[str] | None = None,
        run_manager: CallbackManagerForLLMRun | None = None,
        **kwargs: Any,
    ) -> ChatResult:
        prompt, options = self._build_request(messages, stop, **kwargs)
        response = LLM(self._client, self.session_token).ask(prompt, options)
        return self._to_chat_result(response.data.text, response.data.usage)

    async def _agenerate(
        self,
        messages: list[BaseMessage],
        stop: list[str] | None = None,
        run_manager: AsyncCallbackManagerForLLMRun | None = None,
        **kwargs: Any,
    ) -> ChatResult:
        prompt, options = self._build_request(messages, stop, **kwargs)
        response = await LLM(self._client, self.session_token).aask(prompt, options)
        return self._to_chat_result(response.data.text, response.data.usage)

    def _to_chat_result(self, text: str, usage: LlmUsage | None) -> ChatResult:
        msg = AIMessage(
            content=text,
            response_metadata={"model_name": self.model or "", "provider": self.provider or ""},
            usage_metadata=_usage_metadata_from_usage(usage),
        )
        llm_output: dict[str, Any] = {
            "model_name": self.model or "",
            "token_usage": usage.model_dump() if usage is not None else None,
        }
        return ChatResult(generations=[ChatGeneration(message=msg)], llm_output=llm_output)

    def _stream(
        self,
        messages: list[BaseMessage],
        stop: list[str] | None = None,
        run_manager: CallbackManagerForLLMRun | None = None,
        **kwargs: Any,
    ) -> Iterator[ChatGenerationChunk]:
        prompt, options = self._build_request(messages, stop, **kwargs)
        http = self._client.http
        req = llm_request_kwargs(self.session_token, http, prompt, options, None)

        with http.stream("POST", LLM_STREAM_PATH, **req) as r:
            http.raise_for_status(r, "LLM stream")
            with closing(iter_event_stream(r)) as frames:
                for frame in frames:
                    chunk = self._chunk_from_frame(frame)
                    if chunk is None:
                        continue
                    if run_manager and chunk.text:
                        run_manager.on_llm_new_token(chunk.text, chunk=chunk)
                    yield chunk

    async def _astream(
        self,
        messages: list[BaseMessage],
        stop: list[str] | None = None,
        run_manager: AsyncCallbackManagerForLLMRun | None = None,
        **kwargs: Any,
    ) -> AsyncIterator[ChatGenerationChunk]:
        prompt, options = self._build_request(messages, stop, **kwargs)
        http = self._client.http
        req = llm_request_kwargs(self.session_token, http, prompt, options, None)

        async with http.astream("POST", LLM_STREAM_PATH, **req) as r:
            await http.araise_for_status(r, "LLM stream")
            async with aclosing(aiter_event_stream(r)) as frames:
                async for frame in frames:
                    chunk = self._chunk_from_frame(frame)
                    if chunk is None:
                        continue
                    if run_manager and chunk.text:
                        await run_manager.on_llm_new_token(chunk.text, chunk=chunk)
                    yield chunk
