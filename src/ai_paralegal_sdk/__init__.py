from __future__ import annotations

from ai_paralegal_sdk._errors import (
    AiParalegalAPIError,
    AiParalegalError,
    AiParalegalStreamError,
    StreamUnsupportedError,
)
from ai_paralegal_sdk._sse import (
    AsyncEventStream,
    CancellationToken,
    EventStream,
    SSEEvent,
    StreamEventParser,
    StreamOutcome,
    aconsume_event_stream,
    aiter_event_stream,
    consume_event_stream,
    iter_event_stream,
)
from ai_paralegal_sdk.ask import AskAiRequest, AskAiResponse, AskMatterAI
from ai_paralegal_sdk.chat import ChatAiParalegal
from ai_paralegal_sdk.client import AiParalegalClient, asession_from_url, session_from_url
from ai_paralegal_sdk.docs import DocCreateOptions, Docs
from ai_paralegal_sdk.files import Files
from ai_paralegal_sdk.llm import LLM, LlmRequestOptions, LlmResponse, LlmStreamCallbacks
from ai_paralegal_sdk.markitdown import MarkItDown
from ai_paralegal_sdk.ocr import OCR, OcrExtraction, OcrResponse, OcrStreamCallbacks
from ai_paralegal_sdk.result import ResultSubmitter
from ai_paralegal_sdk.session import SessionContext, TokenExchangeResponse

__all__ = [
    "AiParalegalAPIError",
    "AiParalegalClient",
    "AiParalegalError",
    "AiParalegalStreamError",
    "AskAiRequest",
    "AskAiResponse",
    "AskMatterAI",
    "AsyncEventStream",
    "CancellationToken",
    "ChatAiParalegal",
    "DocCreateOptions",
    "Docs",
    "EventStream",
    "Files",
    "LLM",
    "LlmRequestOptions",
    "LlmResponse",
    "LlmStreamCallbacks",
    "MarkItDown",
    "OCR",
    "OcrExtraction",
    "OcrResponse",
    "OcrStreamCallbacks",
    "ResultSubmitter",
    "SSEEvent",
    "SessionContext",
    "StreamEventParser",
    "StreamOutcome",
    "StreamUnsupportedError",
    "TokenExchangeResponse",
    "aconsume_event_stream",
    "aiter_event_stream",
    "asession_from_url",
    "consume_event_stream",
    "iter_event_stream",
    "session_from_url",
]

__version__ = "0.1.0"
