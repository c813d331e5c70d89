"""
Server-side text extraction: OCR for images and PDFs, direct parsing for DOCX.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ai_paralegal_sdk._client import FileInput, to_multipart_files
from ai_paralegal_sdk._errors import AiParalegalStreamError
from ai_paralegal_sdk._sse import CancellationToken, aconsume_event_stream, consume_event_stream

if TYPE_CHECKING:
    from ai_paralegal_sdk.client import AiParalegalClient

OCR_EXTRACT_PATH = "/api/sdk/v1/ocr/extract"
OCR_STREAM_PATH = "/api/sdk/v1/ocr/stream"


class OcrExtraction(BaseModel):
    """Text extracted from one file. Extra fields sent by the host are kept."""
    model_config = ConfigDict(extra="allow")
    filename: str
    text: str = ""
    mime_type: Optional[str] = None


class OcrResponseData(BaseModel):
    model_config = ConfigDict(extra="allow")
    extractions: list[OcrExtraction] = Field(default_factory=list)


class OcrResponse(BaseModel):
    model_config = ConfigDict(extra="allow")
    data: OcrResponseData

    @property
    def text(self) -> str:
        """All extracted texts joined by a blank line."""
        return "\n\n".join(e.text for e in self.data.extractions)


def _extraction_from_payload(value: Any) -> OcrExtraction | None:
    try:
        return OcrExtraction.model_validate(value)
    except ValidationError:
        logging.debug("OCR extraction %r ignored: unexpected shape", value)
        return None


@dataclass(slots=True)
class OcrStreamCallbacks:
    on_chunk: Optional[Callable[[str, str], None]] = None
    on_file_complete: Optional[Callable[[OcrExtraction], None]] = None
    on_complete: Optional[Callable[[OcrResponse], None]] = None
    on_error: Optional[Callable[[AiParalegalStreamError], None]] = None


@dataclass(slots=True)
class _OcrStreamAdapter:
    callbacks: OcrStreamCallbacks
    response: OcrResponse | None = field(default=None)

    def __call__(self, event: str, data: Any) -> None:
        payload = data if isinstance(data, dict) else {}
        cb = self.callbacks

        if event == "text_delta":
            filename, delta = payload.get("filename"), payload.get("delta")
            if isinstance(filename, str) and isinstance(delta, str) and cb.on_chunk:
                cb.on_chunk(filename, delta)
        elif event == "extraction_complete":
            extraction = _extraction_from_payload(payload)
            if extraction is not None and cb.on_file_complete:
                cb.on_file_complete(extraction)
        elif event == "complete":
            items = payload.get("extractions")
            extractions = [_extraction_from_payload(item) for item in (items if isinstance(items, list) else [])]
            self.response = OcrResponse(
                data=OcrResponseData(extractions=[e for e in extractions if e is not None])
            )
            if cb.on_complete:
                cb.on_complete(self.response)
        elif event == "error":
            err = AiParalegalStreamError(payload.get("message") or "Stream error", payload)
            if cb.on_error is None:
                raise err
            cb.on_error(err)


@dataclass(slots=True)
class OCR:
    """Session scoped access to the text extraction endpoints."""
    client: AiParalegalClient
    session_token: str

    def extract(self, files: Sequence[FileInput]) -> OcrResponse:
        http = self.client.http
        resp = http.request(
            "POST",
            OCR_EXTRACT_PATH,
            headers=http.multipart_session_headers(self.session_token),
            files=to_multipart_files("files[]", files),
            action="OCR request",
        )
        return OcrResponse.model_validate(resp.json())

    async def aextract(self, files: Sequence[FileInput]) -> OcrResponse:
        http = self.client.http
        resp = await http.arequest(
            "POST",
            OCR_EXTRACT_PATH,
            headers=http.multipart_session_headers(self.session_token),
            files=to_multipart_files("files[]", files),
            action="OCR request",
        )
        return OcrResponse.model_validate(resp.json())

    def stream(
        self,
        files: Sequence[FileInput],
        callbacks: OcrStreamCallbacks | None = None,
        cancel: CancellationToken | None = None,
    ) -> OcrResponse | None:
        """
        Stream the extraction: per-file text deltas, one `extraction_complete`
        per file, then a final `complete` with every extraction.

        Returns:
            The `complete` response, or None if the stream ended or was
            cancelled before it.
        """
        http = self.client.http
        adapter = _OcrStreamAdapter(callbacks or OcrStreamCallbacks())
        with http.stream(
            "POST",
            OCR_STREAM_PATH,
            headers=http.multipart_session_headers(self.session_token),
            files=to_multipart_files("files[]", files),
        ) as resp:
            http.raise_for_status(resp, "OCR stream")
            consume_event_stream(resp, adapter, cancel)
        return adapter.response

    async def astream(
        self,
        files: Sequence[FileInput],
        callbacks: OcrStreamCallbacks | None = None,
        cancel: CancellationToken | None = None,
    ) -> OcrResponse | None:
        http = self.client.http
        adapter = _OcrStreamAdapter(callbacks or OcrStreamCallbacks())
        async with http.astream(
            "POST",
            OCR_STREAM_PATH,
            headers=http.multipart_session_headers(self.session_token),
            files=to_multipart_files("files[]", files),
        ) as resp:
            await http.araise_for_status(resp, "OCR stream")
            await aconsume_event_stream(resp, adapter, cancel)
        return adapter.response
