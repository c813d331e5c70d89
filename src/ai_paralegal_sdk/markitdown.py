"""
Conversion of files to Markdown with Microsoft MarkItDown on the host.

Supports PDF, Word, Excel, PowerPoint, images, HTML, CSV, JSON, XML and more.
See https://github.com/microsoft/markitdown
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from ai_paralegal_sdk._client import FileInput, to_multipart_files

if TYPE_CHECKING:
    from ai_paralegal_sdk.client import AiParalegalClient

MARKITDOWN_CONVERT_PATH = "/api/sdk/v1/markitdown/convert"


class MarkItDownConversion(BaseModel):
    model_config = ConfigDict(extra="allow")
    filename: str
    markdown: str = ""
    mime_type: Optional[str] = None


class MarkItDownResponseData(BaseModel):
    model_config = ConfigDict(extra="allow")
    conversions: list[MarkItDownConversion] = Field(default_factory=list)


class MarkItDownResponse(BaseModel):
    model_config = ConfigDict(extra="allow")
    data: MarkItDownResponseData


@dataclass(slots=True)
class MarkItDown:
    client: AiParalegalClient
    session_token: str

    def convert(self, files: Sequence[FileInput]) -> MarkItDownResponse:
        http = self.client.http
        resp = http.request(
            "POST",
            MARKITDOWN_CONVERT_PATH,
            headers=http.multipart_session_headers(self.session_token),
            files=to_multipart_files("files[]", files),
            action="MarkItDown conversion",
        )
        return MarkItDownResponse.model_validate(resp.json())

    async def aconvert(self, files: Sequence[FileInput]) -> MarkItDownResponse:
        http = self.client.http
        resp = await http.arequest(
            "POST",
            MARKITDOWN_CONVERT_PATH,
            headers=http.multipart_session_headers(self.session_token),
            files=to_multipart_files("files[]", files),
            action="MarkItDown conversion",
        )
        return MarkItDownResponse.model_validate(resp.json())
