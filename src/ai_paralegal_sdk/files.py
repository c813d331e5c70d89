"""
Session scoped file upload. The returned file references can be passed to
other capabilities.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from ai_paralegal_sdk._client import FileInput, to_multipart_files

if TYPE_CHECKING:
    from ai_paralegal_sdk.client import AiParalegalClient

FILES_UPLOAD_PATH = "/api/sdk/v1/files/upload"


class UploadedFile(BaseModel):
    model_config = ConfigDict(extra="allow")
    id: str
    filename: str
    mime_type: Optional[str] = None
    size: Optional[int] = None


class FilesResponseData(BaseModel):
    model_config = ConfigDict(extra="allow")
    files: list[UploadedFile] = Field(default_factory=list)


class FilesResponse(BaseModel):
    model_config = ConfigDict(extra="allow")
    data: FilesResponseData


@dataclass(slots=True)
class Files:
    client: AiParalegalClient
    session_token: str

    def upload(self, files: Sequence[FileInput]) -> FilesResponse:
        http = self.client.http
        resp = http.request(
            "POST",
            FILES_UPLOAD_PATH,
            headers=http.multipart_session_headers(self.session_token),
            files=to_multipart_files("files[]", files),
            action="File upload",
        )
        return FilesResponse.model_validate(resp.json())

    async def aupload(self, files: Sequence[FileInput]) -> FilesResponse:
        http = self.client.http
        resp = await http.arequest(
            "POST",
            FILES_UPLOAD_PATH,
            headers=http.multipart_session_headers(self.session_token),
            files=to_multipart_files("files[]", files),
            action="File upload",
        )
        return FilesResponse.model_validate(resp.json())
