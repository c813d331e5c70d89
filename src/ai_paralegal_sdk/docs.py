"""
Document management on the host: create from Markdown, upload, list, read,
edit, delete and convert to Markdown.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from ai_paralegal_sdk._client import FileInput, to_multipart_files

if TYPE_CHECKING:
    from ai_paralegal_sdk.client import AiParalegalClient

DOCS_PATH = "/api/sdk/v1/docs"


class DocCreateOptions(BaseModel):
    """Body of POST /api/sdk/v1/docs/create."""
    model_config = ConfigDict(extra="allow")
    markdown: str
    filename: str
    format: Optional[str] = None  # e.g. "docx"


class DocMeta(BaseModel):
    model_config = ConfigDict(extra="allow")
    id: str
    filename: str
    mime_type: Optional[str] = None
    size: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class DocDetail(DocMeta):
    content: Optional[str] = None


class DocMarkdown(BaseModel):
    model_config = ConfigDict(extra="allow")
    id: str
    filename: str
    markdown: str
    mime_type: Optional[str] = None


class DocCreateResponse(BaseModel):
    model_config = ConfigDict(extra="allow")
    data: DocMeta


class DocUploadData(BaseModel):
    model_config = ConfigDict(extra="allow")
    documents: list[DocMeta] = Field(default_factory=list)


class DocUploadResponse(BaseModel):
    model_config = ConfigDict(extra="allow")
    data: DocUploadData


DocsListResponse = DocUploadResponse


class DocShowResponse(BaseModel):
    model_config = ConfigDict(extra="allow")
    data: DocDetail


DocUpdateResponse = DocCreateResponse


class DocMarkdownResponse(BaseModel):
    model_config = ConfigDict(extra="allow")
    data: DocMarkdown


def _doc_path(document_id: str) -> str:
    return f"{DOCS_PATH}/{document_id}"


@dataclass(slots=True)
class Docs:
    """Session scoped document operations."""
    client: AiParalegalClient
    session_token: str

    def create(self, options: DocCreateOptions) -> DocCreateResponse:
        """Create a document (e.g. a Word file) from Markdown."""
        http = self.client.http
        resp = http.request(
            "POST",
            f"{DOCS_PATH}/create",
            headers=http.session_headers(self.session_token),
            json=options.model_dump(exclude_none=True),
            action="Document create",
        )
        return DocCreateResponse.model_validate(resp.json())

    def upload(self, files: Sequence[FileInput]) -> DocUploadResponse:
        http = self.client.http
        resp = http.request(
            "POST",
            f"{DOCS_PATH}/upload",
            headers=http.multipart_session_headers(self.session_token),
            files=to_multipart_files("files[]", files),
            action="Document upload",
        )
        return DocUploadResponse.model_validate(resp.json())

    def list(self) -> DocsListResponse:
        http = self.client.http
        resp = http.request("GET", DOCS_PATH, headers=http.session_headers(self.session_token), action="Document list")
        return DocsListResponse.model_validate(resp.json())

    def get(self, document_id: str) -> DocShowResponse:
        http = self.client.http
        resp = http.request(
            "GET",
            _doc_path(document_id),
            headers=http.session_headers(self.session_token),
            action="Document read",
        )
        return DocShowResponse.model_validate(resp.json())

    def update(self, document_id: str, file_or_content: FileInput) -> DocUpdateResponse:
        """
        Replace a document.

        A plain string is sent as the new text content; a `(filename, content)`
        tuple or a `pathlib.Path` is uploaded as the new file.
        """
        http = self.client.http
        if isinstance(file_or_content, str):
            resp = http.request(
                "POST",
                _doc_path(document_id),
                headers=http.session_headers(self.session_token),
                json={"content": file_or_content},
                action="Document update",
            )
        else:
            resp = http.request(
                "POST",
                _doc_path(document_id),
                headers=http.multipart_session_headers(self.session_token),
                files=to_multipart_files("file", [file_or_content]),
                action="Document update",
            )
        return DocUpdateResponse.model_validate(resp.json())

    def delete(self, document_id: str) -> None:
        http = self.client.http
        http.request(
            "DELETE",
            _doc_path(document_id),
            headers=http.session_headers(self.session_token),
            action="Document delete",
        )

    def to_markdown(self, document_id: str) -> DocMarkdownResponse:
        http = self.client.http
        resp = http.request(
            "GET",
            f"{_doc_path(document_id)}/markdown",
            headers=http.session_headers(self.session_token),
            action="Document to Markdown",
        )
        return DocMarkdownResponse.model_validate(resp.json())

    async def acreate(self, options: DocCreateOptions) -> DocCreateResponse:
        http = self.client.http
        resp = await http.arequest(
            "POST",
            f"{DOCS_PATH}/create",
            headers=http.session_headers(self.session_token),
            json=options.model_dump(exclude_none=True),
            action="Document create",
        )
        return DocCreateResponse.model_validate(resp.json())

    async def aupload(self, files: Sequence[FileInput]) -> DocUploadResponse:
        http = self.client.http
        resp = await http.arequest(
            "POST",
            f"{DOCS_PATH}/upload",
            headers=http.multipart_session_headers(self.session_token),
            files=to_multipart_files("files[]", files),
            action="Document upload",
        )
        return DocUploadResponse.model_validate(resp.json())

    async def alist(self) -> DocsListResponse:
        http = self.client.http
        resp = await http.arequest(
            "GET", DOCS_PATH, headers=http.session_headers(self.session_token), action="Document list"
        )
        return DocsListResponse.model_validate(resp.json())

    async def aget(self, document_id: str) -> DocShowResponse:
        http = self.client.http
        resp = await http.arequest(
            "GET",
            _doc_path(document_id),
            headers=http.session_headers(self.session_token),
            action="Document read",
        )
        return DocShowResponse.model_validate(resp.json())

    async def aupdate(self, document_id: str, file_or_content: FileInput) -> DocUpdateResponse:
        http = self.client.http
        if isinstance(file_or_content, str):
            resp = await http.arequest(
                "POST",
                _doc_path(document_id),
                headers=http.session_headers(self.session_token),
                json={"content": file_or_content},
                action="Document update",
            )
        else:
            resp = await http.arequest(
                "POST",
                _doc_path(document_id),
                headers=http.multipart_session_headers(self.session_token),
                files=to_multipart_files("file", [file_or_content]),
                action="Document update",
            )
        return DocUpdateResponse.model_validate(resp.json())

    async def adelete(self, document_id: str) -> None:
        http = self.client.http
        await http.arequest(
            "DELETE",
            _doc_path(document_id),
            headers=http.session_headers(self.session_token),
            action="Document delete",
        )

    async def ato_markdown(self, document_id: str) -> DocMarkdownResponse:
        http = self.client.http
        resp = await http.arequest(
            "GET",
            f"{_doc_path(document_id)}/markdown",
            headers=http.session_headers(self.session_token),
            action="Document to Markdown",
        )
        return DocMarkdownResponse.model_validate(resp.json())
