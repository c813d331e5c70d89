import json
from pathlib import Path

import httpx
import pytest

from ai_paralegal_sdk._errors import AiParalegalAPIError
from ai_paralegal_sdk.docs import DocCreateOptions, Docs

DOC = {"id": "doc-1", "filename": "memo.docx", "mime_type": "application/vnd.openxmlformats", "size": 1200}


def route(request: httpx.Request) -> httpx.Response:
    path, method = request.url.path, request.method
    if path == "/api/sdk/v1/docs/create" and method == "POST":
        return httpx.Response(201, json={"data": DOC})
    if path == "/api/sdk/v1/docs/upload" and method == "POST":
        return httpx.Response(200, json={"data": {"documents": [DOC, {**DOC, "id": "doc-2"}]}})
    if path == "/api/sdk/v1/docs" and method == "GET":
        return httpx.Response(200, json={"data": {"documents": [DOC]}})
    if path == "/api/sdk/v1/docs/doc-1/markdown" and method == "GET":
        return httpx.Response(200, json={"data": {"id": "doc-1", "filename": "memo.docx", "markdown": "# Memo"}})
    if path == "/api/sdk/v1/docs/doc-1" and method == "GET":
        return httpx.Response(200, json={"data": {**DOC, "content": "Memo text"}})
    if path == "/api/sdk/v1/docs/doc-1" and method == "POST":
        return httpx.Response(200, json={"data": {**DOC, "size": 99}})
    if path == "/api/sdk/v1/docs/doc-1" and method == "DELETE":
        return httpx.Response(204)
    return httpx.Response(404, json={"message": "Document not found"})


@pytest.fixture
def docs(make_client) -> Docs:
    return Docs(make_client(route), "sess-abc")


def test_create_sends_markdown(docs, requests_seen):
    resp = docs.create(DocCreateOptions(markdown="# Memo", filename="memo.docx", format="docx"))

    assert resp.data.id == "doc-1"
    sent = requests_seen[0]
    assert sent.headers["Authorization"] == "Bearer sess-abc"
    assert json.loads(sent.content) == {"markdown": "# Memo", "filename": "memo.docx", "format": "docx"}


def test_create_omits_unset_format(docs, requests_seen):
    docs.create(DocCreateOptions(markdown="x", filename="x.docx"))

    assert "format" not in json.loads(requests_seen[0].content)


def test_upload(docs, requests_seen):
    resp = docs.upload([("a.docx", b"PK"), ("b.pdf", b"%PDF")])

    assert [d.id for d in resp.data.documents] == ["doc-1", "doc-2"]
    assert requests_seen[0].content.count(b'name="files[]"') == 2


def test_list(docs, requests_seen):
    resp = docs.list()

    assert resp.data.documents[0].filename == "memo.docx"
    assert requests_seen[0].method == "GET"


def test_get(docs):
    resp = docs.get("doc-1")

    assert resp.data.content == "Memo text"
    assert resp.data.size == 1200


def test_update_with_text_content_sends_json(docs, requests_seen):
    resp = docs.update("doc-1", "New text")

    assert resp.data.size == 99
    sent = requests_seen[0]
    assert sent.headers["content-type"] == "application/json"
    assert json.loads(sent.content) == {"content": "New text"}


def test_update_with_file_sends_multipart(docs, requests_seen, tmp_path: Path):
    path = tmp_path / "memo.docx"
    path.write_bytes(b"PK-new")

    docs.update("doc-1", path)

    sent = requests_seen[0]
    assert sent.headers["content-type"].startswith("multipart/form-data")
    assert b'name="file"; filename="memo.docx"' in sent.content
    assert b"PK-new" in sent.content


def test_delete(docs, requests_seen):
    assert docs.delete("doc-1") is None
    assert requests_seen[0].method == "DELETE"


def test_to_markdown(docs):
    resp = docs.to_markdown("doc-1")

    assert resp.data.markdown == "# Memo"


def test_missing_document_raises(docs):
    with pytest.raises(AiParalegalAPIError) as exc:
        docs.get("missing")

    assert exc.value.status_code == 404
    assert exc.value.message == "Document not found"


def test_delete_fallback_message(make_client):
    docs = Docs(make_client(lambda r: httpx.Response(500)), "sess-abc")

    with pytest.raises(AiParalegalAPIError, match="Document delete failed with status 500"):
        docs.delete("doc-1")


@pytest.mark.asyncio
async def test_async_operations(docs):
    created = await docs.acreate(DocCreateOptions(markdown="# Memo", filename="memo.docx"))
    uploaded = await docs.aupload([("a.docx", b"PK")])
    listed = await docs.alist()
    shown = await docs.aget("doc-1")
    updated = await docs.aupdate("doc-1", ("memo.docx", b"PK"))
    md = await docs.ato_markdown("doc-1")
    await docs.adelete("doc-1")

    assert created.data.id == "doc-1"
    assert len(uploaded.data.documents) == 2
    assert listed.data.documents[0].id == "doc-1"
    assert shown.data.content == "Memo text"
    assert updated.data.size == 99
    assert md.data.markdown == "# Memo"
