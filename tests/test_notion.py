import asyncio
import json

import httpx
import pytest

from preview_worker.errors import CatalogError
from preview_worker.services.notion import NOTION_API, NotionCatalog, parse_page


def _page(pid, url, name="", description="", files=()):
    return {
        "id": pid,
        "properties": {
            "Name": {"title": [{"plain_text": name}] if name else []},
            "URL": {"url": url},
            "Description": {"rich_text": [{"plain_text": description}] if description else []},
            "Preview": {"files": list(files)},
        },
    }


def _catalog(handler):
    client = httpx.AsyncClient(base_url=NOTION_API, transport=httpx.MockTransport(handler))
    return NotionCatalog("fake-token", "fake-db-id", client=client)


def test_parse_page():
    record = parse_page(_page("page-1", "https://example.com", "Ex", "Desc", [{"name": "a.jpg"}]))

    assert record.id == "page-1"
    assert record.url == "https://example.com"
    assert record.name == "Ex"
    assert record.description == "Desc"
    assert record.has_artifact


def test_query_sends_filter_and_follows_pagination():
    requests = []

    def handler(request):
        body = json.loads(request.content)
        requests.append((request, body))
        if "start_cursor" not in body:
            return httpx.Response(200, json={
                "results": [_page("page-1", "https://a.example.com")],
                "has_more": True,
                "next_cursor": "cursor-2",
            })
        return httpx.Response(200, json={
            "results": [_page("page-2", "https://b.example.com", files=[{}]), _page("page-3", None)],
            "has_more": False,
            "next_cursor": None,
        })

    records = asyncio.run(_catalog(handler).query())

    assert [r.id for r in records] == ["page-1", "page-2"]
    assert not records[0].has_artifact and records[1].has_artifact

    first, body = requests[0]
    assert first.method == "POST"
    assert str(first.url) == "https://api.notion.com/v1/databases/fake-db-id/query"
    assert first.headers["Authorization"] == "Bearer fake-token"
    assert first.headers["Notion-Version"] == "2022-06-28"
    assert body["filter"] == {"property": "URL", "url": {"is_not_empty": True}}
    assert requests[1][1]["start_cursor"] == "cursor-2"


def test_query_error_status_raises():
    catalog = _catalog(lambda request: httpx.Response(500, json={}))

    with pytest.raises(CatalogError, match="500"):
        asyncio.run(catalog.query())


def test_transport_error_raises():
    def handler(request):
        raise httpx.ConnectError("no route", request=request)

    with pytest.raises(CatalogError):
        asyncio.run(_catalog(handler).query())


def test_update_artifact_uploads_then_attaches():
    seen = []

    def handler(request):
        seen.append((request.method, request.url.path))
        if request.url.path == "/v1/file_uploads":
            assert json.loads(request.content) == {
                "mode": "single_part",
                "filename": "screenshot-page-1.jpg",
                "content_type": "image/jpeg",
            }
            return httpx.Response(200, json={"id": "upload-1"})
        if request.url.path == "/v1/file_uploads/upload-1/send":
            assert b"jpegbytes" in request.content
            return httpx.Response(200, json={"id": "upload-1", "status": "uploaded"})
        body = json.loads(request.content)
        assert body["properties"]["Preview"]["files"][0]["file_upload"] == {"id": "upload-1"}
        return httpx.Response(200, json={"id": "page-1"})

    asyncio.run(_catalog(handler).update_artifact("page-1", b"jpegbytes"))

    assert seen == [
        ("POST", "/v1/file_uploads"),
        ("POST", "/v1/file_uploads/upload-1/send"),
        ("PATCH", "/v1/pages/page-1"),
    ]


def test_update_artifact_stops_when_send_fails():
    seen = []

    def handler(request):
        seen.append(request.url.path)
        if request.url.path == "/v1/file_uploads":
            return httpx.Response(200, json={"id": "upload-1"})
        return httpx.Response(400, json={})

    with pytest.raises(CatalogError):
        asyncio.run(_catalog(handler).update_artifact("page-1", b"jpegbytes"))
    assert seen == ["/v1/file_uploads", "/v1/file_uploads/upload-1/send"]


def test_update_name_and_description():
    captured = {}

    def handler(request):
        captured["method"] = request.method
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={})

    asyncio.run(_catalog(handler).update_name_and_description("page-1", "Example", "A site."))

    assert captured["method"] == "PATCH"
    assert captured["body"] == {
        "properties": {
            "Name": {"title": [{"text": {"content": "Example"}}]},
            "Description": {"rich_text": [{"text": {"content": "A site."}}]},
        }
    }
