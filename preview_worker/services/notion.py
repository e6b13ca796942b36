"""
Notion catalog: reads gallery rows and writes back screenshot, name and description.
"""
from __future__ import annotations

import logging
from typing import Any

import httpx

from preview_worker.errors import CatalogError
from preview_worker.models import CatalogRecord

logger = logging.getLogger(__name__)

NOTION_API = "https://api.notion.com/v1"
NOTION_VERSION = "2022-06-28"
PAGE_SIZE = 100


def _plain_text(items: list[dict]) -> str:
    return items[0].get("plain_text", "") if items else ""


def parse_page(page: dict[str, Any]) -> CatalogRecord:
    props = page.get("properties", {})
    return CatalogRecord(
        id=page["id"],
        url=(props.get("URL") or {}).get("url") or "",
        name=_plain_text((props.get("Name") or {}).get("title", [])),
        description=_plain_text((props.get("Description") or {}).get("rich_text", [])),
        has_artifact=bool((props.get("Preview") or {}).get("files")),
    )


class NotionCatalog:
    """Minimal async Notion client for one gallery database."""

    def __init__(self, api_key: str, database_id: str, *, client: httpx.AsyncClient | None = None,
                 timeout: float = 30):
        self.database_id = database_id
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Notion-Version": NOTION_VERSION,
        }
        self._client = client or httpx.AsyncClient(base_url=NOTION_API, timeout=timeout)

    async def _request(self, method: str, path: str, **kw) -> dict:
        headers = {**self._headers, **kw.pop("headers", {})}
        try:
            res = await self._client.request(method, path, headers=headers, **kw)
        except httpx.HTTPError as exc:
            raise CatalogError(f"{method} {path}: {exc}") from exc
        if not res.is_success:
            raise CatalogError(f"Notion API error: {res.status_code} on {method} {path}")
        if not res.content:
            return {}
        try:
            return res.json()
        except ValueError as exc:
            raise CatalogError(f"{method} {path}: invalid JSON response") from exc

    async def query(self) -> list[CatalogRecord]:
        """All rows with a URL, in database order."""
        records: list[CatalogRecord] = []
        body: dict[str, Any] = {
            "filter": {"property": "URL", "url": {"is_not_empty": True}},
            "page_size": PAGE_SIZE,
        }
        while True:
            data = await self._request("POST", f"/databases/{self.database_id}/query", json=body)
            for page in data.get("results", []):
                record = parse_page(page)
                if record.url:
                    records.append(record)
            if not data.get("has_more") or not data.get("next_cursor"):
                break
            body = {**body, "start_cursor": data["next_cursor"]}
        logger.info("Notion query returned %s rows", len(records))
        return records

    async def update_artifact(self, page_id: str, artifact: bytes) -> None:
        filename = f"screenshot-{page_id}.jpg"

        # 1. create the upload slot
        upload = await self._request(
            "POST",
            "/file_uploads",
            json={"mode": "single_part", "filename": filename, "content_type": "image/jpeg"},
        )
        upload_id = upload.get("id")
        if not upload_id:
            raise CatalogError("Notion file upload returned no id")

        # 2. send the bytes
        await self._request(
            "POST",
            f"/file_uploads/{upload_id}/send",
            files={"file": (filename, artifact, "image/jpeg")},
        )

        # 3. attach to the page's Preview property
        await self._request(
            "PATCH",
            f"/pages/{page_id}",
            json={
                "properties": {
                    "Preview": {
                        "files": [
                            {
                                "type": "file_upload",
                                "file_upload": {"id": upload_id},
                                "name": filename,
                            }
                        ]
                    }
                }
            },
        )

    async def update_name_and_description(self, page_id: str, name: str, description: str) -> None:
        await self._request(
            "PATCH",
            f"/pages/{page_id}",
            json={
                "properties": {
                    "Name": {"title": [{"text": {"content": name}}]},
                    "Description": {"rich_text": [{"text": {"content": description}}]},
                }
            },
        )

    async def close(self) -> None:
        await self._client.aclose()
