"""
Media store adapter.

Thin async wrapper around the Cloudinary Search API, the unsigned upload
endpoint and the CDN that serves the assets. The adapter holds no gallery
state: cursors are passed through untouched and every call is independent.
"""

import logging
import time
from typing import List, Optional

import httpx
from pydantic import ValidationError

from app.core.errors import FetchFailed, UpstreamUnavailable
from app.models.gallery.ImageRecord import ImagePage, ImageRecord

logger = logging.getLogger(__name__)

CLOUDINARY_API_BASE = "https://api.cloudinary.com/v1_1"

# Search API caps max_results at 500
SEARCH_MAX_RESULTS = 500


def attachment_url(source_url: str) -> str:
    """Asks the host to serve the asset with an attachment content-disposition."""
    return source_url.replace("/upload/", "/upload/fl_attachment/", 1)


def identifier_stem(identifier: str) -> str:
    return identifier.split("/")[-1]


def _equality_expression(identifiers: List[str]) -> str:
    terms = []
    for identifier in identifiers:
        escaped = identifier.replace("\\", "\\\\").replace('"', '\\"')
        terms.append(f'public_id="{escaped}"')
    return " OR ".join(terms)


def _to_record(resource: dict) -> ImageRecord:
    return ImageRecord(
        identifier=resource["public_id"],
        source_url=resource["secure_url"],
        created_at=resource["created_at"],
    )


class MediaStore:
    """
    Usage:
        store = MediaStore(cloud_name, api_key, api_secret)
        page = await store.list_images("mariage", cursor=None, page_size=12)
    """

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        upload_preset: Optional[str] = None,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.cloud_name = cloud_name
        self.upload_preset = upload_preset
        self.base_url = f"{CLOUDINARY_API_BASE}/{cloud_name}"
        self._auth = httpx.BasicAuth(api_key, api_secret)
        self.http_client = httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    async def close(self):
        await self.http_client.aclose()

    async def _search(self, body: dict) -> dict:
        url = f"{self.base_url}/resources/search"
        try:
            response = await self.http_client.post(url, json=body, auth=self._auth)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "[MediaStore] Search failed with HTTP %s: %s",
                e.response.status_code,
                body.get("expression"),
            )
            raise UpstreamUnavailable() from e
        except httpx.HTTPError as e:
            logger.error("[MediaStore] Search request error: %s", e)
            raise UpstreamUnavailable() from e
        except ValueError as e:
            logger.error("[MediaStore] Search returned a non-JSON body")
            raise UpstreamUnavailable() from e

    def _parse_resources(self, result: dict) -> List[ImageRecord]:
        try:
            return [_to_record(resource) for resource in result.get("resources", [])]
        except (AttributeError, KeyError, TypeError, ValidationError) as e:
            logger.error("[MediaStore] Malformed search resource: %s", e)
            raise UpstreamUnavailable() from e

    async def count_images(self) -> int:
        result = await self._search({"expression": "resource_type:image", "max_results": 1})
        return int(result.get("total_count", 0))

    async def list_images(
        self, tag: str, cursor: Optional[str], page_size: int
    ) -> ImagePage:
        """
        Lists one page of images carrying ``tag``, newest first.

        The total comes from a second, unfiltered count query.
        """
        body = {
            "expression": f"resource_type:image AND tags:{tag}",
            "sort_by": [{"created_at": "desc"}],
            "max_results": page_size,
        }
        if cursor:
            body["next_cursor"] = cursor

        result = await self._search(body)
        records = self._parse_resources(result)
        total = await self.count_images()

        return ImagePage(
            records=records,
            next_cursor=result.get("next_cursor"),
            total_count=total,
        )

    async def resolve_images(self, identifiers: List[str]) -> List[ImageRecord]:
        """Looks up records by identifier with OR-ed equality filters."""
        records: List[ImageRecord] = []
        for start in range(0, len(identifiers), SEARCH_MAX_RESULTS):
            batch = identifiers[start : start + SEARCH_MAX_RESULTS]
            result = await self._search(
                {
                    "expression": _equality_expression(batch),
                    "max_results": len(batch),
                }
            )
            records.extend(self._parse_resources(result))
        return records

    async def fetch_bytes(self, source_url: str) -> bytes:
        try:
            response = await self.http_client.get(source_url)
        except httpx.HTTPError as e:
            logger.error("[MediaStore] Fetch error for %s: %s", source_url[:80], e)
            raise FetchFailed(source_url) from e

        if not response.is_success:
            logger.error(
                "[MediaStore] Fetch of %s returned HTTP %s",
                source_url[:80],
                response.status_code,
            )
            raise FetchFailed(source_url, response.status_code)

        return response.content

    async def upload_image(
        self,
        filename: str,
        content: bytes,
        tag: str,
        content_type: Optional[str] = None,
    ) -> ImageRecord:
        if not self.upload_preset:
            logger.error("[MediaStore] Upload attempted without an upload preset")
            raise UpstreamUnavailable("Upload is not configured")

        url = f"{self.base_url}/image/upload"
        files = {"file": (filename, content, content_type or "application/octet-stream")}
        data = {"upload_preset": self.upload_preset, "tags": tag}
        try:
            response = await self.http_client.post(url, data=data, files=files)
            response.raise_for_status()
            return _to_record(response.json())
        except httpx.HTTPStatusError as e:
            logger.error(
                "[MediaStore] Upload of %s failed with HTTP %s",
                filename,
                e.response.status_code,
            )
            raise UpstreamUnavailable("Error while uploading images") from e
        except httpx.HTTPError as e:
            logger.error("[MediaStore] Upload request error for %s: %s", filename, e)
            raise UpstreamUnavailable("Error while uploading images") from e
        except (ValueError, KeyError, ValidationError) as e:
            logger.error("[MediaStore] Malformed upload response for %s", filename)
            raise UpstreamUnavailable("Error while uploading images") from e

    async def ping(self) -> float:
        """Returns the latency of a count query in milliseconds."""
        start_time = time.perf_counter()
        await self.count_images()
        end_time = time.perf_counter()
        return round((end_time - start_time) * 1000, 2)
