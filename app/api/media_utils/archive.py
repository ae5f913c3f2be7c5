"""
Bulk download assembly: resolve identifiers, fetch every image concurrently
and pack the results into a single ZIP payload.

The build is all-or-nothing. One unresolved identifier or one failed fetch
aborts the whole archive.
"""

import asyncio
import io
import logging
import zipfile
from typing import List

from app.api.media_utils.media_store import MediaStore, identifier_stem
from app.core.errors import ArchiveBuildFailed, FetchFailed, UpstreamUnavailable
from app.models.gallery.ImageRecord import ImageRecord

logger = logging.getLogger(__name__)

ARCHIVE_FILENAME = "photos.zip"
ARCHIVE_CONTENT_TYPE = "application/zip"
ENTRY_EXTENSION = "jpg"
DEFAULT_STEM = "photo"


def entry_name(identifier: str) -> str:
    stem = identifier_stem(identifier) or DEFAULT_STEM
    return f"{stem}.{ENTRY_EXTENSION}"


def archive_headers() -> dict:
    return {"Content-Disposition": f"attachment; filename={ARCHIVE_FILENAME}"}


def pack_entries(entries: List[tuple[str, bytes]]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, content in entries:
            archive.writestr(name, content)
    return buffer.getvalue()


async def _fetch_all(store: MediaStore, records: List[ImageRecord]) -> List[bytes]:
    tasks = [asyncio.create_task(store.fetch_bytes(r.source_url)) for r in records]
    try:
        return await asyncio.gather(*tasks)
    except Exception:
        for task in tasks:
            task.cancel()
        # let cancelled fetches unwind before the client is reused
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def build_archive(store: MediaStore, identifiers: List[str]) -> bytes:
    """
    Builds a ZIP holding one ``<stem>.jpg`` entry per identifier.

    Raises:
        ArchiveBuildFailed: an identifier did not resolve, the lookup failed
            or any single fetch failed.
    """
    if not identifiers:
        return pack_entries([])

    requested = list(dict.fromkeys(identifiers))

    try:
        records = await store.resolve_images(requested)
    except UpstreamUnavailable as e:
        raise ArchiveBuildFailed() from e

    resolved = {record.identifier: record for record in records}
    missing = [identifier for identifier in requested if identifier not in resolved]
    if missing:
        logger.error(
            f"[Archive] {len(missing)} of {len(requested)} identifiers did not resolve: "
            f"{', '.join(missing[:5])}"
        )
        raise ArchiveBuildFailed()

    ordered = [resolved[identifier] for identifier in requested]

    logger.info(f"[Archive] Fetching {len(ordered)} images")
    try:
        contents = await _fetch_all(store, ordered)
    except FetchFailed as e:
        logger.error(f"[Archive] Aborting archive build: {e}")
        raise ArchiveBuildFailed() from e

    payload = pack_entries(
        [(entry_name(record.identifier), content) for record, content in zip(ordered, contents)]
    )
    logger.info(f"[Archive] Built {ARCHIVE_FILENAME} ({len(payload) // 1024}KB, {len(ordered)} entries)")
    return payload
