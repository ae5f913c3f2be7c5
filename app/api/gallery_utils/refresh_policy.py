"""
Re-listing after an upload.

Freshly uploaded images take a moment to show up in the host's search index.
Instead of hammering the listing on a fixed timer, the first page is polled
with exponential backoff until it changes or the time budget runs out.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterator, Optional

from app.api.gallery_utils.controller import GallerySession
from app.api.media_utils.media_store import MediaStore
from app.core.errors import UpstreamUnavailable
from app.models.gallery.ImageRecord import ImagePage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackoffPolicy:
    initial_delay: float = 1.0
    multiplier: float = 2.0
    max_delay: float = 8.0
    max_elapsed: float = 30.0

    def delays(self) -> Iterator[float]:
        elapsed = 0.0
        delay = self.initial_delay
        while elapsed + delay <= self.max_elapsed:
            yield delay
            elapsed += delay
            delay = min(delay * self.multiplier, self.max_delay)


def _page_changed(baseline: Optional[ImagePage], page: ImagePage) -> bool:
    if baseline is None:
        return True
    return (
        page.total_count != baseline.total_count
        or page.identifiers != baseline.identifiers
    )


async def refresh_after_upload(
    session: GallerySession,
    store: MediaStore,
    policy: BackoffPolicy = BackoffPolicy(),
    baseline: Optional[ImagePage] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> bool:
    """
    Polls the first page until it differs from ``baseline``.

    Returns True when a change was observed. The refreshed page replaces the
    session's loaded page only while the session sits on the first page.
    A later refresh for the same session supersedes this one, which then
    returns False without touching the session.
    """
    session.refresh_generation += 1
    generation = session.refresh_generation

    if baseline is None:
        try:
            baseline = await store.list_images(session.tag, None, session.page_size)
        except UpstreamUnavailable:
            logger.warning("Could not take a baseline listing before polling")

    attempts = 0
    for delay in policy.delays():
        await sleep(delay)
        if session.refresh_generation != generation:
            logger.info(f"Upload refresh superseded after {attempts} attempt(s)")
            return False
        attempts += 1
        try:
            page = await store.list_images(session.tag, None, session.page_size)
        except UpstreamUnavailable:
            logger.warning(f"Listing failed during upload refresh (attempt {attempts})")
            continue

        if session.refresh_generation != generation:
            logger.info(f"Upload refresh superseded after {attempts} attempt(s)")
            return False
        if _page_changed(baseline, page):
            if session.is_authenticated and session.cursor is None:
                session.page = page
            logger.info(f"Upload visible in listing after {attempts} attempt(s)")
            return True

    logger.info(f"Upload not visible after {attempts} attempts, giving up")
    return False
