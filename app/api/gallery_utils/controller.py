"""
Per-session gallery state: authentication state machine, paging cursor,
loaded page and the Selection Set.

One ``GallerySession`` lives for each browser session and is handed to the
request handlers through the session store; nothing here is process-wide.
"""

import logging
from dataclasses import dataclass
from time import monotonic
from typing import Callable, List, Optional, Set, Union

from app.api.auth_utils.verifiers import CredentialVerifier, Principal
from app.api.media_utils.media_store import MediaStore, attachment_url, identifier_stem
from app.core.config import PAGE_SIZE
from app.core.errors import AuthRejected, AuthUnavailable, NotAuthenticated, NothingSelected
from app.models.gallery.ImageRecord import ImagePage, ImageRecord
from app.models.gallery.SessionState import SessionState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectDownload:
    url: str
    filename: str


@dataclass(frozen=True)
class ArchiveDownload:
    identifiers: List[str]


DownloadPlan = Union[DirectDownload, ArchiveDownload]


class GallerySession:
    def __init__(
        self,
        session_id: str,
        tag: str,
        page_size: int = PAGE_SIZE,
        welcome_seconds: float = 5.0,
        clock: Callable[[], float] = monotonic,
    ):
        self.session_id = session_id
        self.tag = tag
        self.page_size = page_size
        self.welcome_seconds = welcome_seconds
        self._clock = clock

        self.state = SessionState.UNAUTHENTICATED
        self.principal: Optional[Principal] = None
        self.cursor: Optional[str] = None
        self.cursor_history: List[Optional[str]] = []
        self.page: Optional[ImagePage] = None
        self.selection: Set[str] = set()
        self.welcome_until = 0.0
        # bumped by each post-upload refresh; older refreshes stop when it moves
        self.refresh_generation = 0

    # --- authentication ---

    async def authenticate(self, verifier: CredentialVerifier, code: str) -> Principal:
        self.state = SessionState.AUTHENTICATING
        try:
            principal = await verifier.verify(code)
        except (AuthRejected, AuthUnavailable) as e:
            self.state = SessionState.UNAUTHENTICATED
            logger.warning(f"Session {self.session_id[:8]} failed to authenticate: {e.message}")
            raise

        self.state = SessionState.AUTHENTICATED
        self.principal = principal
        self.cursor = None
        self.cursor_history = []
        self.page = None
        self.welcome_until = self._clock() + self.welcome_seconds
        return principal

    @property
    def is_authenticated(self) -> bool:
        return self.state == SessionState.AUTHENTICATED

    @property
    def show_welcome(self) -> bool:
        return self.is_authenticated and self._clock() < self.welcome_until

    def logout(self):
        self.state = SessionState.UNAUTHENTICATED
        self.principal = None
        self.cursor = None
        self.cursor_history = []
        self.page = None
        self.selection.clear()
        self.welcome_until = 0.0

    def _require_authenticated(self):
        if not self.is_authenticated:
            raise NotAuthenticated()

    # --- paging ---

    @property
    def current_page_number(self) -> int:
        return len(self.cursor_history) + 1

    async def load_page(self, store: MediaStore) -> ImagePage:
        return await self._move_to(store, self.cursor, self.cursor_history)

    async def _move_to(
        self,
        store: MediaStore,
        cursor: Optional[str],
        history: List[Optional[str]],
    ) -> ImagePage:
        # cursor and history change only once the target page has loaded
        self._require_authenticated()
        page = await store.list_images(self.tag, cursor, self.page_size)
        self.cursor = cursor
        self.cursor_history = history
        self.page = page
        return page

    async def ensure_page(self, store: MediaStore) -> ImagePage:
        if self.page is None:
            return await self.load_page(store)
        return self.page

    async def next_page(self, store: MediaStore) -> ImagePage:
        page = await self.ensure_page(store)
        if not page.next_cursor:
            return page
        return await self._move_to(
            store, page.next_cursor, self.cursor_history + [self.cursor]
        )

    async def prev_page(self, store: MediaStore) -> ImagePage:
        self._require_authenticated()
        if not self.cursor_history:
            return await self._move_to(store, None, [])
        return await self._move_to(
            store, self.cursor_history[-1], self.cursor_history[:-1]
        )

    async def first_page(self, store: MediaStore) -> ImagePage:
        return await self._move_to(store, None, [])

    # --- selection ---
    # Selection survives page changes; only toggle/select_all/clear_all/logout touch it.

    def toggle_select(self, identifier: str) -> Set[str]:
        self._require_authenticated()
        if identifier in self.selection:
            self.selection.discard(identifier)
        else:
            self.selection.add(identifier)
        return self.selection

    def select_all(self) -> Set[str]:
        self._require_authenticated()
        self.selection = set(self.page.identifiers) if self.page else set()
        return self.selection

    def clear_all(self) -> Set[str]:
        self._require_authenticated()
        self.selection = set()
        return self.selection

    # --- download ---

    def _loaded_record(self, identifier: str) -> Optional[ImageRecord]:
        if self.page is None:
            return None
        for record in self.page.records:
            if record.identifier == identifier:
                return record
        return None

    async def plan_download(self, store: MediaStore) -> DownloadPlan:
        """
        One selected image is downloaded straight from the host; two or more
        go through the archive assembler.
        """
        self._require_authenticated()
        if not self.selection:
            raise NothingSelected()

        if len(self.selection) > 1:
            return ArchiveDownload(identifiers=sorted(self.selection))

        (identifier,) = self.selection
        record = self._loaded_record(identifier)
        if record is None:
            # selected on another page
            resolved = await store.resolve_images([identifier])
            record = next((r for r in resolved if r.identifier == identifier), None)
        if record is None:
            raise NothingSelected(f"Selected image {identifier} no longer exists")

        return DirectDownload(
            url=attachment_url(record.source_url),
            filename=identifier_stem(identifier) or "photo.jpg",
        )
