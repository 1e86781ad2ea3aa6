"""Photo repository mediating the remote photo service and the local store."""

import json
import logging
from collections.abc import Callable
from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

import httpx
from pydantic import ValidationError

from photo_browser.adapters.pexels_client import PhotoApiClient
from photo_browser.adapters.pexels_models import PexelsPhoto, PexelsPhotoPage
from photo_browser.domain.errors import (
    PhotoServiceError,
    PhotoServiceUnavailableError,
    PhotoStoreError,
)
from photo_browser.domain.history import SearchHistoryRecord, normalize_query
from photo_browser.domain.photos import FavoritePhotoRecord, PhotoRecord
from photo_browser.domain.profile import UserProfileRecord
from photo_browser.domain.results import Result
from photo_browser.services.observable import ObservableValue

_logger = logging.getLogger(__name__)


class PhotoStore(Protocol):
    """Persistence interface for favorites, search history and the profile."""

    def atomic(self) -> AbstractContextManager[None]:
        """Group several writes into one transaction and one emission per table."""

    def get_favorite(self, photo_id: int) -> FavoritePhotoRecord | None:
        """Return a favorite by photo id, if present."""

    def is_favorite(self, photo_id: int) -> bool:
        """Return True when the photo id is favorited."""

    def upsert_favorite(self, favorite: FavoritePhotoRecord) -> None:
        """Insert a favorite, replacing any row with the same id."""

    def delete_favorite(self, photo_id: int) -> None:
        """Delete a favorite by photo id."""

    def delete_all_favorites(self) -> None:
        """Delete every favorite."""

    def list_favorites(self) -> list[FavoritePhotoRecord]:
        """Return favorites, most recently saved first."""

    def count_favorites(self) -> int:
        """Return the number of favorites."""

    def insert_search(
        self, search_query: str, searched_at: datetime
    ) -> SearchHistoryRecord:
        """Insert a history row and return it."""

    def delete_search(self, search_query: str) -> None:
        """Delete history rows with exactly this query text."""

    def keep_recent_searches(self, limit: int) -> None:
        """Delete all history rows except the most recent ``limit``."""

    def list_recent_searches(self, limit: int) -> list[SearchHistoryRecord]:
        """Return the most recent history rows."""

    def search_history_prefix(
        self, prefix: str, limit: int
    ) -> list[SearchHistoryRecord]:
        """Return the most recent history rows starting with ``prefix``."""

    def clear_history(self) -> None:
        """Delete every history row."""

    def get_profile(self) -> UserProfileRecord | None:
        """Return the singleton profile row, if present."""

    def upsert_profile(self, profile: UserProfileRecord) -> None:
        """Create or overwrite the singleton profile row."""

    def observe_favorites(self) -> ObservableValue[tuple[FavoritePhotoRecord, ...]]:
        """Return the favorites observation stream."""

    def observe_recent_searches(
        self,
    ) -> ObservableValue[tuple[SearchHistoryRecord, ...]]:
        """Return the recent searches observation stream."""

    def observe_profile(self) -> ObservableValue[UserProfileRecord | None]:
        """Return the profile observation stream."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class PhotoRepository:
    """Single mediator between the photo API and local storage.

    Network operations return a ``Result`` and never raise. Store-only
    operations raise ``PhotoStoreError`` when the store fails.
    """

    client: PhotoApiClient
    store: PhotoStore
    history_limit: int = 10
    suggestion_limit: int = 5
    clock: Callable[[], datetime] = _utcnow

    @property
    def favorites(self) -> ObservableValue[tuple[FavoritePhotoRecord, ...]]:
        return self.store.observe_favorites()

    @property
    def recent_searches(self) -> ObservableValue[tuple[SearchHistoryRecord, ...]]:
        return self.store.observe_recent_searches()

    @property
    def profile(self) -> ObservableValue[UserProfileRecord | None]:
        return self.store.observe_profile()

    async def search_photos(
        self, query: str, page: int, page_size: int
    ) -> Result[list[PhotoRecord]]:
        """Search the photo service and record the query in history."""
        _logger.info("Searching photos: query=%s page=%s", query, page)
        try:
            payload = await self.client.search_photos(
                query, page=page, per_page=page_size
            )
            photos = _parse_page(payload)
        except Exception as exc:
            return _to_failure(exc, action="search")

        self._record_search(query)
        _logger.info(
            "Photos received: query=%s page=%s count=%s", query, page, len(photos)
        )
        return Result.success(photos)

    async def curated_photos(
        self, page: int, page_size: int
    ) -> Result[list[PhotoRecord]]:
        """Fetch a page of curated photos."""
        try:
            payload = await self.client.curated_photos(page=page, per_page=page_size)
            photos = _parse_page(payload)
        except Exception as exc:
            return _to_failure(exc, action="curated")
        _logger.info("Curated photos received: page=%s count=%s", page, len(photos))
        return Result.success(photos)

    async def get_photo_by_id(self, photo_id: int) -> Result[PhotoRecord]:
        """Return a photo, preferring the local favorite copy over the network."""
        try:
            favorite = self.store.get_favorite(photo_id)
            if favorite is not None:
                _logger.debug("Photo served from favorites: id=%s", photo_id)
                return Result.success(favorite.to_photo())

            _logger.info("Fetching photo: id=%s", photo_id)
            payload = await self.client.get_photo(photo_id)
            return Result.success(PexelsPhoto.model_validate(payload).to_record())
        except Exception as exc:
            return _to_failure(exc, action=f"get_photo:{photo_id}")

    async def toggle_favorite(self, photo: PhotoRecord) -> bool:
        """Flip favorite membership for a photo and return the new state."""
        if self.store.is_favorite(photo.id):
            _logger.info("Removing favorite: id=%s", photo.id)
            self.store.delete_favorite(photo.id)
            return False
        _logger.info("Adding favorite: id=%s", photo.id)
        self.store.upsert_favorite(photo.to_favorite(saved_at=self.clock()))
        return True

    async def is_favorite(self, photo_id: int) -> bool:
        return self.store.is_favorite(photo_id)

    async def favorite_photos(self) -> list[PhotoRecord]:
        """Return all favorites as photo records, most recently saved first."""
        return [favorite.to_photo() for favorite in self.store.list_favorites()]

    async def favorite_count(self) -> int:
        return self.store.count_favorites()

    async def clear_favorites(self) -> None:
        self.store.delete_all_favorites()
        _logger.info("Favorites cleared")

    async def search_in_history(self, prefix: str) -> list[SearchHistoryRecord]:
        """Return recent history entries starting with a prefix."""
        return self.store.search_history_prefix(prefix.lower(), self.suggestion_limit)

    async def clear_search_history(self) -> None:
        self.store.clear_history()
        _logger.info("Search history cleared")

    async def save_user_profile(self, name: str, avatar_ref: str | None) -> None:
        """Overwrite the singleton profile row."""
        self.store.upsert_profile(UserProfileRecord(name=name, photo_uri=avatar_ref))
        _logger.info("Profile saved: name=%s", name)

    async def get_user_profile(self) -> UserProfileRecord | None:
        return self.store.get_profile()

    def _record_search(self, query: str) -> None:
        """Move a query to the top of history and trim the table."""
        normalized = normalize_query(query)
        if not normalized:
            return
        try:
            with self.store.atomic():
                self.store.delete_search(normalized)
                self.store.insert_search(normalized, self.clock())
                self.store.keep_recent_searches(self.history_limit)
        except PhotoStoreError:
            _logger.exception("Failed to record search: query=%s", normalized)
            return
        _logger.debug("Search recorded: query=%s", normalized)


def _parse_page(payload: dict[str, object]) -> list[PhotoRecord]:
    """Validate a paginated payload and convert its photos."""
    page = PexelsPhotoPage.model_validate(payload)
    return [photo.to_record() for photo in page.photos]


def _to_failure(exc: Exception, *, action: str) -> Result:
    """Map an exception raised during a remote call to a failure result."""
    if isinstance(exc, httpx.TransportError):
        _logger.warning("Photo %s failed, service unreachable: %s", action, exc)
        return _failure_from(PhotoServiceUnavailableError(), exc)
    if isinstance(exc, httpx.HTTPStatusError):
        status_code = exc.response.status_code
        _logger.warning("Photo %s failed: status=%s", action, status_code)
        return _failure_from(
            PhotoServiceError(f"Photo service returned HTTP {status_code}: {exc}"),
            exc,
        )
    if isinstance(exc, (ValidationError, json.JSONDecodeError)):
        _logger.warning("Photo %s returned a malformed payload: %s", action, exc)
        return _failure_from(
            PhotoServiceError(f"Photo service returned a malformed response: {exc}"),
            exc,
        )
    _logger.exception("Photo %s failed", action)
    return Result.failure(exc)


def _failure_from(error: PhotoServiceError, cause: Exception) -> Result:
    error.__cause__ = cause
    return Result.failure(error)
