"""Search and pagination state machine."""

import logging
from dataclasses import dataclass, field, replace
from enum import StrEnum

from photo_browser.domain.errors import PhotoStoreError
from photo_browser.domain.history import SearchHistoryRecord
from photo_browser.domain.photos import FavoritePhotoRecord, PhotoRecord
from photo_browser.services.observable import ObservableValue
from photo_browser.services.photos import PhotoRepository

NO_RESULTS_MESSAGE = 'No results found for "{query}"'

_logger = logging.getLogger(__name__)


class SearchStatus(StrEnum):
    """Lifecycle of a search session."""

    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    LOADING_MORE = "loading_more"
    ERROR = "error"


@dataclass(frozen=True)
class SearchState:
    """Snapshot of a search session published to the presentation layer."""

    status: SearchStatus = SearchStatus.IDLE
    query: str | None = None
    page: int = 1
    photos: tuple[PhotoRecord, ...] = ()
    error: str | None = None
    notice: str | None = None

    @property
    def loading(self) -> bool:
        return self.status in {SearchStatus.LOADING, SearchStatus.LOADING_MORE}


@dataclass
class SearchCoordinator:
    """Owns query, page and accumulated results for one UI session.

    At most one page load runs at a time: ``load_next_page`` is dropped while
    a load is in flight. A new ``submit_query``, ``clear`` or ``close``
    supersedes any in-flight load, whose result is then discarded.
    """

    repository: PhotoRepository
    page_size: int = 20
    state: ObservableValue[SearchState] = field(init=False)
    favorite_ids: ObservableValue[frozenset[int]] = field(init=False)
    recent_searches: ObservableValue[tuple[SearchHistoryRecord, ...]] = field(
        init=False
    )

    def __post_init__(self) -> None:
        self.state = ObservableValue(SearchState())
        self.favorite_ids = self.repository.favorites.map(_favorite_ids)
        self.recent_searches = self.repository.recent_searches.map(tuple)
        self._generation = 0
        self._closed = False

    async def submit_query(self, text: str) -> None:
        """Start a fresh search from page one, replacing current results."""
        query = text.strip()
        if not query:
            self.clear()
            return
        if self._closed:
            return

        self._generation += 1
        generation = self._generation
        self.state.set(SearchState(status=SearchStatus.LOADING, query=query))
        result = await self.repository.search_photos(
            query, page=1, page_size=self.page_size
        )
        if not self._is_current(generation):
            _logger.debug("Dropping superseded search result: query=%s", query)
            return

        if not result.ok:
            self.state.set(
                SearchState(
                    status=SearchStatus.ERROR, query=query, error=result.message
                )
            )
            return
        photos = tuple(result.value or ())
        self.state.set(
            SearchState(
                status=SearchStatus.LOADED,
                query=query,
                photos=photos,
                notice=None if photos else NO_RESULTS_MESSAGE.format(query=query),
            )
        )

    async def load_next_page(self) -> None:
        """Append the next page of results for the last submitted query."""
        current = self.state.value
        if self._closed or current.query is None:
            _logger.debug("Load more ignored: no active query")
            return
        if current.loading:
            _logger.debug("Load more ignored: already loading")
            return

        generation = self._generation
        next_page = current.page + 1
        self.state.set(
            replace(
                current,
                status=SearchStatus.LOADING_MORE,
                page=next_page,
                error=None,
                notice=None,
            )
        )
        result = await self.repository.search_photos(
            current.query, page=next_page, page_size=self.page_size
        )
        if not self._is_current(generation):
            _logger.debug("Dropping superseded page: page=%s", next_page)
            return

        latest = self.state.value
        if result.ok and result.value:
            self.state.set(
                replace(
                    latest,
                    status=SearchStatus.LOADED,
                    photos=latest.photos + tuple(result.value),
                )
            )
        elif result.ok:
            _logger.debug("Reached end of results at page=%s", next_page)
            self.state.set(
                replace(
                    latest,
                    status=_settled_status(latest.photos, None),
                    page=next_page - 1,
                )
            )
        else:
            self.state.set(
                replace(
                    latest,
                    status=_settled_status(latest.photos, result.message),
                    page=next_page - 1,
                    error=result.message,
                )
            )

    async def toggle_favorite(self, photo: PhotoRecord) -> None:
        """Flip a photo's favorite state; the id mirror follows the store."""
        try:
            await self.repository.toggle_favorite(photo)
        except PhotoStoreError as exc:
            _logger.exception("Failed to toggle favorite: id=%s", photo.id)
            self.state.set(
                replace(self.state.value, error=f"Could not update favorites: {exc}")
            )

    def is_favorite(self, photo_id: int) -> bool:
        return photo_id in self.favorite_ids.value

    async def suggestions(self, prefix: str) -> list[SearchHistoryRecord]:
        """Return recent searches matching a typed prefix."""
        return await self.repository.search_in_history(prefix)

    async def clear_history(self) -> None:
        await self.repository.clear_search_history()

    def clear(self) -> None:
        """Return to idle, discarding query, page, results and error."""
        self._generation += 1
        self.state.set(SearchState())

    def close(self) -> None:
        """Detach from storage streams and ignore any late results."""
        self._closed = True
        self._generation += 1
        self.favorite_ids.close()
        self.recent_searches.close()

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation


def _favorite_ids(favorites: tuple[FavoritePhotoRecord, ...]) -> frozenset[int]:
    return frozenset(favorite.id for favorite in favorites)


def _settled_status(photos: tuple[PhotoRecord, ...], error: str | None) -> SearchStatus:
    if error and not photos:
        return SearchStatus.ERROR
    return SearchStatus.LOADED
