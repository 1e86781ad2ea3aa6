"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from photo_browser.adapters.pexels_client import PhotoApiClient
from photo_browser.adapters.sqlite_photo_store import SqlitePhotoStore
from photo_browser.config import Settings
from photo_browser.containers import AppContainer
from photo_browser.domain.photos import PhotoRecord, PhotoSource
from photo_browser.services.debounce import QueryDebouncer
from photo_browser.services.photos import PhotoRepository
from photo_browser.services.profile import ProfileCoordinator
from photo_browser.services.search import SearchCoordinator


def photo_payload(photo_id: int) -> dict[str, object]:
    """Return a Pexels-shaped photo payload."""
    base = f"https://images.pexels.com/photos/{photo_id}"
    return {
        "id": photo_id,
        "width": 4000 + photo_id,
        "height": 3000,
        "url": f"https://www.pexels.com/photo/{photo_id}/",
        "photographer": f"Photographer {photo_id}",
        "photographer_url": f"https://www.pexels.com/@p{photo_id}",
        "photographer_id": photo_id * 10,
        "avg_color": "#7A6B5C",
        "src": {
            "original": f"{base}/original.jpeg",
            "large2x": f"{base}/large2x.jpeg",
            "large": f"{base}/large.jpeg",
            "medium": f"{base}/medium.jpeg",
            "small": f"{base}/small.jpeg",
            "tiny": f"{base}/tiny.jpeg",
        },
        "liked": False,
        "alt": "",
    }


def make_photo(photo_id: int) -> PhotoRecord:
    """Return a domain photo matching ``photo_payload``."""
    base = f"https://images.pexels.com/photos/{photo_id}"
    return PhotoRecord(
        id=photo_id,
        width=4000 + photo_id,
        height=3000,
        photographer=f"Photographer {photo_id}",
        photographer_url=f"https://www.pexels.com/@p{photo_id}",
        src=PhotoSource(
            original=f"{base}/original.jpeg",
            large=f"{base}/large.jpeg",
            medium=f"{base}/medium.jpeg",
            small=f"{base}/small.jpeg",
        ),
    )


def page_of(start: int, count: int) -> list[dict[str, object]]:
    return [photo_payload(photo_id) for photo_id in range(start, start + count)]


@dataclass
class TickingClock:
    """Clock that advances one second on every call."""

    current: datetime = field(
        default_factory=lambda: datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
    )

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@dataclass
class FakePhotoApiClient(PhotoApiClient):
    """Fake photo API with canned pages keyed by (query, page)."""

    pages: dict[tuple[str, int], list[dict[str, object]]] = field(
        default_factory=dict
    )
    photos: dict[int, dict[str, object]] = field(default_factory=dict)
    curated: dict[int, list[dict[str, object]]] = field(default_factory=dict)
    error: Exception | None = None
    calls: list[tuple[object, ...]] = field(default_factory=list)

    async def search_photos(
        self, query: str, page: int = 1, per_page: int = 20
    ) -> dict[str, object]:
        self.calls.append(("search", query, page, per_page))
        if self.error is not None:
            raise self.error
        photos = self.pages.get((query, page), [])
        return {"page": page, "per_page": per_page, "photos": photos}

    async def get_photo(self, photo_id: int) -> dict[str, object]:
        self.calls.append(("photo", photo_id))
        if self.error is not None:
            raise self.error
        return self.photos[photo_id]

    async def curated_photos(
        self, page: int = 1, per_page: int = 20
    ) -> dict[str, object]:
        self.calls.append(("curated", page, per_page))
        if self.error is not None:
            raise self.error
        photos = self.curated.get(page, [])
        return {"page": page, "per_page": per_page, "photos": photos}

    async def close(self) -> None:
        return None

    @property
    def search_calls(self) -> list[tuple[object, ...]]:
        return [call for call in self.calls if call[0] == "search"]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        pexels_api_key="test-key",
        database_path=":memory:",
        search_debounce_seconds=0.01,
    )


@pytest.fixture
def store() -> SqlitePhotoStore:
    return SqlitePhotoStore.open(":memory:")


@pytest.fixture
def photo_client() -> FakePhotoApiClient:
    return FakePhotoApiClient()


@pytest.fixture
def repository(
    photo_client: FakePhotoApiClient, store: SqlitePhotoStore
) -> PhotoRepository:
    return PhotoRepository(client=photo_client, store=store, clock=TickingClock())


@pytest.fixture
def container(
    settings: Settings,
    photo_client: FakePhotoApiClient,
    store: SqlitePhotoStore,
    repository: PhotoRepository,
) -> AppContainer:
    search_coordinator = SearchCoordinator(
        repository=repository, page_size=settings.search_page_size
    )
    query_debouncer = QueryDebouncer(
        submit=search_coordinator.submit_query,
        window_seconds=settings.search_debounce_seconds,
    )
    profile_coordinator = ProfileCoordinator(repository)

    async def close_resources() -> None:
        query_debouncer.cancel()
        search_coordinator.close()
        profile_coordinator.close()

    return AppContainer(
        settings=settings,
        photo_client=photo_client,
        store=store,
        repository=repository,
        search_coordinator=search_coordinator,
        query_debouncer=query_debouncer,
        profile_coordinator=profile_coordinator,
        close_resources=close_resources,
    )
