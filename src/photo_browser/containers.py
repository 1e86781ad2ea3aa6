"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from photo_browser.adapters.pexels_client import HttpxPexelsClient, PhotoApiClient
from photo_browser.adapters.sqlite_photo_store import SqlitePhotoStore
from photo_browser.config import Settings
from photo_browser.services.debounce import QueryDebouncer
from photo_browser.services.photos import PhotoRepository, PhotoStore
from photo_browser.services.profile import ProfileCoordinator
from photo_browser.services.search import SearchCoordinator


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    photo_client: PhotoApiClient
    store: PhotoStore
    repository: PhotoRepository
    search_coordinator: SearchCoordinator
    query_debouncer: QueryDebouncer
    profile_coordinator: ProfileCoordinator
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container.

    The store is opened once here and shared by reference; nothing else in
    the process opens the database.
    """
    resolved_settings = settings or Settings()
    store = SqlitePhotoStore.open(
        resolved_settings.database_path,
        recent_limit=resolved_settings.search_history_limit,
    )
    photo_client = HttpxPexelsClient.create(
        api_key=resolved_settings.pexels_api_key,
        base_url=resolved_settings.pexels_base_url,
        timeout_seconds=resolved_settings.pexels_timeout_seconds,
    )
    repository = PhotoRepository(
        client=photo_client,
        store=store,
        history_limit=resolved_settings.search_history_limit,
        suggestion_limit=resolved_settings.search_suggestion_limit,
    )
    search_coordinator = SearchCoordinator(
        repository=repository,
        page_size=resolved_settings.search_page_size,
    )
    query_debouncer = QueryDebouncer(
        submit=search_coordinator.submit_query,
        window_seconds=resolved_settings.search_debounce_seconds,
    )
    profile_coordinator = ProfileCoordinator(repository)

    async def close_resources() -> None:
        query_debouncer.cancel()
        await profile_coordinator.wait_for_pending()
        search_coordinator.close()
        profile_coordinator.close()
        await photo_client.close()
        store.close()

    return AppContainer(
        settings=resolved_settings,
        photo_client=photo_client,
        store=store,
        repository=repository,
        search_coordinator=search_coordinator,
        query_debouncer=query_debouncer,
        profile_coordinator=profile_coordinator,
        close_resources=close_resources,
    )
