"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status

from photo_browser.adapters.pexels_models import PexelsPhoto
from photo_browser.api.models import (
    HistoryEntry,
    ProfileResponse,
    ProfileUpdateRequest,
    QueryTextRequest,
    SearchRequest,
    SearchStateResponse,
    ToggleFavoriteRequest,
)
from photo_browser.app_logging import configure_logging
from photo_browser.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app exposing the coordinators as JSON endpoints."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        logger.info("Shutting down, closing resources")
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    def _container(request: Request) -> AppContainer:
        return request.app.state.container

    def _search_state(state_container: AppContainer) -> SearchStateResponse:
        coordinator = state_container.search_coordinator
        return SearchStateResponse.from_state(
            coordinator.state.value, coordinator.favorite_ids.value
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/search")
    async def search_state(request: Request) -> SearchStateResponse:
        """Return the current search session state."""
        return _search_state(_container(request))

    @app.post("/search")
    async def submit_search(
        body: SearchRequest, request: Request
    ) -> SearchStateResponse:
        """Run a fresh search from page one."""
        state_container = _container(request)
        await state_container.search_coordinator.submit_query(body.query)
        return _search_state(state_container)

    @app.post("/search/typed", status_code=status.HTTP_202_ACCEPTED)
    async def query_text_changed(
        body: QueryTextRequest, request: Request
    ) -> dict[str, str]:
        """Accept raw typed text; only the last value after the window is searched."""
        _container(request).query_debouncer.push(body.text)
        return {"status": "scheduled"}

    @app.post("/search/next")
    async def load_next_page(request: Request) -> SearchStateResponse:
        """Append the next page of results."""
        state_container = _container(request)
        await state_container.search_coordinator.load_next_page()
        return _search_state(state_container)

    @app.delete("/search")
    async def clear_search(request: Request) -> SearchStateResponse:
        """Reset the search session to idle."""
        state_container = _container(request)
        state_container.search_coordinator.clear()
        return _search_state(state_container)

    @app.get("/search/history")
    async def search_history(
        request: Request, prefix: str | None = None
    ) -> dict[str, list[HistoryEntry]]:
        """Return recent searches, filtered by prefix when given."""
        coordinator = _container(request).search_coordinator
        if prefix:
            records = await coordinator.suggestions(prefix)
        else:
            records = list(coordinator.recent_searches.value)
        return {"searches": [HistoryEntry.from_record(record) for record in records]}

    @app.delete("/search/history")
    async def clear_search_history(request: Request) -> dict[str, str]:
        """Delete all recent searches."""
        await _container(request).search_coordinator.clear_history()
        return {"status": "ok"}

    @app.get("/photos/curated")
    async def curated_photos(request: Request, page: int = 1) -> dict[str, object]:
        """Return a page of curated photos."""
        state_container = _container(request)
        result = await state_container.repository.curated_photos(
            page=page, page_size=state_container.settings.search_page_size
        )
        if not result.ok:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY, detail=result.message
            )
        return {
            "page": page,
            "photos": [
                PexelsPhoto.from_record(photo).model_dump()
                for photo in result.value or []
            ],
        }

    @app.get("/photos/{photo_id}")
    async def photo_detail(photo_id: int, request: Request) -> PexelsPhoto:
        """Return a single photo, served locally when favorited."""
        result = await _container(request).repository.get_photo_by_id(photo_id)
        if not result.ok or result.value is None:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY, detail=result.message
            )
        return PexelsPhoto.from_record(result.value)

    @app.get("/favorites")
    async def favorites(request: Request) -> dict[str, object]:
        """Return favorited photos, most recently saved first."""
        photos = await _container(request).repository.favorite_photos()
        return {
            "count": len(photos),
            "photos": [PexelsPhoto.from_record(photo).model_dump() for photo in photos],
        }

    @app.post("/favorites/toggle")
    async def toggle_favorite(
        body: ToggleFavoriteRequest, request: Request
    ) -> dict[str, object]:
        """Flip the favorite state of a photo."""
        coordinator = _container(request).search_coordinator
        photo = body.photo.to_record()
        await coordinator.toggle_favorite(photo)
        return {"id": photo.id, "favorite": coordinator.is_favorite(photo.id)}

    @app.delete("/favorites")
    async def clear_favorites(request: Request) -> dict[str, str]:
        """Remove every favorite."""
        await _container(request).repository.clear_favorites()
        return {"status": "ok"}

    @app.get("/profile")
    async def profile(request: Request) -> ProfileResponse:
        """Return the profile as currently shown."""
        coordinator = _container(request).profile_coordinator
        return ProfileResponse.from_state(coordinator.state.value)

    @app.put("/profile")
    async def update_profile(
        body: ProfileUpdateRequest, request: Request
    ) -> ProfileResponse:
        """Edit the profile and wait for it to be saved."""
        coordinator = _container(request).profile_coordinator
        await coordinator.update_profile(body.name, body.avatar_ref)
        return ProfileResponse.from_state(coordinator.state.value)

    return app
