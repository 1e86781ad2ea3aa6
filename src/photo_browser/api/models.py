"""Pydantic request and response models for the presentation bridge."""

from datetime import datetime

from pydantic import BaseModel

from photo_browser.adapters.pexels_models import PexelsPhoto
from photo_browser.domain.history import SearchHistoryRecord
from photo_browser.services.profile import ProfileState
from photo_browser.services.search import SearchState


class SearchRequest(BaseModel):
    """Submitted search query."""

    query: str


class QueryTextRequest(BaseModel):
    """Raw query text as typed, before debouncing."""

    text: str


class ToggleFavoriteRequest(BaseModel):
    """Photo whose favorite state should flip."""

    photo: PexelsPhoto


class ProfileUpdateRequest(BaseModel):
    """Edited profile fields."""

    name: str
    avatar_ref: str | None = None


class SearchStateResponse(BaseModel):
    """Search session state."""

    status: str
    query: str | None
    page: int
    photos: list[PexelsPhoto]
    loading: bool
    error: str | None
    notice: str | None
    favorite_ids: list[int]

    @classmethod
    def from_state(
        cls, state: SearchState, favorite_ids: frozenset[int]
    ) -> "SearchStateResponse":
        return cls(
            status=state.status.value,
            query=state.query,
            page=state.page,
            photos=[PexelsPhoto.from_record(photo) for photo in state.photos],
            loading=state.loading,
            error=state.error,
            notice=state.notice,
            favorite_ids=sorted(favorite_ids),
        )


class HistoryEntry(BaseModel):
    """A recent search."""

    query: str
    searched_at: datetime

    @classmethod
    def from_record(cls, record: SearchHistoryRecord) -> "HistoryEntry":
        return cls(query=record.search_query, searched_at=record.searched_at)


class ProfileResponse(BaseModel):
    """Profile values currently shown."""

    name: str
    avatar_ref: str | None
    save_error: str | None

    @classmethod
    def from_state(cls, state: ProfileState) -> "ProfileResponse":
        return cls(
            name=state.name, avatar_ref=state.avatar_ref, save_error=state.save_error
        )
