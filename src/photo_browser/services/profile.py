"""Profile coordinator with optimistic updates."""

import asyncio
import logging
from dataclasses import dataclass, field, replace

from photo_browser.domain.errors import PhotoStoreError
from photo_browser.domain.profile import UserProfileRecord
from photo_browser.services.observable import ObservableValue
from photo_browser.services.photos import PhotoRepository

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProfileState:
    """Profile values shown to the user."""

    name: str = ""
    avatar_ref: str | None = None
    save_error: str | None = None


@dataclass
class ProfileCoordinator:
    """Shows profile edits immediately and persists them in the background.

    Every edit bumps a local version. Store emissions are ignored while an
    edit newer than the one currently being persisted is still queued, so a
    slow write cannot revert a newer value on screen.
    """

    repository: PhotoRepository
    state: ObservableValue[ProfileState] = field(init=False)

    def __post_init__(self) -> None:
        self.state = ObservableValue(ProfileState())
        self._local_version = 0
        self._persisting_version = 0
        self._pending: set[asyncio.Task[None]] = set()
        self._closed = False
        self._subscription = self.repository.profile.subscribe(self._on_profile)

    @property
    def name(self) -> str:
        return self.state.value.name

    @property
    def avatar_ref(self) -> str | None:
        return self.state.value.avatar_ref

    def update_profile(self, name: str, avatar_ref: str | None) -> asyncio.Task[None]:
        """Apply an edit now and schedule its persistence."""
        self._local_version += 1
        version = self._local_version
        self.state.set(ProfileState(name=name, avatar_ref=avatar_ref))
        task = asyncio.get_running_loop().create_task(
            self._persist(version, name, avatar_ref)
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def wait_for_pending(self) -> None:
        """Wait for every scheduled save to finish."""
        while self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    def close(self) -> None:
        """Stop following the store; scheduled saves still complete."""
        self._closed = True
        self._subscription.cancel()

    async def _persist(self, version: int, name: str, avatar_ref: str | None) -> None:
        self._persisting_version = version
        try:
            await self.repository.save_user_profile(name, avatar_ref)
        except PhotoStoreError as exc:
            _logger.exception("Failed to save profile: version=%s", version)
            if version == self._local_version and not self._closed:
                self.state.set(
                    replace(
                        self.state.value, save_error=f"Could not save profile: {exc}"
                    )
                )

    def _on_profile(self, record: UserProfileRecord | None) -> None:
        if self._closed or record is None:
            return
        if self._persisting_version < self._local_version:
            _logger.debug(
                "Ignoring profile emission older than local edit %s",
                self._local_version,
            )
            return
        self.state.set(
            ProfileState(name=record.name or "", avatar_ref=record.photo_uri)
        )
