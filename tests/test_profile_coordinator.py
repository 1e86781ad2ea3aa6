"""Tests for the profile coordinator."""

import asyncio

from photo_browser.adapters.sqlite_photo_store import SqlitePhotoStore
from photo_browser.domain.profile import UserProfileRecord
from photo_browser.services.photos import PhotoRepository
from photo_browser.services.profile import ProfileCoordinator, ProfileState


def test_starts_from_persisted_profile(
    repository: PhotoRepository, store: SqlitePhotoStore
) -> None:
    store.upsert_profile(UserProfileRecord(name="Noa", photo_uri="file:///noa.png"))

    coordinator = ProfileCoordinator(repository)

    assert coordinator.name == "Noa"
    assert coordinator.avatar_ref == "file:///noa.png"


def test_defaults_when_no_profile(repository: PhotoRepository) -> None:
    coordinator = ProfileCoordinator(repository)

    assert coordinator.state.value == ProfileState()


def test_update_is_visible_before_save_completes(
    repository: PhotoRepository, store: SqlitePhotoStore
) -> None:
    coordinator = ProfileCoordinator(repository)

    async def run() -> tuple[str, UserProfileRecord | None]:
        coordinator.update_profile("Rin", "content://avatar/9")
        shown = coordinator.name
        persisted_before = store.get_profile()
        await coordinator.wait_for_pending()
        return shown, persisted_before

    shown, persisted_before = asyncio.run(run())

    assert shown == "Rin"
    assert persisted_before is None
    assert store.get_profile() == UserProfileRecord(
        name="Rin", photo_uri="content://avatar/9"
    )


def test_rapid_edits_keep_latest_value(
    repository: PhotoRepository, store: SqlitePhotoStore
) -> None:
    coordinator = ProfileCoordinator(repository)
    shown: list[str] = []
    coordinator.state.subscribe(lambda state: shown.append(state.name))

    async def run() -> None:
        coordinator.update_profile("A", None)
        coordinator.update_profile("AB", None)
        coordinator.update_profile("ABC", None)
        await coordinator.wait_for_pending()

    asyncio.run(run())

    assert coordinator.name == "ABC"
    assert store.get_profile().name == "ABC"
    assert shown[-1] == "ABC"
    assert "A" not in shown[shown.index("ABC") :]


def test_stale_emission_does_not_clobber_pending_edit(
    repository: PhotoRepository, store: SqlitePhotoStore
) -> None:
    coordinator = ProfileCoordinator(repository)

    async def run() -> str:
        coordinator.update_profile("New", None)
        store.upsert_profile(UserProfileRecord(name="Old", photo_uri=None))
        shown = coordinator.name
        await coordinator.wait_for_pending()
        return shown

    assert asyncio.run(run()) == "New"
    assert coordinator.name == "New"


def test_external_change_applies_when_idle(
    repository: PhotoRepository, store: SqlitePhotoStore
) -> None:
    coordinator = ProfileCoordinator(repository)

    async def run() -> None:
        await coordinator.update_profile("Mine", None)

    asyncio.run(run())
    store.upsert_profile(UserProfileRecord(name="Synced", photo_uri="file:///s.png"))

    assert coordinator.name == "Synced"
    assert coordinator.avatar_ref == "file:///s.png"


def test_save_failure_is_surfaced(
    repository: PhotoRepository, store: SqlitePhotoStore
) -> None:
    coordinator = ProfileCoordinator(repository)
    store.connection.execute("DROP TABLE user_profile")

    async def run() -> None:
        await coordinator.update_profile("Kim", None)

    asyncio.run(run())

    assert coordinator.name == "Kim"
    assert coordinator.state.value.save_error.startswith("Could not save profile")


def test_closed_coordinator_stops_following_store(
    repository: PhotoRepository, store: SqlitePhotoStore
) -> None:
    coordinator = ProfileCoordinator(repository)
    coordinator.close()

    store.upsert_profile(UserProfileRecord(name="Later", photo_uri=None))

    assert coordinator.name == ""
