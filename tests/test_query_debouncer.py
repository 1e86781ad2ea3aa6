"""Tests for query text debouncing."""

import asyncio

from photo_browser.services.debounce import QueryDebouncer
from photo_browser.services.photos import PhotoRepository
from photo_browser.services.search import SearchCoordinator
from tests.conftest import FakePhotoApiClient, page_of


def test_rapid_pushes_submit_only_last_value() -> None:
    submitted: list[str] = []

    async def submit(text: str) -> None:
        submitted.append(text)

    async def run() -> None:
        debouncer = QueryDebouncer(submit=submit, window_seconds=0.2)
        for text in ["n", "na", "nat", "natu", "nature"]:
            debouncer.push(text)
            await asyncio.sleep(0.005)
        await debouncer.drain()

    asyncio.run(run())

    assert submitted == ["nature"]


def test_pushes_separated_by_window_each_submit() -> None:
    submitted: list[str] = []

    async def submit(text: str) -> None:
        submitted.append(text)

    async def run() -> None:
        debouncer = QueryDebouncer(submit=submit, window_seconds=0.01)
        debouncer.push("sea")
        await debouncer.drain()
        debouncer.push("sky")
        await debouncer.drain()

    asyncio.run(run())

    assert submitted == ["sea", "sky"]


def test_cancel_drops_pending_text() -> None:
    submitted: list[str] = []

    async def submit(text: str) -> None:
        submitted.append(text)

    async def run() -> None:
        debouncer = QueryDebouncer(submit=submit, window_seconds=0.05)
        debouncer.push("sea")
        debouncer.cancel()
        await debouncer.drain()

    asyncio.run(run())

    assert submitted == []


def test_debounced_text_reaches_coordinator(
    repository: PhotoRepository, photo_client: FakePhotoApiClient
) -> None:
    photo_client.pages[("forest", 1)] = page_of(1, 4)
    coordinator = SearchCoordinator(repository)

    async def run() -> None:
        debouncer = QueryDebouncer(
            submit=coordinator.submit_query, window_seconds=0.02
        )
        debouncer.push("fo")
        debouncer.push("fore")
        debouncer.push("forest")
        await debouncer.drain()

    asyncio.run(run())

    assert len(coordinator.state.value.photos) == 4
    assert [call[1] for call in photo_client.search_calls] == ["forest"]
