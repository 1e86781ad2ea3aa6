"""Pexels photo API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class PhotoApiClient(Protocol):
    """Interface for remote photo service interactions."""

    async def search_photos(
        self, query: str, page: int = 1, per_page: int = 20
    ) -> dict[str, object]:
        """Search photos by keyword and return raw API data."""

    async def get_photo(self, photo_id: int) -> dict[str, object]:
        """Fetch a single photo by id and return raw API data."""

    async def curated_photos(
        self, page: int = 1, per_page: int = 20
    ) -> dict[str, object]:
        """Fetch curated photos and return raw API data."""


@dataclass
class HttpxPexelsClient(PhotoApiClient):
    """HTTPX-backed Pexels client."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 30.0

    @classmethod
    def create(
        cls, api_key: str, base_url: str, timeout_seconds: float = 30.0
    ) -> "HttpxPexelsClient":
        """Create a Pexels client with a managed httpx session."""
        return cls(
            api_key=api_key,
            base_url=base_url,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def search_photos(
        self, query: str, page: int = 1, per_page: int = 20
    ) -> dict[str, object]:
        """Search photos by keyword."""
        return await self._get(
            "/v1/search", {"query": query, "page": page, "per_page": per_page}
        )

    async def get_photo(self, photo_id: int) -> dict[str, object]:
        """Fetch a photo by id."""
        return await self._get(f"/v1/photos/{photo_id}")

    async def curated_photos(
        self, page: int = 1, per_page: int = 20
    ) -> dict[str, object]:
        """Fetch curated photos."""
        return await self._get("/v1/curated", {"page": page, "per_page": per_page})

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _get(
        self, path: str, params: dict[str, object] | None = None
    ) -> dict[str, object]:
        response = await self.http_client.get(
            f"{self.base_url.rstrip('/')}{path}",
            params=params,
            headers={"Authorization": self.api_key},
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()
