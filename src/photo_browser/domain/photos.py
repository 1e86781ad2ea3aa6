"""Photo domain models and favorite conversions."""

from dataclasses import dataclass
from datetime import UTC, datetime


@dataclass(frozen=True)
class PhotoSource:
    """Image variant URLs for a photo."""

    original: str
    large: str
    medium: str
    small: str


@dataclass(frozen=True)
class PhotoRecord:
    """A photo as returned by the remote photo service."""

    id: int
    width: int
    height: int
    photographer: str
    photographer_url: str
    src: PhotoSource

    def to_favorite(self, saved_at: datetime | None = None) -> "FavoritePhotoRecord":
        """Convert to a persisted favorite, stamped now unless given."""
        return FavoritePhotoRecord(
            id=self.id,
            photographer=self.photographer,
            photographer_url=self.photographer_url,
            width=self.width,
            height=self.height,
            url_original=self.src.original,
            url_large=self.src.large,
            url_medium=self.src.medium,
            url_small=self.src.small,
            saved_at=saved_at or datetime.now(tz=UTC),
        )


@dataclass(frozen=True)
class FavoritePhotoRecord:
    """A favorited photo stored locally."""

    id: int
    photographer: str
    photographer_url: str
    width: int
    height: int
    url_original: str
    url_large: str
    url_medium: str
    url_small: str
    saved_at: datetime

    def to_photo(self) -> PhotoRecord:
        """Convert back to the API-shaped photo record."""
        return PhotoRecord(
            id=self.id,
            width=self.width,
            height=self.height,
            photographer=self.photographer,
            photographer_url=self.photographer_url,
            src=PhotoSource(
                original=self.url_original,
                large=self.url_large,
                medium=self.url_medium,
                small=self.url_small,
            ),
        )
