"""Pydantic models for Pexels API payloads."""

from pydantic import BaseModel

from photo_browser.domain.photos import PhotoRecord, PhotoSource


class PexelsSrc(BaseModel):
    """Image variant URLs of a Pexels photo."""

    original: str
    large: str
    medium: str
    small: str


class PexelsPhoto(BaseModel):
    """Pexels photo payload."""

    id: int
    width: int
    height: int
    photographer: str
    photographer_url: str
    src: PexelsSrc

    def to_record(self) -> PhotoRecord:
        """Convert the payload into a domain photo record."""
        return PhotoRecord(
            id=self.id,
            width=self.width,
            height=self.height,
            photographer=self.photographer,
            photographer_url=self.photographer_url,
            src=PhotoSource(
                original=self.src.original,
                large=self.src.large,
                medium=self.src.medium,
                small=self.src.small,
            ),
        )

    @classmethod
    def from_record(cls, photo: PhotoRecord) -> "PexelsPhoto":
        """Build a payload from a domain photo record."""
        return cls(
            id=photo.id,
            width=photo.width,
            height=photo.height,
            photographer=photo.photographer,
            photographer_url=photo.photographer_url,
            src=PexelsSrc(
                original=photo.src.original,
                large=photo.src.large,
                medium=photo.src.medium,
                small=photo.src.small,
            ),
        )


class PexelsPhotoPage(BaseModel):
    """Paginated search or curated listing payload."""

    page: int
    per_page: int
    photos: list[PexelsPhoto]
