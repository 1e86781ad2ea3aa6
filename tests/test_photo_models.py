"""Tests for photo domain models and wire payload conversion."""

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from photo_browser.adapters.pexels_models import PexelsPhoto, PexelsPhotoPage
from photo_browser.domain.history import normalize_query
from photo_browser.domain.photos import PhotoRecord, PhotoSource
from tests.conftest import make_photo, photo_payload


@pytest.mark.parametrize(
    "photo",
    [
        make_photo(1),
        make_photo(2_147_483_647),
        PhotoRecord(
            id=7,
            width=0,
            height=0,
            photographer="",
            photographer_url="",
            src=PhotoSource(original="", large="", medium="", small=""),
        ),
    ],
)
def test_favorite_conversion_round_trip(photo: PhotoRecord) -> None:
    assert photo.to_favorite().to_photo() == photo


def test_to_favorite_defaults_saved_at_to_now() -> None:
    before = datetime.now(tz=UTC)
    favorite = make_photo(3).to_favorite()

    assert before <= favorite.saved_at <= before + timedelta(seconds=5)
    assert favorite.url_large.endswith("/large.jpeg")


def test_to_favorite_keeps_explicit_saved_at() -> None:
    saved_at = datetime(2024, 1, 2, tzinfo=UTC)
    assert make_photo(3).to_favorite(saved_at=saved_at).saved_at == saved_at


def test_pexels_photo_ignores_extra_fields() -> None:
    record = PexelsPhoto.model_validate(photo_payload(42)).to_record()

    assert record == make_photo(42)


def test_pexels_photo_from_record_round_trip() -> None:
    photo = make_photo(9)
    assert PexelsPhoto.from_record(photo).to_record() == photo


def test_pexels_page_rejects_missing_src() -> None:
    payload = photo_payload(5)
    del payload["src"]

    with pytest.raises(ValidationError):
        PexelsPhotoPage.model_validate({"page": 1, "per_page": 20, "photos": [payload]})


def test_normalize_query_trims_and_lowercases() -> None:
    assert normalize_query("  Nature Walk \n") == "nature walk"
