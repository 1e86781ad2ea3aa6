"""User profile domain models."""

from dataclasses import dataclass

PROFILE_UID = 1


@dataclass(frozen=True)
class UserProfileRecord:
    """The single persisted user profile row."""

    name: str | None
    photo_uri: str | None
    uid: int = PROFILE_UID
