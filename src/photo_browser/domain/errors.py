"""Errors raised by photo browser components."""


class PhotoServiceError(Exception):
    """The remote photo service returned an error or an unusable payload."""


class PhotoServiceUnavailableError(PhotoServiceError):
    """The remote photo service could not be reached."""

    def __init__(
        self, message: str = "Unable to reach the photo service. Check your connection."
    ) -> None:
        super().__init__(message)


class PhotoStoreError(Exception):
    """The local photo store failed to complete an operation."""
