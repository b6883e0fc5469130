"""Image fetch error classes."""

from __future__ import annotations


class ImageFetchError(Exception):
    """Base class for failures delivered to image cache subscribers."""

    transient = False
    user_visible = True

    def __init__(self, locator: str, message: str) -> None:
        super().__init__(f"{message} ({locator})")
        self.locator = locator
        self.message = message


class NetworkError(ImageFetchError):
    """Transport failure; retrying later may succeed."""

    transient = True


class DecodeError(ImageFetchError):
    """The fetched payload is not a readable image."""


class FetchCancelledError(ImageFetchError):
    """The fetch was abandoned before it produced a result."""

    user_visible = False
