"""Async image cache with single-flight fetches, LRU eviction, and a disk tier."""

from .cache import DEFAULT_BUDGET_BYTES, ImageCache
from .decode import decode_image
from .disk import DiskStore
from .errors import DecodeError, FetchCancelledError, ImageFetchError, NetworkError
from .fetcher import Fetcher, UrlFetcher
from .models import CacheStats, ImageCacheEntry, ImageInfo, InFlightRequest, LocatorState

__all__ = [
    "CacheStats",
    "DEFAULT_BUDGET_BYTES",
    "DecodeError",
    "DiskStore",
    "FetchCancelledError",
    "Fetcher",
    "ImageCache",
    "ImageCacheEntry",
    "ImageFetchError",
    "ImageInfo",
    "InFlightRequest",
    "LocatorState",
    "NetworkError",
    "UrlFetcher",
    "decode_image",
]
