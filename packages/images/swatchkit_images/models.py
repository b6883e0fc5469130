"""Typed models for image cache state."""

from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass, field
from enum import Enum


class LocatorState(str, Enum):
    ABSENT = "Absent"
    FETCHING = "Fetching"
    CACHED = "Cached"
    FAILED = "Failed"


@dataclass
class ImageCacheEntry:
    key: str
    data: bytes
    size_bytes: int
    last_accessed: float


@dataclass
class InFlightRequest:
    key: str
    subscribers: list[Future] = field(default_factory=list)
    task: Future | None = None
    # Set once invalidate or clear has forgotten the locator; the result is
    # still delivered but never stored.
    detached: bool = False


@dataclass(frozen=True)
class ImageInfo:
    format: str
    width: int
    height: int


@dataclass(frozen=True)
class CacheStats:
    entries: int
    total_bytes: int
    budget_bytes: int
    in_flight: int
    hits: int
    misses: int
    network_fetches: int
    disk_hits: int
    evictions: int
    failures: int
