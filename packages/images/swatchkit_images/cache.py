"""Byte-budgeted image cache with single-flight fetches and LRU eviction."""

from __future__ import annotations

import functools
import logging
import threading
import time
from collections import OrderedDict
from concurrent.futures import CancelledError, Future, InvalidStateError, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable

from .decode import decode_image
from .disk import DiskStore
from .errors import DecodeError, FetchCancelledError, ImageFetchError, NetworkError
from .fetcher import Fetcher, UrlFetcher
from .models import CacheStats, ImageCacheEntry, InFlightRequest, LocatorState

logger = logging.getLogger("swatchkit.images")

Validator = Callable[[bytes, str], Any]

DEFAULT_BUDGET_BYTES = 64 * 1024 * 1024
_MAX_TRACKED_FAILURES = 256


class ImageCache:
    """Process-local image cache.

    All bookkeeping happens under one lock per instance. Fetching, decoding
    and disk I/O run on worker threads outside the lock, so a slow download
    never blocks ``peek`` or unrelated fetches.
    """

    def __init__(
        self,
        fetcher: Fetcher | None = None,
        budget_bytes: int = DEFAULT_BUDGET_BYTES,
        disk_store: DiskStore | None = None,
        max_workers: int = 4,
        validator: Validator | None = decode_image,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if budget_bytes <= 0:
            raise ValueError("budget_bytes must be positive")
        self.budget_bytes = int(budget_bytes)
        self._fetcher = fetcher or UrlFetcher()
        self._disk = disk_store
        self._validator = validator
        self._clock = clock

        self._lock = threading.RLock()
        self._entries: OrderedDict[str, ImageCacheEntry] = OrderedDict()
        self._total_bytes = 0
        self._in_flight: dict[str, InFlightRequest] = {}
        self._detached: list[InFlightRequest] = []
        self._failed: OrderedDict[str, ImageFetchError] = OrderedDict()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="swatchkit-image")
        self._closed = False

        self._hits = 0
        self._misses = 0
        self._network_fetches = 0
        self._disk_hits = 0
        self._evictions = 0
        self._failures = 0

    def __enter__(self) -> ImageCache:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -- public API -----------------------------------------------------

    def fetch_async(self, locator: str) -> Future:
        """Return a future resolving to the image bytes for ``locator``.

        A locator that is already being fetched gets a new subscriber on the
        existing attempt instead of a second download.
        """
        subscriber: Future = Future()
        with self._lock:
            if self._closed:
                raise RuntimeError("Image cache is closed")

            entry = self._entries.get(locator)
            if entry is not None:
                self._touch(entry)
                self._hits += 1
                subscriber.set_result(entry.data)
                return subscriber

            self._misses += 1
            record = self._in_flight.get(locator)
            if record is None:
                record = InFlightRequest(key=locator)
                self._in_flight[locator] = record
                self._failed.pop(locator, None)
                record.task = self._executor.submit(self._run, locator, record)
                logger.debug("image fetch started", extra={"event": "image_fetch_started"})
            record.subscribers.append(subscriber)

        subscriber.add_done_callback(functools.partial(self._on_subscriber_done, locator, record))
        return subscriber

    def fetch(self, locator: str, timeout: float | None = None) -> bytes:
        future = self.fetch_async(locator)
        try:
            return future.result(timeout=timeout)
        except CancelledError as exc:
            raise FetchCancelledError(locator, "Fetch was cancelled") from exc
        except FutureTimeoutError as exc:
            future.cancel()
            raise NetworkError(locator, f"Timed out after {timeout}s") from exc

    def peek(self, locator: str) -> bytes | None:
        """Memory-only lookup; refreshes recency on a hit."""
        with self._lock:
            entry = self._entries.get(locator)
            if entry is None:
                return None
            self._touch(entry)
            return entry.data

    def state(self, locator: str) -> LocatorState:
        with self._lock:
            if locator in self._in_flight:
                return LocatorState.FETCHING
            if locator in self._entries:
                return LocatorState.CACHED
            if locator in self._failed:
                return LocatorState.FAILED
            return LocatorState.ABSENT

    def last_error(self, locator: str) -> ImageFetchError | None:
        with self._lock:
            return self._failed.get(locator)

    def invalidate(self, locator: str) -> None:
        """Forget ``locator``.

        An attempt already in flight keeps running for its subscribers but is
        detached, so the next ``fetch`` starts a fresh download.
        """
        with self._lock:
            record = self._in_flight.pop(locator, None)
            if record is not None:
                self._detach(record)
            entry = self._entries.pop(locator, None)
            if entry is not None:
                self._total_bytes -= entry.size_bytes
            self._failed.pop(locator, None)
        if self._disk is not None:
            self._disk.remove(locator)

    def clear(self) -> None:
        with self._lock:
            dropped = len(self._entries)
            self._entries.clear()
            self._total_bytes = 0
            self._failed.clear()
            for record in self._in_flight.values():
                self._detach(record)
            self._in_flight.clear()
        if self._disk is not None:
            self._disk.clear()
        logger.info(f"image cache cleared entries={dropped}", extra={"event": "image_cache_cleared"})

    def keys(self) -> list[str]:
        """Cached locators, least recently accessed first."""
        with self._lock:
            return list(self._entries)

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                entries=len(self._entries),
                total_bytes=self._total_bytes,
                budget_bytes=self.budget_bytes,
                in_flight=len(self._in_flight),
                hits=self._hits,
                misses=self._misses,
                network_fetches=self._network_fetches,
                disk_hits=self._disk_hits,
                evictions=self._evictions,
                failures=self._failures,
            )

    def close(self, wait: bool = True) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._executor.shutdown(wait=wait, cancel_futures=True)

        with self._lock:
            pending = [*self._in_flight.values(), *self._detached]
            orphans = [r for r in pending if r.task is not None and r.task.cancelled()]
            for record in orphans:
                self._forget(record)
        for record in orphans:
            error = FetchCancelledError(record.key, "Image cache closed")
            for fut in record.subscribers:
                self._deliver(fut, error=error)

    # -- worker side ----------------------------------------------------

    def _run(self, locator: str, record: InFlightRequest) -> None:
        try:
            data = self._load(locator, record)
        except ImageFetchError as exc:
            self._fail(locator, record, exc)
        except Exception as exc:
            logger.warning(
                f"image fetcher raised unexpected error: {exc}",
                exc_info=True,
                extra={"event": "image_fetch_unexpected_error"},
            )
            error = NetworkError(locator, f"Fetch failed: {exc}")
            error.__cause__ = exc
            self._fail(locator, record, error)
        else:
            self._complete(locator, record, data)

    def _load(self, locator: str, record: InFlightRequest) -> bytes:
        if self._disk is not None:
            data = self._disk.get(locator)
            if data is not None:
                try:
                    self._validate(data, locator)
                except DecodeError:
                    self._disk.remove(locator)
                else:
                    with self._lock:
                        self._disk_hits += 1
                    return data

        with self._lock:
            self._network_fetches += 1
        data = self._fetcher(locator)
        self._validate(data, locator)

        if self._disk is not None and not record.detached:
            try:
                self._disk.put(locator, data)
                if record.detached:
                    self._disk.remove(locator)
            except OSError as exc:
                logger.warning(f"disk cache write failed: {exc}", extra={"event": "image_disk_write_failed"})
        return data

    def _validate(self, data: bytes, locator: str) -> None:
        if self._validator is not None:
            self._validator(data, locator)

    def _complete(self, locator: str, record: InFlightRequest, data: bytes) -> None:
        with self._lock:
            self._forget(record)
            subscribers = list(record.subscribers)
            if not record.detached:
                self._insert(locator, data)
        for fut in subscribers:
            self._deliver(fut, result=data)

    def _fail(self, locator: str, record: InFlightRequest, error: ImageFetchError) -> None:
        with self._lock:
            self._forget(record)
            subscribers = list(record.subscribers)
            self._failures += 1
            if not record.detached:
                self._failed[locator] = error
                self._failed.move_to_end(locator)
                while len(self._failed) > _MAX_TRACKED_FAILURES:
                    self._failed.popitem(last=False)
        logger.warning(
            f"image fetch failed: {error}",
            extra={"event": "image_fetch_failed", "error_type": type(error).__name__},
        )
        for fut in subscribers:
            self._deliver(fut, error=error)

    # -- bookkeeping (lock held) ----------------------------------------

    def _detach(self, record: InFlightRequest) -> None:
        record.detached = True
        self._detached.append(record)

    def _forget(self, record: InFlightRequest) -> None:
        if record.detached:
            self._detached = [r for r in self._detached if r is not record]
        elif self._in_flight.get(record.key) is record:
            del self._in_flight[record.key]

    def _touch(self, entry: ImageCacheEntry) -> None:
        entry.last_accessed = self._clock()
        self._entries.move_to_end(entry.key)

    def _insert(self, locator: str, data: bytes) -> None:
        previous = self._entries.pop(locator, None)
        if previous is not None:
            self._total_bytes -= previous.size_bytes

        size = len(data)
        if size > self.budget_bytes:
            logger.info(
                f"image larger than cache budget, not stored size={size}",
                extra={"event": "image_not_stored"},
            )
            return

        self._entries[locator] = ImageCacheEntry(key=locator, data=data, size_bytes=size, last_accessed=self._clock())
        self._total_bytes += size
        self._evict()

    def _evict(self) -> None:
        while self._total_bytes > self.budget_bytes and self._entries:
            _key, victim = self._entries.popitem(last=False)
            self._total_bytes -= victim.size_bytes
            self._evictions += 1
            logger.debug("image evicted", extra={"event": "image_evicted"})

    def _on_subscriber_done(self, locator: str, record: InFlightRequest, fut: Future) -> None:
        if not fut.cancelled():
            return
        with self._lock:
            if not record.detached and self._in_flight.get(locator) is not record:
                return
            if not all(s.cancelled() for s in record.subscribers):
                return
            if record.task is not None and record.task.cancel():
                self._forget(record)
                logger.debug("abandoned image fetch cancelled", extra={"event": "image_fetch_abandoned"})

    @staticmethod
    def _deliver(fut: Future, result: bytes | None = None, error: BaseException | None = None) -> None:
        try:
            if error is not None:
                fut.set_exception(error)
            else:
                fut.set_result(result)
        except InvalidStateError:
            # Subscriber cancelled its interest.
            pass
