import sys
import tempfile
import threading
import time
import unittest
from concurrent.futures import CancelledError
from io import BytesIO
from pathlib import Path

try:
    from PIL import Image
except Exception:  # pragma: no cover
    Image = None

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "images"))

from swatchkit_images.cache import ImageCache
from swatchkit_images.disk import DiskStore
from swatchkit_images.errors import DecodeError, FetchCancelledError, NetworkError
from swatchkit_images.models import LocatorState


def _png(color=(255, 0, 0), size=(4, 4)) -> bytes:
    buf = BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


class _CountingFetcher:
    """Returns canned payloads and records every call."""

    def __init__(self, payloads: dict[str, bytes] | None = None, default: bytes = b"x" * 100) -> None:
        self.payloads = payloads or {}
        self.default = default
        self.calls: list[str] = []
        self.failures: dict[str, list[Exception]] = {}
        self._lock = threading.Lock()

    def fail_next(self, locator: str, exc: Exception) -> None:
        self.failures.setdefault(locator, []).append(exc)

    def __call__(self, locator: str) -> bytes:
        with self._lock:
            self.calls.append(locator)
            pending = self.failures.get(locator)
            if pending:
                raise pending.pop(0)
        return self.payloads.get(locator, self.default)


class _GatedFetcher(_CountingFetcher):
    """Blocks every fetch until ``gate`` is set."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.gate = threading.Event()

    def __call__(self, locator: str) -> bytes:
        with self._lock:
            self.calls.append(locator)
            pending = self.failures.get(locator)
            exc = pending.pop(0) if pending else None
        self.gate.wait(5)
        if exc is not None:
            raise exc
        return self.payloads.get(locator, self.default)


def _wait_for(predicate, timeout: float = 5.0) -> None:
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not reached in time")
        time.sleep(0.005)


class SingleFlightTests(unittest.TestCase):
    def test_concurrent_async_fetches_share_one_download(self):
        fetcher = _GatedFetcher(default=b"payload")
        with ImageCache(fetcher, budget_bytes=1024, validator=None) as cache:
            futures = [cache.fetch_async("https://img/a.png") for _ in range(10)]
            self.assertEqual(cache.state("https://img/a.png"), LocatorState.FETCHING)
            self.assertEqual(cache.stats().in_flight, 1)

            fetcher.gate.set()
            results = [f.result(timeout=5) for f in futures]

        self.assertEqual(fetcher.calls, ["https://img/a.png"])
        self.assertEqual(len(results), 10)
        self.assertTrue(all(r == b"payload" for r in results))

    def test_threads_calling_fetch_share_one_download(self):
        fetcher = _GatedFetcher(default=b"shared")
        results: list[bytes] = []
        lock = threading.Lock()

        with ImageCache(fetcher, budget_bytes=1024, validator=None) as cache:

            def _worker() -> None:
                data = cache.fetch("https://img/b.png", timeout=5)
                with lock:
                    results.append(data)

            threads = [threading.Thread(target=_worker) for _ in range(8)]
            for t in threads:
                t.start()
            _wait_for(lambda: cache.stats().misses >= 8)
            fetcher.gate.set()
            for t in threads:
                t.join(5)

        self.assertEqual(len(fetcher.calls), 1)
        self.assertEqual(results, [b"shared"] * 8)

    def test_failure_reaches_every_subscriber(self):
        fetcher = _GatedFetcher()
        fetcher.fail_next("u", NetworkError("u", "connection reset"))
        with ImageCache(fetcher, budget_bytes=1024, validator=None) as cache:
            futures = [cache.fetch_async("u") for _ in range(5)]
            fetcher.gate.set()
            errors = [f.exception(timeout=5) for f in futures]

        self.assertIsInstance(errors[0], NetworkError)
        self.assertTrue(all(e is errors[0] for e in errors))
        self.assertEqual(len(fetcher.calls), 1)


class EvictionTests(unittest.TestCase):
    def _cache(self, fetcher, budget=300) -> ImageCache:
        cache = ImageCache(fetcher, budget_bytes=budget, validator=None)
        self.addCleanup(cache.close)
        return cache

    def test_least_recently_accessed_is_evicted(self):
        cache = self._cache(_CountingFetcher())
        for key in ("A", "B", "C"):
            cache.fetch(key)
        cache.fetch("D")

        self.assertIsNone(cache.peek("A"))
        self.assertEqual(cache.keys(), ["B", "C", "D"])
        stats = cache.stats()
        self.assertEqual(stats.total_bytes, 300)
        self.assertEqual(stats.evictions, 1)

    def test_peek_refreshes_recency(self):
        cache = self._cache(_CountingFetcher())
        for key in ("A", "B", "C"):
            cache.fetch(key)
        self.assertIsNotNone(cache.peek("A"))
        cache.fetch("D")

        self.assertIsNone(cache.peek("B"))
        self.assertEqual(cache.keys(), ["C", "A", "D"])

    def test_cached_fetch_refreshes_recency_without_download(self):
        fetcher = _CountingFetcher()
        cache = self._cache(fetcher)
        for key in ("A", "B", "C", "A"):
            cache.fetch(key)
        cache.fetch("D")

        self.assertEqual(fetcher.calls, ["A", "B", "C", "D"])
        self.assertEqual(cache.keys(), ["C", "A", "D"])
        self.assertEqual(cache.stats().hits, 1)

    def test_budget_holds_for_mixed_sizes(self):
        sizes = [50, 150, 120, 30, 90, 200, 10, 75]
        payloads = {f"img{i}": b"z" * n for i, n in enumerate(sizes)}
        cache = self._cache(_CountingFetcher(payloads), budget=250)
        for key in payloads:
            cache.fetch(key)
            self.assertLessEqual(cache.stats().total_bytes, 250)
        self.assertEqual(cache.keys()[-1], "img7")

    def test_oversized_image_is_returned_but_not_stored(self):
        cache = self._cache(_CountingFetcher(default=b"y" * 400))
        self.assertEqual(len(cache.fetch("big")), 400)
        self.assertIsNone(cache.peek("big"))
        self.assertEqual(cache.state("big"), LocatorState.ABSENT)
        self.assertEqual(cache.stats().total_bytes, 0)


class FailureTests(unittest.TestCase):
    def test_failed_fetch_leaves_no_entry_and_retries(self):
        fetcher = _CountingFetcher(default=b"ok")
        fetcher.fail_next("u", NetworkError("u", "offline"))
        with ImageCache(fetcher, budget_bytes=1024, validator=None) as cache:
            with self.assertRaises(NetworkError):
                cache.fetch("u")
            self.assertIsNone(cache.peek("u"))
            self.assertEqual(cache.state("u"), LocatorState.FAILED)
            self.assertIsInstance(cache.last_error("u"), NetworkError)

            self.assertEqual(cache.fetch("u"), b"ok")
            self.assertEqual(cache.state("u"), LocatorState.CACHED)
            self.assertIsNone(cache.last_error("u"))
        self.assertEqual(fetcher.calls, ["u", "u"])

    def test_unexpected_fetcher_error_becomes_network_error(self):
        fetcher = _CountingFetcher()
        fetcher.fail_next("u", ValueError("boom"))
        with ImageCache(fetcher, budget_bytes=1024, validator=None) as cache:
            with self.assertRaises(NetworkError) as ctx:
                cache.fetch("u")
        self.assertIsInstance(ctx.exception.__cause__, ValueError)

    def test_decode_error_for_non_image(self):
        if Image is None:
            self.skipTest("Pillow not installed")
        fetcher = _CountingFetcher(payloads={"bad": b"<html>nope</html>", "good": _png()})
        with ImageCache(fetcher, budget_bytes=4096) as cache:
            with self.assertRaises(DecodeError):
                cache.fetch("bad")
            self.assertIsNone(cache.peek("bad"))
            self.assertEqual(cache.fetch("good"), _png())
            self.assertEqual(cache.stats().failures, 1)

    def test_timeout_abandons_subscriber(self):
        fetcher = _GatedFetcher()
        with ImageCache(fetcher, budget_bytes=1024, validator=None) as cache:
            with self.assertRaises(NetworkError):
                cache.fetch("slow", timeout=0.05)
            fetcher.gate.set()
            _wait_for(lambda: cache.state("slow") == LocatorState.CACHED)


class CancellationTests(unittest.TestCase):
    def test_all_subscribers_cancel_queued_fetch(self):
        fetcher = _GatedFetcher()
        cache = ImageCache(fetcher, budget_bytes=1024, validator=None, max_workers=1)
        self.addCleanup(cache.close)

        blocker = cache.fetch_async("blocker")
        _wait_for(lambda: fetcher.calls == ["blocker"])
        queued = [cache.fetch_async("queued"), cache.fetch_async("queued")]
        self.assertTrue(queued[0].cancel())
        self.assertEqual(cache.state("queued"), LocatorState.FETCHING)
        self.assertTrue(queued[1].cancel())
        self.assertEqual(cache.state("queued"), LocatorState.ABSENT)

        fetcher.gate.set()
        blocker.result(timeout=5)
        self.assertNotIn("queued", fetcher.calls)
        with self.assertRaises(CancelledError):
            queued[0].result(timeout=1)

    def test_close_cancels_queued_fetches(self):
        fetcher = _GatedFetcher()
        cache = ImageCache(fetcher, budget_bytes=1024, validator=None, max_workers=1)
        blocker = cache.fetch_async("blocker")
        _wait_for(lambda: fetcher.calls == ["blocker"])
        queued = cache.fetch_async("queued")

        cache.close(wait=False)
        self.assertIsInstance(queued.exception(timeout=5), FetchCancelledError)
        fetcher.gate.set()
        self.assertEqual(blocker.result(timeout=5), b"x" * 100)
        with self.assertRaises(RuntimeError):
            cache.fetch_async("after-close")


class ManagementTests(unittest.TestCase):
    def test_invalidate_forces_refetch(self):
        fetcher = _CountingFetcher()
        with ImageCache(fetcher, budget_bytes=1024, validator=None) as cache:
            cache.fetch("a")
            cache.invalidate("a")
            self.assertEqual(cache.state("a"), LocatorState.ABSENT)
            self.assertIsNone(cache.peek("a"))
            cache.fetch("a")
        self.assertEqual(fetcher.calls, ["a", "a"])

    def test_invalidate_during_fetch_starts_fresh_attempt(self):
        release_first = threading.Event()
        versions = [b"old", b"new"]
        calls: list[str] = []

        def fetcher(locator: str) -> bytes:
            calls.append(locator)
            if len(calls) == 1:
                release_first.wait(5)
            return versions[len(calls) - 1]

        with ImageCache(fetcher, budget_bytes=1024, validator=None) as cache:
            stale = cache.fetch_async("a")
            _wait_for(lambda: len(calls) == 1)
            cache.invalidate("a")
            self.assertEqual(cache.state("a"), LocatorState.ABSENT)

            self.assertEqual(cache.fetch("a", timeout=5), b"new")
            release_first.set()
            self.assertEqual(stale.result(timeout=5), b"old")
            self.assertEqual(cache.peek("a"), b"new")
            self.assertEqual(cache.stats().in_flight, 0)
        self.assertEqual(calls, ["a", "a"])

    def test_clear_during_fetch_delivers_without_storing(self):
        fetcher = _GatedFetcher(default=b"late")
        with ImageCache(fetcher, budget_bytes=1024, validator=None) as cache:
            pending = cache.fetch_async("a")
            _wait_for(lambda: fetcher.calls == ["a"])
            cache.clear()
            fetcher.gate.set()
            self.assertEqual(pending.result(timeout=5), b"late")
            self.assertEqual(cache.keys(), [])
            self.assertEqual(cache.state("a"), LocatorState.ABSENT)

    def test_clear_drops_everything(self):
        with ImageCache(_CountingFetcher(), budget_bytes=1024, validator=None) as cache:
            cache.fetch("a")
            cache.fetch("b")
            cache.clear()
            self.assertEqual(cache.keys(), [])
            self.assertEqual(cache.stats().total_bytes, 0)

    def test_peek_never_fetches(self):
        fetcher = _CountingFetcher()
        with ImageCache(fetcher, budget_bytes=1024, validator=None) as cache:
            self.assertIsNone(cache.peek("a"))
        self.assertEqual(fetcher.calls, [])

    def test_invalid_budget_rejected(self):
        with self.assertRaises(ValueError):
            ImageCache(_CountingFetcher(), budget_bytes=0)


class DiskTierTests(unittest.TestCase):
    def test_disk_hit_skips_network(self):
        with tempfile.TemporaryDirectory() as tmp:
            store = DiskStore(Path(tmp))
            fetcher = _CountingFetcher(default=b"persisted")
            with ImageCache(fetcher, budget_bytes=1024, disk_store=store, validator=None) as first:
                first.fetch("https://img/p.png")

            with ImageCache(fetcher, budget_bytes=1024, disk_store=store, validator=None) as second:
                self.assertIsNone(second.peek("https://img/p.png"))
                self.assertEqual(second.fetch("https://img/p.png"), b"persisted")
                self.assertEqual(second.stats().disk_hits, 1)
                self.assertEqual(second.stats().network_fetches, 0)

            self.assertEqual(fetcher.calls, ["https://img/p.png"])

    def test_invalidate_removes_disk_record(self):
        with tempfile.TemporaryDirectory() as tmp:
            store = DiskStore(Path(tmp))
            with ImageCache(_CountingFetcher(), budget_bytes=1024, disk_store=store, validator=None) as cache:
                cache.fetch("k")
                self.assertIsNotNone(store.get("k"))
                cache.invalidate("k")
                self.assertIsNone(store.get("k"))


if __name__ == "__main__":
    unittest.main()
