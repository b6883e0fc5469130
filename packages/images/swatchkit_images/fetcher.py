"""Blocking URL fetcher used by the image cache worker threads."""

from __future__ import annotations

import os
import ssl
import urllib.error
import urllib.request
from typing import Callable

import certifi

from .errors import NetworkError

Fetcher = Callable[[str], bytes]

USER_AGENT = "swatchkit-images/0.1"
MAX_IMAGE_BYTES = 32 * 1024 * 1024


def _build_ssl_context() -> ssl.SSLContext:
    """Create TLS context for image downloads with explicit CA handling."""
    ca_bundle = os.environ.get("SWATCHKIT_CA_BUNDLE", "").strip()
    if ca_bundle:
        return ssl.create_default_context(cafile=ca_bundle)
    return ssl.create_default_context(cafile=certifi.where())


class UrlFetcher:
    """Fetch image bytes over http(s) or file URLs."""

    def __init__(
        self,
        timeout_s: float = 30.0,
        user_agent: str = USER_AGENT,
        max_bytes: int = MAX_IMAGE_BYTES,
    ) -> None:
        self.timeout_s = timeout_s
        self.user_agent = user_agent
        self.max_bytes = max_bytes
        self._ssl_context: ssl.SSLContext | None = None

    def _context(self) -> ssl.SSLContext:
        if self._ssl_context is None:
            self._ssl_context = _build_ssl_context()
        return self._ssl_context

    def __call__(self, locator: str) -> bytes:
        request = urllib.request.Request(
            locator,
            headers={"User-Agent": self.user_agent, "Accept": "image/*"},
        )
        kwargs = {}
        if locator.lower().startswith("https:"):
            kwargs["context"] = self._context()

        try:
            with urllib.request.urlopen(request, timeout=self.timeout_s, **kwargs) as resp:
                data = resp.read(self.max_bytes + 1)
        except urllib.error.HTTPError as exc:
            raise NetworkError(locator, f"HTTP {exc.code}") from exc
        except urllib.error.URLError as exc:
            raise NetworkError(locator, f"Unreachable: {exc.reason}") from exc
        except (TimeoutError, OSError) as exc:
            raise NetworkError(locator, f"Transfer failed: {exc}") from exc

        if len(data) > self.max_bytes:
            raise NetworkError(locator, f"Payload exceeds {self.max_bytes} bytes")
        return bytes(data)
