"""Second-tier on-disk store for fetched image bytes.

Each record is a ``<sha256>.bin`` payload next to a ``<sha256>.json`` sidecar
holding ``{"key", "stored_at", "size"}``. The sidecar carries the original
locator so a digest collision can be detected on read.
"""

from __future__ import annotations

import hashlib
import json
import os
import threading
import time
from pathlib import Path


class DiskStore:
    def __init__(self, root: Path, max_age_s: float | None = None) -> None:
        self.root = Path(root)
        self.max_age_s = max_age_s
        self.root.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _digest(key: str) -> str:
        return hashlib.sha256(key.encode("utf-8")).hexdigest()

    def _paths(self, key: str) -> tuple[Path, Path]:
        digest = self._digest(key)
        return self.root / f"{digest}.bin", self.root / f"{digest}.json"

    def get(self, key: str) -> bytes | None:
        blob, meta = self._paths(key)
        try:
            record = json.loads(meta.read_text(encoding="utf-8"))
            if record.get("key") != key:
                return None
            if self.max_age_s is not None and time.time() - float(record.get("stored_at", 0)) > self.max_age_s:
                self.remove(key)
                return None
            data = blob.read_bytes()
        except (OSError, ValueError):
            return None
        if len(data) != int(record.get("size", -1)):
            self.remove(key)
            return None
        return data

    def put(self, key: str, data: bytes) -> None:
        blob, meta = self._paths(key)
        suffix = f".tmp{os.getpid()}-{threading.get_ident()}"
        tmp_blob = blob.with_suffix(suffix)
        tmp_blob.write_bytes(data)
        os.replace(tmp_blob, blob)
        tmp_meta = meta.with_suffix(suffix + "m")
        tmp_meta.write_text(
            json.dumps({"key": key, "stored_at": time.time(), "size": len(data)}, sort_keys=True),
            encoding="utf-8",
        )
        os.replace(tmp_meta, meta)

    def remove(self, key: str) -> None:
        for path in self._paths(key):
            path.unlink(missing_ok=True)

    def clear(self) -> None:
        for path in self.root.glob("*"):
            if path.suffix in (".bin", ".json") or path.suffix.startswith(".tmp"):
                path.unlink(missing_ok=True)

    def total_bytes(self) -> int:
        return sum(p.stat().st_size for p in self.root.glob("*.bin"))
