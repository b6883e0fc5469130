"""Persistent settings schema and load/save helpers."""

from __future__ import annotations

import json
import os
import platform
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from swatchkit_style.models import SizeCategory


CONFIG_VERSION = 1


@dataclass
class UiConfig:
    color_scheme: str = "auto"
    size_category: str = "large"
    reduce_motion: bool = False
    reduce_transparency: bool = False


@dataclass
class ImagesConfig:
    # 0 sizes the budget from installed memory.
    budget_mb: float = 0.0
    disk_cache: bool = False
    disk_dir: str | None = None
    disk_max_age_hours: float | None = None
    timeout_s: float = 30.0
    max_workers: int = 4


@dataclass
class DiagnosticsConfig:
    keep_log_files: int = 7
    max_bundle_mb: int = 20


@dataclass
class AppConfig:
    config_version: int = CONFIG_VERSION
    ui: UiConfig = field(default_factory=UiConfig)
    images: ImagesConfig = field(default_factory=ImagesConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)


def config_root() -> Path:
    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "Swatchkit"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "Swatchkit"
    return Path.home() / ".config" / "swatchkit"


def config_path() -> Path:
    return config_root() / "config.json"


def default_disk_dir() -> Path:
    return config_root() / "image-cache"


def _merge(dataclass_type, raw: dict[str, Any]):
    defaults = dataclass_type()  # type: ignore[misc]
    for k, v in (raw or {}).items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _normalize_ui(cfg: AppConfig) -> None:
    if cfg.ui.color_scheme not in ("auto", "light", "dark"):
        cfg.ui.color_scheme = "auto"
    try:
        cfg.ui.size_category = SizeCategory.parse(cfg.ui.size_category).name.lower()
    except (KeyError, ValueError, AttributeError):
        cfg.ui.size_category = "large"
    cfg.ui.reduce_motion = bool(cfg.ui.reduce_motion)
    cfg.ui.reduce_transparency = bool(cfg.ui.reduce_transparency)


def _normalize_images(cfg: AppConfig) -> None:
    cfg.images.budget_mb = float(max(0.0, min(4096.0, float(cfg.images.budget_mb))))
    cfg.images.timeout_s = float(max(1.0, min(300.0, float(cfg.images.timeout_s))))
    cfg.images.max_workers = max(1, min(32, int(cfg.images.max_workers)))
    cfg.images.disk_cache = bool(cfg.images.disk_cache)
    if cfg.images.disk_max_age_hours is not None:
        cfg.images.disk_max_age_hours = float(max(0.0, float(cfg.images.disk_max_age_hours)))


def _normalize_diagnostics(cfg: AppConfig) -> None:
    cfg.diagnostics.keep_log_files = max(2, int(cfg.diagnostics.keep_log_files))
    cfg.diagnostics.max_bundle_mb = max(1, int(cfg.diagnostics.max_bundle_mb))


def load_config(path: Path | None = None) -> AppConfig:
    path = path or config_path()
    if not path.exists():
        return AppConfig()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return AppConfig()
    if not isinstance(data, dict):
        return AppConfig()

    cfg = AppConfig(
        config_version=int(data.get("config_version", CONFIG_VERSION)),
        ui=_merge(UiConfig, data.get("ui", {})),
        images=_merge(ImagesConfig, data.get("images", {})),
        diagnostics=_merge(DiagnosticsConfig, data.get("diagnostics", {})),
    )

    _normalize_ui(cfg)
    _normalize_images(cfg)
    _normalize_diagnostics(cfg)
    return cfg


def save_config(cfg: AppConfig, path: Path | None = None) -> Path:
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path
