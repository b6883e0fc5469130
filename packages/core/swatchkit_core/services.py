"""Build style context and image cache instances from app settings."""

from __future__ import annotations

from pathlib import Path

import psutil

from swatchkit_images import DiskStore, ImageCache, UrlFetcher
from swatchkit_style.models import ColorScheme, SizeCategory, ThemeContext

from .config import AppConfig, default_disk_dir
from .logging_setup import get_logger

AUTO_BUDGET_FRACTION = 0.02
AUTO_BUDGET_CAP_BYTES = 128 * 1024 * 1024
AUTO_BUDGET_FLOOR_BYTES = 8 * 1024 * 1024


def build_theme_context(
    cfg: AppConfig,
    system_scheme: ColorScheme | str = ColorScheme.LIGHT,
    size_category: SizeCategory | str | None = None,
) -> ThemeContext:
    """Map settings onto the context handed to the style resolver.

    ``system_scheme`` is what the host reports; it only applies when the
    user left the color scheme on ``auto``.
    """
    scheme = ColorScheme(system_scheme) if cfg.ui.color_scheme == "auto" else ColorScheme(cfg.ui.color_scheme)
    return ThemeContext(
        color_scheme=scheme,
        size_category=SizeCategory.parse(size_category or cfg.ui.size_category),
        reduce_motion=cfg.ui.reduce_motion,
        reduce_transparency=cfg.ui.reduce_transparency,
    )


def resolve_budget_bytes(budget_mb: float) -> int:
    if budget_mb > 0:
        return int(budget_mb * 1024 * 1024)
    total = int(psutil.virtual_memory().total)
    return max(AUTO_BUDGET_FLOOR_BYTES, min(AUTO_BUDGET_CAP_BYTES, int(total * AUTO_BUDGET_FRACTION)))


def build_image_cache(cfg: AppConfig) -> ImageCache:
    images = cfg.images
    disk = None
    if images.disk_cache:
        root = Path(images.disk_dir).expanduser() if images.disk_dir else default_disk_dir()
        max_age = images.disk_max_age_hours * 3600 if images.disk_max_age_hours else None
        disk = DiskStore(root, max_age_s=max_age)

    budget = resolve_budget_bytes(images.budget_mb)
    get_logger("services").info(
        f"image cache budget={budget} disk={'on' if disk else 'off'}",
        extra={"event": "image_cache_built"},
    )
    return ImageCache(
        fetcher=UrlFetcher(timeout_s=images.timeout_s),
        budget_bytes=budget,
        disk_store=disk,
        max_workers=images.max_workers,
    )
