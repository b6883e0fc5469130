"""Core app services for settings, logging, service wiring, and diagnostics."""

from .config import AppConfig, load_config, save_config
from .diagnostics import DiagnosticsExporter, build_doctor_payload
from .services import build_image_cache, build_theme_context, resolve_budget_bytes

__all__ = [
    "AppConfig",
    "DiagnosticsExporter",
    "build_doctor_payload",
    "build_image_cache",
    "build_theme_context",
    "load_config",
    "resolve_budget_bytes",
    "save_config",
]
