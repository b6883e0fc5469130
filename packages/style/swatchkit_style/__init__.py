"""Style presets and theme-aware style resolution."""

from .effects import GlassEffect, GlassStyle, glass_effect, glow_intensity, render_shimmer_frame, shimmer_offset, shimmer_phase
from .models import (
    CLEAR,
    Color,
    ColorScheme,
    ControlSize,
    EdgeInsets,
    FontToken,
    ResolvedStyle,
    SizeCategory,
    StylePreset,
    StyleRequest,
    ThemeContext,
)
from .palette import StatusTone, system_color, tone_color
from .presets import DEFAULT_PRESET, PRESETS, get_preset, list_presets, validate_presets
from .resolver import resolve

try:  # pragma: no cover - optional at import time for test environments
    from .swatch import SwatchRenderer
except Exception:  # pragma: no cover
    SwatchRenderer = None  # type: ignore[assignment]

__all__ = [
    "CLEAR",
    "Color",
    "ColorScheme",
    "ControlSize",
    "DEFAULT_PRESET",
    "EdgeInsets",
    "FontToken",
    "GlassEffect",
    "GlassStyle",
    "PRESETS",
    "ResolvedStyle",
    "SizeCategory",
    "StatusTone",
    "StylePreset",
    "StyleRequest",
    "ThemeContext",
    "get_preset",
    "glass_effect",
    "glow_intensity",
    "list_presets",
    "render_shimmer_frame",
    "resolve",
    "shimmer_offset",
    "shimmer_phase",
    "system_color",
    "tone_color",
    "validate_presets",
]

if SwatchRenderer is not None:
    __all__.append("SwatchRenderer")
