"""System colors and status tones in light and dark variants."""

from __future__ import annotations

from enum import Enum

from .models import Color, ColorScheme


class StatusTone(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


# (light, dark)
SYSTEM_COLORS: dict[str, tuple[Color, Color]] = {
    "accent": (Color.from_hex("#007AFF"), Color.from_hex("#0A84FF")),
    "label": (Color.from_hex("#000000"), Color.from_hex("#FFFFFF")),
    "secondary_label": (Color.from_hex("#3C3C43").with_alpha(0.6), Color.from_hex("#EBEBF5").with_alpha(0.6)),
    "background": (Color.from_hex("#FFFFFF"), Color.from_hex("#000000")),
    "secondary_background": (Color.from_hex("#F2F2F7"), Color.from_hex("#1C1C1E")),
    "gray5": (Color.from_hex("#E5E5EA"), Color.from_hex("#2C2C2E")),
    "gray6": (Color.from_hex("#F2F2F7"), Color.from_hex("#1C1C1E")),
    "shadow": (Color(0, 0, 0, 0.15), Color(0, 0, 0, 0.45)),
}

TONE_COLORS: dict[StatusTone, tuple[Color, Color]] = {
    StatusTone.SUCCESS: (Color.from_hex("#34C759"), Color.from_hex("#30D158")),
    StatusTone.ERROR: (Color.from_hex("#FF3B30"), Color.from_hex("#FF453A")),
    StatusTone.WARNING: (Color.from_hex("#FF9500"), Color.from_hex("#FF9F0A")),
    StatusTone.INFO: (Color.from_hex("#007AFF"), Color.from_hex("#0A84FF")),
}


def system_color(name: str, scheme: ColorScheme = ColorScheme.LIGHT) -> Color:
    light, dark = SYSTEM_COLORS[name]
    return dark if scheme == ColorScheme.DARK else light


def tone_color(tone: StatusTone | str, scheme: ColorScheme = ColorScheme.LIGHT) -> Color:
    light, dark = TONE_COLORS[StatusTone(tone)]
    return dark if scheme == ColorScheme.DARK else light


def backdrop(scheme: ColorScheme) -> Color:
    """Opaque surface a translucent fill is flattened onto."""
    return system_color("background", scheme)
