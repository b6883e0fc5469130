"""Built-in style presets, one row per StylePreset tag."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from .models import CLEAR, Color, ColorScheme, ControlSize, EdgeInsets, FontToken, StylePreset
from .palette import system_color

DEFAULT_PRESET = StylePreset.DEFAULT


@dataclass(frozen=True)
class Palette:
    background: Color
    foreground: Color
    border: Color
    shadow: Color


@dataclass(frozen=True)
class PresetSpec:
    preset: StylePreset
    light: Palette
    dark: Palette
    corner_radius: float
    padding: EdgeInsets
    font: FontToken
    border_width: float = 0.0
    shadow_radius: float = 0.0
    animation_duration: float = 0.2

    def palette(self, scheme: ColorScheme) -> Palette:
        return self.dark if scheme == ColorScheme.DARK else self.light


@dataclass(frozen=True)
class ControlSizeSpec:
    padding_scale: float
    font_steps: int


# Font steps are relative to the preset font (body -> subheadline / headline).
CONTROL_SIZES: dict[ControlSize, ControlSizeSpec] = {
    ControlSize.SMALL: ControlSizeSpec(padding_scale=0.75, font_steps=-2),
    ControlSize.MEDIUM: ControlSizeSpec(padding_scale=1.0, font_steps=0),
    ControlSize.LARGE: ControlSizeSpec(padding_scale=1.25, font_steps=1),
}


def _pair(name: str) -> tuple[Color, Color]:
    return system_color(name, ColorScheme.LIGHT), system_color(name, ColorScheme.DARK)


_ACCENT_L, _ACCENT_D = _pair("accent")
_LABEL_L, _LABEL_D = _pair("label")
_SHADOW_L, _SHADOW_D = _pair("shadow")
_WHITE = Color(255, 255, 255)
_BLACK = Color(0, 0, 0)
_PADDING = EdgeInsets.symmetric(12, 16)

PRESETS: dict[StylePreset, PresetSpec] = {
    StylePreset.DEFAULT: PresetSpec(
        preset=StylePreset.DEFAULT,
        light=Palette(system_color("secondary_background"), _LABEL_L, CLEAR, _SHADOW_L),
        dark=Palette(system_color("secondary_background", ColorScheme.DARK), _LABEL_D, CLEAR, _SHADOW_D),
        corner_radius=10,
        padding=_PADDING,
        font=FontToken.BODY,
    ),
    StylePreset.OUTLINE: PresetSpec(
        preset=StylePreset.OUTLINE,
        light=Palette(CLEAR, _ACCENT_L, _ACCENT_L.with_alpha(0.5), _SHADOW_L),
        dark=Palette(CLEAR, _ACCENT_D, _ACCENT_D.with_alpha(0.5), _SHADOW_D),
        corner_radius=10,
        padding=_PADDING,
        font=FontToken.BODY,
        border_width=1.5,
    ),
    StylePreset.SUBTLE: PresetSpec(
        preset=StylePreset.SUBTLE,
        light=Palette(system_color("gray6"), _LABEL_L, CLEAR, _SHADOW_L),
        dark=Palette(system_color("gray6", ColorScheme.DARK), _LABEL_D, CLEAR, _SHADOW_D),
        corner_radius=10,
        padding=_PADDING,
        font=FontToken.BODY,
    ),
    StylePreset.GHOST: PresetSpec(
        preset=StylePreset.GHOST,
        light=Palette(CLEAR, _ACCENT_L, CLEAR, _SHADOW_L),
        dark=Palette(CLEAR, _ACCENT_D, CLEAR, _SHADOW_D),
        corner_radius=8,
        padding=EdgeInsets.symmetric(8, 12),
        font=FontToken.BODY,
    ),
    StylePreset.TINTED: PresetSpec(
        preset=StylePreset.TINTED,
        light=Palette(_ACCENT_L.with_alpha(0.15), _ACCENT_L, CLEAR, _SHADOW_L),
        dark=Palette(_ACCENT_D.with_alpha(0.25), _ACCENT_D, CLEAR, _SHADOW_D),
        corner_radius=10,
        padding=_PADDING,
        font=FontToken.BODY,
    ),
    StylePreset.FILLED: PresetSpec(
        preset=StylePreset.FILLED,
        light=Palette(_ACCENT_L, _WHITE, CLEAR, _ACCENT_L.with_alpha(0.3)),
        dark=Palette(_ACCENT_D, _WHITE, CLEAR, _ACCENT_D.with_alpha(0.4)),
        corner_radius=12,
        padding=EdgeInsets.symmetric(14, 20),
        font=FontToken.HEADLINE,
        shadow_radius=4,
    ),
    StylePreset.GLASS: PresetSpec(
        preset=StylePreset.GLASS,
        light=Palette(_WHITE.with_alpha(0.2), _LABEL_L, _WHITE.with_alpha(0.3), _SHADOW_L),
        dark=Palette(_BLACK.with_alpha(0.3), _LABEL_D, _WHITE.with_alpha(0.15), _SHADOW_D),
        corner_radius=20,
        padding=EdgeInsets.uniform(20),
        font=FontToken.BODY,
        border_width=1,
        shadow_radius=10,
        animation_duration=0.3,
    ),
}


def validate_presets(table: Mapping[StylePreset, PresetSpec] | None = None) -> None:
    table = PRESETS if table is None else table
    missing = [p.value for p in StylePreset if p not in table]
    if missing:
        raise RuntimeError(f"Preset table has no entry for: {', '.join(missing)}")
    mislabeled = [p.value for p, spec in table.items() if spec.preset != p]
    if mislabeled:
        raise RuntimeError(f"Preset rows stored under the wrong tag: {', '.join(mislabeled)}")


def list_presets() -> list[str]:
    return sorted(p.value for p in PRESETS)


def get_preset(name: StylePreset | str | None) -> PresetSpec:
    if not name:
        return PRESETS[DEFAULT_PRESET]
    try:
        return PRESETS[StylePreset(name)]
    except (ValueError, KeyError):
        return PRESETS[DEFAULT_PRESET]


validate_presets()
