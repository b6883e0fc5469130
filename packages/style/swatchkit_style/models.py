"""Typed style models shared by the preset table and the resolver."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Any, Mapping


class ColorScheme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class SizeCategory(IntEnum):
    """Dynamic type size categories, smallest to largest."""

    EXTRA_SMALL = 0
    SMALL = 1
    MEDIUM = 2
    LARGE = 3
    EXTRA_LARGE = 4
    EXTRA_EXTRA_LARGE = 5
    EXTRA_EXTRA_EXTRA_LARGE = 6
    ACCESSIBILITY_MEDIUM = 7
    ACCESSIBILITY_LARGE = 8
    ACCESSIBILITY_EXTRA_LARGE = 9
    ACCESSIBILITY_EXTRA_EXTRA_LARGE = 10
    ACCESSIBILITY_EXTRA_EXTRA_EXTRA_LARGE = 11

    @classmethod
    def parse(cls, value: str | int | SizeCategory) -> SizeCategory:
        if isinstance(value, SizeCategory):
            return value
        if isinstance(value, int):
            return cls(value)
        return cls[value.strip().upper().replace("-", "_")]


class FontToken(str, Enum):
    CAPTION2 = "caption2"
    CAPTION = "caption"
    FOOTNOTE = "footnote"
    SUBHEADLINE = "subheadline"
    CALLOUT = "callout"
    BODY = "body"
    HEADLINE = "headline"
    TITLE3 = "title3"
    TITLE2 = "title2"
    TITLE = "title"
    LARGE_TITLE = "largeTitle"

    def stepped(self, steps: int) -> FontToken:
        scale = list(FontToken)
        index = min(len(scale) - 1, max(0, scale.index(self) + steps))
        return scale[index]


class StylePreset(str, Enum):
    DEFAULT = "default"
    OUTLINE = "outline"
    SUBTLE = "subtle"
    GHOST = "ghost"
    TINTED = "tinted"
    FILLED = "filled"
    GLASS = "glass"


class ControlSize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


@dataclass(frozen=True)
class Color:
    red: int
    green: int
    blue: int
    alpha: float = 1.0

    @classmethod
    def from_hex(cls, value: str) -> Color:
        raw = value.strip().lstrip("#")
        if len(raw) not in (6, 8):
            raise ValueError(f"Expected #RRGGBB or #RRGGBBAA, got {value!r}")
        r, g, b = (int(raw[i : i + 2], 16) for i in (0, 2, 4))
        a = int(raw[6:8], 16) / 255 if len(raw) == 8 else 1.0
        return cls(r, g, b, round(a, 3))

    @property
    def hex(self) -> str:
        base = f"#{self.red:02X}{self.green:02X}{self.blue:02X}"
        if self.alpha >= 1.0:
            return base
        return base + f"{round(self.alpha * 255):02X}"

    @property
    def rgb(self) -> tuple[int, int, int]:
        return (self.red, self.green, self.blue)

    @property
    def is_translucent(self) -> bool:
        return 0.0 < self.alpha < 1.0

    def with_alpha(self, alpha: float) -> Color:
        return Color(self.red, self.green, self.blue, max(0.0, min(1.0, alpha)))

    def composited_over(self, backdrop: Color) -> Color:
        a = self.alpha

        def _mix(top: int, bottom: int) -> int:
            return int(round(top * a + bottom * (1 - a)))

        return Color(
            _mix(self.red, backdrop.red),
            _mix(self.green, backdrop.green),
            _mix(self.blue, backdrop.blue),
            1.0,
        )


CLEAR = Color(0, 0, 0, 0.0)


@dataclass(frozen=True)
class EdgeInsets:
    top: float
    right: float
    bottom: float
    left: float

    @classmethod
    def uniform(cls, value: float) -> EdgeInsets:
        return cls(value, value, value, value)

    @classmethod
    def symmetric(cls, vertical: float, horizontal: float) -> EdgeInsets:
        return cls(vertical, horizontal, vertical, horizontal)

    def scaled(self, factor: float) -> EdgeInsets:
        return EdgeInsets(
            round(self.top * factor, 2),
            round(self.right * factor, 2),
            round(self.bottom * factor, 2),
            round(self.left * factor, 2),
        )


@dataclass(frozen=True)
class ThemeContext:
    color_scheme: ColorScheme = ColorScheme.LIGHT
    size_category: SizeCategory = SizeCategory.LARGE
    reduce_motion: bool = False
    reduce_transparency: bool = False


@dataclass(frozen=True)
class ResolvedStyle:
    background_color: Color
    foreground_color: Color
    border_color: Color
    border_width: float
    corner_radius: float
    padding: EdgeInsets
    font: FontToken
    shadow_radius: float
    shadow_color: Color
    animation_duration: float

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        for name in ("background_color", "foreground_color", "border_color", "shadow_color"):
            out[name] = getattr(self, name).hex
        out["font"] = self.font.value
        return out


STYLE_FIELDS = frozenset(f.name for f in fields(ResolvedStyle))
_COLOR_FIELDS = frozenset(
    ("background_color", "foreground_color", "border_color", "shadow_color")
)
_NUMBER_FIELDS = frozenset(
    ("border_width", "corner_radius", "shadow_radius", "animation_duration")
)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _coerce_override(name: str, value: Any) -> Any:
    if name in _COLOR_FIELDS:
        if isinstance(value, Color):
            return value
        if isinstance(value, str):
            return Color.from_hex(value)
        raise ValueError(f"Override {name} expects a Color or hex string, got {value!r}")
    if name in _NUMBER_FIELDS:
        if not _is_number(value):
            raise ValueError(f"Override {name} expects a number, got {value!r}")
        return float(value)
    if name == "padding":
        if isinstance(value, EdgeInsets):
            return value
        if not _is_number(value):
            raise ValueError(f"Override padding expects EdgeInsets or a number, got {value!r}")
        return EdgeInsets.uniform(float(value))
    if name == "font" and not isinstance(value, FontToken):
        return FontToken(value)
    return value


@dataclass(frozen=True)
class StyleRequest:
    """A preset tag plus field overrides; built fresh for every render."""

    preset: StylePreset | str = StylePreset.DEFAULT
    size: ControlSize = ControlSize.MEDIUM
    overrides: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        unknown = sorted(set(self.overrides) - STYLE_FIELDS)
        if unknown:
            raise ValueError(f"Unknown style override field(s): {', '.join(unknown)}")
        coerced = {k: _coerce_override(k, v) for k, v in self.overrides.items()}
        object.__setattr__(self, "overrides", MappingProxyType(coerced))
        object.__setattr__(self, "size", ControlSize(self.size))
        if not isinstance(self.preset, StylePreset) and self.preset in _PRESET_VALUES:
            object.__setattr__(self, "preset", StylePreset(self.preset))

    @property
    def known_preset(self) -> bool:
        return isinstance(self.preset, StylePreset)


_PRESET_VALUES = frozenset(p.value for p in StylePreset)
