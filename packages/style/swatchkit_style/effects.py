"""Cosmetic effect parameters expressed as pure functions of elapsed time."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

try:  # pragma: no cover
    import numpy as np
except Exception:  # pragma: no cover
    np = None

try:  # pragma: no cover
    from PIL import Image
except Exception:  # pragma: no cover
    Image = None

from .models import CLEAR, Color, ThemeContext
from .palette import backdrop

# Gradient stops of the shimmer band: (position, highlight opacity).
SHIMMER_STOPS: tuple[tuple[float, float], ...] = (
    (0.0, 0.0),
    (0.4, 0.6),
    (0.5, 1.0),
    (0.6, 0.6),
    (1.0, 0.0),
)
SHIMMER_BAND_SCALE = 1.5


def shimmer_phase(elapsed: float, speed: float = 1.5, reduce_motion: bool = False) -> float:
    """Linear sweep from -1 to 1 repeating every ``speed`` seconds."""
    if reduce_motion or speed <= 0:
        return 0.0
    cycle = (elapsed / speed) % 1.0
    return -1.0 + 2.0 * cycle


def shimmer_offset(elapsed: float, width: float, speed: float = 1.5, reduce_motion: bool = False) -> float:
    return shimmer_phase(elapsed, speed, reduce_motion) * width * SHIMMER_BAND_SCALE


def glow_intensity(
    elapsed: float,
    period: float = 1.5,
    minimum: float = 0.3,
    maximum: float = 1.0,
    reduce_motion: bool = False,
) -> float:
    """Autoreversing pulse between ``minimum`` and ``maximum``."""
    if reduce_motion or period <= 0:
        return maximum
    t = 0.5 - 0.5 * math.cos(2 * math.pi * elapsed / period)
    return minimum + (maximum - minimum) * t


class GlassStyle(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    COLORFUL = "colorful"
    FROSTED = "frosted"
    CRYSTAL = "crystal"


@dataclass(frozen=True)
class GlassEffect:
    tint: Color
    tint_opacity: float
    blur_radius: float

    @property
    def fill(self) -> Color:
        return self.tint.with_alpha(self.tint.alpha * self.tint_opacity) if self.tint.alpha else CLEAR


_WHITE = Color(255, 255, 255)
_BLACK = Color(0, 0, 0)

_GLASS: dict[GlassStyle, GlassEffect] = {
    GlassStyle.LIGHT: GlassEffect(_WHITE, 0.2, 10),
    GlassStyle.DARK: GlassEffect(_BLACK, 0.3, 10),
    GlassStyle.COLORFUL: GlassEffect(Color.from_hex("#007AFF"), 0.15, 15),
    GlassStyle.FROSTED: GlassEffect(_WHITE, 0.4, 20),
    GlassStyle.CRYSTAL: GlassEffect(CLEAR, 0.1, 8),
}


def glass_effect(
    style: GlassStyle | str,
    context: ThemeContext | None = None,
    tint: Color | None = None,
) -> GlassEffect:
    effect = _GLASS[GlassStyle(style)]
    if tint is not None and GlassStyle(style) == GlassStyle.COLORFUL:
        effect = GlassEffect(tint, effect.tint_opacity, effect.blur_radius)

    context = context or ThemeContext()
    if context.reduce_transparency:
        solid = effect.fill.composited_over(backdrop(context.color_scheme))
        return GlassEffect(solid, 1.0, 0.0)
    return effect


def render_shimmer_frame(
    width: int,
    height: int,
    elapsed: float,
    base: Color = Color.from_hex("#E5E5EA"),
    highlight: Color = Color.from_hex("#D1D1D6"),
    speed: float = 1.5,
    reduce_motion: bool = False,
) -> Image.Image:
    if np is None or Image is None:
        raise RuntimeError("numpy and Pillow are required for shimmer rendering")

    band = width * SHIMMER_BAND_SCALE
    left = (width - band) / 2 + shimmer_offset(elapsed, width, speed, reduce_motion)
    xs = (np.arange(width, dtype=np.float32) + 0.5 - left) / max(band, 1e-6)
    positions = [p for p, _ in SHIMMER_STOPS]
    weights = [w for _, w in SHIMMER_STOPS]
    alpha = np.interp(xs, positions, weights, left=0.0, right=0.0).astype(np.float32)

    base_rgb = np.array(base.rgb, dtype=np.float32)
    high_rgb = np.array(highlight.rgb, dtype=np.float32)
    row = base_rgb[None, :] * (1 - alpha[:, None]) + high_rgb[None, :] * alpha[:, None]
    frame = np.broadcast_to(row[None, :, :], (height, width, 3))
    return Image.fromarray(np.clip(frame, 0, 255).astype(np.uint8))
