"""Resolve a style request against ambient theme context.

Precedence is fixed: explicit overrides win over context adjustments, which
win over the preset base. Resolution never fails; an unknown preset tag
resolves as the default preset.
"""

from __future__ import annotations

from dataclasses import replace

from .models import ColorScheme, ResolvedStyle, SizeCategory, StyleRequest, ThemeContext
from .palette import backdrop
from .presets import CONTROL_SIZES, get_preset

# Categories at or below LARGE keep the base metrics.
_SIZE_STEPS: dict[SizeCategory, int] = {
    SizeCategory.EXTRA_LARGE: 1,
    SizeCategory.EXTRA_EXTRA_LARGE: 1,
    SizeCategory.EXTRA_EXTRA_EXTRA_LARGE: 2,
    SizeCategory.ACCESSIBILITY_MEDIUM: 2,
    SizeCategory.ACCESSIBILITY_LARGE: 3,
    SizeCategory.ACCESSIBILITY_EXTRA_LARGE: 3,
    SizeCategory.ACCESSIBILITY_EXTRA_EXTRA_LARGE: 4,
    SizeCategory.ACCESSIBILITY_EXTRA_EXTRA_EXTRA_LARGE: 4,
}
_PADDING_STEP = 0.125


def size_steps(category: SizeCategory) -> int:
    return _SIZE_STEPS.get(category, 0)


def _base(request: StyleRequest) -> ResolvedStyle:
    spec = get_preset(request.preset)
    size = CONTROL_SIZES[request.size]
    palette = spec.light
    return ResolvedStyle(
        background_color=palette.background,
        foreground_color=palette.foreground,
        border_color=palette.border,
        border_width=float(spec.border_width),
        corner_radius=float(spec.corner_radius),
        padding=spec.padding.scaled(size.padding_scale),
        font=spec.font.stepped(size.font_steps),
        shadow_radius=float(spec.shadow_radius),
        shadow_color=palette.shadow,
        animation_duration=float(spec.animation_duration),
    )


def _apply_context(style: ResolvedStyle, request: StyleRequest, context: ThemeContext) -> ResolvedStyle:
    if context.color_scheme == ColorScheme.DARK:
        palette = get_preset(request.preset).dark
        style = replace(
            style,
            background_color=palette.background,
            foreground_color=palette.foreground,
            border_color=palette.border,
            shadow_color=palette.shadow,
        )

    if context.reduce_transparency and style.background_color.is_translucent:
        style = replace(
            style,
            background_color=style.background_color.composited_over(backdrop(context.color_scheme)),
        )

    steps = size_steps(context.size_category)
    if steps:
        style = replace(
            style,
            padding=style.padding.scaled(1 + _PADDING_STEP * steps),
            font=style.font.stepped(steps),
        )

    if context.reduce_motion:
        style = replace(style, animation_duration=0.0)
    return style


def resolve(request: StyleRequest, context: ThemeContext | None = None) -> ResolvedStyle:
    context = context or ThemeContext()
    style = _apply_context(_base(request), request, context)
    if request.overrides:
        style = replace(style, **dict(request.overrides))
    return style
