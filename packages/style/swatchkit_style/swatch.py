"""Swatch preview composer for resolved styles."""

from __future__ import annotations

import base64
from io import BytesIO

from PIL import Image, ImageDraw, ImageFont

from .models import ColorScheme, FontToken, ResolvedStyle
from .palette import backdrop

# Point sizes of the semantic font tokens at the default size category.
FONT_POINTS: dict[FontToken, int] = {
    FontToken.CAPTION2: 11,
    FontToken.CAPTION: 12,
    FontToken.FOOTNOTE: 13,
    FontToken.SUBHEADLINE: 15,
    FontToken.CALLOUT: 16,
    FontToken.BODY: 17,
    FontToken.HEADLINE: 17,
    FontToken.TITLE3: 20,
    FontToken.TITLE2: 22,
    FontToken.TITLE: 28,
    FontToken.LARGE_TITLE: 34,
}


class SwatchRenderer:
    """Draws a labelled sample of a resolved style on its scheme backdrop."""

    def __init__(self, margin: int = 24, scale: int = 2) -> None:
        self.margin = margin
        self.scale = scale

    def _font(self, size: int):
        for name in ("SF-Pro-Text-Regular.otf", "Arial.ttf", "DejaVuSans.ttf"):
            try:
                return ImageFont.truetype(name, size)
            except OSError:
                continue
        return ImageFont.load_default()

    def render_image(
        self,
        style: ResolvedStyle,
        label: str = "Button",
        scheme: ColorScheme = ColorScheme.LIGHT,
    ) -> Image.Image:
        s = self.scale
        font = self._font(FONT_POINTS[style.font] * s)
        probe = ImageDraw.Draw(Image.new("RGB", (1, 1)))
        x0, y0, x1, y1 = probe.textbbox((0, 0), label, font=font)
        text_w, text_h = x1 - x0, y1 - y0

        pad = style.padding
        body_w = int(text_w + (pad.left + pad.right) * s)
        body_h = int(text_h + (pad.top + pad.bottom) * s)
        m = self.margin * s
        shadow = int(style.shadow_radius * s)
        width, height = body_w + 2 * m + shadow, body_h + 2 * m + shadow

        image = Image.new("RGBA", (width, height), backdrop(scheme).rgb + (255,))
        overlay = Image.new("RGBA", image.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(overlay)
        box = (m, m, m + body_w, m + body_h)
        radius = int(style.corner_radius * s)

        if shadow and style.shadow_color.alpha:
            draw.rounded_rectangle(
                (box[0], box[1] + shadow, box[2], box[3] + shadow),
                radius=radius,
                fill=self._rgba(style.shadow_color),
            )
        draw.rounded_rectangle(
            box,
            radius=radius,
            fill=self._rgba(style.background_color),
            outline=self._rgba(style.border_color) if style.border_width else None,
            width=max(1, int(round(style.border_width * s))),
        )
        draw.text(
            (box[0] + pad.left * s - x0, box[1] + pad.top * s - y0),
            label,
            font=font,
            fill=self._rgba(style.foreground_color),
        )
        return Image.alpha_composite(image, overlay).convert("RGB")

    def preview_data_url(self, style: ResolvedStyle, label: str = "Button", scheme: ColorScheme = ColorScheme.LIGHT) -> str:
        image = self.render_image(style, label, scheme)
        buf = BytesIO()
        image.save(buf, format="PNG")
        b64 = base64.b64encode(buf.getvalue()).decode("ascii")
        return f"data:image/png;base64,{b64}"

    @staticmethod
    def _rgba(color) -> tuple[int, int, int, int]:
        return color.rgb + (int(round(color.alpha * 255)),)
