import sys
import unittest
from dataclasses import replace
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "style"))

from swatchkit_style.models import ColorScheme, StylePreset
from swatchkit_style.palette import StatusTone, tone_color
from swatchkit_style.presets import DEFAULT_PRESET, PRESETS, get_preset, list_presets, validate_presets


class PresetTableTests(unittest.TestCase):
    def test_every_tag_has_a_row(self):
        for preset in StylePreset:
            self.assertIn(preset, PRESETS)
            self.assertIs(PRESETS[preset].preset, preset)
        validate_presets()

    def test_missing_row_is_reported(self):
        table = {k: v for k, v in PRESETS.items() if k is not StylePreset.GLASS}
        with self.assertRaises(RuntimeError) as ctx:
            validate_presets(table)
        self.assertIn("glass", str(ctx.exception))

    def test_mislabeled_row_is_reported(self):
        table = dict(PRESETS)
        table[StylePreset.GHOST] = replace(PRESETS[StylePreset.GHOST], preset=StylePreset.FILLED)
        with self.assertRaises(RuntimeError):
            validate_presets(table)

    def test_lookup_falls_back_to_default(self):
        self.assertIs(get_preset(None), PRESETS[DEFAULT_PRESET])
        self.assertIs(get_preset(""), PRESETS[DEFAULT_PRESET])
        self.assertIs(get_preset("does-not-exist"), PRESETS[DEFAULT_PRESET])
        self.assertIs(get_preset("tinted"), PRESETS[StylePreset.TINTED])

    def test_list_presets_sorted(self):
        names = list_presets()
        self.assertEqual(names, sorted(names))
        self.assertEqual(len(names), len(StylePreset))

    def test_tone_colors_have_dark_variants(self):
        for tone in StatusTone:
            self.assertNotEqual(tone_color(tone, ColorScheme.LIGHT), tone_color(tone, ColorScheme.DARK))
        self.assertEqual(tone_color("error").hex, "#FF3B30")


if __name__ == "__main__":
    unittest.main()
