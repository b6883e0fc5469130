"""CLI entrypoints for style resolution, swatch previews, image cache tools, and diagnostics."""

from __future__ import annotations

import argparse
import json
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import asdict
from pathlib import Path
from typing import Any

from swatchkit_core import (
    DiagnosticsExporter,
    build_doctor_payload,
    build_image_cache,
    build_theme_context,
    load_config,
)
from swatchkit_core.logging_setup import configure_logging
from swatchkit_images import ImageFetchError, decode_image
from swatchkit_style import ControlSize, SizeCategory, StylePreset, StyleRequest, ThemeContext, list_presets, resolve

_SIZE_CATEGORY_CHOICES = [c.name.lower() for c in SizeCategory]


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str))


def _parse_override(raw: str) -> tuple[str, Any]:
    if "=" not in raw:
        raise argparse.ArgumentTypeError(f"Override must look like field=value, got {raw!r}")
    key, value = raw.split("=", 1)
    try:
        parsed: Any = json.loads(value)
    except ValueError:
        parsed = value
    return key.strip(), parsed


def _context_from_args(args: argparse.Namespace) -> ThemeContext:
    cfg = load_config()
    if args.scheme != "auto":
        cfg.ui.color_scheme = args.scheme
    if args.reduce_motion:
        cfg.ui.reduce_motion = True
    if args.reduce_transparency:
        cfg.ui.reduce_transparency = True
    return build_theme_context(cfg, size_category=args.size_category)


def _request_from_args(args: argparse.Namespace) -> StyleRequest:
    return StyleRequest(preset=args.preset, size=ControlSize(args.size), overrides=dict(args.override or []))


def cmd_presets(_args: argparse.Namespace) -> int:
    _print_json(
        [
            {
                "preset": name,
                "light": resolve(StyleRequest(preset=name)).to_dict(),
            }
            for name in list_presets()
        ]
    )
    return 0


def cmd_resolve(args: argparse.Namespace) -> int:
    try:
        request = _request_from_args(args)
    except ValueError as exc:
        _print_json({"success": False, "error": str(exc)})
        return 2
    context = _context_from_args(args)
    _print_json(
        {
            "preset": str(getattr(request.preset, "value", request.preset)),
            "known_preset": request.known_preset,
            "context": {
                "color_scheme": context.color_scheme.value,
                "size_category": context.size_category.name.lower(),
                "reduce_motion": context.reduce_motion,
                "reduce_transparency": context.reduce_transparency,
            },
            "style": resolve(request, context).to_dict(),
        }
    )
    return 0


def cmd_preview(args: argparse.Namespace) -> int:
    from swatchkit_style.swatch import SwatchRenderer

    try:
        request = _request_from_args(args)
    except ValueError as exc:
        _print_json({"success": False, "error": str(exc)})
        return 2
    context = _context_from_args(args)
    image = SwatchRenderer().render_image(resolve(request, context), label=args.label, scheme=context.color_scheme)
    out = Path(args.out).expanduser().resolve()
    out.parent.mkdir(parents=True, exist_ok=True)
    image.save(out, format="PNG")
    _print_json({"success": True, "path": str(out), "size": list(image.size)})
    return 0


def cmd_cache_fetch(args: argparse.Namespace) -> int:
    cfg = load_config()
    rows: list[dict[str, Any]] = []
    timed_out = False
    cache = build_image_cache(cfg)
    try:
        futures = [(url, cache.fetch_async(url)) for url in args.urls]
        for url, future in futures:
            try:
                data = future.result(timeout=args.timeout)
            except FutureTimeoutError as exc:
                timed_out = True
                future.cancel()
                rows.append({"locator": url, "success": False, "error_type": "TimeoutError", "error": str(exc)})
                continue
            except ImageFetchError as exc:
                rows.append({"locator": url, "success": False, "error_type": type(exc).__name__, "error": str(exc)})
                continue
            info = decode_image(data, url)
            rows.append({"locator": url, "success": True, "bytes": len(data), **asdict(info)})
        stats = asdict(cache.stats())
    finally:
        # Abandoned downloads are not waited on once a timeout fired.
        cache.close(wait=not timed_out)

    _print_json({"results": rows, "stats": stats})
    return 0 if all(r["success"] for r in rows) else 2


def cmd_cache_clear(_args: argparse.Namespace) -> int:
    cfg = load_config()
    if not cfg.images.disk_cache:
        _print_json({"success": True, "cleared": False, "reason": "disk cache disabled"})
        return 0
    with build_image_cache(cfg) as cache:
        cache.clear()
    _print_json({"success": True, "cleared": True})
    return 0


def cmd_doctor(args: argparse.Namespace) -> int:
    cfg = load_config()
    payload = build_doctor_payload(cfg)

    if args.export:
        exporter = DiagnosticsExporter()
        out_dir = Path(args.out_dir).expanduser().resolve() if args.out_dir else None
        bundle = exporter.bundle(cfg=cfg, doctor_payload=payload, output_dir=out_dir)
        payload["diagnostics_bundle"] = str(bundle)

    _print_json(payload)
    return 0


def _style_args() -> argparse.ArgumentParser:
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument("--preset", default=StylePreset.DEFAULT.value, help="Preset tag; unknown tags fall back to default")
    parent.add_argument("--size", default=ControlSize.MEDIUM.value, choices=[s.value for s in ControlSize])
    parent.add_argument("--scheme", default="auto", choices=["auto", "light", "dark"])
    parent.add_argument("--size-category", default=None, choices=_SIZE_CATEGORY_CHOICES)
    parent.add_argument("--reduce-motion", action="store_true")
    parent.add_argument("--reduce-transparency", action="store_true")
    parent.add_argument(
        "--override",
        action="append",
        type=_parse_override,
        metavar="FIELD=VALUE",
        help="Replace a resolved field, e.g. corner_radius=4 or background_color=#FF0000",
    )
    return parent


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="swatchkit", description="Style resolution and image cache tools")
    sub = parser.add_subparsers(dest="command", required=True)
    style_args = _style_args()

    presets_cmd = sub.add_parser("presets", help="List presets with their light resolution")
    presets_cmd.set_defaults(func=cmd_presets)

    resolve_cmd = sub.add_parser("resolve", parents=[style_args], help="Resolve a style request")
    resolve_cmd.set_defaults(func=cmd_resolve)

    preview_cmd = sub.add_parser("preview", parents=[style_args], help="Render a swatch PNG of a resolved style")
    preview_cmd.add_argument("--label", default="Button")
    preview_cmd.add_argument("--out", required=True, help="Output PNG path")
    preview_cmd.set_defaults(func=cmd_preview)

    cache_cmd = sub.add_parser("cache", help="Image cache tools")
    cache_sub = cache_cmd.add_subparsers(dest="cache_cmd", required=True)
    fetch_cmd = cache_sub.add_parser("fetch", help="Fetch images through the cache")
    fetch_cmd.add_argument("urls", nargs="+")
    fetch_cmd.add_argument("--timeout", type=float, default=None)
    fetch_cmd.set_defaults(func=cmd_cache_fetch)
    clear_cmd = cache_sub.add_parser("clear", help="Clear the on-disk image cache")
    clear_cmd.set_defaults(func=cmd_cache_clear)

    doctor_cmd = sub.add_parser("doctor", help="Print diagnostics")
    doctor_cmd.add_argument("--export", action="store_true", help="Export offline diagnostics bundle")
    doctor_cmd.add_argument("--out-dir", default=None, help="Optional output directory for diagnostics bundle")
    doctor_cmd.set_defaults(func=cmd_doctor)

    return parser


def main(argv: list[str] | None = None) -> int:
    configure_logging(console=False)
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
