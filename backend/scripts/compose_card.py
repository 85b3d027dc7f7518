"""Compose a trading card from local image files.

Usage:
    compose-card --background bg.png --illustration art.png --out card.png \
        [--variant landscape-square|landscape-flat|portrait-square|portrait-flat] \
        [--text title="Dragon" --text content1="Breathes fire"] [--frame classic]

Without --background, a background is generated from --prompt through the
configured image service (IMAGE_GEN_URL / IMAGE_GEN_API_KEY).
When CARD_DEBUG_ARTIFACTS=1, per-layer PNG/SVG files land in --debug-dir.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from domain.errors import CardError
from domain.models import (
    BlurIntensity,
    BorderPreset,
    CropAnchor,
    FramePresetId,
    GlowIntensity,
    LayoutMode,
    LayoutVariantId,
    PanelColorId,
    ScalePreset,
    TextPanelContent,
    TextureType,
)
from services.asset_cache import AssetCache
from services.card_composer import ComposeCardOptions, compose_card_detailed
from services.frame_assembler import render_frame
from services.frame_presets import INSET_MAX, INSET_MIN, THICKNESS_MAX, THICKNESS_MIN
from services.image_generation import NEGATIVE_PROMPT, HttpImageGenerator, build_background_prompt
from services.layout_catalogue import canvas_size_for, resolve_variant_id

logger = logging.getLogger("compose_card")

READ_ERROR = "Could not read image file {path}: {reason}"


def _values(enum_cls) -> List[str]:
    return [e.value for e in enum_cls]


def _parse_text(items: List[str]) -> List[TextPanelContent]:
    panels: List[TextPanelContent] = []
    for item in items or []:
        panel_id, sep, text = item.partition("=")
        if not sep:
            raise SystemExit(f"--text expects panel=text, got {item!r}")
        panels.append(TextPanelContent(panel_id=panel_id.strip(), text=text))
    return panels


def _read(path: str) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise SystemExit(READ_ERROR.format(path=path, reason=exc.strerror or exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Compose a layered trading card into a PNG.")
    parser.add_argument("--background", default=None, help="Background image file.")
    parser.add_argument("--prompt", default=None, help="Scene description used to generate a background.")
    parser.add_argument("--illustration", required=True, help="Illustration image file.")
    parser.add_argument("--out", required=True, help="Output PNG path.")
    parser.add_argument("--variant", choices=_values(LayoutVariantId), default=None)
    parser.add_argument("--mode", choices=_values(LayoutMode), default=None, help="Legacy 2-way layout mode.")
    parser.add_argument("--text", action="append", default=[], help="panel=text, repeatable (title, content1..4).")
    parser.add_argument("--color", choices=_values(PanelColorId), default=PanelColorId.OBSIDIAN.value)
    parser.add_argument("--border-preset", choices=_values(BorderPreset), default=None)
    parser.add_argument("--texture", choices=_values(TextureType), default=None)
    parser.add_argument("--blur", choices=_values(BlurIntensity), default=None)
    parser.add_argument("--glow", choices=_values(GlowIntensity), default=None)
    parser.add_argument("--scale", choices=_values(ScalePreset), default=None)
    parser.add_argument("--crop-anchor", choices=_values(CropAnchor), default=None)
    parser.add_argument("--frame", choices=_values(FramePresetId), default=FramePresetId.NONE.value)
    parser.add_argument("--inset", type=int, default=None, help=f"Frame inset override ({INSET_MIN}-{INSET_MAX}).")
    parser.add_argument(
        "--thickness", type=int, default=None, help=f"Frame edge thickness override ({THICKNESS_MIN}-{THICKNESS_MAX})."
    )
    parser.add_argument("--asset-root", default=None, help="Frame tile root; defaults to CARD_ASSET_ROOT.")
    parser.add_argument("--strict", action="store_true", help="Fail on border geometry problems.")
    parser.add_argument("--debug-dir", default=None)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv(Path(__file__).resolve().parents[1] / ".env")
    if not logger.handlers:
        logging.basicConfig(level=logging.INFO, format="%(message)s")
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.inset is not None and not INSET_MIN <= args.inset <= INSET_MAX:
        parser.error(f"--inset must be between {INSET_MIN} and {INSET_MAX}")
    if args.thickness is not None and not THICKNESS_MIN <= args.thickness <= THICKNESS_MAX:
        parser.error(f"--thickness must be between {THICKNESS_MIN} and {THICKNESS_MAX}")
    if not args.background and not args.prompt:
        parser.error("one of --background or --prompt is required")

    try:
        variant = resolve_variant_id(args.variant, args.mode)
        if args.background:
            background = _read(args.background)
        else:
            width, height = canvas_size_for(variant)
            background = HttpImageGenerator().generate(
                build_background_prompt(args.prompt), width, height, NEGATIVE_PROMPT
            )

        options = ComposeCardOptions(
            background=background,
            illustration=_read(args.illustration),
            text_panels=_parse_text(args.text),
            color_id=args.color,
            layout_variant=variant,
            border_preset=args.border_preset,
            texture=args.texture,
            blur=args.blur,
            glow=args.glow,
            scale=args.scale,
            crop_anchor=args.crop_anchor,
            strict_geometry=True if args.strict else None,
            debug_dir=Path(args.debug_dir) if args.debug_dir else None,
        )
        composed = compose_card_detailed(options)
        image = render_frame(
            composed.image,
            args.frame,
            orientation=variant,
            inset_offset=args.inset,
            edge_thickness=args.thickness,
            cache=AssetCache(args.asset_root) if args.asset_root else None,
        )
    except CardError as exc:
        logger.error("compose failed: %s", exc)
        return 1

    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(out_path, format="PNG")
    logger.info("wrote %s (%dx%d, %d layers)", out_path, image.width, image.height, len(composed.layers))
    return 0


if __name__ == "__main__":
    sys.exit(main())
