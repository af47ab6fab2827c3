"""Headless Mesmerise Renderer - CLI entry point.

Loads one or more images as layers (the first is the base), applies
effects, optionally crops the composition, and writes the flattened
result as a PNG.

Usage:
    mesmerise-headless IMAGE [IMAGE ...] [-o OUT.png] [--effect INDEX:KIND[=VALUE]]
                       [--crop X,Y,W,H] [--config PATH] [-v]

Examples:
    mesmerise-headless photo.png --effect 0:sepia=60 -o sepia.png
    mesmerise-headless photo.png sticker.png --effect 1:resolution=25
    mesmerise-headless photo.png --effect '0:tint={"color": "#00ff88", "mix": 50}'
    mesmerise-headless photo.png --crop 10,10,200,120 -o cropped.png
"""

import sys
import os
import json
import argparse
import logging

# Add editor/src to path so imports work
_src_dir = os.path.dirname(os.path.abspath(__file__))
if _src_dir not in sys.path:
    sys.path.insert(0, _src_dir)

from constants import LOG_FORMAT


def parse_effect_arg(text: str):
    """Parse 'INDEX:KIND[=VALUE]' into (layer_index, kind, value or None)

    VALUE is a number for scalar effects or a JSON object for custom ones.

    Raises:
        ValueError: If the argument is malformed
    """
    index_text, sep, rest = text.partition(':')
    if not sep or not rest:
        raise ValueError(f"Expected INDEX:KIND[=VALUE], got '{text}'")
    try:
        index = int(index_text)
    except ValueError:
        raise ValueError(f"Layer index must be an integer, got '{index_text}'") from None

    kind, has_value, value_text = rest.partition('=')
    if not has_value:
        return index, kind.strip(), None

    value_text = value_text.strip()
    try:
        value = json.loads(value_text)
    except json.JSONDecodeError:
        raise ValueError(f"Could not parse effect value '{value_text}'") from None
    return index, kind.strip(), value


def parse_crop_arg(text: str):
    """Parse 'X,Y,W,H' into a canvas Rect

    Raises:
        ValueError: If the argument is malformed or the size is not positive
    """
    from models.transform import Rect

    parts = text.split(',')
    if len(parts) != 4:
        raise ValueError(f"Expected X,Y,W,H, got '{text}'")
    x, y, w, h = (int(p) for p in parts)
    if w <= 0 or h <= 0:
        raise ValueError("Crop width and height must be positive")
    return Rect.from_xywh(x, y, w, h)


def build_parser():
    parser = argparse.ArgumentParser(
        prog='mesmerise-headless',
        description='Composite images with effects and export a PNG (headless).',
    )
    parser.add_argument(
        'images',
        nargs='+',
        help='Input images; the first one is the base layer.',
    )
    parser.add_argument(
        '-o', '--output',
        default=None,
        help='Output PNG path (default: export filename from the config).',
    )
    parser.add_argument(
        '-e', '--effect',
        action='append',
        default=[],
        metavar='INDEX:KIND[=VALUE]',
        help='Add an effect to the layer at INDEX. May be repeated; applied in order.',
    )
    parser.add_argument(
        '--crop',
        default=None,
        metavar='X,Y,W,H',
        help='Crop the composition to this canvas rectangle before export.',
    )
    parser.add_argument(
        '--config',
        default=None,
        help='Config file to read settings from.',
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose logging.',
    )
    return parser


def run(args, config) -> int:
    """Execute a parsed command line; returns the process exit code"""
    from models.session import EditorSession
    from services.compositor import Surface, render_all
    from services.file_operations import load_image, save_png
    from services.render_scheduler import ManualRenderScheduler

    logger = logging.getLogger('headless')

    surface = Surface()
    session = EditorSession.from_config(config)
    scheduler = ManualRenderScheduler.from_config(lambda: render_all(session.layers, surface), config)
    session.attach_scheduler(scheduler)

    for path in args.images:
        if not os.path.isfile(path):
            print(f"Error: Input file not found: {path}")
            return 1
        try:
            session.add_layer(load_image(path))
        except OSError as e:
            print(f"Error: Could not read {path}: {e}")
            return 1

    layer_ids = [layer.id for layer in session.layers]
    for effect_arg in args.effect:
        try:
            index, kind, value = parse_effect_arg(effect_arg)
            if not 0 <= index < len(layer_ids):
                raise ValueError(f"No layer at index {index}")
            result = session.add_effect(layer_ids[index], kind)
            if result and value is not None:
                session.update_effect(result.value, value)
        except ValueError as e:
            print(f"Error: --effect {effect_arg}: {e}")
            return 1
        if not result:
            print(f"Warning: --effect {effect_arg} skipped: {result.reason}")

    if args.crop:
        try:
            result = session.crop_base(parse_crop_arg(args.crop))
        except ValueError as e:
            print(f"Error: --crop {args.crop}: {e}")
            return 1
        if not result:
            print(f"Warning: crop skipped: {result.reason}")

    scheduler.flush()

    output = os.path.abspath(args.output or config.export_filename)
    save_png(session, surface, output)
    logger.info(f"Wrote {output}")
    print(f"Saved {surface.width}x{surface.height} image to {output}")
    return 0


def main(argv=None):
    from utils.config import load_config

    args = build_parser().parse_args(argv)
    config = load_config(args.config)

    # Logging
    if args.verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, str(config.log_level).upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    sys.exit(run(args, config))


if __name__ == '__main__':
    main()
