#!/usr/bin/env python3
"""
Arena Level Generator - Command Line Entry Point

Builds one arena layout and prints a summary. Generation parameters can be
given as flags, loaded from a settings file or a saved preset, and the
result can be dumped as DOT, JSON or an ASCII map.
"""

import sys
import argparse
import logging
from pathlib import Path

from arena_levelgen.pipeline import (
    ArenaPipeline,
    PipelineSettings,
    PipelineError,
    load_settings,
    load_settings_from_path,
    save_settings,
)
from arena_levelgen.pipeline.debug import export_layout_dot, export_layout_json, render_ascii

logger = logging.getLogger("arena_levelgen.main")


# Flag name -> PipelineSettings field
OVERRIDES = {
    'width': 'grid_width',
    'depth': 'grid_depth',
    'cell_size': 'cell_size',
    'seed': 'seed',
    'rooms': 'desired_room_count',
    'min_room_size': 'min_room_size',
    'max_room_size': 'max_room_size',
    'corridor_width': 'corridor_width',
    'floors': 'stacked_floor_count',
    'tiers': 'max_platform_tiers',
    'staircases': 'staircase_count',
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate a procedural multi-room arena layout.")
    parser.add_argument('--settings', type=Path, help="JSON settings file to start from")
    parser.add_argument('--preset', help="Saved preset name to start from")
    parser.add_argument('--save-preset', metavar='NAME', help="Save the effective settings as a preset")

    parser.add_argument('--width', type=int, help="Grid width in cells")
    parser.add_argument('--depth', type=int, help="Grid depth in cells")
    parser.add_argument('--cell-size', type=float, help="World size of one cell")
    parser.add_argument('--seed', type=int, help="Generation seed")
    parser.add_argument('--random-seed', action='store_true', help="Ignore the seed and draw a fresh one")
    parser.add_argument('--rooms', type=int, help="Desired room count")
    parser.add_argument('--min-room-size', type=int)
    parser.add_argument('--max-room-size', type=int)
    parser.add_argument('--corridor-width', type=int)
    parser.add_argument('--floors', type=int, help="Stacked floor count")
    parser.add_argument('--tiers', type=int, help="Maximum platform tiers per floor")
    parser.add_argument('--staircases', type=int, help="Staircase room count")
    parser.add_argument('--no-enemies', action='store_true', help="Skip encounter generation")

    parser.add_argument('--dump', type=Path, help="Write the layout to this file")
    parser.add_argument('--format', choices=['dot', 'json', 'ascii'], default='json',
                        help="Dump format (default: json)")
    parser.add_argument('--ascii', action='store_true', help="Print an ASCII map of the height field")
    parser.add_argument('-v', '--verbose', action='store_true', help="Debug logging")
    return parser


def resolve_settings(args: argparse.Namespace) -> PipelineSettings:
    settings = PipelineSettings()
    if args.settings:
        loaded = load_settings_from_path(args.settings)
        if loaded is None:
            raise PipelineError(f"Settings file not found: {args.settings}")
        settings = loaded
    elif args.preset:
        loaded = load_settings(args.preset)
        if loaded is None:
            raise PipelineError(f"Unknown preset: {args.preset}")
        settings = loaded

    for flag, field_name in OVERRIDES.items():
        value = getattr(args, flag)
        if value is not None:
            setattr(settings, field_name, value)
    if args.random_seed:
        settings.use_random_seed = True
    if args.no_enemies:
        settings.spawn_enemies = False
    return settings


def write_dump(layout, path: Path, fmt: str):
    if fmt == 'dot':
        content = export_layout_dot(layout)
    elif fmt == 'ascii':
        content = render_ascii(layout)
    else:
        content = export_layout_json(layout)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding='utf-8')
    logger.info("Layout written: %s", path)


def main(argv=None) -> int:
    """Main command line entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = resolve_settings(args)
    except PipelineError as e:
        logger.error("%s", e)
        return 2

    if args.save_preset:
        save_settings(settings, args.save_preset)

    pipeline = ArenaPipeline(settings)
    result = pipeline.generate()
    if not result.success:
        for error in result.errors:
            logger.error("%s", error)
        return 1

    layout = result.layout
    stats = layout.get_stats()
    print(f"Seed {layout.seed}: {stats['room_count']} rooms, {stats['tile_count']} tiles, "
          f"{stats['ramp_count']} ramps, {stats['encounter_count']} encounters "
          f"({stats['enemy_count']} enemies) in {result.total_time:.2f}s")
    if result.validation is not None and not result.validation.passed:
        print(result.validation.report())

    if args.ascii:
        print(render_ascii(layout))
    if args.dump:
        write_dump(layout, args.dump, args.format)
    return 0


if __name__ == "__main__":
    sys.exit(main())
