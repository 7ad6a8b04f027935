"""Command-line entry point: generate a track and print its summary.

    python -m procedural_race_track --preset daily --preview daily.png
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import CONFIGS, LaneSelectionMode, get_preset
from .track_gen import TrackGenerator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="procedural_race_track",
        description="Generate a seeded racing track layout",
    )
    parser.add_argument("--preset", default="default", choices=sorted(CONFIGS), help="Base config preset")
    parser.add_argument("--seed", type=int, help="Override the preset seed")
    parser.add_argument("--length", type=float, help="Override the track length (metres)")
    parser.add_argument("--lanes", type=int, help="Override the lane count")
    parser.add_argument(
        "--mode",
        choices=[m.value for m in LaneSelectionMode],
        help="Lane selection strategy",
    )
    parser.add_argument("--preview", metavar="PATH", help="Save a top-down preview image")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    config = get_preset(args.preset)
    if args.seed is not None:
        config.seed = args.seed
    if args.length is not None:
        config.track_length = args.length
    if args.lanes is not None:
        config.lane_count = args.lanes
    if args.mode is not None:
        config.lane_selection = LaneSelectionMode(args.mode)

    layout = TrackGenerator(config).generate()
    print(layout.summary())

    if args.preview:
        # Imported here so plain generation never loads pygame
        from .preview import render_preview, save_preview

        save_preview(render_preview(layout), args.preview)
        print(f"preview: {args.preview}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
