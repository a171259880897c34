from __future__ import annotations

import argparse
from pathlib import Path

from . import __version__
from .config import STRATEGIES, _coerce_ratio

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _ratio_arg(value: str) -> str:
    if _coerce_ratio(value, 0.0) <= 0:
        raise argparse.ArgumentTypeError(f"not a positive ratio: {value!r}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="smartcropper",
        description="Crops photos to a fixed aspect ratio around their salient content",
    )
    parser.add_argument("--input", type=Path, help="Image file or directory of images")
    parser.add_argument("--output", type=Path, help="Directory for the cropped images")
    parser.add_argument(
        "--strategy",
        type=str.upper,
        choices=list(STRATEGIES),
        help="Detection strategy (overrides .env)",
    )
    parser.add_argument(
        "--ratio",
        type=_ratio_arg,
        help='Target width/height, e.g. "1", "1.5" or "2:1" (overrides .env)',
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Keep running and crop images dropped into the input directory",
    )
    parser.add_argument("--log-level", type=str.upper, choices=list(LOG_LEVELS))
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)
