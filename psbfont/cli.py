"""
Command-line entry point.

    python -m psbfont --config config.json
    psbfont --config config.json --output-dir build/fonts --verbose
"""

from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

from .config import DEFAULT_CONFIG_PATH, load_config
from .errors import AtlasBuildError
from .pipeline import run

log = logging.getLogger("psbfont")


def _build_argparser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Build packed bitmap-font atlases and descriptors from TrueType/OpenType fonts."
    )
    ap.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to the JSON build configuration (default: {DEFAULT_CONFIG_PATH})",
    )
    ap.add_argument(
        "--output-dir", default=None, help="Override the configured output directory"
    )
    ap.add_argument(
        "--chars-file", default=None, help="Override the configured character set file"
    )
    ap.add_argument(
        "--atlas-size",
        type=int,
        default=None,
        help="Override the atlas page capacity (pixels, square)",
    )
    ap.add_argument(
        "--keep-going",
        action="store_true",
        help="Continue with the remaining sizes when one size fails",
    )
    ap.add_argument(
        "--verbose", action="store_true", help="Enable debug logging"
    )
    return ap


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_argparser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config(args.config).with_overrides(
            output_dir=args.output_dir,
            chars_file=args.chars_file,
            atlas_max_size=args.atlas_size,
        )
        log.info(
            "Config %s: %d size(s), %d font(s), atlas %dpx -> %s",
            args.config,
            len(config.font_sizes),
            len(config.fonts),
            config.atlas_max_size,
            config.output_dir,
        )
        report = run(config, keep_going=args.keep_going)
    except AtlasBuildError as e:
        log.error("%s", e)
        return 1

    if not report.ok:
        log.error(
            "%d size(s) failed: %s",
            len(report.failed),
            ", ".join(f"{t.max_height:.0f}" for t in report.failed),
        )
        return 1
    log.info("All tasks complete.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
