"""
pipeline.py
===========

Whole-run driver.

    config -> fonts -> characters
    for each size tier:
        metrics   (once)
        rasterize (per character, in character order)
        pack      (single ordered pass)
        serialize (images + descriptors)

Tiers share only read-only inputs (fonts, character list, config) and write
to disjoint output files, so a failed tier never touches the output of one
that already finished.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .charset import load_characters
from .config import AppConfig, SizeTier
from .errors import AtlasBuildError, OutputWriteError
from .fonts import LoadedFont, load_fonts
from .metrics import FontMetrics, compute_metrics
from .packer import AtlasPage, pack_glyphs
from .rasterize import rasterize_chars
from .serialize import PlacementRecord, build_placements, write_tier_outputs

__all__ = ["TierResult", "BuildReport", "build_tier", "process_tier", "run"]

log = logging.getLogger(__name__)


@dataclass
class TierResult:
    tier: SizeTier
    render_size: float
    metrics: FontMetrics
    pages: List[AtlasPage]
    placements: Dict[str, PlacementRecord]


@dataclass
class BuildReport:
    written: List[Path]
    failed: List[SizeTier]

    @property
    def ok(self) -> bool:
        return not self.failed


def build_tier(
    fonts: Sequence[LoadedFont],
    tier: SizeTier,
    chars: Sequence[str],
    config: AppConfig,
) -> TierResult:
    """Compute metrics, rasterize and pack one tier in memory."""
    render_size = tier.max_height * config.global_scale
    log.info(
        "Generating font size: %.0f (render size: %.1f)...", tier.max_height, render_size
    )
    metrics = compute_metrics(fonts, tier, config, render_size)
    bitmaps = rasterize_chars(chars, fonts, tier, render_size, metrics.baseline_y)
    pages, packed = pack_glyphs(bitmaps, config.atlas_max_size)
    log.debug(
        "tier %.0f: baseline %.2f, a=%.2f b=%.2f d=%.2f, %d page(s)",
        tier.max_height,
        metrics.baseline_y,
        metrics.param_a,
        metrics.param_b,
        metrics.param_d,
        len(pages),
    )
    return TierResult(
        tier=tier,
        render_size=render_size,
        metrics=metrics,
        pages=pages,
        placements=build_placements(packed, tier, metrics),
    )


def process_tier(
    fonts: Sequence[LoadedFont],
    tier: SizeTier,
    chars: Sequence[str],
    config: AppConfig,
) -> List[Path]:
    result = build_tier(fonts, tier, chars, config)
    return write_tier_outputs(config.output_dir, tier, result.pages, result.placements)


def run(
    config: AppConfig,
    keep_going: bool = False,
    fonts: Optional[Sequence[LoadedFont]] = None,
) -> BuildReport:
    """
    Build every configured tier.

    Font and character loading errors are always fatal. A failing tier stops
    the run unless `keep_going` is set, in which case the remaining tiers are
    still built and the failure is reported in the returned `BuildReport`.
    """
    if fonts is None:
        fonts = load_fonts(config.fonts)
    chars = load_characters(config.chars_file)
    log.info("Initialisation complete. Total characters: %d", len(chars))

    out_dir = Path(config.output_dir)
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputWriteError(out_dir, e) from e

    report = BuildReport(written=[], failed=[])
    for tier in config.font_sizes:
        try:
            report.written.extend(process_tier(fonts, tier, chars, config))
        except AtlasBuildError as e:
            if not keep_going:
                raise
            log.error("Size %.0f failed: %s", tier.max_height, e)
            report.failed.append(tier)
    return report
