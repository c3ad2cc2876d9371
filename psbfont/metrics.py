"""
metrics.py
==========

Unified vertical metrics per size tier.

All glyphs of a tier share one baseline and one vertical envelope so that
characters drawn from different fonts line up. The envelope is derived from
the primary (first) font only:

    fixed_height   = ceil(max(maxHeight, minHeight))
    baseline_y     = (fixed_height - render_size) / 2 + ascent(primary)
    dynamic_offset = round(global_offset_correction * maxHeight / ref_maxHeight)
    b              = baseline_y + dynamic_offset
    a              = b - fixed_height
    d              = maxHeight

`ref_maxHeight` is the maxHeight of the last configured tier, which scales a
single global correction proportionally across tiers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from .config import AppConfig, SizeTier

__all__ = ["FontMetrics", "compute_metrics", "round_half_away"]


def round_half_away(value: float) -> float:
    """Round to the nearest integer, ties away from zero (2.5 -> 3, -2.5 -> -3)."""
    return math.copysign(math.floor(abs(value) + 0.5), value)


@dataclass(frozen=True)
class FontMetrics:
    baseline_y: float
    param_a: float
    param_b: float
    param_d: float


def compute_metrics(
    fonts: Sequence,
    tier: SizeTier,
    config: AppConfig,
    render_size: float,
) -> FontMetrics:
    primary = fonts[0]
    ascent = primary.ascent(render_size * primary.config.scale)
    fixed_height = tier.fixed_height

    vertical_center_offset = (fixed_height - render_size) / 2.0
    baseline_y = vertical_center_offset + ascent

    size_ratio = tier.max_height / config.reference_tier.max_height
    dynamic_offset = round_half_away(config.global_offset_correction * size_ratio)

    unified_b = baseline_y + dynamic_offset
    unified_a = unified_b - fixed_height
    return FontMetrics(
        baseline_y=baseline_y,
        param_a=unified_a,
        param_b=unified_b,
        param_d=tier.max_height,
    )
