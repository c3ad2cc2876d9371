"""
rasterize.py
============

Character -> fixed-height RGBA cell.

Each glyph is drawn into a cell of `tier.fixed_height` rows whose width is the
largest of the rounded-up advance, the rounded-up outline width, and the
tier's minimum width. The glyph sits on the tier's shared baseline (plus the
font entry's `offset_y`); when that would push it out of the cell it is moved
vertically by a whole number of pixels:

    top < 0                     -> shift down by -top
    bottom > fixed_height       -> shift up by (fixed_height - bottom),
                                   unless that lifts the top above 0, in
                                   which case shift so that top == 0
    otherwise                   -> no shift

The applied shift is recorded on the bitmap so the descriptor can move the
glyph's a/b parameters by the same amount. Coverage samples become white
pixels with alpha = round(coverage * 255); samples landing outside the cell
are dropped.

Characters missing from every font still produce a (transparent) cell with a
correct advance.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from .config import SizeTier
from .fonts import LoadedFont, select_font
from .metrics import round_half_away

__all__ = ["GlyphBitmap", "compute_shift", "rasterize_char", "rasterize_chars"]

log = logging.getLogger(__name__)


@dataclass
class GlyphBitmap:
    char: str
    pixels: Optional[np.ndarray]  # (height, width, 4) uint8 RGBA
    width: int
    height: int
    advance: float
    shift_y: float

    @property
    def has_ink(self) -> bool:
        return self.pixels is not None and bool(self.pixels[..., 3].any())


def compute_shift(top: float, bottom: float, fixed_height: float) -> float:
    """Vertical shift (rounded to whole pixels) keeping [top, bottom] inside the cell."""
    shift = 0.0
    if top < 0.0:
        shift = -top
    elif bottom > fixed_height:
        shift_up = fixed_height - bottom
        if top + shift_up >= 0.0:
            shift = shift_up
        else:
            shift = -top
    return round_half_away(shift)


def rasterize_char(
    char: str,
    fonts: Sequence[LoadedFont],
    tier: SizeTier,
    render_size: float,
    baseline_y: float,
) -> GlyphBitmap:
    font_idx = select_font(char, fonts)
    font = fonts[font_idx]
    px = render_size * font.config.scale

    glyph_id = font.glyph_id(char)
    h_advance = font.h_advance(glyph_id, px)
    # .notdef is never drawn; unmapped characters stay blank
    outlined = font.outline_glyph(glyph_id, px) if glyph_id != 0 else None

    fixed_h = tier.fixed_height
    content_w = int(math.ceil(outlined.px_bounds.width)) if outlined is not None else 0
    advance_w = int(math.ceil(h_advance))
    img_w = max(advance_w, content_w, int(math.ceil(tier.min_width)))

    shift_y = 0.0
    if outlined is not None:
        bounds = outlined.px_bounds
        top = bounds.min_y + baseline_y + font.config.offset_y
        bottom = bounds.max_y + baseline_y + font.config.offset_y
        shift_y = compute_shift(top, bottom, fixed_h)

    pixels = np.zeros((fixed_h, img_w, 4), dtype=np.uint8)
    if outlined is not None:
        bounds = outlined.px_bounds
        origin_y = bounds.min_y + baseline_y + font.config.offset_y + shift_y

        def _plot(x: int, y: int, coverage: float) -> None:
            alpha = int(round_half_away(coverage * 255.0))
            if alpha <= 0:
                return
            dest_x = bounds.min_x + x
            dest_y = origin_y + y
            if 0.0 <= dest_x < img_w and 0.0 <= dest_y < fixed_h:
                pixels[int(dest_y), int(dest_x)] = (255, 255, 255, min(alpha, 255))

        outlined.draw(_plot)

    log.debug(
        "glyph %r: font #%d, cell %dx%d, shift %+.0f",
        char,
        font_idx,
        img_w,
        fixed_h,
        shift_y,
    )

    return GlyphBitmap(
        char=char,
        pixels=pixels,
        width=img_w,
        height=fixed_h,
        advance=max(h_advance, tier.min_width),
        shift_y=shift_y,
    )


def rasterize_chars(
    chars: Sequence[str],
    fonts: Sequence[LoadedFont],
    tier: SizeTier,
    render_size: float,
    baseline_y: float,
) -> List[GlyphBitmap]:
    """Rasterize `chars` in order; the result keeps the same order."""
    return [rasterize_char(c, fonts, tier, render_size, baseline_y) for c in chars]
