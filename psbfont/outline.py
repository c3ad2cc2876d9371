"""
outline.py
==========

Glyph outline -> pixel coverage.

Design
------
- Outlines are pulled from a fontTools glyph set through a pen that flattens
  every segment into polylines, already scaled to pixels with the y axis
  pointing down (origin on the baseline, at the pen position).
- Quadratic segments go through `BasePen`'s quadratic -> cubic conversion;
  cubics are sampled uniformly.
- Coverage follows the nonzero winding rule: each closed ring is filled on a
  supersampled canvas and added into a winding buffer as +1 or -1 by the sign
  of its area; pixels with nonzero winding are ink. The buffer is then
  box-filtered down to the glyph's pixel bounds; the fractional area per
  output pixel is the coverage value handed to `OutlinedGlyph.draw` callbacks.

Usage
-----
    pen = PolylinePen(glyph_set, scale=px_per_unit)
    glyph_set[glyph_name].draw(pen)
    outlined = OutlinedGlyph(pen.polylines)
    outlined.draw(lambda x, y, c: ...)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np
from fontTools.pens.basePen import BasePen
from PIL import Image, ImageDraw

__all__ = [
    "Point",
    "Polyline",
    "PixelBounds",
    "PolylinePen",
    "OutlinedGlyph",
    "sample_cubic",
]

Point = Tuple[float, float]
Polyline = List[Point]

DEFAULT_SUPERSAMPLE = 4
DEFAULT_CUBIC_SUBDIV = 8


# ---------------------------------------------------------------------------
# Curve Sampling
# ---------------------------------------------------------------------------


def sample_cubic(p0: Point, p1: Point, p2: Point, p3: Point, n: int = 8) -> List[Point]:
    """
    Flatten one pixel-space cubic segment for `PolylinePen`.

    Returns n+1 points evenly spaced in t; the first is the pen position,
    which callers already hold, the last is the segment end point.
    """
    pts: List[Point] = []
    for i in range(n + 1):
        t = i / n
        b0 = (1 - t) ** 3
        b1 = 3 * (1 - t) ** 2 * t
        b2 = 3 * (1 - t) * t * t
        b3 = t ** 3
        pts.append(
            (
                b0 * p0[0] + b1 * p1[0] + b2 * p2[0] + b3 * p3[0],
                b0 * p0[1] + b1 * p1[1] + b2 * p2[1] + b3 * p3[1],
            )
        )
    return pts


def _ring_direction(poly: Sequence[Point]) -> int:
    """+1 or -1 by the sign of the ring's shoelace area, 0 for degenerate rings."""
    area = 0.0
    for (x1, y1), (x2, y2) in zip(poly, poly[1:] + poly[:1]):
        area += x1 * y2 - x2 * y1
    if area > 0:
        return 1
    if area < 0:
        return -1
    return 0


class PolylinePen(BasePen):
    """
    Pen flattening an outline into pixel-space polylines.

    `scale` converts font units to pixels; y is flipped so that positive
    values point down, matching image rows.
    """

    def __init__(self, glyphSet=None, scale: float = 1.0, cubic_subdiv: int = DEFAULT_CUBIC_SUBDIV):
        super().__init__(glyphSet)
        self.scale = scale
        self.cubic_subdiv = max(1, int(cubic_subdiv))
        self.polylines: List[Polyline] = []
        self._current: Optional[Polyline] = None

    def _px(self, pt) -> Point:
        return (pt[0] * self.scale, -pt[1] * self.scale)

    def _moveTo(self, pt):
        self._flush()
        self._current = [self._px(pt)]

    def _lineTo(self, pt):
        if self._current is None:
            self._current = []
        self._current.append(self._px(pt))

    def _curveToOne(self, pt1, pt2, pt3):
        start = self._getCurrentPoint()
        samples = sample_cubic(
            self._px(start),
            self._px(pt1),
            self._px(pt2),
            self._px(pt3),
            n=self.cubic_subdiv,
        )
        if self._current is None:
            self._current = samples
        else:
            # first sample duplicates the pen position
            self._current.extend(samples[1:])

    def _closePath(self):
        if self._current and self._current[0] != self._current[-1]:
            self._current.append(self._current[0])
        self._flush()

    def _endPath(self):
        # Open contours are closed implicitly by the fill rule.
        self._closePath()

    def _flush(self):
        if self._current and len(self._current) >= 2:
            self.polylines.append(self._current)
        self._current = None


# ---------------------------------------------------------------------------
# Outlined Glyph
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PixelBounds:
    """Integer-aligned pixel box: floor of the outline minimum, ceil of its maximum."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


class OutlinedGlyph:
    """
    A scaled, positioned outline able to report per-pixel coverage.

    Pixel (x, y) passed to `draw` callbacks is relative to `px_bounds`
    (min_x, min_y); coverage is in [0, 1].
    """

    def __init__(self, polylines: Sequence[Polyline], supersample: int = DEFAULT_SUPERSAMPLE):
        if not polylines:
            raise ValueError("OutlinedGlyph needs at least one polyline")
        self.polylines = [list(p) for p in polylines]
        self.supersample = max(1, int(supersample))
        xs = [x for poly in self.polylines for x, _ in poly]
        ys = [y for poly in self.polylines for _, y in poly]
        self.px_bounds = PixelBounds(
            min_x=float(math.floor(min(xs))),
            min_y=float(math.floor(min(ys))),
            max_x=float(math.ceil(max(xs))),
            max_y=float(math.ceil(max(ys))),
        )
        self._coverage: Optional[np.ndarray] = None

    def coverage(self) -> np.ndarray:
        """Coverage array of shape (height, width), float32 in [0, 1]."""
        if self._coverage is None:
            self._coverage = self._render_coverage()
        return self._coverage

    def _render_coverage(self) -> np.ndarray:
        w = int(self.px_bounds.width)
        h = int(self.px_bounds.height)
        if w <= 0 or h <= 0:
            return np.zeros((max(h, 0), max(w, 0)), dtype=np.float32)

        ss = self.supersample
        size = (w * ss, h * ss)
        winding = np.zeros((size[1], size[0]), dtype=np.int32)
        ox, oy = self.px_bounds.min_x, self.px_bounds.min_y
        for poly in self.polylines:
            if len(poly) < 3:
                continue
            direction = _ring_direction(poly)
            if direction == 0:
                continue
            scaled = [((x - ox) * ss, (y - oy) * ss) for x, y in poly]
            ring = Image.new("1", size, color=0)
            ImageDraw.Draw(ring).polygon(scaled, fill=1)
            winding += direction * np.asarray(ring, dtype=np.int32)

        # nonzero winding: overlapping same-direction rings stay filled,
        # opposite-direction rings carve counters
        gray = Image.fromarray(np.where(winding != 0, 255, 0).astype(np.uint8))
        if ss > 1:
            gray = gray.resize((w, h), resample=Image.Resampling.BOX)
        return np.asarray(gray, dtype=np.float32) / 255.0

    def draw(self, fn: Callable[[int, int, float], None]) -> None:
        """Invoke `fn(x, y, coverage)` for every pixel of the bounding box."""
        cov = self.coverage()
        h, w = cov.shape
        for y in range(h):
            row = cov[y]
            for x in range(w):
                fn(x, y, float(row[x]))
