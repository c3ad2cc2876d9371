"""
packer.py
=========

Shelf (row) packing of glyph cells into square atlas pages.

Glyphs are placed left to right in input order. A glyph that does not fit in
the remaining row width opens a new row below the tallest cell of the current
row; a glyph that does not fit below the last row closes the page and starts
a new one. Closed pages are trimmed to the smallest power-of-two rectangle
(never below 64x64) covering every placed cell.

Blank cells (no visible pixel) are still given room on the shelf, but their
recorded coordinates are the fixed anchor (1, 1).

The packer is a single sequential pass: every placement depends on the
cursor state left behind by the previous one. All of that state lives in a
`PackerContext` owned by the pass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np
from PIL import Image

from .errors import AtlasCapacityError
from .rasterize import GlyphBitmap

__all__ = [
    "MIN_PAGE_SIZE",
    "BLANK_ANCHOR",
    "AtlasPage",
    "PackedGlyph",
    "PackerContext",
    "next_power_of_two",
    "pack_glyphs",
]

log = logging.getLogger(__name__)

MIN_PAGE_SIZE = 64
BLANK_ANCHOR = (1, 1)


def next_power_of_two(v: int) -> int:
    """Smallest power of two >= v, never less than 64."""
    p = MIN_PAGE_SIZE
    while p < v:
        p *= 2
    return p


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


@dataclass
class AtlasPage:
    index: int
    pixels: np.ndarray  # (height, width, 4) uint8 RGBA

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.pixels)


@dataclass(frozen=True)
class PackedGlyph:
    char: str
    page_index: int
    x: int
    y: int
    width: int
    height: int
    advance: float
    shift_y: float


@dataclass
class PackerContext:
    """Cursor state for the page currently being filled."""

    capacity: int
    page_index: int = 0
    cursor_x: int = 0
    cursor_y: int = 0
    row_height: int = 0
    used_width: int = 0
    used_height: int = 0
    canvas: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        self.canvas = self._blank_canvas()

    def _blank_canvas(self) -> np.ndarray:
        return np.zeros((self.capacity, self.capacity, 4), dtype=np.uint8)

    def fits_row(self, width: int) -> bool:
        return self.cursor_x + width <= self.capacity

    def fits_page(self, height: int) -> bool:
        return self.cursor_y + height <= self.capacity

    def new_row(self) -> None:
        self.cursor_x = 0
        self.cursor_y += self.row_height
        self.row_height = 0

    def place(self, bitmap: GlyphBitmap) -> Tuple[int, int]:
        """Blit `bitmap` at the cursor and advance; returns recorded (x, y)."""
        x, y = self.cursor_x, self.cursor_y
        if bitmap.has_ink:
            self.canvas[y : y + bitmap.height, x : x + bitmap.width] = bitmap.pixels
            coords = (x, y)
        else:
            coords = BLANK_ANCHOR

        self.used_width = max(self.used_width, x + bitmap.width)
        self.used_height = max(self.used_height, y + bitmap.height)
        self.row_height = max(self.row_height, bitmap.height)
        self.cursor_x += bitmap.width
        return coords

    def finish_page(self) -> AtlasPage:
        """Trim the current page and reset the context for the next one."""
        w = next_power_of_two(self.used_width)
        h = next_power_of_two(self.used_height)
        trimmed = np.zeros((h, w, 4), dtype=np.uint8)
        cw, ch = min(w, self.capacity), min(h, self.capacity)
        trimmed[:ch, :cw] = self.canvas[:ch, :cw]
        page = AtlasPage(index=self.page_index, pixels=trimmed)
        log.debug(
            "page %d closed: used %dx%d -> %dx%d",
            self.page_index,
            self.used_width,
            self.used_height,
            w,
            h,
        )

        self.page_index += 1
        self.cursor_x = self.cursor_y = 0
        self.row_height = 0
        self.used_width = self.used_height = 0
        self.canvas = self._blank_canvas()
        return page


# ---------------------------------------------------------------------------
# Packing
# ---------------------------------------------------------------------------


def pack_glyphs(
    bitmaps: Sequence[GlyphBitmap], capacity: int
) -> Tuple[List[AtlasPage], List[PackedGlyph]]:
    """
    Pack `bitmaps` (in order) into pages of `capacity` x `capacity` pixels.

    Raises
    ------
    AtlasCapacityError
        A cell is wider or taller than a whole page.
    """
    ctx = PackerContext(capacity=capacity)
    pages: List[AtlasPage] = []
    packed: List[PackedGlyph] = []

    for bmp in bitmaps:
        if bmp.width > capacity or bmp.height > capacity:
            raise AtlasCapacityError(
                f"Glyph {bmp.char!r} cell {bmp.width}x{bmp.height} exceeds "
                f"atlas page size {capacity}x{capacity}"
            )
        if not ctx.fits_row(bmp.width):
            ctx.new_row()
        if not ctx.fits_page(bmp.height):
            pages.append(ctx.finish_page())

        x, y = ctx.place(bmp)
        packed.append(
            PackedGlyph(
                char=bmp.char,
                page_index=ctx.page_index,
                x=x,
                y=y,
                width=bmp.width,
                height=bmp.height,
                advance=bmp.advance,
                shift_y=bmp.shift_y,
            )
        )

    pages.append(ctx.finish_page())
    return pages, packed
