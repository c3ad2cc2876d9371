"""
fonts.py
========

Font loading and glyph queries (fontTools-backed).

Each configured font is read into memory once and shared read-only by every
size tier. A `LoadedFont` owns its byte buffer for as long as it lives, and
every glyph query goes through it.

Scale Semantics
---------------
A requested pixel size `px` is the full ascender-to-descender height:

    factor = px / (ascender - descender)

where ascender/descender come from `hhea`, or from OS/2 typo metrics when the
font sets the USE_TYPO_METRICS bit (fsSelection bit 7). Advances and outlines
are scaled by the same factor; `ascent(px)` is `ascender * factor`.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from fontTools.ttLib import TTFont

from .config import FontConfig
from .errors import FontUnreadableError, NoFontsConfiguredError
from .outline import OutlinedGlyph, PolylinePen

__all__ = ["LoadedFont", "load_fonts", "select_font"]

log = logging.getLogger(__name__)

_USE_TYPO_METRICS = 1 << 7


class LoadedFont:
    def __init__(self, data: bytes, config: FontConfig, source: str = "<memory>"):
        self.data = data
        self.config = config
        self.source = source
        self.ttfont = TTFont(io.BytesIO(data))
        self._cmap: Dict[int, str] = self.ttfont.getBestCmap() or {}
        self._glyph_set = self.ttfont.getGlyphSet()
        self._hmtx = self.ttfont["hmtx"]
        self.units_per_em = int(self.ttfont["head"].unitsPerEm)
        self.ascender, self.descender = self._vertical_metrics()

    @classmethod
    def from_config(cls, config: FontConfig) -> "LoadedFont":
        path = Path(config.path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise FontUnreadableError(f"Unable to read font file: {path} ({e})") from e
        try:
            return cls(data, config, source=str(path))
        except Exception as e:  # fontTools raises a variety of types on bad data
            raise FontUnreadableError(f"Unable to parse font file: {path} ({e})") from e

    def _vertical_metrics(self):
        hhea = self.ttfont["hhea"]
        ascender, descender = float(hhea.ascent), float(hhea.descent)
        if "OS/2" in self.ttfont:
            os2 = self.ttfont["OS/2"]
            if getattr(os2, "fsSelection", 0) & _USE_TYPO_METRICS:
                ascender = float(os2.sTypoAscender)
                descender = float(os2.sTypoDescender)
        if ascender - descender <= 0:
            ascender, descender = float(self.units_per_em), 0.0
        return ascender, descender

    # -- scaling ------------------------------------------------------------

    def scale_factor(self, px: float) -> float:
        return px / (self.ascender - self.descender)

    def ascent(self, px: float) -> float:
        return self.ascender * self.scale_factor(px)

    # -- glyph queries ------------------------------------------------------

    def glyph_id(self, char: str) -> int:
        """Glyph index mapped to `char`, 0 (.notdef) when the font lacks it."""
        name = self._cmap.get(ord(char))
        if name is None:
            return 0
        return self.ttfont.getGlyphID(name)

    def has_glyph(self, char: str) -> bool:
        return self.glyph_id(char) != 0

    def h_advance(self, glyph_id: int, px: float) -> float:
        name = self.ttfont.getGlyphName(glyph_id)
        advance, _lsb = self._hmtx[name]
        return advance * self.scale_factor(px)

    def outline_glyph(self, glyph_id: int, px: float) -> Optional[OutlinedGlyph]:
        """Scaled outline for `glyph_id`, or None when the glyph has no contours."""
        name = self.ttfont.getGlyphName(glyph_id)
        pen = PolylinePen(self._glyph_set, scale=self.scale_factor(px))
        self._glyph_set[name].draw(pen)
        if not pen.polylines:
            return None
        return OutlinedGlyph(pen.polylines)

    def __repr__(self) -> str:
        return f"LoadedFont({self.source!r}, scale={self.config.scale}, offset_y={self.config.offset_y})"


def load_fonts(configs: Iterable[FontConfig]) -> List[LoadedFont]:
    """
    Load every configured font, in order.

    Raises
    ------
    FontUnreadableError
        A font path cannot be read or parsed.
    NoFontsConfiguredError
        The configuration lists no fonts.
    """
    fonts: List[LoadedFont] = []
    for cfg in configs:
        log.info("Loading font file: %s", cfg.path)
        fonts.append(LoadedFont.from_config(cfg))
    if not fonts:
        raise NoFontsConfiguredError("No fonts defined in the configuration")
    return fonts


def select_font(char: str, fonts: Sequence[LoadedFont]) -> int:
    """
    Index of the first font whose character map covers `char`.

    Falls back to index 0 when no font covers it; the result is then a blank
    cell rendered with the primary font's metrics.
    """
    for idx, font in enumerate(fonts):
        if font.has_glyph(char):
            return idx
    return 0
