"""
Shared fixtures: tiny TrueType fonts built on the fly.

All test fonts use 1000 units per em with hhea ascent 800 / descent -200, so
a pixel size `px` maps to `px / 1000` pixels per unit. Glyph shapes are plain
rectangles, which keeps expected bounds easy to compute by hand. A rectangle
with x0 > x1 is drawn in the opposite direction.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

from psbfont.config import FontConfig, SizeTier, parse_config
from psbfont.fonts import load_fonts

Rect = Tuple[int, int, int, int]

ASCENT = 800
DESCENT = -200

# name -> (codepoint or None, advance, rects)
PRIMARY_GLYPHS: Dict[str, Tuple[int, int, List[Rect]]] = {
    ".notdef": (None, 500, [(50, 0, 450, 700)]),
    "space": (0x20, 250, []),
    "A": (0x41, 600, [(50, 0, 550, 700)]),
    # counter drawn with x0 > x1, i.e. in the opposite direction
    "O": (0x4F, 650, [(50, 0, 600, 700), (500, 100, 150, 600)]),
    "g": (0x67, 500, [(50, -300, 450, 500)]),
    "T": (0x54, 600, [(50, 0, 550, 1100)]),
    # two overlapping contours wound the same way
    "X": (0x58, 900, [(50, 0, 500, 700), (300, 0, 850, 700)]),
}

FALLBACK_GLYPHS: Dict[str, Tuple[int, int, List[Rect]]] = {
    ".notdef": (None, 500, []),
    "space": (0x20, 300, []),
    "A": (0x41, 900, [(0, 0, 900, 700)]),
    "Omega": (0x3A9, 700, [(50, 0, 650, 700)]),
}


def _draw_rects(rects: Sequence[Rect]):
    pen = TTGlyphPen(None)
    for x0, y0, x1, y1 in rects:
        pen.moveTo((x0, y0))
        pen.lineTo((x0, y1))
        pen.lineTo((x1, y1))
        pen.lineTo((x1, y0))
        pen.closePath()
    return pen.glyph()


def build_test_font(path: Path, glyphs: Dict[str, Tuple[int, int, List[Rect]]], family: str) -> Path:
    fb = FontBuilder(unitsPerEm=1000, isTTF=True)
    order = list(glyphs)
    fb.setupGlyphOrder(order)
    fb.setupCharacterMap({cp: name for name, (cp, _, _) in glyphs.items() if cp is not None})
    fb.setupGlyf({name: _draw_rects(rects) for name, (_, _, rects) in glyphs.items()})
    fb.setupHorizontalMetrics(
        {
            name: (adv, min((min(r[0], r[2]) for r in rects), default=0))
            for name, (_, adv, rects) in glyphs.items()
        }
    )
    fb.setupHorizontalHeader(ascent=ASCENT, descent=DESCENT)
    fb.setupNameTable({"familyName": family, "styleName": "Regular"})
    fb.setupOS2(
        sTypoAscender=ASCENT,
        sTypoDescender=DESCENT,
        usWinAscent=ASCENT,
        usWinDescent=-DESCENT,
    )
    fb.setupPost()
    fb.save(str(path))
    return path


@pytest.fixture(scope="session")
def font_paths(tmp_path_factory) -> Dict[str, Path]:
    root = tmp_path_factory.mktemp("fonts")
    return {
        "primary": build_test_font(root / "primary.ttf", PRIMARY_GLYPHS, "Primary"),
        "fallback": build_test_font(root / "fallback.ttf", FALLBACK_GLYPHS, "Fallback"),
    }


@pytest.fixture(scope="session")
def fonts(font_paths):
    return load_fonts(
        [
            FontConfig(path=str(font_paths["primary"])),
            FontConfig(path=str(font_paths["fallback"])),
        ]
    )


@pytest.fixture
def tier32() -> SizeTier:
    return SizeTier(max_height=32, max_width=32, min_height=24, min_width=8)


@pytest.fixture
def make_config(tmp_path, font_paths):
    """Write a config.json (plus optional chars file) and return its path."""

    def _make(
        chars: str = None,
        font_sizes=None,
        fonts=None,
        **extra,
    ) -> Path:
        chars_file = tmp_path / "chars.txt"
        if chars is not None:
            chars_file.write_text(chars, encoding="utf-8")
        doc = {
            "output_dir": str(tmp_path / "out"),
            "chars_file": str(chars_file),
            "font_sizes": font_sizes
            or [{"maxHeight": 32, "maxWidth": 32, "minHeight": 24, "minWidth": 8}],
            "fonts": fonts
            if fonts is not None
            else [{"path": str(font_paths["primary"])}, {"path": str(font_paths["fallback"])}],
        }
        doc.update(extra)
        cfg_path = tmp_path / "config.json"
        cfg_path.write_text(json.dumps(doc), encoding="utf-8")
        return cfg_path

    return _make


@pytest.fixture
def app_config(font_paths, tmp_path):
    def _make(**overrides):
        raw = {
            "output_dir": str(tmp_path / "out"),
            "chars_file": str(tmp_path / "missing.txt"),
            "font_sizes": [{"maxHeight": 32, "maxWidth": 32, "minHeight": 24, "minWidth": 8}],
            "fonts": [{"path": str(font_paths["primary"])}],
        }
        raw.update(overrides)
        return parse_config(raw)

    return _make
