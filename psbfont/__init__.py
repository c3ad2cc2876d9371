"""
PSB Bitmap Font Builder

Turns TrueType/OpenType fonts plus a character set into packed atlas pages
and the JSON descriptors (`textfont<N>.psb.m.json` / `.resx.json`) consumed
by the PSB `BmpFont` tooling.

Modules
-------
- config.py    : JSON build configuration -> frozen dataclasses
- charset.py   : character set loading (sorted, deduplicated, space first)
- fonts.py     : fontTools-backed font loading, fallback font selection
- outline.py   : outline flattening + supersampled coverage
- metrics.py   : per-size unified baseline / vertical envelope
- rasterize.py : character -> fixed-height RGBA cell with vertical clamping
- packer.py    : shelf packing into power-of-two trimmed pages
- serialize.py : descriptor documents + PNG pages
- pipeline.py  : whole-run driver
- cli.py       : command-line entry point (`python -m psbfont`)
"""

from __future__ import annotations

from .config import AppConfig, FontConfig, SizeTier, load_config  # noqa: F401
from .errors import AtlasBuildError  # noqa: F401
from .pipeline import run  # noqa: F401

__all__ = [
    "AppConfig",
    "FontConfig",
    "SizeTier",
    "AtlasBuildError",
    "load_config",
    "run",
    "get_version",
]

_PROJECT_VERSION = "0.1.0"


def get_version() -> str:
    return _PROJECT_VERSION
