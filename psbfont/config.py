"""
config.py
=========

Build configuration loading.

The configuration is a single JSON document:

    {
      "output_dir": "out",
      "chars_file": "chars.txt",
      "atlas_max_size": 2048,            (optional, default 2048)
      "global_offset_correction": 0,     (optional, default 0)
      "global_scale": 1.0,               (optional, default 1.0)
      "font_sizes": [
        {"maxHeight": 24, "maxWidth": 24, "minHeight": 20, "minWidth": 6},
        {"maxHeight": 32, "maxWidth": 32, "minHeight": 24, "minWidth": 8}
      ],
      "fonts": [
        {"path": "fonts/main.ttf"},
        {"path": "fonts/fallback.otf", "scale": 0.95, "offset_y": 1}
      ]
    }

Each entry of `font_sizes` is a *size tier*: one descriptor plus its atlas
pages. The last configured tier is the reference for the cross-tier offset
correction (see `metrics.py`), so the order of `font_sizes` matters.

Relative paths are kept as written; they resolve against the current working
directory when used.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .errors import ConfigInvalidError, ConfigMissingError

__all__ = [
    "DEFAULT_ATLAS_SIZE",
    "DEFAULT_CONFIG_PATH",
    "SizeTier",
    "FontConfig",
    "AppConfig",
    "load_config",
    "parse_config",
]

DEFAULT_CONFIG_PATH = "config.json"
DEFAULT_ATLAS_SIZE = 2048


# ---------------------------------------------------------------------------
# Data Structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SizeTier:
    max_height: float
    max_width: float
    min_height: float
    min_width: float

    @property
    def fixed_height(self) -> int:
        """Pixel height shared by every glyph cell of this tier."""
        return int(math.ceil(max(self.max_height, self.min_height)))


@dataclass(frozen=True)
class FontConfig:
    path: str
    scale: float = 1.0
    offset_y: float = 0.0


@dataclass(frozen=True)
class AppConfig:
    output_dir: str
    chars_file: str
    font_sizes: Tuple[SizeTier, ...]
    fonts: Tuple[FontConfig, ...]
    atlas_max_size: int = DEFAULT_ATLAS_SIZE
    global_offset_correction: float = 0.0
    global_scale: float = 1.0
    source_path: Optional[str] = None

    @property
    def reference_tier(self) -> SizeTier:
        return self.font_sizes[-1]

    def with_overrides(
        self,
        output_dir: Optional[str] = None,
        chars_file: Optional[str] = None,
        atlas_max_size: Optional[int] = None,
    ) -> "AppConfig":
        changes: Dict[str, Any] = {}
        if output_dir is not None:
            changes["output_dir"] = output_dir
        if chars_file is not None:
            changes["chars_file"] = chars_file
        if atlas_max_size is not None:
            if atlas_max_size <= 0:
                raise ConfigInvalidError(
                    f"atlas size must be positive, got {atlas_max_size}"
                )
            changes["atlas_max_size"] = atlas_max_size
        return replace(self, **changes) if changes else self


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _number(raw: Dict[str, Any], key: str, where: str, default=None) -> float:
    if key not in raw:
        if default is None:
            raise ConfigInvalidError(f"{where}: missing required key '{key}'")
        return default
    val = raw[key]
    # bool is an int subclass; reject it explicitly
    if isinstance(val, bool) or not isinstance(val, (int, float)):
        raise ConfigInvalidError(f"{where}: '{key}' must be a number, got {val!r}")
    return float(val)


def _string(raw: Dict[str, Any], key: str, where: str) -> str:
    val = raw.get(key)
    if not isinstance(val, str) or not val:
        raise ConfigInvalidError(f"{where}: '{key}' must be a non-empty string")
    return val


def _parse_tier(raw: Any, where: str) -> SizeTier:
    if not isinstance(raw, dict):
        raise ConfigInvalidError(f"{where}: expected an object, got {raw!r}")
    return SizeTier(
        max_height=_number(raw, "maxHeight", where),
        max_width=_number(raw, "maxWidth", where),
        min_height=_number(raw, "minHeight", where),
        min_width=_number(raw, "minWidth", where),
    )


def _parse_font(raw: Any, where: str) -> FontConfig:
    if not isinstance(raw, dict):
        raise ConfigInvalidError(f"{where}: expected an object, got {raw!r}")
    return FontConfig(
        path=_string(raw, "path", where),
        scale=_number(raw, "scale", where, default=1.0),
        offset_y=_number(raw, "offset_y", where, default=0.0),
    )


def parse_config(raw: Any, source: str = "<config>") -> AppConfig:
    """
    Validate a decoded JSON document and build an `AppConfig`.

    An empty `fonts` list is accepted here; it is rejected when fonts are
    loaded (`fonts.load_fonts`) with a dedicated error.
    """
    if not isinstance(raw, dict):
        raise ConfigInvalidError(f"{source}: top-level value must be an object")

    tiers_raw = raw.get("font_sizes")
    if not isinstance(tiers_raw, list) or not tiers_raw:
        raise ConfigInvalidError(f"{source}: 'font_sizes' must be a non-empty list")
    tiers: List[SizeTier] = [
        _parse_tier(t, f"{source}: font_sizes[{i}]") for i, t in enumerate(tiers_raw)
    ]

    fonts_raw = raw.get("fonts", [])
    if not isinstance(fonts_raw, list):
        raise ConfigInvalidError(f"{source}: 'fonts' must be a list")
    fonts = [_parse_font(f, f"{source}: fonts[{i}]") for i, f in enumerate(fonts_raw)]

    atlas_size = _number(raw, "atlas_max_size", source, default=float(DEFAULT_ATLAS_SIZE))
    if atlas_size <= 0 or atlas_size != int(atlas_size):
        raise ConfigInvalidError(
            f"{source}: 'atlas_max_size' must be a positive integer, got {atlas_size}"
        )

    return AppConfig(
        output_dir=_string(raw, "output_dir", source),
        chars_file=_string(raw, "chars_file", source),
        font_sizes=tuple(tiers),
        fonts=tuple(fonts),
        atlas_max_size=int(atlas_size),
        global_offset_correction=_number(
            raw, "global_offset_correction", source, default=0.0
        ),
        global_scale=_number(raw, "global_scale", source, default=1.0),
        source_path=source,
    )


def load_config(path: str = DEFAULT_CONFIG_PATH) -> AppConfig:
    """
    Read and validate the JSON configuration at `path`.

    Raises
    ------
    ConfigMissingError
        The file does not exist.
    ConfigInvalidError
        The file cannot be read, is not valid JSON, or fails validation.
    """
    cfg_path = Path(path)
    if not cfg_path.is_file():
        raise ConfigMissingError(f"Config file not found: {cfg_path}")
    try:
        raw = json.loads(cfg_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ConfigInvalidError(f"Unable to parse config {cfg_path}: {e}") from e
    return parse_config(raw, source=str(cfg_path))
