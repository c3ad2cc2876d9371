"""
serialize.py
============

Descriptor documents + page images for one size tier.

Output layout (for a tier with maxHeight 32):

    <output_dir>/textfont32.psb.m.json         font metrics document
    <output_dir>/textfont32.psb.m.resx.json    resource manifest
    <output_dir>/textfont32.psb.m/[0]-[0].png  atlas page 0
    <output_dir>/textfont32.psb.m/[1]-[1].png  atlas page 1 ...

Real-valued quantities are rounded (half away from zero) exactly once, here,
when the documents are built.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Sequence

from .config import SizeTier
from .errors import OutputWriteError
from .metrics import FontMetrics, round_half_away
from .packer import AtlasPage, PackedGlyph

__all__ = [
    "FONT_VERSION",
    "MDF_KEY_PREFIX",
    "PlacementRecord",
    "base_name_for",
    "page_filename",
    "mdf_key_for",
    "build_placements",
    "build_font_document",
    "build_resx_document",
    "dump_json",
    "write_tier_outputs",
]

log = logging.getLogger(__name__)

FONT_VERSION = 1.08
PIXEL_TYPE = "A8_SW"
PLATFORM = "vita"
MDF_KEY_PREFIX = "2shj693vwue5t"
MDF_KEY_LENGTH = 131


def _r(value: float) -> float:
    # + 0.0 folds -0.0 into 0.0
    return float(round_half_away(value)) + 0.0


def base_name_for(tier: SizeTier) -> str:
    # ties round to even here, unlike the emitted fields
    return f"textfont{tier.max_height:.0f}.psb.m"


def page_filename(index: int) -> str:
    return f"[{index}]-[{index}].png"


def mdf_key_for(base_name: str) -> str:
    return f"{MDF_KEY_PREFIX}{base_name}"


# ---------------------------------------------------------------------------
# Placement Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PlacementRecord:
    page_index: int
    x: float
    y: float
    advance_width: float
    cell_height: float
    glyph_width: int
    glyph_height: int
    a: float
    b: float
    d: float

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.page_index,
            "x": _r(self.x),
            "y": _r(self.y),
            "width": _r(self.advance_width),
            "height": _r(self.cell_height),
            "w": float(self.glyph_width),
            "h": float(self.glyph_height),
            "a": _r(self.a),
            "b": _r(self.b),
            "d": _r(self.d),
        }


def build_placements(
    packed: Sequence[PackedGlyph], tier: SizeTier, metrics: FontMetrics
) -> Dict[str, PlacementRecord]:
    """Merge packer coordinates with the tier's unified metrics, keyed by character."""
    records: Dict[str, PlacementRecord] = {}
    for g in packed:
        records[g.char] = PlacementRecord(
            page_index=g.page_index,
            x=g.x,
            y=g.y,
            advance_width=g.advance,
            cell_height=tier.max_height,
            glyph_width=g.width,
            glyph_height=g.height,
            a=metrics.param_a + g.shift_y,
            b=metrics.param_b + g.shift_y,
            d=metrics.param_d,
        )
    return records


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


def build_font_document(
    tier: SizeTier,
    pages: Sequence[AtlasPage],
    placements: Dict[str, PlacementRecord],
) -> Dict[str, Any]:
    return {
        "version": FONT_VERSION,
        "id": "font",
        "spec": PLATFORM,
        "label": "normal",
        "minWidth": _r(tier.min_width),
        "minHeight": _r(tier.min_height),
        "maxWidth": _r(tier.max_width),
        "maxHeight": _r(tier.max_height),
        "source": [
            {
                "type": PIXEL_TYPE,
                "pixel": f"#resource#{page.index}",
                "width": page.width,
                "height": page.height,
            }
            for page in pages
        ],
        "code": {ch: placements[ch].to_json() for ch in sorted(placements)},
    }


def build_resx_document(base_name: str, pages: Sequence[AtlasPage]) -> Dict[str, Any]:
    # Resource keys sort as strings ("10" before "2").
    resources = {
        str(page.index): f"{base_name}/{page_filename(page.index)}" for page in pages
    }
    return {
        "PsbVersion": 2,
        "PsbType": "BmpFont",
        "Platform": PLATFORM,
        "CryptKey": None,
        "ExternalTextures": False,
        "Context": {
            "MdfKeyLength": MDF_KEY_LENGTH,
            "FileName": base_name,
            "MdfKey": mdf_key_for(base_name),
            "PsbZlibFastCompress": False,
            "PsbShellType": "MDF",
        },
        "Resources": dict(sorted(resources.items())),
    }


def dump_json(doc: Dict[str, Any]) -> str:
    return json.dumps(doc, indent=2, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------


def _write_text(path: Path, text: str) -> None:
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise OutputWriteError(path, e) from e


def write_tier_outputs(
    output_dir: str,
    tier: SizeTier,
    pages: Sequence[AtlasPage],
    placements: Dict[str, PlacementRecord],
) -> List[Path]:
    """
    Save page images and both descriptor documents; returns the written paths.

    Raises
    ------
    OutputWriteError
        Any directory creation or file write fails.
    """
    base_name = base_name_for(tier)
    out_root = Path(output_dir)
    page_dir = out_root / base_name
    try:
        page_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputWriteError(page_dir, e) from e

    written: List[Path] = []
    for page in pages:
        img_path = page_dir / page_filename(page.index)
        try:
            page.to_image().save(img_path, format="PNG")
        except OSError as e:
            raise OutputWriteError(img_path, e) from e
        written.append(img_path)

    font_path = out_root / f"{base_name}.json"
    _write_text(font_path, dump_json(build_font_document(tier, pages, placements)))
    written.append(font_path)

    resx_path = out_root / f"{base_name}.resx.json"
    _write_text(resx_path, dump_json(build_resx_document(base_name, pages)))
    written.append(resx_path)

    log.info("  -> wrote %s (%d page(s))", resx_path, len(pages))
    return written
