import pytest

from psbfont.config import FontConfig
from psbfont.errors import FontUnreadableError, NoFontsConfiguredError
from psbfont.fonts import LoadedFont, load_fonts, select_font


def test_scale_and_ascent(fonts):
    primary = fonts[0]
    assert primary.scale_factor(32) == pytest.approx(0.032)
    assert primary.ascent(32) == pytest.approx(25.6)


def test_glyph_lookup(fonts):
    primary, fallback = fonts
    assert primary.glyph_id("A") != 0
    assert primary.glyph_id("Ω") == 0
    assert fallback.glyph_id("Ω") != 0
    assert primary.h_advance(primary.glyph_id("A"), 32) == pytest.approx(19.2)


def test_outline_bounds_are_pixel_aligned(fonts):
    primary = fonts[0]
    outlined = primary.outline_glyph(primary.glyph_id("A"), 32)
    b = outlined.px_bounds
    # x 50..550, y 0..700 units at 0.032 px/unit, y pointing down
    assert (b.min_x, b.min_y, b.max_x, b.max_y) == (1.0, -23.0, 18.0, 0.0)
    cov = outlined.coverage()
    assert cov.shape == (23, 17)
    assert cov.max() == pytest.approx(1.0)
    assert cov.min() >= 0.0


def test_counter_is_left_empty(fonts):
    primary = fonts[0]
    outlined = primary.outline_glyph(primary.glyph_id("O"), 100)
    cov = outlined.coverage()
    h, w = cov.shape
    assert cov[h // 2, w // 2] == pytest.approx(0.0)
    assert cov[h // 2, 2] == pytest.approx(1.0)


def test_overlapping_contours_stay_filled(fonts):
    primary = fonts[0]
    outlined = primary.outline_glyph(primary.glyph_id("X"), 32)
    b = outlined.px_bounds
    # x 50..850 units at 0.032 px/unit
    assert (b.min_x, b.max_x) == (1.0, 28.0)
    cov = outlined.coverage()
    mid = cov[cov.shape[0] // 2]
    # both rectangles cover units 300..500 (px 9.6..16)
    assert mid[9:15].min() == pytest.approx(1.0)
    assert mid[1:26].min() == pytest.approx(1.0)


def test_empty_outline_is_none(fonts):
    primary = fonts[0]
    assert primary.outline_glyph(primary.glyph_id(" "), 32) is None


def test_select_font_first_match_wins(fonts):
    assert select_font("A", fonts) == 0
    assert select_font("Ω", fonts) == 1
    # unmapped everywhere -> primary
    assert select_font("€", fonts) == 0
    assert select_font("Ω", tuple(fonts)) == 1


def test_missing_font_path(tmp_path):
    missing = tmp_path / "missing.ttf"
    with pytest.raises(FontUnreadableError, match="missing.ttf"):
        load_fonts([FontConfig(path=str(missing))])


def test_garbage_font_data(tmp_path):
    bad = tmp_path / "bad.ttf"
    bad.write_bytes(b"definitely not a font")
    with pytest.raises(FontUnreadableError, match="bad.ttf"):
        LoadedFont.from_config(FontConfig(path=str(bad)))


def test_no_fonts_configured():
    with pytest.raises(NoFontsConfiguredError):
        load_fonts([])
