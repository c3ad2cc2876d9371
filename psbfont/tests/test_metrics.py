import pytest

from psbfont.metrics import compute_metrics, round_half_away


@pytest.mark.parametrize(
    "value,expected",
    [(2.5, 3.0), (-2.5, -3.0), (2.4, 2.0), (-0.4, 0.0), (0.5, 1.0), (7.0, 7.0)],
)
def test_round_half_away(value, expected):
    assert round_half_away(value) == expected


def test_single_tier_envelope(fonts, app_config):
    cfg = app_config()
    tier = cfg.font_sizes[0]
    m = compute_metrics(fonts, tier, cfg, render_size=32.0)
    # fixed height 32, render 32 -> no centering offset, ascent 25.6
    assert m.baseline_y == pytest.approx(25.6)
    assert m.param_b == pytest.approx(25.6)
    assert m.param_a == pytest.approx(25.6 - 32)
    assert m.param_d == 32


def test_render_size_smaller_than_cell_is_centered(fonts, app_config):
    cfg = app_config(global_scale=0.5)
    tier = cfg.font_sizes[0]
    m = compute_metrics(fonts, tier, cfg, render_size=16.0)
    assert m.baseline_y == pytest.approx((32 - 16) / 2 + 12.8)


def test_primary_scale_feeds_ascent(font_paths, app_config):
    from psbfont.config import FontConfig
    from psbfont.fonts import load_fonts

    scaled = load_fonts([FontConfig(path=str(font_paths["primary"]), scale=0.5)])
    cfg = app_config()
    m = compute_metrics(scaled, cfg.font_sizes[0], cfg, render_size=32.0)
    assert m.baseline_y == pytest.approx(12.8)


def test_offset_correction_scales_with_tier_ratio(fonts, app_config):
    sizes = [
        {"maxHeight": 16, "maxWidth": 16, "minHeight": 12, "minWidth": 4},
        {"maxHeight": 32, "maxWidth": 32, "minHeight": 24, "minWidth": 8},
    ]
    base = app_config(font_sizes=sizes)
    shifted = app_config(font_sizes=sizes, global_offset_correction=5)
    small, large = base.font_sizes

    d_large = (
        compute_metrics(fonts, large, shifted, 32).param_b
        - compute_metrics(fonts, large, base, 32).param_b
    )
    d_small = (
        compute_metrics(fonts, small, shifted, 16).param_b
        - compute_metrics(fonts, small, base, 16).param_b
    )
    assert d_large == pytest.approx(5.0)
    # 5 * 16/32 = 2.5 rounds away from zero
    assert d_small == pytest.approx(3.0)


def test_deterministic(fonts, app_config):
    cfg = app_config()
    tier = cfg.font_sizes[0]
    assert compute_metrics(fonts, tier, cfg, 32) == compute_metrics(fonts, tier, cfg, 32)
