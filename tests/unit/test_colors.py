"""
Unit tests for concentration colour mapping and hover text.
"""

import math

import numpy as np
import pytest

from iceroute.render.colors import (
    TRANSPARENT,
    IceColor,
    clamp_concentration,
    color_for,
    hover_text,
    is_visible_ice,
    legend_stops,
)


class TestColorFor:

    def test_half_concentration(self):
        color = color_for(50.0)
        assert (color.r, color.g, color.b) == (100, 135, 227)
        assert color.alpha == pytest.approx(0.7)

    def test_full_concentration(self):
        color = color_for(100.0)
        assert (color.r, color.g, color.b) == (0, 50, 200)
        assert color.alpha == pytest.approx(1.0)
        assert color.alpha_byte == 255

    def test_threshold_is_visible(self):
        color = color_for(1.0)
        assert color is not TRANSPARENT
        assert color.alpha == pytest.approx(0.406)

    @pytest.mark.parametrize("value", [None, math.nan, 0.0, 0.5, 0.99, -5.0])
    def test_transparent(self, value):
        assert color_for(value) is TRANSPARENT

    def test_above_range_clamps(self):
        assert color_for(150.0) == color_for(100.0)

    def test_channels_monotonic(self):
        colors = [color_for(v) for v in range(1, 101)]
        for a, b in zip(colors, colors[1:]):
            assert b.r <= a.r
            assert b.g <= a.g
            assert b.b <= a.b
            assert b.alpha > a.alpha

    def test_rgba_string_and_hex(self):
        color = IceColor(r=100, g=135, b=227, alpha=0.7)
        assert color.to_rgba_string() == "rgba(100, 135, 227, 0.7)"
        assert color.to_hex() == "#6487E3"


class TestClampAndVisibility:

    def test_clamp(self):
        assert clamp_concentration(-5.0) == 0.0
        assert clamp_concentration(150.0) == 100.0
        assert clamp_concentration(42.5) == 42.5

    def test_clamp_keeps_no_data(self):
        assert clamp_concentration(None) is None
        assert clamp_concentration(math.nan) is None
        assert clamp_concentration(np.float32("nan")) is None

    def test_numpy_nan_is_transparent(self):
        assert color_for(np.float32("nan")) is TRANSPARENT
        assert hover_text(np.float32("nan")) is None

    def test_visibility(self):
        assert is_visible_ice(1.0)
        assert not is_visible_ice(0.99)
        assert not is_visible_ice(None)


class TestHoverText:

    def test_visible_value(self):
        assert hover_text(50.0) == "Ice: 50.0%"

    def test_hover_uses_clamped_value(self):
        assert hover_text(150.0) == "Ice: 100.0%"

    def test_below_threshold(self):
        assert hover_text(0.5) == "Ice: 0.0% (not visible)"
        assert hover_text(-3.0) == "Ice: 0.0% (not visible)"

    def test_no_data_has_no_hover(self):
        assert hover_text(None) is None


class TestLegend:

    def test_five_stops(self):
        stops = legend_stops()
        assert [s["label"] for s in stops] == ["0%", "25%", "50%", "75%", "100%"]

    def test_zero_stop_transparent(self):
        assert legend_stops()[0]["color"] is None
        assert legend_stops()[2]["color"].startswith("rgba(100, 135, 227")
