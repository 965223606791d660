from fractions import Fraction

import pytest

from pamstream.ui.viewport import Viewport, level_percent, nearest_level, zoom_levels

LEVELS = zoom_levels(10, 3200)


def at_level(width, height, level, origin=None):
    return Viewport(width, height, LEVELS, LEVELS.index(Fraction(level)), origin)


def test_zoom_levels_respect_bounds():
    assert LEVELS[0] == Fraction(1, 8)
    assert LEVELS[-1] == 32
    assert [level_percent(level) for level in LEVELS[:4]] == [12, 25, 33, 50]


def test_zoom_levels_always_contain_actual_size():
    assert zoom_levels(200, 400) == [1, 2, 3, 4]


@pytest.mark.parametrize("percent, expected", [(110, 1), (180, 2), (5000, 32), (1, Fraction(1, 8))])
def test_nearest_level(percent, expected):
    assert nearest_level(LEVELS, percent) == expected


def test_fit_picks_largest_level_that_fits():
    viewport = Viewport(100, 50, LEVELS)
    viewport.fit(400, 300)
    assert viewport.percent == 400
    viewport.fit(30, 30)
    assert viewport.percent == 25
    assert viewport.origin is None


def test_fit_falls_back_to_smallest_level():
    viewport = Viewport(1000, 1000, LEVELS, level_index=5)
    viewport.fit(10, 10)
    assert viewport.scale == LEVELS[0]


def test_set_percent_snaps_to_level():
    viewport = Viewport(10, 10, LEVELS)
    viewport.set_percent(180)
    assert viewport.percent == 200


def test_span_is_never_empty():
    assert at_level(3, 3, Fraction(1, 8)).span(3) == 1


def test_place_centers_small_image():
    viewport = at_level(10, 10, 2)
    assert viewport.place(100, 60) == (40, 20)


def test_place_clamps_large_image():
    viewport = at_level(100, 100, 4, origin=(50, -500))
    assert viewport.place(200, 200) == (0, -200)


def test_canvas_to_sample_at_integer_zoom():
    viewport = at_level(10, 10, 2)
    viewport.place(100, 60)
    assert viewport.canvas_to_sample(41, 21) == (0, 0)
    assert viewport.canvas_to_sample(59, 39) == (9, 9)
    assert viewport.canvas_to_sample(60, 20) is None
    assert viewport.canvas_to_sample(39, 20) is None


def test_canvas_to_sample_when_zoomed_out():
    viewport = at_level(100, 100, Fraction(1, 4), origin=(0, 0))
    assert viewport.canvas_to_sample(5, 3) == (20, 12)


def test_canvas_to_sample_before_placement():
    assert Viewport(4, 4, LEVELS).canvas_to_sample(0, 0) is None


def test_zoom_at_keeps_sample_under_cursor():
    viewport = at_level(100, 100, 2, origin=(0, 0))
    assert viewport.canvas_to_sample(50, 50) == (25, 25)
    assert viewport.zoom_at(50, 50, 1) is True
    assert viewport.percent == 300
    assert viewport.origin == (-25, -25)
    assert viewport.canvas_to_sample(50, 50) == (25, 25)


def test_zoom_at_stops_at_bounds():
    viewport = at_level(10, 10, 32, origin=(0, 0))
    assert viewport.zoom_at(5, 5, 1) is False
    assert viewport.percent == 3200
    assert viewport.origin == (0, 0)


def test_pan_moves_placed_image_only():
    viewport = Viewport(10, 10, LEVELS)
    viewport.pan(5, 5)
    assert viewport.origin is None
    viewport.origin = (1, 2)
    viewport.pan(3, -4)
    assert viewport.origin == (4, -2)


def test_visible_region_covers_partial_samples():
    viewport = at_level(100, 100, 4, origin=(-10, -10))
    assert viewport.visible_region(40, 40) == (2, 2, 13, 13)
    assert viewport.sample_to_canvas(2, 2) == (-2, -2)


def test_visible_region_requires_placement():
    assert Viewport(4, 4, LEVELS).visible_region(10, 10) is None
