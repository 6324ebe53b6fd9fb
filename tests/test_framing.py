import math

import pytest

from conftest import WESTERN_CAPE, make_location

from gasroute.data.regions import REGION_COORDINATES
from gasroute.models.domain import RegionSelection
from gasroute.services.framing import MapFraming, collect_frame_points, compute_frame


def test_no_valid_points_returns_region_default_exactly():
    frame = compute_frame([(0.0, 0.0), (math.nan, 18.4)], WESTERN_CAPE)

    assert frame.center == REGION_COORDINATES["Western Cape"].center
    assert frame.zoom == REGION_COORDINATES["Western Cape"].zoom
    assert frame.bounds is None


def test_two_points_center_on_their_mean():
    frame = compute_frame([(-33.9, 18.4), (-34.1, 18.6)], WESTERN_CAPE)

    assert frame.center == pytest.approx((-34.0, 18.5))
    assert frame.zoom == 11


def test_invalid_points_are_ignored_in_mean():
    frame = compute_frame([(-33.9, 18.4), (0.0, 0.0), (-34.1, 18.6)], WESTERN_CAPE)

    assert frame.center == pytest.approx((-34.0, 18.5))


def test_bounds_are_padded_around_points():
    frame = compute_frame([(-33.9, 18.4), (-34.1, 18.6)], WESTERN_CAPE)

    (south, west), (north, east) = frame.bounds
    assert south == pytest.approx(-34.15)
    assert north == pytest.approx(-33.85)
    assert west == pytest.approx(18.35)
    assert east == pytest.approx(18.65)


def test_region_zoom_override_applies_to_points():
    frame = compute_frame([(-28.7, 24.7)], RegionSelection("South Africa", "Northern Cape"))

    assert frame.zoom == 8


def test_explicit_route_points_take_precedence_over_catalog():
    start = make_location("s", -33.8, 18.3)
    catalog = [make_location("x", -30.0, 20.0)]

    assert collect_frame_points(start, None, [], catalog) == [(-33.8, 18.3)]
    assert collect_frame_points(None, None, [], catalog) == [(-30.0, 20.0)]


def test_map_framing_recomputes_on_region_change():
    framing = MapFraming(WESTERN_CAPE)

    framing.on_region_changed(RegionSelection("South Africa", "Gauteng"))

    assert framing.frame.center == REGION_COORDINATES["Gauteng"].center

    frame = framing.update_points([(-26.0, 28.0)])
    assert frame.center == (-26.0, 28.0)
    assert framing.frame is frame
