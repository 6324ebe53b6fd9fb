"""Map center/zoom/bounds derived from the currently relevant points."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..config import settings
from ..data.regions import get_point_zoom, get_region_coordinates
from ..models.domain import Location, MapFrame, RegionSelection, is_valid_coordinate

Point = tuple[float, float]

BOUNDS_PADDING_RATIO = 0.2
MIN_BOUNDS_PADDING = 0.05


def _bounds(points: Sequence[Point]) -> tuple[Point, Point]:
    lats = [lat for lat, _ in points]
    lons = [lon for _, lon in points]
    min_lat, max_lat = min(lats), max(lats)
    min_lon, max_lon = min(lons), max(lons)
    lat_padding = max(MIN_BOUNDS_PADDING, (max_lat - min_lat) * BOUNDS_PADDING_RATIO)
    lon_padding = max(MIN_BOUNDS_PADDING, (max_lon - min_lon) * BOUNDS_PADDING_RATIO)
    return (
        (min_lat - lat_padding, min_lon - lon_padding),
        (max_lat + lat_padding, max_lon + lon_padding),
    )


def compute_frame(points: Iterable[Point], fallback: RegionSelection) -> MapFrame:
    """Center on the mean of the valid points, or on the fallback region's default.

    The center is a plain coordinate-wise mean, not a fitted bounding circle.
    """

    valid = [(lat, lon) for lat, lon in points if is_valid_coordinate(lat, lon)]
    if not valid:
        default = get_region_coordinates(fallback.country, fallback.region)
        return MapFrame(center=default.center, zoom=default.zoom)

    center = (
        sum(lat for lat, _ in valid) / len(valid),
        sum(lon for _, lon in valid) / len(valid),
    )
    zoom = get_point_zoom(fallback.region, settings.framing_default_zoom)
    return MapFrame(center=center, zoom=zoom, bounds=_bounds(valid))


def collect_frame_points(
    start: Optional[Location],
    end: Optional[Location],
    waypoints: Sequence[Location],
    catalog_locations: Sequence[Location],
) -> list[Point]:
    """Explicit route points win; catalog locations are used only when no route exists."""

    explicit = [loc for loc in (start, *waypoints, end) if loc is not None]
    source = explicit if explicit else catalog_locations
    return [(loc.latitude, loc.longitude) for loc in source]


class MapFraming:
    """Holds the current frame and recomputes it from scratch on every change."""

    def __init__(self, region: RegionSelection) -> None:
        self.region = region
        self._points: list[Point] = []
        self.frame = compute_frame(self._points, region)

    def on_region_changed(self, selection: RegionSelection) -> None:
        self.region = selection
        self.frame = compute_frame(self._points, selection)

    def update_points(self, points: Iterable[Point]) -> MapFrame:
        self._points = list(points)
        self.frame = compute_frame(self._points, self.region)
        return self.frame
