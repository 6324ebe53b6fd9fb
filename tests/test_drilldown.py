import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from gasroute.models.domain import RouteRecord
from gasroute.persistence.base import PersistenceError
from gasroute.persistence.routes import InMemoryRouteRepository
from gasroute.services.drilldown import DetailDrilldown, derive_duration, format_display_date

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


def _record(route_id: str, days_ago: float, distance: float = 20.0, duration=None) -> RouteRecord:
    return RouteRecord(
        id=route_id,
        name=f"Route {route_id}",
        date=NOW - timedelta(days=days_ago),
        total_distance=distance,
        total_duration=duration,
        estimated_cost=100.0,
        total_cylinders=30,
    )


class OfflineRouteRepository(InMemoryRouteRepository):
    def fetch_history(self, start, end):
        raise PersistenceError("connection refused")


def test_derive_duration_for_twenty_km_without_stored_value():
    assert derive_duration(20.0, None) == 45.0


def test_derive_duration_prefers_positive_stored_value():
    assert derive_duration(20.0, 73.0) == 73.0
    assert derive_duration(20.0, 0.0) == 45.0


@pytest.mark.parametrize(
    "distance, expected",
    [
        (0.0, 15.0),
        (5.0, 22.5),
        (50.0, 120.0),
    ],
)
def test_derive_duration_estimates_stops_from_distance(distance, expected):
    assert derive_duration(distance, None) == pytest.approx(expected)


def test_format_display_date():
    assert format_display_date(datetime(2026, 3, 5)) == "Mar 5, 2026"


def test_show_filters_window_inclusively_and_sorts_descending():
    repository = InMemoryRouteRepository(
        [
            _record("old", 8),
            _record("edge", 7),
            _record("recent", 1, duration=60.0),
            _record("today", 0),
        ]
    )
    drilldown = DetailDrilldown(repository)

    result = asyncio.run(drilldown.show("fuel", 7, now=NOW))

    assert result.title == "Recent Fuel Costs"
    assert [record.id for record in result.records] == ["today", "recent", "edge"]
    assert result.records[1].duration == 60.0
    assert result.records[0].duration == 45.0
    assert result.records[0].date == "Oct 17, 2026"
    assert drilldown.is_open and not drilldown.is_loading


def test_show_fetch_failure_yields_empty_result_with_error():
    drilldown = DetailDrilldown(OfflineRouteRepository())

    result = asyncio.run(drilldown.show("deliveries", 7, now=NOW))

    assert result.records == []
    assert result.error
    assert drilldown.is_loading is False


def test_show_rejects_unknown_kind_and_negative_window():
    drilldown = DetailDrilldown(InMemoryRouteRepository())

    with pytest.raises(ValueError):
        asyncio.run(drilldown.show("weather"))
    with pytest.raises(ValueError):
        asyncio.run(drilldown.show("route", -1))
