"""Stop sequencing and route metrics for a single delivery vehicle.

The matrix comes from OSRM when it is configured and reachable, otherwise
from straight-line distances at a fixed average speed. OR-Tools orders the
intermediate stops between a fixed start and a fixed end node. The search
uses a deterministic strategy so the same request always yields the same
route.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

import httpx
from ortools.constraint_solver import pywrapcp, routing_enums_pb2

from ...config import settings
from ...models.domain import Location, OptimizedRoute, RegionSelection, Stop
from ..geospatial import haversine_table
from .osrm_client import OSRMClient

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class OptimizationRequest:
    stops: list[Stop]
    start: Optional[Location]
    end: Optional[Location]
    region: RegionSelection


def estimate_fuel_litres(distance_km: float, cylinders: int) -> float:
    """Fuel for the trip, increasing with the weight of the load."""

    weight_kg = cylinders * settings.cylinder_weight_kg
    weight_factor = 1 + (weight_kg / 100) * settings.fuel_load_factor
    return distance_km * settings.base_fuel_consumption_l_per_100km * weight_factor / 100


def estimate_cost(distance_km: float, fuel_litres: float) -> float:
    fuel_cost = fuel_litres * settings.fuel_price_per_litre
    maintenance_cost = distance_km * settings.maintenance_cost_per_km
    return round(fuel_cost + maintenance_cost, 2)


class RouteOptimizer:
    """Optimization collaborator consumed by the route workflow."""

    def __init__(
        self,
        osrm_client_factory: Optional[Callable[[], OSRMClient]] = None,
        time_limit_seconds: Optional[int] = None,
    ) -> None:
        if osrm_client_factory is None and settings.osrm_base_url:
            osrm_client_factory = OSRMClient
        self._osrm_client_factory = osrm_client_factory
        self.time_limit_seconds = time_limit_seconds or settings.solver_time_limit_seconds

    def _matrix(self, coordinates: Sequence[tuple[float, float]]) -> dict:
        if self._osrm_client_factory is not None:
            try:
                table = self._osrm_client_factory().table(coordinates)
                if all(
                    value is not None
                    for row in (*table["durations"], *table["distances"])
                    for value in row
                ):
                    return table
                logger.warning("OSRM returned unreachable legs. Using haversine fallback.")
            except (ConnectionError, ValueError, httpx.HTTPError) as e:
                logger.warning(f"OSRM table request failed: {e}. Using haversine fallback.")
        return haversine_table(coordinates, settings.haversine_speed_kmh)

    def _sequence(self, distance_matrix: list[list[float]]) -> list[int]:
        """Return the visiting order of the intermediate nodes (1 .. n-2)."""

        n = len(distance_matrix)
        if n <= 3:
            return list(range(1, n - 1))

        manager = pywrapcp.RoutingIndexManager(n, 1, [0], [n - 1])
        routing = pywrapcp.RoutingModel(manager)

        def distance_callback(from_index: int, to_index: int) -> int:
            from_node = manager.IndexToNode(from_index)
            to_node = manager.IndexToNode(to_index)
            return int(distance_matrix[from_node][to_node])

        transit_index = routing.RegisterTransitCallback(distance_callback)
        routing.SetArcCostEvaluatorOfAllVehicles(transit_index)

        search_parameters = pywrapcp.DefaultRoutingSearchParameters()
        search_parameters.first_solution_strategy = routing_enums_pb2.FirstSolutionStrategy.PATH_CHEAPEST_ARC
        search_parameters.local_search_metaheuristic = routing_enums_pb2.LocalSearchMetaheuristic.GREEDY_DESCENT
        search_parameters.time_limit.FromSeconds(self.time_limit_seconds)

        assignment = routing.SolveWithParameters(search_parameters)
        if not assignment:
            logger.warning("Could not optimize stop sequence, keeping the current order")
            return list(range(1, n - 1))

        order: list[int] = []
        index = routing.Start(0)
        while not routing.IsEnd(index):
            node = manager.IndexToNode(index)
            if 0 < node < n - 1:
                order.append(node)
            index = assignment.Value(routing.NextVar(index))
        return order

    def optimize(self, request: OptimizationRequest) -> OptimizedRoute:
        if not request.stops:
            raise ValueError("Cannot optimize a route without stops.")

        start = request.start or request.stops[0].location
        end = request.end or request.stops[-1].location
        stop_by_id = {stop.location.id: stop for stop in request.stops}
        middle = [stop for stop in request.stops if stop.location.id not in (start.id, end.id)]

        path_locations = [start, *(stop.location for stop in middle), end]
        invalid = [loc.name for loc in path_locations if not loc.has_valid_coordinates]
        if invalid:
            raise ValueError(f"Locations without valid coordinates: {', '.join(invalid)}")

        coordinates = [(loc.latitude, loc.longitude) for loc in path_locations]
        table = self._matrix(coordinates)
        distances = table["distances"]
        durations = table["durations"]

        order = self._sequence(distances)
        path = [0, *order, len(path_locations) - 1]

        legs_km = [distances[a][b] / 1000.0 for a, b in zip(path, path[1:])]
        driving_min = sum(durations[a][b] for a, b in zip(path, path[1:])) / 60.0

        ordered_stops: list[Stop] = []
        leg_distances: list[float] = []
        start_stop = stop_by_id.get(start.id)
        if start_stop is not None:
            ordered_stops.append(start_stop)
            leg_distances.append(0.0)
        for position, node in enumerate(order, start=1):
            ordered_stops.append(middle[node - 1])
            leg_distances.append(round(legs_km[position - 1], 2))
        end_stop = stop_by_id.get(end.id)
        if end_stop is not None and end_stop is not start_stop:
            ordered_stops.append(end_stop)
            leg_distances.append(round(legs_km[-1], 2))
        elif start_stop is not None and end_stop is start_stop:
            # Round trip: the return leg ends at the first row.
            leg_distances[0] = round(legs_km[-1], 2)
        elif ordered_stops:
            # The closing leg to an end point that is not a stop belongs to the last stop.
            leg_distances[-1] = round(leg_distances[-1] + legs_km[-1], 2)

        distance_km = sum(legs_km)
        cylinders = sum(stop.quantity for stop in request.stops)
        fuel_litres = estimate_fuel_litres(distance_km, cylinders)
        duration_min = driving_min + len(request.stops) * settings.service_minutes_per_stop

        logger.info(
            f"Optimized route with {len(ordered_stops)} stops: {distance_km:.1f} km, {duration_min:.0f} min"
        )
        return OptimizedRoute(
            stops=ordered_stops,
            distance_km=round(distance_km, 1),
            duration_min=float(round(duration_min)),
            estimated_cost=estimate_cost(distance_km, fuel_litres),
            cylinder_totals={stop.location.id: stop.quantity for stop in request.stops},
            fuel_consumption_l=round(fuel_litres, 2),
            leg_distances_km=leg_distances,
        )
