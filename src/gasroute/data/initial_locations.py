"""Default Western Cape location set used when no database is configured."""

from __future__ import annotations

from ..models.domain import Location, LocationCategory

_STORAGE = LocationCategory.STORAGE
_CUSTOMER = LocationCategory.CUSTOMER

# (id, name, address, lat, long, category, full, empty)
_SEED = (
    ("1", "Afrox Epping Depot", "Epping Industria, Cape Town", -33.93631, 18.52759, _STORAGE, 100, 0),
    ("5", "Pick n Pay TableView", "Table View, Cape Town", -33.8258, 18.4881, _CUSTOMER, 0, 18),
    ("6", "SUPERSPAR Parklands", "Parklands, Cape Town", -33.815781, 18.495968, _CUSTOMER, 0, 12),
    ("7", "West Coast Village", "West Coast, Cape Town", -33.803329, 18.485944, _CUSTOMER, 0, 16),
    ("8", "KWIKSPAR Paarl", "Paarl, Western Cape", -33.708061, 18.962563, _CUSTOMER, 0, 10),
    ("9", "SUPERSPAR Plattekloof", "Plattekloof, Cape Town", -33.873642, 18.578856, _CUSTOMER, 0, 14),
    ("10", "OK Foods Strand", "Strand, Western Cape", -34.12169719, 18.836937, _CUSTOMER, 0, 9),
    ("11", "OK Urban Sonstraal", "Sonstraal, Western Cape", -33.511, 18.3945, _CUSTOMER, 0, 11),
    ("12", "Clara Anna", "Clara Anna, Western Cape", -33.818184, 18.632576, _CUSTOMER, 0, 7),
    ("13", "Laborie", "Laborie, Western Cape", -33.764587, 18.960768, _CUSTOMER, 0, 13),
    ("14", "Burgundy Square", "Burgundy, Cape Town", -33.841858, 18.545229, _CUSTOMER, 0, 15),
    ("15", "Shell Sea Point", "Sea Point, Cape Town", -33.4812, 18.3855, _STORAGE, 75, 0),
    ("16", "Shell Hugo Street", "Hugo Street, Cape Town", -33.900848, 18.564976, _STORAGE, 80, 0),
    ("17", "Shell Meadowridge", "Meadowridge, Cape Town", -34.038963, 18.455086, _STORAGE, 65, 0),
    ("18", "Simonsrust Shopping Centre", "Simonsrust, Western Cape", -33.926464, 18.877136, _CUSTOMER, 0, 19),
    ("19", "Shell Stellenbosch Square", "Stellenbosch, Western Cape", -33.976185, 18.843523, _STORAGE, 70, 0),
    ("20", "Willowridge Shopping Centre", "Willowridge, Western Cape", -33.871166, 18.63283, _CUSTOMER, 0, 17),
    ("21", "Zevenwacht", "Zevenwacht, Western Cape", -33.949867, 18.696407, _CUSTOMER, 0, 21),
    ("22", "Killarney Shell", "Killarney, Cape Town", -33.854279, 18.516291, _STORAGE, 85, 0),
)


def initial_locations() -> list[Location]:
    """Return fresh copies of the seed locations."""

    return [
        Location(
            id=loc_id,
            name=name,
            address=address,
            latitude=lat,
            longitude=lon,
            category=category,
            full_cylinders=full,
            empty_cylinders=empty,
            open_time="08:00",
            close_time="17:00",
            region="Western Cape",
            country="South Africa",
        )
        for loc_id, name, address, lat, lon, category, full, empty in _SEED
    ]
