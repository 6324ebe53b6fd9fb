"""Known countries/regions and their default map framing."""

from __future__ import annotations

from typing import Optional

from ..models.domain import RegionCoordinates

KNOWN_REGIONS: dict[str, list[str]] = {
    "South Africa": [
        "Western Cape",
        "Eastern Cape",
        "Northern Cape",
        "North West",
        "Free State",
        "Gauteng",
        "Mpumalanga",
        "Limpopo",
        "KwaZulu-Natal",
    ],
    "United States": ["Texas", "California", "Florida"],
}

REGION_COORDINATES: dict[str, RegionCoordinates] = {
    # South Africa
    "Western Cape": RegionCoordinates(center=(-33.9249, 18.4241), zoom=9),
    "Eastern Cape": RegionCoordinates(center=(-33.0292, 27.8546), zoom=8),
    "Northern Cape": RegionCoordinates(center=(-28.7282, 24.7499), zoom=7),
    "North West": RegionCoordinates(center=(-25.8526, 25.6445), zoom=8),
    "Free State": RegionCoordinates(center=(-29.0852, 26.1596), zoom=8),
    "Gauteng": RegionCoordinates(center=(-26.2041, 28.0473), zoom=9),
    "Mpumalanga": RegionCoordinates(center=(-25.4658, 30.9852), zoom=8),
    "Limpopo": RegionCoordinates(center=(-23.4013, 29.4179), zoom=8),
    "KwaZulu-Natal": RegionCoordinates(center=(-29.0852, 31.0566), zoom=8),
    # United States
    "Texas": RegionCoordinates(center=(31.9686, -99.9018), zoom=6),
    "California": RegionCoordinates(center=(36.7783, -119.4179), zoom=6),
    "Florida": RegionCoordinates(center=(27.6648, -81.5158), zoom=6),
}

COUNTRY_COORDINATES: dict[str, RegionCoordinates] = {
    "South Africa": RegionCoordinates(center=(-30.5595, 22.9375), zoom=6),
    "United States": RegionCoordinates(center=(39.8283, -98.5795), zoom=4),
}

DEFAULT_COORDINATES = REGION_COORDINATES["Western Cape"]

# Zoom used when framing actual points in sparse, wide regions.
POINT_ZOOM_OVERRIDES: dict[str, int] = {
    "Northern Cape": 8,
    "Texas": 8,
    "California": 8,
}


def list_countries() -> list[str]:
    return sorted(KNOWN_REGIONS)


def list_regions(country: str) -> list[str]:
    return list(KNOWN_REGIONS.get(country, []))


def is_known_region(country: str, region: str) -> bool:
    return region in KNOWN_REGIONS.get(country, [])


def register_region(
    country: str,
    region: str,
    center: Optional[tuple[float, float]] = None,
    zoom: Optional[int] = None,
) -> None:
    """Add a custom region to the known set, optionally with its own framing."""

    country = country.strip()
    region = region.strip()
    if not country or not region:
        raise ValueError("Country and region names are required.")
    regions = KNOWN_REGIONS.setdefault(country, [])
    if region not in regions:
        regions.append(region)
    if center is not None:
        REGION_COORDINATES[region] = RegionCoordinates(center=center, zoom=zoom or 9)


def get_region_coordinates(country: Optional[str], region: Optional[str]) -> RegionCoordinates:
    """Resolve the default framing for a region, falling back to the country, then Western Cape."""

    if region and region in REGION_COORDINATES:
        return REGION_COORDINATES[region]
    if country and country in COUNTRY_COORDINATES:
        return COUNTRY_COORDINATES[country]
    return DEFAULT_COORDINATES


def get_point_zoom(region: Optional[str], default: int) -> int:
    if region and region in POINT_ZOOM_OVERRIDES:
        return POINT_ZOOM_OVERRIDES[region]
    return default
