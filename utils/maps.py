"""Map widget settings and outbound map links."""
from __future__ import annotations

from typing import Mapping, Optional

from models import Location

DEFAULT_EXTERNAL_MAP_URL = "https://www.google.com/maps?q={lat},{lng}"
TILE_ATTRIBUTION = '&copy; <a href="https://www.openstreetmap.org/copyright">OSM</a>'


def external_map_url(location: Optional[Location], template: str = DEFAULT_EXTERNAL_MAP_URL) -> Optional[str]:
    if location is None:
        return None
    return template.format(lat=location.lat, lng=location.lng)


def format_coordinates(location: Location, places: int = 6) -> str:
    return f"{location.lat:.{places}f}, {location.lng:.{places}f}"


def editable_map(config: Mapping, center: Location, marker: Optional[Location]) -> dict:
    """Settings for the wizard map: click places the marker, a set marker is flown to."""
    return {
        "mode": "edit",
        "tile_url": config.get("MAP_TILE_URL"),
        "attribution": TILE_ATTRIBUTION,
        "center": center.to_dict(),
        "zoom": config.get("MAP_EDIT_ZOOM", 13),
        "fly_zoom": config.get("MAP_FLY_ZOOM", 15),
        "marker": marker.to_dict() if marker else None,
    }


def static_map(config: Mapping, location: Location) -> dict:
    """Settings for a locked snapshot map centred on ``location``."""
    return {
        "mode": "static",
        "tile_url": config.get("MAP_TILE_URL"),
        "attribution": TILE_ATTRIBUTION,
        "center": location.to_dict(),
        "zoom": config.get("MAP_STATIC_ZOOM", 15),
        "marker": location.to_dict(),
    }
