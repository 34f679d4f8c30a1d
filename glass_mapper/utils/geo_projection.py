"""
Geospatial helpers: great-circle distances and screen projection.
"""
from typing import Callable, Sequence
import math

import numpy as np
from pyproj import Transformer

from glass_mapper.domain.models import Point, ScreenCoord, Viewport


# Spherical earth radius used by the web map library for distances
EARTH_RADIUS_M = 6_371_000.0

# Half the circumference of the EPSG:3857 sphere (6378137 m)
WEB_MERCATOR_HALF_EXTENT = math.pi * 6_378_137.0

_to_web_mercator = Transformer.from_crs(
    "EPSG:4326",  # WGS84 (lat/lon)
    "EPSG:3857",  # Web Mercator
    always_xy=True,  # Ensure (lon, lat) -> (x, y) order
)


def haversine_distance(a: Point, b: Point) -> float:
    """
    Great-circle distance between two points in meters.

    Args:
        a: Origin point
        b: Destination point

    Returns:
        Distance in meters
    """
    lat1, lng1, lat2, lng2 = map(math.radians, [a.lat, a.lng, b.lat, b.lng])
    d_lat = lat2 - lat1
    d_lng = lng2 - lng1
    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def segment_lengths(points: Sequence[Point], closed: bool) -> np.ndarray:
    """
    Great-circle length of every segment of a path, in drawing order.

    Args:
        points: Ordered vertices
        closed: Whether the last vertex connects back to the first

    Returns:
        Array of segment lengths in meters (empty for fewer than 2 points)
    """
    n = len(points)
    if n < 2:
        return np.zeros(0)

    coords = np.radians(np.array([(p.lat, p.lng) for p in points], dtype=float))
    limit = n if closed else n - 1
    start = coords[:limit]
    end = coords[(np.arange(limit) + 1) % n]

    d_lat = end[:, 0] - start[:, 0]
    d_lng = end[:, 1] - start[:, 1]
    h = (
        np.sin(d_lat / 2) ** 2
        + np.cos(start[:, 0]) * np.cos(end[:, 0]) * np.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_M * 2 * np.arctan2(np.sqrt(h), np.sqrt(1 - h))


def project_to_world_pixels(point: Point, zoom: float, tile_size: int = 256) -> ScreenCoord:
    """
    Project a coordinate to Web Mercator world pixel space.

    Args:
        point: Coordinate to project
        zoom: Map zoom level
        tile_size: Tile edge in pixels

    Returns:
        (x, y) world pixels, origin at the top-left of the world
    """
    x, y = _to_web_mercator.transform(point.lng, point.lat)
    scale = tile_size * 2 ** zoom
    px = (x + WEB_MERCATOR_HALF_EXTENT) / (2 * WEB_MERCATOR_HALF_EXTENT) * scale
    py = (WEB_MERCATOR_HALF_EXTENT - y) / (2 * WEB_MERCATOR_HALF_EXTENT) * scale
    return (px, py)


def make_screen_projector(viewport: Viewport) -> Callable[[Point], ScreenCoord]:
    """
    Build a projector from coordinates to container pixels for a viewport.

    Args:
        viewport: Zoom level and container origin in world pixels

    Returns:
        Callable mapping a Point to its (x, y) container position
    """
    def project(point: Point) -> ScreenCoord:
        px, py = project_to_world_pixels(point, viewport.zoom, viewport.tile_size)
        return (px - viewport.origin_x, py - viewport.origin_y)

    return project
