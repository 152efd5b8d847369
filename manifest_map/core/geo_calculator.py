"""Geodesic and viewport calculations for the manifest map.

Provides geographic helper functions:
- Destination calculation (endpoint from start, bearing, distance)
- Bounds accumulation (LatLngBounds) and circular bounds (center ± radius)
- Fit-bounds view computation in Web Mercator with pixel padding

All calculations use WGS84 spherical Earth approximation (R = 6,371 km).
"""

from collections.abc import Iterable
from dataclasses import dataclass
from math import asin, atan, atan2, cos, degrees, exp, log, log2, pi, radians, sin, tan

from manifest_map.constants import MapConfig

# Earth's radius in meters (WGS84 spherical approximation)
EARTH_RADIUS_M = 6_371_000

# Web Mercator latitude limit
MAX_MERCATOR_LAT = 85.05112878


@dataclass
class LatLngBounds:
    """Axis-aligned geographic bounds, grown point by point.

    Empty until the first extend() call.
    """

    south: float | None = None
    west: float | None = None
    north: float | None = None
    east: float | None = None

    @property
    def is_empty(self) -> bool:
        return self.south is None

    def extend(self, lat: float, lon: float) -> "LatLngBounds":
        """Grow bounds to include (lat, lon). Returns self for chaining."""
        if self.is_empty:
            self.south = self.north = lat
            self.west = self.east = lon
            return self
        assert self.south is not None and self.north is not None
        assert self.west is not None and self.east is not None
        self.south = min(self.south, lat)
        self.north = max(self.north, lat)
        self.west = min(self.west, lon)
        self.east = max(self.east, lon)
        return self

    @staticmethod
    def from_lat_lons(lat_lons: Iterable[tuple[float, float]]) -> "LatLngBounds":
        bounds = LatLngBounds()
        for lat, lon in lat_lons:
            bounds.extend(lat=lat, lon=lon)
        return bounds


@dataclass(frozen=True)
class ViewFit:
    """Camera position that fits a bounds into a viewport."""

    latitude: float
    longitude: float
    zoom: float


class GeoCalculator:
    """Static methods for geodesic and viewport calculations.

    Coordinates are in decimal degrees (WGS84).
    Bearings are in degrees clockwise from North (0-360).
    Distances are in meters.
    """

    EARTH_RADIUS_M = EARTH_RADIUS_M

    @staticmethod
    def destination(
        lon: float,
        lat: float,
        bearing_deg: float,
        distance_m: float,
    ) -> tuple[float, float]:
        """Calculate destination point given start, bearing, and distance.

        Args:
            lon: Longitude of start point (decimal degrees)
            lat: Latitude of start point (decimal degrees)
            bearing_deg: Bearing in degrees (clockwise from North)
            distance_m: Distance to travel in meters

        Returns:
            Tuple (lon, lat) of destination point in decimal degrees.
        """
        brng = radians(bearing_deg)
        lat1 = radians(lat)
        lon1 = radians(lon)
        d_R = distance_m / EARTH_RADIUS_M

        lat2 = asin(sin(lat1) * cos(d_R) + cos(lat1) * sin(d_R) * cos(brng))
        lon2 = lon1 + atan2(
            sin(brng) * sin(d_R) * cos(lat1),
            cos(d_R) - sin(lat1) * sin(lat2),
        )
        return degrees(lon2), degrees(lat2)

    @staticmethod
    def circle_bounds(lat: float, lon: float, radius_m: float) -> LatLngBounds:
        """Bounds of a circle: the center offset by radius to N, E, S and W.

        Args:
            lat: Circle center latitude
            lon: Circle center longitude
            radius_m: Circle radius in meters

        Returns:
            LatLngBounds enclosing the circle.
        """
        bounds = LatLngBounds().extend(lat=lat, lon=lon)
        for bearing in (0.0, 90.0, 180.0, 270.0):
            edge_lon, edge_lat = GeoCalculator.destination(
                lon=lon, lat=lat, bearing_deg=bearing, distance_m=radius_m
            )
            bounds.extend(lat=edge_lat, lon=edge_lon)
        return bounds

    @staticmethod
    def _mercator_y(lat: float) -> float:
        lat = max(-MAX_MERCATOR_LAT, min(MAX_MERCATOR_LAT, lat))
        return log(tan(pi / 4 + radians(lat) / 2))

    @staticmethod
    def _inverse_mercator_y(y: float) -> float:
        return degrees(2 * atan(exp(y)) - pi / 2)

    @staticmethod
    def fit_bounds(
        bounds: LatLngBounds,
        width_px: int,
        height_px: int,
        padding_px: int = MapConfig.DEFAULT_PADDING,
        max_zoom: float = MapConfig.MAX_ZOOM,
    ) -> ViewFit:
        """Compute the camera that fits bounds into a viewport with padding.

        Works in Web Mercator: the zoom is the largest level at which both the
        longitude span and the projected latitude span fit inside the padded
        viewport. Degenerate (single point) bounds resolve to max_zoom.

        Raises:
            ValueError: If bounds are empty
        """
        if bounds.is_empty:
            raise ValueError("Cannot fit empty bounds")
        assert bounds.south is not None and bounds.north is not None
        assert bounds.west is not None and bounds.east is not None

        usable_w = width_px - 2 * padding_px
        usable_h = height_px - 2 * padding_px
        # Padding larger than the viewport falls back to the unpadded size
        if usable_w <= 0:
            usable_w = width_px
        if usable_h <= 0:
            usable_h = height_px

        y_north = GeoCalculator._mercator_y(bounds.north)
        y_south = GeoCalculator._mercator_y(bounds.south)
        lon_fraction = (bounds.east - bounds.west) / 360.0
        lat_fraction = (y_north - y_south) / (2 * pi)

        zooms = [max_zoom]
        if lon_fraction > 0:
            zooms.append(log2(usable_w / (MapConfig.TILE_SIZE_PX * lon_fraction)))
        if lat_fraction > 0:
            zooms.append(log2(usable_h / (MapConfig.TILE_SIZE_PX * lat_fraction)))
        zoom = max(MapConfig.MIN_ZOOM, min(zooms))

        center_lat = GeoCalculator._inverse_mercator_y((y_north + y_south) / 2)
        center_lon = (bounds.west + bounds.east) / 2
        return ViewFit(latitude=center_lat, longitude=center_lon, zoom=zoom)
