"""Tests for GeoCalculator and LatLngBounds - geodesy and viewport fitting."""

from math import degrees

import pytest

from manifest_map.constants import MapConfig
from manifest_map.core.geo_calculator import GeoCalculator, LatLngBounds


class TestLatLngBounds:
    """Bounds grow point by point."""

    def test_empty(self) -> None:
        bounds = LatLngBounds()
        assert bounds.is_empty
        assert LatLngBounds.from_lat_lons([]).is_empty

    def test_extend(self) -> None:
        bounds = LatLngBounds.from_lat_lons([(-37.8, 144.9), (-37.6, 145.1), (-37.7, 144.8)])
        assert (bounds.south, bounds.west, bounds.north, bounds.east) == (-37.8, 144.8, -37.6, 145.1)

    def test_from_generator(self) -> None:
        bounds = LatLngBounds.from_lat_lons((lat, 144.9) for lat in (-37.8, -37.6))
        assert (bounds.south, bounds.north) == (-37.8, -37.6)


class TestGeodesy:
    def test_destination_due_north(self) -> None:
        """1 km north moves latitude by 1000 / R radians."""
        lon, lat = GeoCalculator.destination(lon=144.96, lat=-37.81, bearing_deg=0.0, distance_m=1000.0)
        assert lon == pytest.approx(144.96)
        assert lat - (-37.81) == pytest.approx(degrees(1000.0 / GeoCalculator.EARTH_RADIUS_M))

    def test_destination_zero_distance(self) -> None:
        assert GeoCalculator.destination(lon=144.96, lat=-37.81, bearing_deg=45.0, distance_m=0.0) == pytest.approx(
            (144.96, -37.81)
        )

    def test_circle_bounds_symmetric(self) -> None:
        bounds = GeoCalculator.circle_bounds(lat=-37.81, lon=144.96, radius_m=500.0)
        assert bounds.north - (-37.81) == pytest.approx((-37.81) - bounds.south, rel=1e-3)
        assert bounds.east - 144.96 == pytest.approx(144.96 - bounds.west, rel=1e-3)
        assert bounds.north - (-37.81) == pytest.approx(degrees(500.0 / GeoCalculator.EARTH_RADIUS_M))

    def test_circle_bounds_longitude_span_wider_off_equator(self) -> None:
        bounds = GeoCalculator.circle_bounds(lat=-60.0, lon=0.0, radius_m=1000.0)
        assert bounds.east - bounds.west > bounds.north - bounds.south


class TestFitBounds:
    """Web Mercator fit of bounds into a padded viewport."""

    def test_empty_raises(self) -> None:
        with pytest.raises(ValueError, match="empty"):
            GeoCalculator.fit_bounds(LatLngBounds(), width_px=800, height_px=600)

    def test_single_point_max_zoom(self) -> None:
        bounds = LatLngBounds().extend(lat=-37.81, lon=144.96)
        fit = GeoCalculator.fit_bounds(bounds, width_px=800, height_px=600)
        assert fit.zoom == MapConfig.MAX_ZOOM
        assert (fit.latitude, fit.longitude) == pytest.approx((-37.81, 144.96))

    def test_whole_world_min_zoom(self) -> None:
        bounds = LatLngBounds.from_lat_lons([(-80.0, -180.0), (80.0, 180.0)])
        fit = GeoCalculator.fit_bounds(bounds, width_px=400, height_px=300)
        assert fit.zoom == MapConfig.MIN_ZOOM

    def test_padding_zooms_out(self) -> None:
        bounds = LatLngBounds.from_lat_lons([(-37.9, 144.8), (-37.7, 145.1)])
        tight = GeoCalculator.fit_bounds(bounds, width_px=1200, height_px=640, padding_px=0)
        padded = GeoCalculator.fit_bounds(bounds, width_px=1200, height_px=640, padding_px=100)
        assert padded.zoom < tight.zoom

    def test_oversized_padding_falls_back(self) -> None:
        bounds = LatLngBounds.from_lat_lons([(-37.9, 144.8), (-37.7, 145.1)])
        fit = GeoCalculator.fit_bounds(bounds, width_px=150, height_px=150, padding_px=100)
        unpadded = GeoCalculator.fit_bounds(bounds, width_px=150, height_px=150, padding_px=0)
        assert fit.zoom == unpadded.zoom

    def test_center_is_mercator_midpoint(self) -> None:
        bounds = LatLngBounds.from_lat_lons([(0.0, 10.0), (60.0, 20.0)])
        fit = GeoCalculator.fit_bounds(bounds, width_px=800, height_px=600)
        assert fit.longitude == pytest.approx(15.0)
        # Mercator stretches high latitudes, so the visual center sits above the arithmetic mean
        assert fit.latitude > 30.0
