"""Overlap resolution - separates visually coincident markers.

For each point, the number of EARLIER points in the same coincident bucket
(|Δlat| and |Δlon| both below half the offset distance) selects a position
on a fixed hexagonal pattern:

    count = 0      -> no offset
    count = k > 0  -> angle = OFFSET_ANGLES[k mod 6]
                      offset = (sin(angle)·D, cos(angle)·D) as (Δlat, Δlon)

The result depends on input order. Buckets are always compared on the SOURCE
coordinates, never on previously adjusted ones.

Past six coincident markers the hex positions repeat unless
OverlapConfig.RING_SPREAD is enabled.
"""

import logging
from dataclasses import replace
from math import cos, radians, sin

import numpy as np

from manifest_map.constants import MapConfig, OverlapConfig
from manifest_map.model.map_point import ManifestMapPoint

logger = logging.getLogger(__name__)


class OverlapResolver:
    """Static methods computing deterministic marker offsets."""

    @staticmethod
    def coincident_counts(points: list[ManifestMapPoint] | tuple[ManifestMapPoint, ...]) -> list[int]:
        """Count earlier coincident points for every index.

        Points without geometry compare as NaN and are never coincident.

        Returns:
            List where entry i is the number of j < i sharing i's bucket.
        """
        n = len(points)
        if n == 0:
            return []

        lats = np.array([p.latitude if p.latitude is not None else np.nan for p in points], dtype=float)
        lons = np.array([p.longitude if p.longitude is not None else np.nan for p in points], dtype=float)
        half = MapConfig.OFFSET_DISTANCE / 2

        with np.errstate(invalid="ignore"):
            close = (np.abs(lats[:, None] - lats[None, :]) < half) & (np.abs(lons[:, None] - lons[None, :]) < half)
        earlier = np.tril(np.ones((n, n), dtype=bool), k=-1)
        return [int(c) for c in (close & earlier).sum(axis=1)]

    @staticmethod
    def offset_for_count(count: int, ring_spread: bool | None = None) -> tuple[float, float]:
        """Offset (Δlat, Δlon) for a point with `count` earlier coincident points.

        Args:
            count: Number of earlier coincident points
            ring_spread: Override OverlapConfig.RING_SPREAD

        Returns:
            (Δlat, Δlon) rounded to MapConfig.OFFSET_DECIMALS.
        """
        if count <= 0:
            return (0.0, 0.0)

        if ring_spread is None:
            ring_spread = OverlapConfig.RING_SPREAD

        angles = MapConfig.OFFSET_ANGLES
        angle = radians(angles[count % len(angles)])
        distance = MapConfig.OFFSET_DISTANCE
        if ring_spread:
            distance *= 1 + count // OverlapConfig.RING_SIZE

        decimals = MapConfig.OFFSET_DECIMALS
        # + 0.0 normalizes -0.0 from sin(180°)
        return (round(sin(angle) * distance, decimals) + 0.0, round(cos(angle) * distance, decimals) + 0.0)

    @staticmethod
    def resolve(
        points: list[ManifestMapPoint] | tuple[ManifestMapPoint, ...],
        ring_spread: bool | None = None,
    ) -> tuple[ManifestMapPoint, ...]:
        """Return new points with adjusted coordinates set.

        Input points are not modified. Points without geometry are returned
        with adjusted coordinates cleared.
        """
        counts = OverlapResolver.coincident_counts(points)
        resolved = []
        for point, count in zip(points, counts):
            if not point.has_geometry:
                resolved.append(replace(point, adjusted_latitude=None, adjusted_longitude=None))
                continue
            assert point.latitude is not None and point.longitude is not None
            d_lat, d_lon = OverlapResolver.offset_for_count(count=count, ring_spread=ring_spread)
            resolved.append(
                replace(
                    point,
                    adjusted_latitude=point.latitude + d_lat,
                    adjusted_longitude=point.longitude + d_lon,
                )
            )

        moved = sum(1 for c in counts if c > 0)
        if moved:
            logger.debug(f"Offset {moved} of {len(points)} coincident markers")
        return tuple(resolved)
