"""Core pure computations for manifest map rendering.

- GeoCalculator: Geodesic distance, destination, circle bounds, fit-bounds view
- OverlapResolver: Deterministic hexagonal de-overlap of coincident markers
- visibility_filter: Category toggles -> render decision
- TripPathBuilder: Time-ordered path descriptor and TripsLayer
"""

from manifest_map.core.geo_calculator import GeoCalculator, LatLngBounds, ViewFit
from manifest_map.core.overlap_resolver import OverlapResolver
from manifest_map.core.trip_path import TripPath, TripPathBuilder
from manifest_map.core.visibility_filter import filter_visible, is_marker_visible, is_path_visible

__all__ = [
    # Geo calculator
    "GeoCalculator",
    "LatLngBounds",
    "ViewFit",
    # Overlap resolver
    "OverlapResolver",
    # Trip path
    "TripPath",
    "TripPathBuilder",
    # Visibility filter
    "filter_visible",
    "is_marker_visible",
    "is_path_visible",
]
