"""Grid placement of parsed circuits."""

from .placement import PlacementStrategy, normalize_positions, place_devices

__all__ = ["PlacementStrategy", "normalize_positions", "place_devices"]
