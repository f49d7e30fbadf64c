# src/core/geo/__init__.py
"""
Geo-примитивы.
Точки, прямоугольники и расстояния на сферической Земле.
"""

from src.core.geo.distance import EARTH_RADIUS_KM, calculate_distance, haversine
from src.core.geo.models import BoundingBox, Point

__all__ = [
    "EARTH_RADIUS_KM",
    "BoundingBox",
    "Point",
    "calculate_distance",
    "haversine",
]
