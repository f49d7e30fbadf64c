# src/core/__init__.py
"""
Доменный слой (Core Domain).
Пространственный индекс и справочник позиций, независимые от транспорта.
"""

from src.core.directory import LocationDirectory
from src.core.errors import OutOfBoundsError, ProximityError, UserNotFoundError
from src.core.geo import BoundingBox, Point
from src.core.spatial import SpatialIndex, UserRecord

__all__ = [
    "BoundingBox",
    "LocationDirectory",
    "OutOfBoundsError",
    "Point",
    "ProximityError",
    "SpatialIndex",
    "UserNotFoundError",
    "UserRecord",
]
