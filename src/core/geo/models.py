# src/core/geo/models.py
"""
Геометрические примитивы: точка и прямоугольник в градусах.
"""

from __future__ import annotations

from dataclasses import dataclass


MIN_LATITUDE = -90.0
MAX_LATITUDE = 90.0
MIN_LONGITUDE = -180.0
MAX_LONGITUDE = 180.0


@dataclass(frozen=True)
class Point:
    """Геолокация (широта, долгота) в градусах."""
    latitude: float
    longitude: float

    def is_valid(self) -> bool:
        """Координаты в допустимых пределах (NaN недопустим)."""
        return (
            MIN_LATITUDE <= self.latitude <= MAX_LATITUDE
            and MIN_LONGITUDE <= self.longitude <= MAX_LONGITUDE
        )


@dataclass(frozen=True)
class BoundingBox:
    """
    Замкнутый прямоугольник в градусах.

    Границы включаются: точка на ребре принадлежит прямоугольнику.
    """
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def __post_init__(self) -> None:
        if self.min_lat > self.max_lat or self.min_lon > self.max_lon:
            raise ValueError(
                f"Некорректные границы: lat [{self.min_lat}, {self.max_lat}], "
                f"lon [{self.min_lon}, {self.max_lon}]"
            )

    @classmethod
    def world(cls) -> "BoundingBox":
        """Прямоугольник всего мира."""
        return cls(MIN_LATITUDE, MAX_LATITUDE, MIN_LONGITUDE, MAX_LONGITUDE)

    def contains(self, point: Point) -> bool:
        return (
            self.min_lat <= point.latitude <= self.max_lat
            and self.min_lon <= point.longitude <= self.max_lon
        )

    def midpoint(self) -> Point:
        return Point(
            (self.min_lat + self.max_lat) / 2,
            (self.min_lon + self.max_lon) / 2,
        )

    def quadrants(self) -> tuple["BoundingBox", "BoundingBox", "BoundingBox", "BoundingBox"]:
        """Четыре четверти в порядке NW, NE, SW, SE."""
        mid = self.midpoint()
        return (
            BoundingBox(mid.latitude, self.max_lat, self.min_lon, mid.longitude),
            BoundingBox(mid.latitude, self.max_lat, mid.longitude, self.max_lon),
            BoundingBox(self.min_lat, mid.latitude, self.min_lon, mid.longitude),
            BoundingBox(self.min_lat, mid.latitude, mid.longitude, self.max_lon),
        )

    def area(self) -> float:
        """Площадь в квадратных градусах."""
        return (self.max_lat - self.min_lat) * (self.max_lon - self.min_lon)
