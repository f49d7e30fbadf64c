# src/core/geo/distance.py
"""
Расстояния на сферической Земле.

haversine — единственный источник истины для "расстояния" в сервисе.
Остальные функции дают консервативную оценку в градусах и используются
только для отсечения поддеревьев индекса.
"""

from __future__ import annotations

import math

from src.core.geo.models import BoundingBox, Point


EARTH_RADIUS_KM = 6371.0

# Запас на погрешность плавающей точки при отсечении
_SPAN_RELATIVE_SLACK = 1e-9
_SPAN_ABSOLUTE_SLACK = 1e-9


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Вычисляет расстояние между двумя точками (в км) по формуле Haversine.
    """
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = (math.sin(dlat / 2) ** 2 +
         math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) *
         math.sin(dlon / 2) ** 2)
    a = min(1.0, max(0.0, a))

    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def haversine(p1: Point, p2: Point) -> float:
    """Расстояние между точками в км."""
    return calculate_distance(p1.latitude, p1.longitude, p2.latitude, p2.longitude)


def search_spans(center: Point, radius_km: float) -> tuple[float, float]:
    """
    Полуширина области поиска в градусах: (по широте, по долготе).

    Любая точка не дальше radius_km от center отличается от неё
    по широте не больше первого значения, по долготе — не больше второго.
    Если шапка поиска захватывает полюс, долгота не ограничена (180).
    """
    angular = radius_km / EARTH_RADIUS_KM
    if angular >= math.pi:
        return 180.0, 180.0

    dlat = math.degrees(angular)
    if abs(center.latitude) + dlat >= 90.0:
        dlon = 180.0
    else:
        ratio = math.sin(angular) / math.cos(math.radians(center.latitude))
        dlon = math.degrees(math.asin(min(1.0, ratio)))

    return _with_slack(dlat), _with_slack(dlon)


def latitude_gap(center: Point, bounds: BoundingBox) -> float:
    """Расстояние по широте от центра до полосы прямоугольника (градусы)."""
    if center.latitude < bounds.min_lat:
        return bounds.min_lat - center.latitude
    if center.latitude > bounds.max_lat:
        return center.latitude - bounds.max_lat
    return 0.0


def longitude_gap(center: Point, bounds: BoundingBox) -> float:
    """
    Расстояние по долготе от центра до полосы прямоугольника (градусы).

    Учитывает переход через антимеридиан: берётся кратчайший путь.
    """
    if bounds.min_lon <= center.longitude <= bounds.max_lon:
        return 0.0
    return min(
        _angular_difference(center.longitude, bounds.min_lon),
        _angular_difference(center.longitude, bounds.max_lon),
    )


def may_contain_within(bounds: BoundingBox, center: Point, spans: tuple[float, float]) -> bool:
    """
    Может ли прямоугольник содержать точку в пределах области поиска.

    Ближайшая точка прямоугольника сравнивается с полуширинами spans
    по каждой оси отдельно.
    """
    dlat, dlon = spans
    if latitude_gap(center, bounds) > dlat:
        return False
    if dlon >= 180.0:
        return True
    return longitude_gap(center, bounds) <= dlon


def _angular_difference(lon1: float, lon2: float) -> float:
    return abs((lon1 - lon2 + 180.0) % 360.0 - 180.0)


def _with_slack(span: float) -> float:
    return min(180.0, span * (1 + _SPAN_RELATIVE_SLACK) + _SPAN_ABSOLUTE_SLACK)
