# src/core/errors.py
"""
Исключения ядра сервиса геопоиска.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from src.core.geo.models import Point


class ProximityError(Exception):
    """Базовое исключение ядра."""


class OutOfBoundsError(ProximityError):
    """Точка лежит вне границ корня индекса."""

    def __init__(self, point: "Point") -> None:
        self.point = point
        super().__init__(
            f"Точка ({point.latitude}, {point.longitude}) вне границ индекса"
        )


class UserNotFoundError(ProximityError):
    """Пользователь отсутствует в справочнике."""

    def __init__(self, user_id: Any) -> None:
        self.user_id = user_id
        super().__init__(f"Пользователь {user_id} не найден")
