# src/services/realtime_location/service.py
"""
Бизнес-логика приёма геолокации и поиска соседей.
"""

from __future__ import annotations

from typing import Any

from starlette.concurrency import run_in_threadpool

from src.common.constants import TypeMsg
from src.common.logger import log_error, log_info
from src.core.directory.service import LocationDirectory
from src.core.errors import OutOfBoundsError
from src.core.geo.models import Point
from src.core.spatial.models import UserRecord
from src.shared.models.location_dto import CoordinatesReport


class LocationIngestService:
    """
    Сервис приёма координат пользователей.

    Вызовы справочника выполняются в пуле потоков, не в цикле событий.

    Ответственности:
    - Валидация координат
    - Обновление справочника и индекса
    - Поиск соседей в радиусе
    - Статистика обновлений
    """

    def __init__(self, directory: LocationDirectory, default_range_km: float) -> None:
        """
        Инициализация сервиса.

        Args:
            directory: Справочник позиций (общий для всех запросов)
            default_range_km: Радиус поиска, если клиент его не передал
        """
        self._directory = directory
        self._default_range_km = default_range_km

        # Статистика
        self._total_updates = 0
        self._updates_per_user: dict[str, int] = {}

    @property
    def directory(self) -> LocationDirectory:
        return self._directory

    @property
    def default_range_km(self) -> float:
        return self._default_range_km

    async def update_location(self, user_id: str, lat: float, lon: float) -> UserRecord:
        """
        Обновить геолокацию пользователя.

        Raises:
            OutOfBoundsError: Координаты вне допустимых пределов
        """
        point = Point(lat, lon)
        if not point.is_valid():
            await log_info(
                f"Отклонены координаты ({lat}, {lon}) пользователя {user_id}",
                type_msg=TypeMsg.WARNING,
            )
            raise OutOfBoundsError(point)

        record = await run_in_threadpool(self._directory.report, user_id, point)

        self._total_updates += 1
        self._updates_per_user[user_id] = self._updates_per_user.get(user_id, 0) + 1

        await log_info(
            f"Обновлён пользователь (ID: {user_id}), позиция ({lat}, {lon})",
            type_msg=TypeMsg.DEBUG,
        )
        return record

    async def update_locations_batch(self, updates: list[CoordinatesReport]) -> dict[str, Any]:
        """
        Пакетное обновление геолокаций.

        Ошибка одного элемента не прерывает обработку остальных.
        """
        success_count = 0
        errors = []

        for update in updates:
            try:
                await self.update_location(update.user_id, update.latitude, update.longitude)
                success_count += 1
            except OutOfBoundsError as e:
                errors.append({
                    "user_id": update.user_id,
                    "error": str(e),
                })

        if errors:
            await log_error(f"Пакетное обновление: ошибок {len(errors)} из {len(updates)}")

        return {
            "success_count": success_count,
            "error_count": len(errors),
            "errors": errors if errors else None,
        }

    async def find_nearby(self, user_id: str, range_km: float | None = None) -> list[dict[str, Any]]:
        """
        Соседи пользователя в радиусе range_km (км).

        Пустой или нулевой радиус заменяется радиусом по умолчанию.
        Неизвестный пользователь — пустой список.
        """
        search_range = range_km or self._default_range_km
        nearby = await run_in_threadpool(self._directory.find_nearby, user_id, search_range)

        await log_info(
            f"Поиск рядом с (ID: {user_id}), радиус {search_range} км, найдено: {len(nearby)}",
            type_msg=TypeMsg.DEBUG,
        )
        return [record.to_dict() for record in nearby]

    async def get_user_location(self, user_id: str) -> UserRecord | None:
        """Последняя известная позиция пользователя."""
        return await run_in_threadpool(self._directory.get, user_id)

    async def remove_user(self, user_id: str) -> bool:
        """Удалить пользователя из справочника и индекса."""
        removed = await run_in_threadpool(self._directory.remove, user_id)
        if removed:
            self._updates_per_user.pop(user_id, None)
            await log_info(f"Пользователь {user_id} удалён из индекса", type_msg=TypeMsg.DEBUG)
        return removed

    async def get_stats(self) -> dict[str, Any]:
        """Получить статистику."""
        directory_stats = await run_in_threadpool(self._directory.stats)
        return {
            "total_updates": self._total_updates,
            "unique_users": len(self._updates_per_user),
            "tracked_users": directory_stats["tracked_users"],
            "index_nodes": directory_stats["index_nodes"],
            "index_depth": directory_stats["index_depth"],
        }
