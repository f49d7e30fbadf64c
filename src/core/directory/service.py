# src/core/directory/service.py
"""
Справочник последних известных позиций пользователей.
Источник истины для "где сейчас пользователь X" и единственная точка
входа, через которую обновляется пространственный индекс.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Optional

from src.common.logger import get_logger
from src.core.errors import UserNotFoundError
from src.core.geo.distance import haversine
from src.core.geo.models import Point
from src.core.spatial.index import SpatialIndex
from src.core.spatial.models import UserId, UserRecord
from src.core.sync import ReadWriteLock


logger = get_logger("directory")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LocationDirectory:
    """
    Справочник id -> UserRecord, синхронизированный с SpatialIndex.

    Запись в справочник и изменение индекса выполняются в одной
    критической секции: читатель не увидит одно без другого.
    """

    def __init__(
        self,
        index: SpatialIndex | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """
        Инициализация справочника.

        Args:
            index: Пустой индекс (по умолчанию — на весь мир)
            clock: Источник времени для last_updated
        """
        self._index = index if index is not None else SpatialIndex()
        self._records: dict[UserId, UserRecord] = {}
        self._lock = ReadWriteLock()
        self._clock = clock

    @property
    def index(self) -> SpatialIndex:
        return self._index

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._records)

    def __contains__(self, user_id: object) -> bool:
        with self._lock.read_locked():
            return user_id in self._records

    def report(self, user_id: UserId, point: Point) -> UserRecord:
        """
        Обновить позицию пользователя (создаёт запись при первом появлении).

        Raises:
            OutOfBoundsError: Точка вне мира; справочник не меняется
        """
        with self._lock.write_locked():
            record = self._index.upsert(user_id, point, last_updated=self._clock())
            self._records[user_id] = record

        logger.debug(
            f"Обновлён пользователь (ID: {user_id}): ({point.latitude}, {point.longitude})"
        )
        return record

    def remove(self, user_id: UserId) -> bool:
        """Удалить пользователя из справочника и индекса."""
        with self._lock.write_locked():
            existed = self._records.pop(user_id, None) is not None
            self._index.remove(user_id)
        return existed

    def get(self, user_id: UserId) -> Optional[UserRecord]:
        with self._lock.read_locked():
            return self._records.get(user_id)

    def find_nearby(self, user_id: UserId, radius_km: float) -> list[UserRecord]:
        """
        Пользователи в радиусе radius_km от user_id, без него самого.

        Отсортированы по расстоянию, затем по id.
        Неизвестный пользователь — пустой список.
        """
        try:
            return self._find_nearby(user_id, radius_km)
        except UserNotFoundError as e:
            logger.info(str(e))
            return []

    def _find_nearby(self, user_id: UserId, radius_km: float) -> list[UserRecord]:
        with self._lock.read_locked():
            requester = self._records.get(user_id)
            if requester is None:
                raise UserNotFoundError(user_id)
            found = self._index.query(requester.position, radius_km)

        logger.debug(
            f"Поиск рядом с (ID: {user_id}) в ({requester.lat}, {requester.lon}), "
            f"радиус {radius_km} км"
        )

        nearby = [record for record in found if record.id != user_id]
        nearby.sort(key=lambda r: (haversine(requester.position, r.position), str(r.id)))
        return nearby

    def stats(self) -> dict[str, Any]:
        """Размер справочника и форма дерева."""
        with self._lock.read_locked():
            return {
                "tracked_users": len(self._records),
                "index_nodes": self._index.node_count(),
                "index_depth": self._index.depth(),
                "node_capacity": self._index.capacity,
                "max_depth": self._index.max_depth,
            }
