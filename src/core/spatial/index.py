# src/core/spatial/index.py
"""
Пространственный индекс — квадродерево над широтой и долготой.

Каждая запись хранится ровно в одном листе. Лист делится на четыре части,
когда число записей превышает capacity и глубина меньше max_depth.
Для удаления поддерживается таблица id -> лист.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Iterator, Optional

from src.common.logger import get_logger
from src.core.errors import OutOfBoundsError
from src.core.geo.distance import haversine, may_contain_within, search_spans
from src.core.geo.models import BoundingBox, Point
from src.core.spatial.models import IndexNode, UserId, UserRecord


DEFAULT_NODE_CAPACITY = 8
DEFAULT_MAX_DEPTH = 20

logger = get_logger("spatial")


class SpatialIndex:
    """
    Квадродерево точек с поиском по радиусу.

    Не потокобезопасен: синхронизация — забота владельца
    (см. LocationDirectory).
    """

    def __init__(
        self,
        bounds: BoundingBox | None = None,
        capacity: int = DEFAULT_NODE_CAPACITY,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        """
        Инициализация индекса.

        Args:
            bounds: Границы корня (по умолчанию весь мир)
            capacity: Максимум записей в листе до деления
            max_depth: Максимальная глубина деления
        """
        if capacity < 1:
            raise ValueError("capacity должен быть >= 1")
        if max_depth < 0:
            raise ValueError("max_depth должен быть >= 0")

        self._root = IndexNode(bounds or BoundingBox.world())
        self._capacity = capacity
        self._max_depth = max_depth
        self._leaf_by_id: dict[UserId, IndexNode] = {}

    @property
    def root(self) -> IndexNode:
        return self._root

    @property
    def bounds(self) -> BoundingBox:
        return self._root.bounds

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def max_depth(self) -> int:
        return self._max_depth

    def __len__(self) -> int:
        return len(self._leaf_by_id)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._leaf_by_id

    # =========================================================================
    # МУТАЦИИ
    # =========================================================================

    def upsert(
        self,
        user_id: UserId,
        point: Point,
        *,
        last_updated: datetime | None = None,
    ) -> UserRecord:
        """
        Вставляет или перемещает запись пользователя.

        Raises:
            OutOfBoundsError: Точка вне границ корня (индекс не меняется)
        """
        if not self._root.bounds.contains(point):
            raise OutOfBoundsError(point)

        self.remove(user_id)

        record = UserRecord(
            id=user_id,
            position=point,
            last_updated=last_updated or datetime.now(timezone.utc),
        )
        self._insert(record)
        return record

    def remove(self, user_id: UserId) -> bool:
        """
        Удаляет запись пользователя.

        Returns:
            True, если запись была; для неизвестного id — False (без ошибки)
        """
        leaf = self._leaf_by_id.pop(user_id, None)
        if leaf is None:
            return False
        del leaf.entries[user_id]
        return True

    def _insert(self, record: UserRecord) -> None:
        node = self._root
        while not node.is_leaf:
            node = node.child_for(record.position)

        self._place(node, record)
        self._maybe_subdivide(node)

    def _place(self, leaf: IndexNode, record: UserRecord) -> None:
        leaf.entries[record.id] = record
        self._leaf_by_id[record.id] = leaf

    def _maybe_subdivide(self, node: IndexNode) -> None:
        if len(node.entries) <= self._capacity or node.depth >= self._max_depth:
            return

        node.split()
        entries, node.entries = node.entries, {}
        for record in entries.values():
            self._place(node.child_for(record.position), record)

        logger.debug(
            f"Узел глубины {node.depth} разделён, перераспределено записей: {len(entries)}"
        )

        # Все записи могли попасть в одну четверть
        for child in node.children:
            self._maybe_subdivide(child)

    # =========================================================================
    # ЗАПРОСЫ
    # =========================================================================

    def query(self, center: Point, radius_km: float) -> set[UserRecord]:
        """
        Все записи не дальше radius_km от center (по haversine).

        Поддеревья, которые не могут содержать подходящих точек,
        отсекаются по оценке в градусах.

        Raises:
            ValueError: Отрицательный или нечисловой радиус
            OutOfBoundsError: Центр вне границ корня
        """
        if math.isnan(radius_km) or radius_km < 0:
            raise ValueError(f"Некорректный радиус: {radius_km}")
        if not self._root.bounds.contains(center):
            raise OutOfBoundsError(center)

        results: set[UserRecord] = set()
        spans = search_spans(center, radius_km)
        self._query_recursive(self._root, center, radius_km, spans, results)
        return results

    def _query_recursive(
        self,
        node: IndexNode,
        center: Point,
        radius_km: float,
        spans: tuple[float, float],
        results: set[UserRecord],
    ) -> None:
        if not may_contain_within(node.bounds, center, spans):
            return

        if node.children is None:
            for record in node.entries.values():
                if haversine(center, record.position) <= radius_km:
                    results.add(record)
            return

        for child in node.children:
            self._query_recursive(child, center, radius_km, spans, results)

    def get(self, user_id: UserId) -> Optional[UserRecord]:
        leaf = self._leaf_by_id.get(user_id)
        if leaf is None:
            return None
        return leaf.entries[user_id]

    def leaf_for(self, user_id: UserId) -> Optional[IndexNode]:
        """Лист, в котором хранится запись."""
        return self._leaf_by_id.get(user_id)

    def iter_leaves(self) -> Iterator[IndexNode]:
        return (node for node in self._root.iter_nodes() if node.is_leaf)

    def node_count(self) -> int:
        return sum(1 for _ in self._root.iter_nodes())

    def depth(self) -> int:
        """Глубина самого глубокого узла."""
        return max(node.depth for node in self._root.iter_nodes())
