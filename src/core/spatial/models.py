# src/core/spatial/models.py
"""
Модели пространственного индекса: запись пользователя и узел дерева.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterator, Optional

from src.core.geo.models import BoundingBox, Point


UserId = str | int

# Порядок потомков узла
NW, NE, SW, SE = 0, 1, 2, 3


@dataclass(frozen=True)
class UserRecord:
    """Последняя известная позиция пользователя."""
    id: UserId
    position: Point
    last_updated: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def lat(self) -> float:
        return self.position.latitude

    @property
    def lon(self) -> float:
        return self.position.longitude

    def to_dict(self) -> dict[str, object]:
        """Представление для ответа API: {id, lat, lon}."""
        return {"id": self.id, "lat": self.lat, "lon": self.lon}


class IndexNode:
    """
    Узел дерева: прямоугольная область мира.

    Лист хранит записи в entries и не имеет потомков.
    Внутренний узел имеет ровно четыре потомка (NW, NE, SW, SE)
    и собственных записей не хранит.
    """

    def __init__(self, bounds: BoundingBox, depth: int = 0) -> None:
        self.bounds = bounds
        self.depth = depth
        self.entries: dict[UserId, UserRecord] = {}
        self.children: Optional[tuple[IndexNode, IndexNode, IndexNode, IndexNode]] = None

    @property
    def is_leaf(self) -> bool:
        return self.children is None

    def quadrant_for(self, point: Point) -> int:
        """
        Номер потомка, которому принадлежит точка.

        Точка на средней широте уходит на север, на средней долготе — на запад,
        точный центр — в NW. Совпадает с проверкой NW, NE, SW, SE по порядку.
        """
        mid = self.bounds.midpoint()
        north = point.latitude >= mid.latitude
        west = point.longitude <= mid.longitude
        if north:
            return NW if west else NE
        return SW if west else SE

    def child_for(self, point: Point) -> "IndexNode":
        if self.children is None:
            raise ValueError("Лист не имеет потомков")
        return self.children[self.quadrant_for(point)]

    def split(self) -> None:
        """Создаёт четыре пустых потомка."""
        self.children = tuple(
            IndexNode(quadrant, self.depth + 1)
            for quadrant in self.bounds.quadrants()
        )

    def iter_nodes(self) -> Iterator["IndexNode"]:
        """Обход поддерева в глубину, начиная с самого узла."""
        yield self
        if self.children is not None:
            for child in self.children:
                yield from child.iter_nodes()

    def __repr__(self) -> str:
        kind = "leaf" if self.is_leaf else "internal"
        return f"IndexNode({kind}, depth={self.depth}, entries={len(self.entries)}, bounds={self.bounds})"
