# src/core/spatial/__init__.py
"""
Пространственный индекс.
Квадродерево для поиска пользователей по радиусу.
"""

from src.core.spatial.index import DEFAULT_MAX_DEPTH, DEFAULT_NODE_CAPACITY, SpatialIndex
from src.core.spatial.models import IndexNode, UserId, UserRecord

__all__ = [
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_NODE_CAPACITY",
    "IndexNode",
    "SpatialIndex",
    "UserId",
    "UserRecord",
]
