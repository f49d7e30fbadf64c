# src/shared/models/location_dto.py
"""
DTO для приёма координат и поиска соседей.
Имена полей совпадают с JSON-контрактом клиентов (userID, latitude, ...).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def normalize_user_id(value: Any) -> str:
    """userID — строка или целое число; внутри сервиса всегда строка."""
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise ValueError("userID должен быть строкой или целым числом")
    normalized = str(value).strip()
    if not normalized:
        raise ValueError("userID не может быть пустым")
    return normalized


class CoordinatesReport(BaseModel):
    """Отчёт о текущей позиции пользователя."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userID")
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    @field_validator("user_id", mode="before")
    @classmethod
    def validate_user_id(cls, v: Any) -> str:
        return normalize_user_id(v)


class BatchCoordinatesReport(BaseModel):
    """Пакет отчётов о позиции."""

    updates: list[CoordinatesReport] = Field(..., min_length=1)


class NearbyQuery(BaseModel):
    """Запрос соседей пользователя. range — в километрах."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userID")
    range: Optional[float] = Field(default=None, ge=0)

    @field_validator("user_id", mode="before")
    @classmethod
    def validate_user_id(cls, v: Any) -> str:
        return normalize_user_id(v)


class NearbyUser(BaseModel):
    """Найденный сосед."""

    id: str
    lat: float
    lon: float


class UserLocationResponse(BaseModel):
    """Последняя известная позиция пользователя."""

    id: str
    lat: float
    lon: float
    last_updated: datetime


class BatchReportResult(BaseModel):
    """Итог пакетного обновления."""

    success_count: int
    error_count: int
    errors: list[dict[str, Any]] | None = None


class StatsResponse(BaseModel):
    """Статистика сервиса."""

    total_updates: int
    unique_users: int
    tracked_users: int
    index_nodes: int
    index_depth: int
