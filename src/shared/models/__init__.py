# src/shared/models/__init__.py
"""
Общие DTO и Pydantic-модели сервиса.
"""

from src.shared.models.common import (
    ErrorResponse,
    HealthStatus,
)
from src.shared.models.location_dto import (
    BatchCoordinatesReport,
    BatchReportResult,
    CoordinatesReport,
    NearbyQuery,
    NearbyUser,
    StatsResponse,
    UserLocationResponse,
)

__all__ = [
    # Common
    "ErrorResponse",
    "HealthStatus",
    # Location
    "BatchCoordinatesReport",
    "BatchReportResult",
    "CoordinatesReport",
    "NearbyQuery",
    "NearbyUser",
    "StatsResponse",
    "UserLocationResponse",
]
