# src/services/realtime_location/app.py
"""
FastAPI приложение сервиса геопоиска.

Приём координат пользователей и поиск соседей в радиусе.

Endpoints:
- GET /  - сервис запущен
- GET /health - проверка здоровья
- GET /stats - статистика
- POST /coordinates - обновить позицию пользователя
- POST /getNearbyCoordinates - соседи пользователя
- POST /api/v1/location/batch - пакетное обновление
- GET /api/v1/location/{user_id} - последняя позиция
- DELETE /api/v1/location/{user_id} - удалить из индекса
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.common.logger import log_info, setup_logging
from src.config import settings
from src.core.directory.service import LocationDirectory
from src.core.errors import OutOfBoundsError
from src.core.spatial.index import SpatialIndex
from src.services.realtime_location.service import LocationIngestService
from src.shared.models.common import ErrorResponse, HealthStatus
from src.shared.models.location_dto import (
    BatchCoordinatesReport,
    BatchReportResult,
    CoordinatesReport,
    NearbyQuery,
    NearbyUser,
    StatsResponse,
    UserLocationResponse,
)


SERVICE_NAME = "proximity_service"


def build_service() -> LocationIngestService:
    """Создаёт справочник и индекс по настройкам."""
    index = SpatialIndex(
        capacity=settings.spatial.NODE_CAPACITY,
        max_depth=settings.spatial.MAX_DEPTH,
    )
    return LocationIngestService(
        LocationDirectory(index),
        default_range_km=settings.search.DEFAULT_RANGE_KM,
    )


# === LIFESPAN ===

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Жизненный цикл приложения."""
    setup_logging()

    app.state.location_service = build_service()
    app.state.started_at = time.monotonic()

    await log_info(
        f"Сервис запущен: capacity={settings.spatial.NODE_CAPACITY}, "
        f"max_depth={settings.spatial.MAX_DEPTH}"
    )

    yield

    await log_info("Сервис остановлен")


# === DEPENDENCIES ===

def get_service(request: Request) -> LocationIngestService:
    """Сервис, созданный в lifespan."""
    service = getattr(request.app.state, "location_service", None)
    if service is None:
        raise RuntimeError("Service not initialized")
    return service


# === APP ===

app = FastAPI(
    title="Proximity Service",
    description="Последние позиции пользователей и поиск соседей в радиусе.",
    version=settings.system.VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


@app.exception_handler(OutOfBoundsError)
async def out_of_bounds_handler(request: Request, exc: OutOfBoundsError) -> JSONResponse:
    """Точка вне мира — ошибка запроса, не сервиса."""
    body = ErrorResponse(
        error_code="out_of_bounds",
        message=str(exc),
        details={"latitude": exc.point.latitude, "longitude": exc.point.longitude},
    )
    return JSONResponse(status_code=400, content=body.model_dump())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Ошибка валидации тела запроса — 422.

    Входные значения приводятся к строке: NaN и Infinity не сериализуются в JSON.
    """
    errors = [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
            "input": str(error.get("input")),
        }
        for error in exc.errors()
    ]
    body = ErrorResponse(
        error_code="validation_error",
        message="Некорректный запрос",
        details={"errors": errors},
    )
    return JSONResponse(status_code=422, content=body.model_dump())


# === HEALTH CHECK ===

@app.get("/", tags=["Health"])
async def root() -> dict[str, str]:
    """Сервис запущен."""
    return {"message": "Server running!"}


@app.get("/health", response_model=HealthStatus, tags=["Health"])
async def health_check(request: Request) -> HealthStatus:
    """Проверка здоровья сервиса."""
    started_at = getattr(request.app.state, "started_at", None)
    return HealthStatus(
        status="healthy",
        service=SERVICE_NAME,
        version=settings.system.VERSION,
        uptime_seconds=round(time.monotonic() - started_at, 3) if started_at is not None else None,
    )


# === STATS ===

@app.get("/stats", response_model=StatsResponse, tags=["Stats"])
async def get_stats(service: LocationIngestService = Depends(get_service)) -> StatsResponse:
    """Получить статистику сервиса."""
    return StatsResponse(**await service.get_stats())


# === LOCATION ENDPOINTS ===

@app.post("/coordinates", tags=["Location"], summary="Обновить позицию")
async def update_coordinates(
    report: CoordinatesReport,
    service: LocationIngestService = Depends(get_service),
) -> dict[str, str]:
    """Обновить позицию пользователя."""
    await log_info(
        f"Получены координаты: {report.latitude}, {report.longitude}, {report.user_id}"
    )
    await service.update_location(report.user_id, report.latitude, report.longitude)
    return {"status": "Coordinates updated"}


@app.post(
    "/getNearbyCoordinates",
    response_model=list[NearbyUser],
    tags=["Location"],
    summary="Соседи пользователя",
)
async def get_nearby_coordinates(
    query: NearbyQuery,
    service: LocationIngestService = Depends(get_service),
) -> list[dict[str, Any]]:
    """
    Найти пользователей рядом с userID.

    range — в километрах, по умолчанию 25 метров.
    Неизвестный пользователь — пустой список.
    """
    if query.range is not None and query.range > settings.search.MAX_RANGE_KM:
        raise HTTPException(
            status_code=422,
            detail=f"range не может превышать {settings.search.MAX_RANGE_KM} км",
        )
    return await service.find_nearby(query.user_id, query.range)


@app.post(
    "/api/v1/location/batch",
    response_model=BatchReportResult,
    tags=["Location"],
    summary="Пакетное обновление",
)
async def update_coordinates_batch(
    batch: BatchCoordinatesReport,
    service: LocationIngestService = Depends(get_service),
) -> dict[str, Any]:
    """Пакетное обновление позиций."""
    return await service.update_locations_batch(batch.updates)


@app.get(
    "/api/v1/location/{user_id}",
    response_model=UserLocationResponse,
    responses={404: {"description": "Пользователь не найден"}},
    tags=["Location"],
    summary="Последняя позиция пользователя",
)
async def get_user_location(
    user_id: str,
    service: LocationIngestService = Depends(get_service),
) -> UserLocationResponse:
    """Получить последнюю известную позицию пользователя."""
    record = await service.get_user_location(user_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Пользователь не найден")

    return UserLocationResponse(
        id=str(record.id),
        lat=record.lat,
        lon=record.lon,
        last_updated=record.last_updated,
    )


@app.delete(
    "/api/v1/location/{user_id}",
    tags=["Location"],
    summary="Удалить пользователя из индекса",
)
async def remove_user(
    user_id: str,
    service: LocationIngestService = Depends(get_service),
) -> dict[str, str]:
    """
    Удалить пользователя из индекса.

    Неизвестный пользователь — не ошибка.
    """
    removed = await service.remove_user(user_id)
    return {"status": "removed" if removed else "not_found", "user_id": user_id}


# === STARTUP ===

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.deployment.HOST, port=settings.deployment.PORT)
