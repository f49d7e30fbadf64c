# tests/conftest.py
"""
Общие фикстуры и настройки для тестов.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Generator

import pytest

# Устанавливаем переменные окружения перед импортом модулей
os.environ.setdefault("ENVIRONMENT", "test")

from src.core.directory.service import LocationDirectory
from src.core.geo.models import Point
from src.core.spatial.index import SpatialIndex
from src.services.realtime_location.service import LocationIngestService


# =============================================================================
# ФИКСТУРЫ КОНФИГУРАЦИИ
# =============================================================================

@pytest.fixture(scope="session")
def project_root() -> Path:
    """Корневая директория проекта."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def config_path(project_root: Path) -> Path:
    """Путь к файлу конфигурации."""
    return project_root / "config" / "config.json"


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Мок конфигурации для тестов."""
    return {
        "_comment": "test config",
        "PROJECT_NAME": "proximity_test",
        "VERSION": "1.0.0-test",
        "DEBUG": True,
        "LOG_LEVEL": "DEBUG",
        "ENVIRONMENT": "test",
        "HOST": "127.0.0.1",
        "PORT": 3100,
        "LOG_TO_FILE": False,
        "LOG_FILE_PATH": "logs/test.log",
        "LOG_FORMAT": "json",
        "LOG_MAX_BYTES": 1024,
        "LOG_BACKUP_COUNT": 2,
        "NODE_CAPACITY": 4,
        "MAX_DEPTH": 10,
        "DEFAULT_RANGE_KM": 0.5,
        "MAX_RANGE_KM": 1000.0,
    }


# =============================================================================
# ФИКСТУРЫ ГЕОМЕТРИИ
# =============================================================================

@pytest.fixture
def point_a() -> Point:
    """Точка A (Нью-Йорк)."""
    return Point(40.0, -73.0)


@pytest.fixture
def point_b() -> Point:
    """Точка B — примерно в 14 метрах от A."""
    return Point(40.0001, -73.0001)


@pytest.fixture
def point_c() -> Point:
    """Точка C — примерно в 140 км от A."""
    return Point(41.0, -74.0)


# =============================================================================
# ФИКСТУРЫ ЯДРА
# =============================================================================

@pytest.fixture
def fixed_now() -> datetime:
    """Фиксированный момент времени."""
    return datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock(fixed_now: datetime) -> Callable[[], datetime]:
    """Часы, всегда возвращающие fixed_now."""
    return lambda: fixed_now


@pytest.fixture
def spatial_index() -> SpatialIndex:
    """Пустой индекс на весь мир с параметрами по умолчанию."""
    return SpatialIndex()


@pytest.fixture
def small_index() -> SpatialIndex:
    """Индекс с маленькой ёмкостью листа (деление происходит сразу)."""
    return SpatialIndex(capacity=1, max_depth=6)


@pytest.fixture
def directory(fixed_clock: Callable[[], datetime]) -> LocationDirectory:
    """Пустой справочник."""
    return LocationDirectory(clock=fixed_clock)


@pytest.fixture
def abc_directory(
    directory: LocationDirectory,
    point_a: Point,
    point_b: Point,
    point_c: Point,
) -> LocationDirectory:
    """Справочник с пользователями A, B, C."""
    directory.report("A", point_a)
    directory.report("B", point_b)
    directory.report("C", point_c)
    return directory


# =============================================================================
# ФИКСТУРЫ СЕРВИСОВ
# =============================================================================

@pytest.fixture
def location_service(directory: LocationDirectory) -> LocationIngestService:
    """Сервис приёма координат поверх пустого справочника."""
    return LocationIngestService(directory, default_range_km=0.025)


@pytest.fixture
def client() -> Generator[Any, None, None]:
    """
    HTTP-клиент приложения.
    Контекстный менеджер запускает lifespan: у каждого теста свой справочник.
    """
    from fastapi.testclient import TestClient

    from src.services.realtime_location.app import app

    with TestClient(app) as test_client:
        yield test_client


# =============================================================================
# ВРЕМЕННЫЕ ФАЙЛЫ
# =============================================================================

@pytest.fixture
def temp_config_file(tmp_path: Path, mock_config: dict[str, Any]) -> Path:
    """Временный файл конфигурации."""
    import json

    config_dir = tmp_path / "config"
    config_dir.mkdir()
    config_file = config_dir / "config.json"
    config_file.write_text(json.dumps(mock_config, ensure_ascii=False), encoding="utf-8")
    return config_file
