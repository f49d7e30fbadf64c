# src/config/loader.py
"""
Загрузчик конфигурации проекта.
Единственный источник истины — config/config.json.
Параметры развертывания переопределяются из переменных окружения.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.common.constants import DEFAULT_SEARCH_RANGE_KM


# =============================================================================
# ОПРЕДЕЛЕНИЕ ПУТЕЙ
# =============================================================================

def get_project_root() -> Path:
    """Возвращает корневую директорию проекта."""
    return Path(__file__).parent.parent.parent


def get_config_path() -> Path:
    """Возвращает путь к файлу конфигурации."""
    return get_project_root() / "config" / "config.json"


def load_config_json() -> dict[str, Any]:
    """Загружает config.json и возвращает словарь."""
    config_path = get_config_path()
    if not config_path.exists():
        raise FileNotFoundError(f"Файл конфигурации не найден: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        return json.load(f)


# =============================================================================
# PYDANTIC МОДЕЛИ КОНФИГУРАЦИИ
# =============================================================================

class SystemSettings(BaseModel):
    """Системные настройки."""
    PROJECT_NAME: str = "proximity_service"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"


class DeploymentSettings(BaseModel):
    """Настройки развертывания HTTP-сервиса."""
    HOST: str = "0.0.0.0"
    PORT: int = Field(default=3000, ge=1, le=65535)


class LoggingSettings(BaseModel):
    """Настройки логирования."""
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False
    LOG_FILE_PATH: str = "logs/app.log"
    LOG_FORMAT: str = "colored"
    LOG_MAX_BYTES: int = 10485760
    LOG_BACKUP_COUNT: int = 5

    @field_validator("LOG_FORMAT")
    @classmethod
    def check_format(cls, v: str) -> str:
        """Допустимы только colored и json."""
        if v not in ("colored", "json"):
            raise ValueError(f"Неизвестный формат логов: {v}")
        return v


class SpatialIndexSettings(BaseModel):
    """Параметры квадродерева."""
    NODE_CAPACITY: int = Field(default=8, ge=1)
    MAX_DEPTH: int = Field(default=20, ge=0)


class SearchSettings(BaseModel):
    """Настройки поиска соседей."""
    DEFAULT_RANGE_KM: float = Field(default=DEFAULT_SEARCH_RANGE_KM, gt=0)
    MAX_RANGE_KM: float = Field(default=20016.0, gt=0)


# =============================================================================
# ГЛАВНЫЙ КЛАСС НАСТРОЕК
# =============================================================================

class Settings(BaseSettings):
    """
    Главный класс настроек приложения.
    Агрегирует все секции конфигурации.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    system: SystemSettings = Field(default_factory=SystemSettings)
    deployment: DeploymentSettings = Field(default_factory=DeploymentSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    spatial: SpatialIndexSettings = Field(default_factory=SpatialIndexSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)

    @classmethod
    def from_config_json(cls) -> "Settings":
        """
        Создаёт объект Settings из config.json.
        Параметры развертывания переопределяются из переменных окружения.
        """
        data = load_config_json()
        # Ключи-комментарии вида "_comment" пропускаем
        filtered_data = {k: v for k, v in data.items() if not k.startswith("_")}

        log_level = os.getenv("LOG_LEVEL", filtered_data.get("LOG_LEVEL", "INFO"))

        return cls(
            system=SystemSettings(
                PROJECT_NAME=filtered_data.get("PROJECT_NAME", "proximity_service"),
                VERSION=filtered_data.get("VERSION", "1.0.0"),
                DEBUG=filtered_data.get("DEBUG", False),
                LOG_LEVEL=log_level,
                ENVIRONMENT=os.getenv("ENVIRONMENT", filtered_data.get("ENVIRONMENT", "development")),
            ),
            deployment=DeploymentSettings(
                HOST=os.getenv("PROXIMITY_HOST", filtered_data.get("HOST", "0.0.0.0")),
                PORT=int(os.getenv("PROXIMITY_PORT", filtered_data.get("PORT", 3000))),
            ),
            logging=LoggingSettings(
                LOG_LEVEL=log_level,
                LOG_TO_FILE=filtered_data.get("LOG_TO_FILE", False),
                LOG_FILE_PATH=filtered_data.get("LOG_FILE_PATH", "logs/app.log"),
                LOG_FORMAT=filtered_data.get("LOG_FORMAT", "colored"),
                LOG_MAX_BYTES=filtered_data.get("LOG_MAX_BYTES", 10485760),
                LOG_BACKUP_COUNT=filtered_data.get("LOG_BACKUP_COUNT", 5),
            ),
            spatial=SpatialIndexSettings(
                NODE_CAPACITY=filtered_data.get("NODE_CAPACITY", 8),
                MAX_DEPTH=filtered_data.get("MAX_DEPTH", 20),
            ),
            search=SearchSettings(
                DEFAULT_RANGE_KM=float(os.getenv("DEFAULT_RANGE_KM", filtered_data.get("DEFAULT_RANGE_KM", DEFAULT_SEARCH_RANGE_KM))),
                MAX_RANGE_KM=filtered_data.get("MAX_RANGE_KM", 20016.0),
            ),
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Возвращает синглтон настроек приложения.
    Использует кэширование для производительности.
    """
    from dotenv import load_dotenv
    # Загружаем .env файл
    env_path = get_project_root() / ".env"
    if env_path.exists():
        load_dotenv(env_path)
    return Settings.from_config_json()


# Экспорт синглтона для удобного импорта
settings = get_settings()
