#!/usr/bin/env python3
"""
Entrypoint для сервиса геопоиска.

Запуск:
    python entrypoint_realtime_location.py

Порт по умолчанию: 3000 (PROXIMITY_PORT)
"""

import sys
from pathlib import Path

# Добавляем корневую директорию проекта в путь
project_root = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(project_root))

import uvicorn

from src.config import settings


def main() -> None:
    """Запустить сервис геопоиска."""
    uvicorn.run(
        "src.services.realtime_location.app:app",
        host=settings.deployment.HOST,
        port=settings.deployment.PORT,
        reload=settings.system.DEBUG,
        log_level=settings.logging.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
