#!/usr/bin/env python3
# main.py
"""
Главная точка входа сервиса геопоиска.

Запуск:
    python main.py            # сервис на порту из конфига
    python main.py --reload   # перезапуск при изменении кода (разработка)
"""

from __future__ import annotations

import sys

import uvicorn

from src.config import settings
from src.common.logger import setup_logging


def print_usage() -> None:
    """Выводит справку по запуску."""
    print(__doc__)


def main(reload: bool = False) -> None:
    """Запустить HTTP-сервис."""
    setup_logging()
    uvicorn.run(
        "src.services.realtime_location.app:app",
        host=settings.deployment.HOST,
        port=settings.deployment.PORT,
        reload=reload,
        log_level=settings.logging.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    args = [arg.lower() for arg in sys.argv[1:]]
    if "--help" in args or "-h" in args:
        print_usage()
        sys.exit(0)
    main(reload="--reload" in args)
