# src/common/logger.py
"""
Модуль структурированного логирования.
Поддерживает JSON и цветной текстовый формат, ротацию файлов по размеру.
"""

from __future__ import annotations

import inspect
import json
import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from src.common.constants import TypeMsg


DEFAULT_LOGGER_NAME = "proximity"

# Глобальный файловый хендлер (один для всех логгеров)
_GLOBAL_FILE_HANDLER: logging.Handler | None = None
# Глобальный хендлер ошибок
_GLOBAL_ERROR_HANDLER: logging.Handler | None = None

# Флаг инициализации (предотвращает повторную настройку)
_LOGGING_INITIALIZED: bool = False


# =============================================================================
# JSON FORMATTER
# =============================================================================

class JsonFormatter(logging.Formatter):
    """Форматтер для JSON логов."""

    def format(self, record: logging.LogRecord) -> str:
        """Форматирует запись лога в JSON."""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Добавляем дополнительные поля, если есть
        if hasattr(record, "extra_data"):
            log_data["extra"] = record.extra_data

        # Добавляем информацию об исключении
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class DateBasedRotatingFileHandler(RotatingFileHandler):
    """
    Хендлер для ротации логов.
    Пишет в фиксированный файл (например, proximity.log).
    При ротации переименовывает текущий файл, добавляя дату и время,
    и хранит не больше backup_count архивов.
    """

    def __init__(
        self,
        log_dir: str,
        max_bytes: int,
        logger_name: str = "app",
        backup_count: int = 5,
        encoding: str = "utf-8",
    ):
        """
        Args:
            log_dir: Директория для логов
            max_bytes: Максимальный размер файла в байтах
            logger_name: Имя логгера (используется в имени файла)
            backup_count: Сколько архивов хранить (0 — без ограничения)
            encoding: Кодировка файла
        """
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.logger_name = logger_name
        self.archive_limit = backup_count

        # Фиксированное имя файла
        filename = str(self.log_dir / f"{logger_name}.log")

        # Стандартную ротацию отключаем (backupCount=0), архивы ведём сами
        super().__init__(
            filename=filename,
            maxBytes=max_bytes,
            backupCount=0,
            encoding=encoding,
        )

    def shouldRollover(self, record: logging.LogRecord) -> bool:
        """
        Проверяет, нужна ли ротация.

        Ротация происходит только при превышении размера файла.
        """
        if self.maxBytes > 0:
            if self.stream is None:
                self.stream = self._open()
            self.stream.seek(0, 2)  # Переходим в конец файла
            if self.stream.tell() >= self.maxBytes:
                return True

        return False

    def doRollover(self) -> None:
        """
        Выполняет ротацию лог-файла.

        Переименовывает текущий файл в архивный и открывает новый.
        """
        if self.stream:
            self.stream.close()
            self.stream = None

        timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        archive_filename = self.log_dir / f"{self.logger_name}_{timestamp}.log"

        if os.path.exists(self.baseFilename):
            try:
                os.rename(self.baseFilename, archive_filename)
            except OSError:
                # Файл занят, продолжаем писать в текущий
                pass

        self._prune_archives()
        self.stream = self._open()

    def _prune_archives(self) -> None:
        """Удаляет самые старые архивы сверх лимита."""
        if self.archive_limit <= 0:
            return
        archives = sorted(self.log_dir.glob(f"{self.logger_name}_*.log"))
        for old in archives[:-self.archive_limit]:
            try:
                old.unlink()
            except OSError:
                pass


class ColoredFormatter(logging.Formatter):
    """Цветной форматтер для консоли (разработка)."""

    # ANSI коды цветов
    COLORS = {
        "DEBUG": "\033[36m",      # Cyan
        "INFO": "\033[32m",       # Green
        "WARNING": "\033[33m",    # Yellow
        "ERROR": "\033[31m",      # Red
        "CRITICAL": "\033[35m",   # Magenta
    }
    RESET = "\033[0m"
    GRAY = "\033[90m"  # Серый для информации о вызывающей функции

    def format(self, record: logging.LogRecord) -> str:
        """Форматирует запись лога с цветом."""
        color = self.COLORS.get(record.levelname, self.GRAY)
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

        # Формируем caller info, если есть
        caller_info = ""
        if hasattr(record, "extra_data") and record.extra_data:
            caller_func = record.extra_data.get("caller_function")
            caller_module = record.extra_data.get("caller_module")
            caller_file = record.extra_data.get("caller_file")
            caller_line = record.extra_data.get("caller_line")

            if caller_func:
                caller_info = f" {self.GRAY}[{caller_module}.{caller_func}() {caller_file}:{caller_line}]{self.RESET}"

        message = (
            f"{timestamp} {color}[{record.levelname}]{self.RESET}{caller_info} "
            f"{record.name}: {record.getMessage()}"
        )

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)

        return message


# =============================================================================
# ЛОГГЕР
# =============================================================================

_loggers: dict[str, logging.Logger] = {}


def setup_logging() -> None:
    """
    Инициализирует систему логирования.
    Вызывается при старте приложения для настройки основного логгера.
    Может безопасно вызываться многократно (идемпотентна).
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED:
        return

    _LOGGING_INITIALIZED = True

    get_logger(DEFAULT_LOGGER_NAME)

    # Уровень для сторонних библиотек
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _read_logging_settings() -> dict[str, Any]:
    """Настройки логирования из конфига (или значения по умолчанию)."""
    defaults: dict[str, Any] = {
        "level": "INFO",
        "format": "colored",
        "to_file": False,
        "file_path": "logs/app.log",
        "max_bytes": 10485760,
        "backup_count": 5,
    }
    # Ленивый импорт для избежания циклических зависимостей
    try:
        from src.config import settings
        cfg = settings.logging
    except Exception:
        return defaults

    # Защита от MagicMock в тестах
    if isinstance(cfg.LOG_LEVEL, str):
        defaults["level"] = cfg.LOG_LEVEL
    if isinstance(cfg.LOG_FORMAT, str):
        defaults["format"] = cfg.LOG_FORMAT
    if isinstance(cfg.LOG_TO_FILE, bool):
        defaults["to_file"] = cfg.LOG_TO_FILE
    if isinstance(cfg.LOG_FILE_PATH, str):
        defaults["file_path"] = cfg.LOG_FILE_PATH
    if isinstance(cfg.LOG_MAX_BYTES, int):
        defaults["max_bytes"] = cfg.LOG_MAX_BYTES
    if isinstance(cfg.LOG_BACKUP_COUNT, int):
        defaults["backup_count"] = cfg.LOG_BACKUP_COUNT
    return defaults


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """
    Возвращает настроенный логгер.
    Использует кэширование для избежания дублирования хендлеров.

    Args:
        name: Имя логгера

    Returns:
        Настроенный логгер
    """
    if name in _loggers:
        return _loggers[name]

    cfg = _read_logging_settings()

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, cfg["level"].upper(), logging.INFO))

    # Не добавляем хендлеры повторно
    if logger.handlers:
        _loggers[name] = logger
        return logger

    formatter: logging.Formatter = JsonFormatter() if cfg["format"] == "json" else ColoredFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if cfg["to_file"]:
        global _GLOBAL_FILE_HANDLER, _GLOBAL_ERROR_HANDLER
        log_path = Path(cfg["file_path"])
        log_dir = log_path.parent

        if _GLOBAL_FILE_HANDLER is None:
            _GLOBAL_FILE_HANDLER = DateBasedRotatingFileHandler(
                log_dir=str(log_dir),
                max_bytes=cfg["max_bytes"],
                logger_name=log_path.stem,
                backup_count=cfg["backup_count"],
            )
            _GLOBAL_FILE_HANDLER.setFormatter(formatter)
        logger.addHandler(_GLOBAL_FILE_HANDLER)

        # Отдельный файл для ошибок
        if _GLOBAL_ERROR_HANDLER is None:
            _GLOBAL_ERROR_HANDLER = DateBasedRotatingFileHandler(
                log_dir=str(log_dir),
                max_bytes=cfg["max_bytes"],
                logger_name="error",
                backup_count=cfg["backup_count"],
            )
            _GLOBAL_ERROR_HANDLER.setLevel(logging.ERROR)
            _GLOBAL_ERROR_HANDLER.setFormatter(formatter)
        logger.addHandler(_GLOBAL_ERROR_HANDLER)

    # Предотвращаем дублирование логов в родительских логгерах
    logger.propagate = False

    _loggers[name] = logger
    return logger


# =============================================================================
# ВСПОМОГАТЕЛЬНЫЕ ФУНКЦИИ ЛОГИРОВАНИЯ
# =============================================================================

def _get_caller_info() -> dict[str, Any]:
    """
    Получает информацию о вызывающей функции.

    Returns:
        Словарь с информацией о вызывающей функции:
        - caller_function: Имя функции, вызвавшей логирование
        - caller_module: Модуль вызывающей функции
        - caller_file: Файл вызывающей функции
        - caller_line: Номер строки вызова
    """
    frame = None
    caller_frame = None
    try:
        # [0] - _get_caller_info, [1] - log_info/log_error, [2] - вызывающий код
        frame = inspect.currentframe()
        if frame is None:
            return {}

        caller_frame = frame.f_back
        if caller_frame:
            caller_frame = caller_frame.f_back

        if caller_frame is None:
            return {}

        frame_info = inspect.getframeinfo(caller_frame)
        caller_module = inspect.getmodule(caller_frame)

        return {
            "caller_function": caller_frame.f_code.co_name,
            "caller_module": caller_module.__name__ if caller_module else "unknown",
            "caller_file": Path(frame_info.filename).name if frame_info.filename else "unknown",
            "caller_line": frame_info.lineno,
        }
    except Exception:
        return {}
    finally:
        # Освобождаем ссылки на фреймы для избежания утечек памяти
        del frame
        del caller_frame


async def log_info(
    message: str,
    *,
    type_msg: TypeMsg = TypeMsg.INFO,
    logger_name: str = DEFAULT_LOGGER_NAME,
    extra: dict[str, Any] | None = None,
) -> None:
    """
    Асинхронная функция логирования (INFO уровень).

    Args:
        message: Сообщение для логирования
        type_msg: Уровень сообщения
        logger_name: Имя логгера
        extra: Дополнительные данные
    """
    logger = get_logger(logger_name)

    caller_info = _get_caller_info()
    record_extra = {"extra_data": {**caller_info, **(extra or {})}}

    match type_msg:
        case TypeMsg.DEBUG:
            logger.debug(message, extra=record_extra)
        case TypeMsg.INFO:
            logger.info(message, extra=record_extra)
        case TypeMsg.WARNING:
            logger.warning(message, extra=record_extra)
        case TypeMsg.ERROR:
            logger.error(message, extra=record_extra)
        case TypeMsg.CRITICAL:
            logger.critical(message, extra=record_extra)
        case _:
            logger.info(message, extra=record_extra)


async def log_debug(
    message: str,
    logger_name: str = DEFAULT_LOGGER_NAME,
    extra: dict[str, Any] | None = None,
) -> None:
    """Логирование DEBUG уровня."""
    await log_info(message, type_msg=TypeMsg.DEBUG, logger_name=logger_name, extra=extra)


async def log_warning(
    message: str,
    logger_name: str = DEFAULT_LOGGER_NAME,
    extra: dict[str, Any] | None = None,
) -> None:
    """Логирование WARNING уровня."""
    await log_info(message, type_msg=TypeMsg.WARNING, logger_name=logger_name, extra=extra)


async def log_error(
    message: str,
    logger_name: str = DEFAULT_LOGGER_NAME,
    extra: dict[str, Any] | None = None,
    exc_info: bool = False,
) -> None:
    """
    Логирование ERROR уровня.

    Args:
        message: Сообщение об ошибке
        logger_name: Имя логгера
        extra: Дополнительные данные
        exc_info: Включать ли трейсбек исключения
    """
    logger = get_logger(logger_name)

    caller_info = _get_caller_info()
    record_extra = {"extra_data": {**caller_info, **(extra or {})}}

    logger.error(message, extra=record_extra, exc_info=exc_info)
