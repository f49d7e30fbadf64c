# src/services/__init__.py
"""
HTTP-сервисы приложения.

Сервисы:
- realtime_location: приём координат пользователей и поиск соседей
"""

__all__: list[str] = []
