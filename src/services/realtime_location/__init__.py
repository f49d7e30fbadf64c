# src/services/realtime_location/__init__.py
"""
Realtime Location — сервис приёма координат пользователей.

Обеспечивает:
- Приём координат (HTTP)
- Хранение последней позиции в справочнике
- Поиск соседей через пространственный индекс
"""
