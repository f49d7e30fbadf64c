# src/shared/__init__.py
"""
Общий код сервиса.

Модули:
- models: DTO и Pydantic-модели HTTP-контракта
"""

__all__: list[str] = []
