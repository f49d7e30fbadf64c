# src/core/directory/__init__.py
"""
Справочник позиций пользователей.
"""

from src.core.directory.service import LocationDirectory

__all__ = [
    "LocationDirectory",
]
