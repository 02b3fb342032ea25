# src/config/__init__.py
"""
Конфигурация freight core.
Экспортирует синглтон настроек и загрузчик.
"""

from src.config.loader import Settings, get_project_root, get_settings, settings

__all__ = ["Settings", "get_project_root", "get_settings", "settings"]
