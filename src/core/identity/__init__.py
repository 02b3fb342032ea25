# src/core/identity/__init__.py
"""
Идентификация вызывающего пользователя через внешний провайдер.
"""

from src.core.identity.service import IdentityResolver

__all__ = [
    "IdentityResolver",
]
