# src/common/localization.py
"""
Модуль локализации текстов уведомлений.
Загружает переводы из config/lang_dict.json.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

# Язык, на который откатываемся при отсутствии перевода
FALLBACK_LANGUAGE = "pt"


def get_lang_dict_path() -> Path:
    """Возвращает путь к файлу локализации."""
    return Path(__file__).parent.parent.parent / "config" / "lang_dict.json"


@lru_cache()
def load_lang_dict() -> dict[str, dict[str, str]]:
    """
    Загружает словарь локализации из JSON файла.
    Кэширует результат.

    Returns:
        Словарь с переводами
    """
    lang_path = get_lang_dict_path()
    if not lang_path.exists():
        raise FileNotFoundError(f"Файл локализации не найден: {lang_path}")

    with open(lang_path, "r", encoding="utf-8") as f:
        return json.load(f)


def get_text(
    key: str,
    lang: str = FALLBACK_LANGUAGE,
    default: str | None = None,
    **kwargs: Any,
) -> str:
    """
    Получает локализованный текст по ключу.

    Args:
        key: Ключ перевода
        lang: Код языка (pt, en)
        default: Значение по умолчанию, если ключ не найден
        **kwargs: Параметры для форматирования строки

    Example:
        >>> get_text("NOTIFY_ETA_MESSAGE", "pt", eta_minutes=12)
        "Você deve chegar em aproximadamente 12 minutos"
    """
    try:
        lang_dict = load_lang_dict()
    except FileNotFoundError:
        return default or f"[{key}]"

    translations = lang_dict.get(key)
    if not translations:
        return default or f"[{key}]"

    text = translations.get(lang) or translations.get(FALLBACK_LANGUAGE)
    if not text:
        text = next(iter(translations.values()), f"[{key}]")

    if kwargs:
        try:
            text = text.format(**kwargs)
        except KeyError:
            pass  # Отсутствующие плейсхолдеры оставляем как есть

    return text
