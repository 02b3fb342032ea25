# tests/common/test_localization.py
"""
Тесты для модуля локализации.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from src.common.localization import (
    get_lang_dict_path,
    get_text,
    load_lang_dict,
)


@pytest.fixture(autouse=True)
def _clear_cache():
    """Сбрасывает кэш словаря до и после каждого теста."""
    load_lang_dict.cache_clear()
    yield
    load_lang_dict.cache_clear()


class TestLoadLangDict:
    """Тесты для функции load_lang_dict."""

    def test_path_in_config_directory(self) -> None:
        path = get_lang_dict_path()
        assert path.name == "lang_dict.json"
        assert path.parent.name == "config"

    def test_notification_keys_present(self) -> None:
        """Все тексты уведомлений переведены на pt и en."""
        lang_dict = load_lang_dict()

        for prefix in ("NOTIFY_ARRIVAL", "NOTIFY_ETA", "NOTIFY_OFFLINE"):
            for suffix in ("TITLE", "MESSAGE"):
                translations = lang_dict[f"{prefix}_{suffix}"]
                assert {"pt", "en"} <= set(translations)

    def test_raises_file_not_found(self, tmp_path: Path) -> None:
        """Проверяет исключение при отсутствии файла."""
        with patch("src.common.localization.get_lang_dict_path") as mock_path:
            mock_path.return_value = tmp_path / "nonexistent.json"

            with pytest.raises(FileNotFoundError):
                load_lang_dict()


class TestGetText:
    """Тесты для функции get_text."""

    def test_get_text_with_formatting(self, temp_lang_dict_file: Path) -> None:
        """Проверяет форматирование строки."""
        with patch("src.common.localization.get_lang_dict_path", return_value=temp_lang_dict_file):
            result = get_text("NOTIFY_ETA_MESSAGE", "pt", eta_minutes=12)

        assert result == "Chegada em aproximadamente 12 minutos"

    def test_get_text_other_language(self, temp_lang_dict_file: Path) -> None:
        with patch("src.common.localization.get_lang_dict_path", return_value=temp_lang_dict_file):
            assert get_text("NOTIFY_ETA_TITLE", "en") == "Arriving soon"

    def test_unknown_language_falls_back_to_portuguese(self, temp_lang_dict_file: Path) -> None:
        """Язык без перевода откатывается на pt."""
        with patch("src.common.localization.get_lang_dict_path", return_value=temp_lang_dict_file):
            assert get_text("NOTIFY_ETA_TITLE", "de") == "Chegando em breve"

    def test_first_translation_when_no_fallback(self, temp_lang_dict_file: Path) -> None:
        with patch("src.common.localization.get_lang_dict_path", return_value=temp_lang_dict_file):
            assert get_text("ONLY_EN", "pt") == "English only"

    def test_missing_key_returns_placeholder(self, temp_lang_dict_file: Path) -> None:
        """Проверяет возврат плейсхолдера при отсутствии ключа."""
        with patch("src.common.localization.get_lang_dict_path", return_value=temp_lang_dict_file):
            assert get_text("NONEXISTENT_KEY", "pt") == "[NONEXISTENT_KEY]"
            assert get_text("NONEXISTENT_KEY", "pt", default="padrão") == "padrão"

    def test_missing_format_key_keeps_placeholder(self, temp_lang_dict_file: Path) -> None:
        """Отсутствующий параметр форматирования оставляет строку как есть."""
        with patch("src.common.localization.get_lang_dict_path", return_value=temp_lang_dict_file):
            result = get_text("NOTIFY_ETA_MESSAGE", "pt", other=1)

        assert "{eta_minutes}" in result

    def test_real_dictionary_arrival_message(self) -> None:
        assert get_text("NOTIFY_ARRIVAL_MESSAGE", "pt", distance_m=120) == "Você está a 120m do destino"
