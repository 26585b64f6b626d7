"""
Tests for the translation registry.
"""
import json
from pathlib import Path

import pytest

from lakedrop.config.i18n import I18nManager, i18n_manager, t

CORE_DIR = Path(__file__).resolve().parent.parent / "src" / "lakedrop" / "config" / "i18n" / "core"


@pytest.fixture
def manager():
    manager = I18nManager()
    manager.add_translations("en", {"hello": "Hello", "rows": "{count} rows", "only_en": "English only"})
    manager.add_translations("zh", {"hello": "你好", "rows": "{count} 行"})
    return manager


def test_lookup_and_formatting(manager):
    assert manager.t("hello") == "Hello"
    assert manager.t("rows", count=3) == "3 rows"


def test_fallback_chain(manager):
    manager.set_language("zh")

    assert manager.t("hello") == "你好"
    assert manager.t("only_en") == "English only"
    assert manager.t("missing_key") == "missing_key"


def test_bad_format_arguments_keep_template(manager):
    assert manager.t("rows", total=3) == "{count} rows"


def test_unknown_language_is_refused(manager):
    assert not manager.set_language("fr")
    assert manager.get_current_language() == "en"


def test_observers(manager):
    calls = []
    manager.register_observer(lambda: calls.append(manager.get_current_language()))

    manager.set_language("zh")
    manager.set_language("zh")
    manager.set_language("en")

    assert calls == ["zh", "en"]


def test_register_core_directory(tmp_path):
    (tmp_path / "en.json").write_text(json.dumps({"lang_name": "English", "a": "A"}), encoding="utf-8")
    (tmp_path / "xx.json").write_text("[1, 2]", encoding="utf-8")
    manager = I18nManager()

    assert manager.register_core(tmp_path)
    assert not manager.register_core(tmp_path / "missing")
    assert manager.get_available_languages() == {"en": "English"}
    assert manager.t("a") == "A"


def test_bundled_languages_have_same_keys():
    english = json.loads((CORE_DIR / "en.json").read_text(encoding="utf-8"))
    chinese = json.loads((CORE_DIR / "zh.json").read_text(encoding="utf-8"))
    assert set(english) == set(chinese)


def test_global_manager_serves_bundled_text():
    assert t("no_file") == "No file loaded"
    assert t("rows_of_total", count="1,000", total="2,500") != "rows_of_total"
    assert set(i18n_manager.get_available_languages()) >= {"en", "zh"}
