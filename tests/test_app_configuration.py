from pathlib import Path

import pytest

from modrelay.configuration.app_configuration import (
    DEFAULT_DURATION_SUGGESTIONS,
    DEFAULT_EMBED_COLOR,
    DEFAULT_LOCALE,
    AppConfig,
)


@pytest.fixture()
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "app_config.yml"


def test_app_config_reload_parses_yaml(config_path: Path, tmp_path: Path) -> None:
    config_path.write_text(
        "database:\n"
        f"  path: {tmp_path / 'relay.db'}\n"
        "localization:\n"
        "  default_locale: es-ES\n"
        "relay:\n"
        "  embed_color: \"#FF0000\"\n"
        "durations:\n"
        "  suggestions: [15m, 2h]\n",
        encoding="utf-8",
    )

    config = AppConfig(config_path)

    assert config.database_path == (tmp_path / "relay.db").resolve()
    assert config.default_locale == "es-ES"
    assert config.embed_color == 0xFF0000
    assert config.duration_suggestions == ["15m", "2h"]
    assert config.get("relay") == {"embed_color": "#FF0000"}


def test_app_config_missing_file_returns_defaults(tmp_path: Path) -> None:
    config = AppConfig(tmp_path / "does_not_exist.yml")

    assert config.data == {}
    assert config.default_locale == DEFAULT_LOCALE
    assert config.embed_color == DEFAULT_EMBED_COLOR
    assert config.duration_suggestions == DEFAULT_DURATION_SUGGESTIONS
    assert config.database_path.name == "modrelay.db"


def test_app_config_integer_color_and_bad_sections(config_path: Path) -> None:
    config_path.write_text(
        "relay:\n"
        "  embed_color: 255\n"
        "durations: not-a-mapping\n",
        encoding="utf-8",
    )

    config = AppConfig(config_path)

    assert config.embed_color == 255
    assert config.duration_suggestions == DEFAULT_DURATION_SUGGESTIONS


def test_app_config_invalid_hex_color_falls_back(config_path: Path) -> None:
    config_path.write_text("relay:\n  embed_color: \"#nothex\"\n", encoding="utf-8")

    assert AppConfig(config_path).embed_color == DEFAULT_EMBED_COLOR


def test_app_config_non_mapping_document(config_path: Path) -> None:
    config_path.write_text("- just\n- a list\n", encoding="utf-8")

    assert AppConfig(config_path).data == {}


def test_app_config_reload_reflects_changes(config_path: Path) -> None:
    config_path.write_text("localization:\n  default_locale: en-US\n", encoding="utf-8")
    config = AppConfig(config_path)

    config_path.write_text("localization:\n  default_locale: es-ES\n", encoding="utf-8")
    reloaded = config.reload()

    assert reloaded["localization"]["default_locale"] == "es-ES"
    assert config.default_locale == "es-ES"
