from __future__ import annotations

import json
from pathlib import Path

import pytest

from hookbridge.config import Settings, StoredConfig, config_exists, load_config, save_config
from hookbridge.errors import ConfigurationError


def test_save_and_load_roundtrip(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "config.json"

    save_config(StoredConfig(bot_token="123:abc", chat_id="42", timeout=120), path)  # noqa: S106
    config = load_config(path)

    assert json.loads(path.read_text(encoding="utf-8")) == {"botToken": "123:abc", "chatId": "42", "timeout": 120}
    assert (config.token, config.chat_id, config.timeout) == ("123:abc", "42", 120)


def test_missing_file_raises_configuration_error(tmp_path: Path) -> None:
    path = tmp_path / "config.json"

    assert not config_exists(path)
    with pytest.raises(ConfigurationError, match="Config not found"):
        load_config(path)


def test_missing_fields_raise_configuration_error(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"botToken": "123:abc"}), encoding="utf-8")

    with pytest.raises(ConfigurationError, match="missing botToken or chatId"):
        load_config(path)


def test_invalid_json_raises_configuration_error(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="Invalid config"):
        load_config(path)


def test_default_timeout_when_not_specified(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"botToken": "123:abc", "chatId": "42"}), encoding="utf-8")

    assert load_config(path).timeout == 3600


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOOKBRIDGE_CONFIG_DIR", str(tmp_path))
    monkeypatch.setenv("HOOKBRIDGE_POLL_SLICE_SECONDS", "2")

    settings = Settings()

    assert settings.config_path == tmp_path / "config.json"
    assert settings.poll_slice_seconds == 2
    assert settings.log_level == "WARNING"
