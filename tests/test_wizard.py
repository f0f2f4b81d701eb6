from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace

import pytest
from rich.console import Console
from telegram.error import Forbidden, NetworkError

from hookbridge import wizard
from hookbridge.errors import ConfigurationError
from hookbridge.wizard import SetupWizard, detect_chat_id, validate_token


class DummyBot:
    def __init__(
        self,
        updates: list[object] | None = None,
        fail: Exception | None = None,
        fail_send: Exception | None = None,
    ) -> None:
        self.updates = updates or []
        self.fail = fail
        self.fail_send = fail_send
        self.sent: list[str] = []

    async def __aenter__(self) -> DummyBot:
        return self

    async def __aexit__(self, *_exc: object) -> None:
        return None

    async def initialize(self) -> None:
        return None

    async def shutdown(self) -> None:
        return None

    async def get_updates(self, **_kwargs: object) -> list[object]:
        if self.fail is not None:
            raise self.fail
        return self.updates

    async def send_message(self, **kwargs: object) -> SimpleNamespace:
        if self.fail_send is not None:
            raise self.fail_send
        self.sent.append(str(kwargs["text"]))
        return SimpleNamespace(message_id=1)


def _answers(monkeypatch: pytest.MonkeyPatch, prompts: list[str], confirms: list[bool]) -> None:
    monkeypatch.setattr(wizard.Prompt, "ask", lambda *_a, **_k: prompts.pop(0))
    monkeypatch.setattr(wizard.Confirm, "ask", lambda *_a, **_k: confirms.pop(0))


def test_validate_token_requires_colon() -> None:
    assert validate_token(" 123:abc ") == "123:abc"
    with pytest.raises(ConfigurationError, match="Invalid token format"):
        validate_token("nocolon")


@pytest.mark.asyncio
async def test_detect_chat_id_uses_last_update() -> None:
    bot = DummyBot(
        updates=[SimpleNamespace(effective_chat=SimpleNamespace(id=1)), SimpleNamespace(effective_chat=SimpleNamespace(id=99))]
    )

    assert await detect_chat_id(bot) == "99"


@pytest.mark.asyncio
async def test_detect_chat_id_handles_errors_and_empty_results() -> None:
    assert await detect_chat_id(DummyBot()) is None
    assert await detect_chat_id(DummyBot(fail=NetworkError("offline"))) is None


@pytest.mark.asyncio
async def test_wizard_saves_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    bot = DummyBot(updates=[SimpleNamespace(effective_chat=SimpleNamespace(id=4242))])
    _answers(monkeypatch, ["123:abc", ""], [False])

    done = await SetupWizard(config_path, console=Console(quiet=True), bot=bot).run()

    assert done is True
    assert json.loads(config_path.read_text(encoding="utf-8")) == {"botToken": "123:abc", "chatId": "4242", "timeout": 3600}
    assert "Setup successful!" in bot.sent[0]


@pytest.mark.asyncio
async def test_wizard_falls_back_to_manual_chat_id(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    installed: list[bool] = []
    monkeypatch.setattr(wizard, "install_hooks", lambda: installed.append(True) or tmp_path / "settings.json")
    _answers(monkeypatch, ["123:abc", "", " 777 "], [True])

    done = await SetupWizard(config_path, console=Console(quiet=True), bot=DummyBot()).run()

    assert done is True
    assert json.loads(config_path.read_text(encoding="utf-8"))["chatId"] == "777"
    assert installed == [True]


@pytest.mark.asyncio
async def test_wizard_keeps_existing_config_unless_confirmed(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text("{}", encoding="utf-8")
    _answers(monkeypatch, [], [False])

    assert await SetupWizard(config_path, console=Console(quiet=True), bot=DummyBot()).run() is False
    assert config_path.read_text(encoding="utf-8") == "{}"


@pytest.mark.asyncio
async def test_wizard_failed_connection_raises_and_saves_nothing(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    config_path = tmp_path / "config.json"
    bot = DummyBot(
        updates=[SimpleNamespace(effective_chat=SimpleNamespace(id=4242))],
        fail_send=Forbidden("bot was blocked by the user"),
    )
    _answers(monkeypatch, ["123:abc", ""], [])

    with pytest.raises(ConfigurationError, match="Failed to connect"):
        await SetupWizard(config_path, console=Console(quiet=True), bot=bot).run()

    assert not config_path.exists()
