"""Interactive first-run setup."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.rule import Rule
from telegram import Bot
from telegram.error import TelegramError

from hookbridge.channels.telegram import TelegramConfig, TelegramGateway
from hookbridge.config import DEFAULT_TIMEOUT_SECONDS, StoredConfig, config_exists, save_config
from hookbridge.errors import ConfigurationError, TransportError
from hookbridge.install import install_hooks

TOTAL_STEPS = 4

BOT_INSTRUCTIONS = """To create a Telegram bot:
1. Open Telegram and search for @BotFather
2. Send /newbot command
3. Choose a name (e.g., "Claude Code Notifier")
4. Choose a username (must end in 'bot', e.g., "my_claude_notifier_bot")
5. Copy the token provided"""

CHAT_INSTRUCTIONS = """To get your Chat ID:
1. Open a chat with your new bot in Telegram
2. Send any message to the bot (e.g., "hello")
3. Press Enter here after sending the message"""


def validate_token(token: str) -> str:
    token = token.strip()
    if ":" not in token:
        raise ConfigurationError("Invalid token format. Should be like: 123456789:ABCdefGHIjklMNOpqrsTUVwxyz")
    return token


async def detect_chat_id(bot: Any) -> str | None:
    """Return the chat of the most recent update the bot has seen."""
    try:
        updates = await bot.get_updates()
    except TelegramError as exc:
        logger.warning("wizard.detect_chat_id.error error={}", exc)
        return None
    if not updates:
        return None
    chat = updates[-1].effective_chat
    if chat is None:
        return None
    return str(chat.id)


class SetupWizard:
    def __init__(self, config_path: Path, console: Console | None = None, bot: Any | None = None) -> None:
        self._config_path = config_path
        self._console = console or Console()
        self._bot = bot

    def _step(self, step: int, message: str) -> None:
        self._console.print()
        self._console.print(Rule(f"[{step}/{TOTAL_STEPS}] {message}", align="left"))

    async def run(self) -> bool:
        """Return False when the user keeps the existing config.

        Raises:
            ConfigurationError: on a malformed token or a failed connection test.
        """
        self._console.print(Panel.fit("Claude Code Telegram Notifier - Setup", style="bold blue"))

        if config_exists(self._config_path) and not Confirm.ask(
            "Configuration already exists. Reconfigure?", default=False, console=self._console
        ):
            self._console.print("Setup cancelled.")
            return False

        self._step(1, "Create Telegram Bot")
        self._console.print(BOT_INSTRUCTIONS)
        token = validate_token(Prompt.ask("Paste your bot token", console=self._console))

        self._step(2, "Get Chat ID")
        chat_id = await self._chat_id(token)

        self._step(3, "Test Connection")
        config = TelegramConfig(token=token, chat_id=chat_id, timeout=DEFAULT_TIMEOUT_SECONDS)
        if not await self._test_connection(config):
            raise ConfigurationError("Failed to connect. Please check your token and chat ID.")
        self._console.print("[green]Connection successful![/green]")

        self._step(4, "Save Configuration")
        path = save_config(
            StoredConfig(bot_token=token, chat_id=chat_id, timeout=DEFAULT_TIMEOUT_SECONDS),
            self._config_path,
        )
        self._console.print(f"Config saved to: {path}")

        if Confirm.ask("Install Claude Code hooks automatically?", default=True, console=self._console):
            try:
                settings_path = install_hooks()
            except (OSError, ValueError) as exc:
                self._console.print(f"[red]Failed to install hooks: {exc}[/red]")
            else:
                self._console.print(f"Hooks installed in: {settings_path}")

        self._console.print(
            Panel.fit(
                "Setup Complete!\n\n"
                "To test manually:  hookbridge --test\n"
                "To reconfigure:    hookbridge --setup\n"
                "To uninstall:      hookbridge --uninstall",
                style="green",
            )
        )
        return True

    async def _chat_id(self, token: str) -> str:
        self._console.print(CHAT_INSTRUCTIONS)
        Prompt.ask("Press Enter after sending a message to your bot", default="", show_default=False, console=self._console)
        self._console.print("Fetching chat ID...")

        bot = self._bot or Bot(token)
        try:
            async with bot:
                chat_id = await detect_chat_id(bot)
        except TelegramError as exc:
            logger.warning("wizard.bot.error error={}", exc)
            chat_id = None
        if chat_id:
            self._console.print(f"Found chat ID: {chat_id}")
            return chat_id
        self._console.print("Couldn't detect chat ID automatically.")
        return Prompt.ask("Enter your chat ID manually", console=self._console).strip()

    async def _test_connection(self, config: TelegramConfig) -> bool:
        self._console.print("Testing connection...")
        try:
            async with TelegramGateway(config, bot=self._bot) as gateway:
                await gateway.send_notification(
                    "<b>Claude Code Telegram</b>\n\nSetup successful! You will receive notifications here."
                )
        except TransportError as exc:
            self._console.print(f"[red]Failed to send test message: {exc}[/red]")
            return False
        return True
