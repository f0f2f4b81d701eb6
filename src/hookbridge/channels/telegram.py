"""Telegram messaging gateway."""

from __future__ import annotations

from dataclasses import dataclass
from types import TracebackType
from typing import Any

from loguru import logger
from telegram import Bot, InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.constants import ParseMode
from telegram.error import TelegramError

from hookbridge.approval.models import (
    ButtonActivation,
    Controls,
    InboundUpdate,
    MessageHandle,
    TextMessage,
    UnsupportedUpdate,
    approval_controls,
)
from hookbridge.errors import TransportError

ALLOWED_UPDATES = ["message", "callback_query"]


@dataclass(frozen=True)
class TelegramConfig:
    """Telegram gateway config."""

    token: str
    chat_id: str
    timeout: int = 3600


def to_markup(controls: Controls | None) -> InlineKeyboardMarkup | None:
    if controls is None:
        return None
    return InlineKeyboardMarkup(
        [[InlineKeyboardButton(control.label, callback_data=control.token) for control in row] for row in controls]
    )


def to_inbound(update: Update) -> InboundUpdate:
    query = update.callback_query
    if query is not None and query.data is not None:
        message_id = query.message.message_id if query.message is not None else None
        return ButtonActivation(
            update_id=update.update_id,
            message_id=message_id,
            token=str(query.data),
            query_id=query.id,
        )
    message = update.message
    if message is not None and message.text is not None:
        return TextMessage(update_id=update.update_id, text=message.text)
    return UnsupportedUpdate(update_id=update.update_id)


class TelegramGateway:
    """Stateless wrapper around the Telegram Bot API.

    Every call is single-shot. Any ``TelegramError`` is re-raised as
    ``TransportError``; retrying is left to the caller.
    """

    def __init__(self, config: TelegramConfig, bot: Any | None = None) -> None:
        self._config = config
        self._bot = bot if bot is not None else Bot(config.token)

    async def __aenter__(self) -> TelegramGateway:
        try:
            await self._bot.initialize()
        except TelegramError as exc:
            raise TransportError(f"Telegram API error: {exc.message}") from exc
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            await self._bot.shutdown()
        except TelegramError:
            logger.exception("telegram.gateway.shutdown.error")

    async def send(self, text: str, controls: Controls | None = None) -> MessageHandle:
        try:
            message = await self._bot.send_message(
                chat_id=self._config.chat_id,
                text=text,
                parse_mode=ParseMode.HTML,
                reply_markup=to_markup(controls),
            )
        except TelegramError as exc:
            raise TransportError(f"Telegram API error: {exc.message}") from exc
        logger.debug("telegram.gateway.sent message_id={}", message.message_id)
        return MessageHandle(message.message_id)

    async def edit_controls(self, handle: MessageHandle, controls: Controls | None = None) -> None:
        try:
            await self._bot.edit_message_reply_markup(
                chat_id=self._config.chat_id,
                message_id=handle.message_id,
                reply_markup=to_markup(controls),
            )
        except TelegramError as exc:
            raise TransportError(f"Telegram API error: {exc.message}") from exc

    async def acknowledge(self, query_id: str, text: str | None = None) -> None:
        try:
            await self._bot.answer_callback_query(callback_query_id=query_id, text=text)
        except TelegramError as exc:
            raise TransportError(f"Telegram API error: {exc.message}") from exc

    async def poll(self, cursor: int, wait_seconds: int) -> list[InboundUpdate]:
        """Long-poll for updates at or after ``cursor``.

        A cursor of 0 means no offset has been confirmed yet. An empty list is
        a plain timeout, not an error.
        """
        try:
            updates = await self._bot.get_updates(
                offset=cursor or None,
                timeout=wait_seconds,
                allowed_updates=ALLOWED_UPDATES,
            )
        except TelegramError as exc:
            raise TransportError(f"Telegram API error: {exc.message}") from exc
        return [to_inbound(update) for update in updates]

    async def verify(self) -> bool:
        try:
            me = await self._bot.get_me()
        except Exception:
            logger.debug("telegram.gateway.verify.failed")
            return False
        return bool(me.username)

    async def send_notification(self, text: str) -> MessageHandle:
        return await self.send(text)

    async def send_approval_prompt(self, text: str, include_reply: bool = True) -> MessageHandle:
        return await self.send(text, approval_controls(include_reply))
