"""Messaging platform gateways."""

from hookbridge.channels.telegram import TelegramConfig, TelegramGateway

__all__ = ["TelegramConfig", "TelegramGateway"]
