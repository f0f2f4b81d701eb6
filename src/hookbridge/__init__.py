"""hookbridge - approve agent hook prompts from Telegram."""

__version__ = "1.0.0"
