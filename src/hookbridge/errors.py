"""Application-level exception types for hookbridge."""

from __future__ import annotations


class HookbridgeError(Exception):
    """Base exception for hookbridge."""


class ConfigurationError(HookbridgeError):
    """Raised when the persisted configuration is missing or invalid."""


class TransportError(HookbridgeError):
    """Raised when a single call to the messaging platform fails."""


class MalformedInputError(HookbridgeError):
    """Raised when hook input on stdin cannot be parsed."""
