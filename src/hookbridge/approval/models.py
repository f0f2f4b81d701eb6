"""Value types exchanged between the gateway and the approval exchange."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Literal

APPROVE = "approve"
DENY = "deny"
SKIP = "skip"
REPLY = "reply"
CANCEL_SENTINEL = "/cancel"


@dataclass(frozen=True)
class Control:
    """One labeled button carrying an opaque activation token."""

    label: str
    token: str


Controls = tuple[tuple[Control, ...], ...]


@dataclass(frozen=True)
class MessageHandle:
    """Platform-assigned identifier of a sent message."""

    message_id: int


# Inbound updates


@dataclass(frozen=True)
class ButtonActivation:
    update_id: int
    message_id: int | None
    token: str
    query_id: str


@dataclass(frozen=True)
class TextMessage:
    update_id: int
    text: str


@dataclass(frozen=True)
class UnsupportedUpdate:
    """An update the exchange never acts on, kept so the cursor can move past it."""

    update_id: int


InboundUpdate = ButtonActivation | TextMessage | UnsupportedUpdate


# Outcomes


@dataclass(frozen=True)
class Approved:
    kind: ClassVar[Literal["approve"]] = "approve"


@dataclass(frozen=True)
class Denied:
    kind: ClassVar[Literal["deny"]] = "deny"


@dataclass(frozen=True)
class Skipped:
    kind: ClassVar[Literal["skip"]] = "skip"


@dataclass(frozen=True)
class Replied:
    text: str
    kind: ClassVar[Literal["text"]] = "text"


@dataclass(frozen=True)
class TimedOut:
    kind: ClassVar[Literal["timeout"]] = "timeout"


Outcome = Approved | Denied | Skipped | Replied | TimedOut


class WaitState(Enum):
    AWAITING_DECISION = "awaiting_decision"
    AWAITING_TEXT = "awaiting_text"


def approval_controls(include_reply: bool = True) -> Controls:
    """Build the standard Approve/Deny (+ Skip/Reply) grid."""
    rows = [(Control("Approve", APPROVE), Control("Deny", DENY))]
    if include_reply:
        rows.append((Control("Skip", SKIP), Control("Reply", REPLY)))
    return tuple(rows)
