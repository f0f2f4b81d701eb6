from hookbridge.approval.exchange import ApprovalExchange
from hookbridge.approval.models import (
    Approved,
    ButtonActivation,
    Denied,
    InboundUpdate,
    MessageHandle,
    Outcome,
    Replied,
    Skipped,
    TextMessage,
    TimedOut,
    UnsupportedUpdate,
    WaitState,
    approval_controls,
)

__all__ = [
    "ApprovalExchange",
    "Approved",
    "ButtonActivation",
    "Denied",
    "InboundUpdate",
    "MessageHandle",
    "Outcome",
    "Replied",
    "Skipped",
    "TextMessage",
    "TimedOut",
    "UnsupportedUpdate",
    "WaitState",
    "approval_controls",
]
