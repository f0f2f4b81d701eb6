"""Hook input parsing and dispatch to the approval exchange."""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator

from hookbridge.approval.models import Approved, Denied, MessageHandle, Outcome, Replied, Skipped, TimedOut
from hookbridge.errors import MalformedInputError
from hookbridge.formatting import NotificationContext, format_notification

PERMISSION_PROMPT = "permission_prompt"

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_BLOCKED = 2

BranchLookup = Callable[[str | Path], str | None]


class HookInput(BaseModel):
    """JSON object the hook caller writes to stdin.

    Only the fields the notice is built from are read. Anything else, whatever
    its shape, is ignored.
    """

    model_config = ConfigDict(extra="ignore")

    session_id: str | None = None
    cwd: str | None = None
    message: str | None = None
    notification_type: str | None = None
    tool_name: str | None = None

    @field_validator("session_id", "cwd", "message", "notification_type", "tool_name", mode="before")
    @classmethod
    def _text_or_none(cls, value: Any) -> str | None:
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return None


class HookOutput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    system_message: str | None = Field(default=None, alias="systemMessage")

    def render(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


@dataclass(frozen=True)
class HookResult:
    exit_code: int
    stdout: str | None = None
    stderr: str | None = None


class NotifyingGateway(Protocol):
    async def send_notification(self, text: str) -> MessageHandle: ...

    async def send_approval_prompt(self, text: str, include_reply: bool = True) -> MessageHandle: ...


class Waiter(Protocol):
    async def wait_for_response(self, handle: MessageHandle, timeout: float | None = None) -> Outcome: ...


def decode_hook_input(raw: str) -> HookInput:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise MalformedInputError(f"hook input is not valid JSON: {exc.msg}") from exc
    if not isinstance(data, dict):
        raise MalformedInputError("hook input must be a JSON object")
    return HookInput.model_validate(data)


def parse_hook_input(raw: str | None) -> HookInput | None:
    """Parse stdin; anything unusable means "no structured input"."""
    if raw is None or not raw.strip():
        return None
    try:
        return decode_hook_input(raw)
    except MalformedInputError as exc:
        logger.debug("hook.input.malformed error={}", exc)
        return None


def resolve_exit(outcome: Outcome) -> HookResult:
    if isinstance(outcome, (Approved, Skipped)):
        return HookResult(EXIT_OK)
    if isinstance(outcome, Replied):
        output = HookOutput(system_message=f"User response via Telegram: {outcome.text}")
        return HookResult(EXIT_OK, stdout=output.render())
    if isinstance(outcome, Denied):
        return HookResult(EXIT_BLOCKED, stderr="User denied this action via Telegram.")
    if isinstance(outcome, TimedOut):
        return HookResult(EXIT_BLOCKED, stderr="Timeout waiting for response via Telegram. Action denied for safety.")
    return HookResult(EXIT_ERROR, stderr="Unexpected response type")


def _project_context(cwd: str | Path, branch_lookup: BranchLookup) -> tuple[str, str | None]:
    return Path(cwd).name, branch_lookup(cwd)


async def handle_stop(gateway: NotifyingGateway, cwd: str | Path, branch_lookup: BranchLookup) -> HookResult:
    project_name, branch = _project_context(cwd, branch_lookup)
    context = NotificationContext(
        project_name=project_name,
        git_branch=branch,
        event_type="Task Completed",
        message="Claude has finished and is waiting for your next instruction.",
    )
    await gateway.send_notification(format_notification(context))
    return HookResult(EXIT_OK)


async def handle_notification(
    gateway: NotifyingGateway,
    waiter: Waiter,
    hook_input: HookInput,
    cwd: str | Path,
    branch_lookup: BranchLookup,
) -> HookResult:
    """Send the notice and, for permission prompts, block on the human's answer."""
    notification_type = hook_input.notification_type or "notification"
    project_name, branch = _project_context(hook_input.cwd or cwd, branch_lookup)
    text = format_notification(
        NotificationContext(
            project_name=project_name,
            git_branch=branch,
            event_type=notification_type.replace("_", " "),
            message=hook_input.message or "",
            tool_name=hook_input.tool_name,
        )
    )

    if notification_type != PERMISSION_PROMPT:
        await gateway.send_notification(text)
        return HookResult(EXIT_OK)

    handle = await gateway.send_approval_prompt(text, include_reply=True)
    logger.info("hook.prompt.sent message_id={} session_id={}", handle.message_id, hook_input.session_id)
    outcome = await waiter.wait_for_response(handle)
    return resolve_exit(outcome)
