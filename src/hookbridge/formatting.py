"""HTML message formatting for Telegram notices."""

from __future__ import annotations

from dataclasses import dataclass

MAX_MESSAGE_LENGTH = 2000


@dataclass(frozen=True)
class NotificationContext:
    project_name: str
    event_type: str
    message: str = ""
    git_branch: str | None = None
    tool_name: str | None = None


def escape_html(text: str) -> str:
    """Escape the characters Telegram's HTML parse mode treats as markup."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def truncate(text: str, limit: int = MAX_MESSAGE_LENGTH) -> str:
    if len(text) <= limit:
        return text
    return f"{text[:limit]}..."


def format_notification(context: NotificationContext) -> str:
    lines = [f"<b>Project:</b> {escape_html(context.project_name)}"]
    if context.git_branch:
        lines[0] += f" (<code>{escape_html(context.git_branch)}</code>)"
    if context.tool_name:
        lines.append(f"<b>Tool:</b> {escape_html(context.tool_name)}")
    lines.append(f"<b>Event:</b> {escape_html(context.event_type)}")

    text = "<b>Claude Code</b>\n\n" + "\n".join(lines) + "\n\n"
    if context.message:
        text += f"<pre>{escape_html(truncate(context.message))}</pre>"
    return text
