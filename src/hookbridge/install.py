"""Claude settings hook registration and uninstall helpers."""

from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Any

from loguru import logger

COMMAND = "hookbridge"
INSTALL_PATH = Path("/usr/local/bin/hookbridge")
HOOK_EVENTS = ("Notification", "Stop")


def claude_settings_path() -> Path:
    return Path.home() / ".claude" / "settings.json"


def hooks_config(command: str = COMMAND) -> dict[str, list[dict[str, Any]]]:
    return {
        "Notification": [
            {
                "matcher": "permission_prompt",
                "hooks": [{"type": "command", "command": command, "timeout": 3600}],
            }
        ],
        "Stop": [
            {
                "matcher": "",
                "hooks": [{"type": "command", "command": f"{command} --event=stop", "timeout": 30}],
            }
        ],
    }


def _read_settings(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a JSON object")
    return data


def _write_settings(path: Path, settings: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(settings, indent=2), encoding="utf-8")


def install_hooks(settings_path: Path | None = None, command: str = COMMAND) -> Path:
    """Merge the Notification and Stop hooks into the Claude settings file.

    Other top-level keys and other hook events are preserved.
    """
    path = settings_path or claude_settings_path()
    settings = _read_settings(path)
    hooks = settings.get("hooks")
    if not isinstance(hooks, dict):
        hooks = {}
    settings["hooks"] = {**hooks, **hooks_config(command)}
    _write_settings(path, settings)
    logger.info("install.hooks.written path={}", path)
    return path


def remove_hooks(settings_path: Path | None = None) -> bool:
    """Drop the Notification and Stop hooks. Returns True when the file changed."""
    path = settings_path or claude_settings_path()
    settings = _read_settings(path)
    hooks = settings.get("hooks")
    if not isinstance(hooks, dict) or not any(event in hooks for event in HOOK_EVENTS):
        return False
    for event in HOOK_EVENTS:
        hooks.pop(event, None)
    _write_settings(path, settings)
    return True


def uninstall(config_dir: Path, settings_path: Path | None = None, binary: Path = INSTALL_PATH) -> list[str]:
    """Remove config, binary and hooks. Each step is attempted independently."""
    report: list[str] = []

    if config_dir.exists():
        shutil.rmtree(config_dir, ignore_errors=True)
        report.append(f"Removed config: {config_dir}")
    else:
        report.append(f"Config not found: {config_dir}")

    try:
        binary.unlink()
        report.append(f"Removed binary: {binary}")
    except FileNotFoundError:
        pass
    except OSError as exc:
        report.append(f"Could not remove binary {binary}: {exc}")

    path = settings_path or claude_settings_path()
    try:
        if remove_hooks(path):
            report.append(f"Removed hooks from: {path}")
    except (OSError, ValueError) as exc:
        report.append(f"Could not update {path}: {exc}")

    return report
