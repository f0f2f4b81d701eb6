"""hookbridge command line entry point."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger

from hookbridge import __version__
from hookbridge.approval.exchange import ApprovalExchange
from hookbridge.channels.telegram import TelegramConfig, TelegramGateway
from hookbridge.config import Settings, load_config
from hookbridge.errors import ConfigurationError, TransportError
from hookbridge.git import current_branch
from hookbridge.hook import EXIT_ERROR, EXIT_OK, HookResult, handle_notification, handle_stop, parse_hook_input
from hookbridge.install import uninstall
from hookbridge.utils.logging import configure_logging
from hookbridge.wizard import SetupWizard

STOP_EVENT = "stop"
NO_INPUT_MESSAGE = "No input received. This script should be called by Claude Code hooks."
TEST_NOTICE = "<b>Claude Code Telegram</b>\n\nTest notification successful!"

app = typer.Typer(
    name="hookbridge",
    help="Telegram notifications for Claude Code with interactive approval buttons.",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


def _read_stdin() -> str | None:
    if sys.stdin is None or sys.stdin.isatty():
        return None
    return sys.stdin.read()


def _emit(result: HookResult) -> None:
    if result.stdout:
        typer.echo(result.stdout)
    if result.stderr:
        typer.echo(result.stderr, err=True)


async def run_test(config: TelegramConfig) -> HookResult:
    typer.echo("Testing Telegram connection...")
    try:
        async with TelegramGateway(config) as gateway:
            if await gateway.verify():
                await gateway.send_notification(TEST_NOTICE)
                return HookResult(EXIT_OK, stdout="Success! Check your Telegram.")
    except TransportError as exc:
        logger.warning("cli.test.error error={}", exc)
    return HookResult(EXIT_ERROR, stderr="Failed to connect to Telegram. Check your config.")


async def run_hook(config: TelegramConfig, settings: Settings, *, stop_event: bool, raw_input: str | None) -> HookResult:
    """Handle one hook invocation end to end."""
    hook_input = parse_hook_input(raw_input)
    cwd = (hook_input.cwd if hook_input and hook_input.cwd else None) or str(Path.cwd())

    async with TelegramGateway(config) as gateway:
        if stop_event:
            return await handle_stop(gateway, cwd, current_branch)
        if hook_input is None:
            return HookResult(EXIT_ERROR, stderr=NO_INPUT_MESSAGE)
        exchange = ApprovalExchange(gateway, timeout=config.timeout, poll_slice=settings.poll_slice_seconds)
        return await handle_notification(gateway, exchange, hook_input, cwd, current_branch)


@app.command()
def main(
    setup: bool = typer.Option(False, "--setup", help="Run the setup wizard to configure Telegram bot"),
    test: bool = typer.Option(False, "--test", help="Test the Telegram connection"),
    uninstall_: bool = typer.Option(False, "--uninstall", help="Remove the binary and configuration"),
    event: Optional[str] = typer.Option(None, "--event", help="Hook event; 'stop' sends a completion notice"),
    version: bool = typer.Option(
        False, "--version", "-v", callback=_version_callback, is_eager=True, help="Show version number"
    ),
) -> None:
    """Normal mode reads the hook JSON from stdin."""
    settings = Settings()
    configure_logging(settings.log_level)

    if setup:
        try:
            completed = asyncio.run(SetupWizard(settings.config_path).run())
        except ConfigurationError as exc:
            typer.echo(str(exc), err=True)
            raise typer.Exit(EXIT_ERROR) from exc
        logger.debug("cli.setup.done completed={}", completed)
        raise typer.Exit(EXIT_OK)

    if uninstall_:
        typer.echo("Uninstalling hookbridge...\n")
        for line in uninstall(settings.config_dir):
            typer.echo(line)
        typer.echo("\nUninstall complete!")
        raise typer.Exit(EXIT_OK)

    try:
        config = load_config(settings.config_path)
    except ConfigurationError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(EXIT_ERROR) from exc

    try:
        if test:
            result = asyncio.run(run_test(config))
        else:
            result = asyncio.run(
                run_hook(config, settings, stop_event=event == STOP_EVENT, raw_input=_read_stdin())
            )
    except Exception as exc:
        logger.exception("cli.unexpected_error")
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(EXIT_ERROR) from exc

    _emit(result)
    raise typer.Exit(result.exit_code)
