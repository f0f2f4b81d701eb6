"""Send-and-wait protocol for one approval request."""

from __future__ import annotations

import asyncio
import math
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol

from loguru import logger

from hookbridge.approval.models import (
    APPROVE,
    CANCEL_SENTINEL,
    DENY,
    REPLY,
    SKIP,
    Approved,
    ButtonActivation,
    Controls,
    Denied,
    InboundUpdate,
    MessageHandle,
    Outcome,
    Replied,
    Skipped,
    TextMessage,
    TimedOut,
    WaitState,
)
from hookbridge.errors import TransportError

REPLY_PROMPT = "Type your response (or /cancel to cancel):"
DEFAULT_POLL_SLICE_SECONDS = 5
DEFAULT_BACKOFF_SECONDS = 1.0

_DECISIONS: dict[str, Callable[[], Outcome]] = {
    APPROVE: Approved,
    DENY: Denied,
    SKIP: Skipped,
}


class Gateway(Protocol):
    async def send(self, text: str, controls: Controls | None = None) -> MessageHandle: ...

    async def edit_controls(self, handle: MessageHandle, controls: Controls | None = None) -> None: ...

    async def acknowledge(self, query_id: str, text: str | None = None) -> None: ...

    async def poll(self, cursor: int, wait_seconds: int) -> list[InboundUpdate]: ...


@dataclass(frozen=True)
class SideEffectResult:
    """Result of a best-effort call. Only ever consulted for logging."""

    name: str
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def best_effort(name: str, call: Awaitable[None]) -> SideEffectResult:
    try:
        await call
    except TransportError as exc:
        return SideEffectResult(name, exc)
    return SideEffectResult(name)


class ApprovalExchange:
    """Wait for the human's decision on one sent prompt.

    The exchange owns the update cursor for the lifetime of the process. Every
    observed update moves the cursor past its id, whether or not it belongs to
    the prompt being waited on, so no update is processed twice.
    """

    def __init__(
        self,
        gateway: Gateway,
        *,
        timeout: float,
        poll_slice: int = DEFAULT_POLL_SLICE_SECONDS,
        backoff: float = DEFAULT_BACKOFF_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._gateway = gateway
        self._timeout = timeout
        self._poll_slice = max(1, poll_slice)
        self._backoff = backoff
        self._clock = clock
        self._sleep = sleep
        self._cursor = 0

    @property
    def cursor(self) -> int:
        return self._cursor

    def _advance(self, update: InboundUpdate) -> None:
        self._cursor = max(self._cursor, update.update_id + 1)

    async def drain(self) -> None:
        """Skip everything already queued before the prompt was sent."""
        try:
            updates = await self._gateway.poll(self._cursor, 0)
        except TransportError as exc:
            logger.warning("approval.drain.error cursor={} error={}", self._cursor, exc)
            return
        for update in updates:
            self._advance(update)
        logger.debug("approval.drain.done discarded={} cursor={}", len(updates), self._cursor)

    async def wait_for_response(self, handle: MessageHandle, timeout: float | None = None) -> Outcome:
        timeout = self._timeout if timeout is None else timeout
        started = self._clock()
        state = WaitState.AWAITING_DECISION

        await self.drain()

        while (elapsed := self._clock() - started) < timeout:
            wait_seconds = min(self._poll_slice, math.ceil(timeout - elapsed))
            try:
                updates = await self._gateway.poll(self._cursor, wait_seconds)
            except TransportError as exc:
                logger.warning("approval.poll.error cursor={} error={}", self._cursor, exc)
                await self._sleep(self._backoff)
                continue

            for update in updates:
                self._advance(update)
                outcome, state = await self._dispatch(update, handle, state)
                if outcome is not None:
                    logger.info("approval.outcome kind={} message_id={}", outcome.kind, handle.message_id)
                    return outcome

        logger.info("approval.timeout message_id={} timeout={}", handle.message_id, timeout)
        return TimedOut()

    async def _dispatch(
        self,
        update: InboundUpdate,
        handle: MessageHandle,
        state: WaitState,
    ) -> tuple[Outcome | None, WaitState]:
        if isinstance(update, ButtonActivation):
            if update.message_id != handle.message_id:
                return None, state
            return await self._on_button(update, handle, state)
        if isinstance(update, TextMessage):
            if state is not WaitState.AWAITING_TEXT:
                return None, state
            if update.text == CANCEL_SENTINEL:
                return Skipped(), state
            return Replied(update.text), state
        return None, state

    async def _on_button(
        self,
        update: ButtonActivation,
        handle: MessageHandle,
        state: WaitState,
    ) -> tuple[Outcome | None, WaitState]:
        acked = await best_effort("acknowledge", self._gateway.acknowledge(update.query_id))
        stripped = await best_effort("strip_controls", self._gateway.edit_controls(handle, None))
        for result in (acked, stripped):
            if not result.ok:
                logger.warning(
                    "approval.side_effect.failed name={} message_id={} error={}",
                    result.name,
                    handle.message_id,
                    result.error,
                )

        decision = _DECISIONS.get(update.token)
        if decision is not None:
            return decision(), state
        if update.token == REPLY:
            # Stays AWAITING_TEXT even when the prompt fails to send.
            state = WaitState.AWAITING_TEXT
            try:
                await self._gateway.send(REPLY_PROMPT)
            except TransportError:
                logger.warning("approval.reply_prompt.failed message_id={}", handle.message_id)
            return None, state
        logger.debug("approval.unknown_token token={}", update.token)
        return None, state
