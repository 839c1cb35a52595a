"""Task status polling state machine.

    IDLE ──start──▶ POLLING ──SUCCESS+output──▶ SUCCEEDED ─┐
                      │  ▲                                 ├─acknowledge──▶ IDLE
                      │  └── NOT_START / IN_PROGRESS /     │
                      │      SUCCESS without output /      │
                      │      tick error                    │
                      └──────FAILURE──────────▶ FAILED ────┘

The repeating timer is a single asyncio task owned by the poller. Arming
always disarms first, so at most one timer runs per poller. Ticks inside the
timer run one after another; a tick result is applied only if its task id is
still the active one and the poller is still polling.
"""

from __future__ import annotations

import asyncio
import contextlib
import enum
import logging
from typing import Any

from soragen.client import RemoteJobClient
from soragen.errors import InvalidTransition, SoraGenError
from soragen.progress import normalize_progress
from soragen.schemas import TaskState, TaskStatus
from soragen.session import SessionStore

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_REASON = "Video generation failed"


class PollerState(str, enum.Enum):
    """Poller lifecycle states."""

    IDLE = "IDLE"
    POLLING = "POLLING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


TERMINAL_STATES = (PollerState.SUCCEEDED, PollerState.FAILED)


class TaskPoller:
    """Tracks one remote task at a time until it succeeds or fails."""

    def __init__(
        self,
        client: RemoteJobClient,
        session: SessionStore,
        *,
        interval: float = 10.0,
    ) -> None:
        self._client = client
        self._session = session
        self.interval = interval

        self.state = PollerState.IDLE
        self.active_handle: str | None = None
        self.snapshot: TaskStatus | None = None
        self.progress = ""
        self.result_url: str | None = None
        self.failure_reason: str | None = None
        self.last_error: str | None = None

        self._timer: asyncio.Task | None = None

    @property
    def loading(self) -> bool:
        return self.state is PollerState.POLLING

    @property
    def armed(self) -> bool:
        return self._timer is not None and not self._timer.done()

    # ── transitions ──

    async def start(self, handle: str) -> None:
        """Begin polling ``handle``, replacing whatever was active.

        Persists the handle, performs one tick immediately, then arms the
        repeating timer if the task is still running.
        """
        self._client.require_credential()

        self._disarm()
        self._reset_observations()
        self.active_handle = handle
        self.state = PollerState.POLLING
        self._session.save_task_id(handle)
        logger.info("Polling task %s every %ss", handle, self.interval)

        await self._tick(handle)

        if self._is_current(handle):
            self._arm(handle)

    async def replace(self, handle: str) -> None:
        """Switch polling to ``handle``; the previous timer is disarmed first."""
        if self.active_handle and self.active_handle != handle:
            logger.info("Replacing task %s with %s", self.active_handle, handle)
        await self.start(handle)

    def acknowledge(self) -> None:
        """Dismiss a finished task and return to IDLE."""
        if self.state not in TERMINAL_STATES:
            raise InvalidTransition(f"Cannot acknowledge a task in state {self.state.value}")
        logger.info("Task %s acknowledged (%s)", self.active_handle, self.state.value)
        self._reset()

    def cancel(self, *, clear_session: bool = True) -> None:
        """Stop tracking the active task, whatever its state.

        With ``clear_session=False`` the persisted task id is left in place so
        the task can still be resumed.
        """
        if self.active_handle:
            logger.info("Stopped tracking task %s", self.active_handle)
        self._reset(clear_session=clear_session)

    async def shutdown(self) -> None:
        """Disarm on process exit. The persisted task id is kept for resumption."""
        timer = self._timer
        self._disarm()
        if timer is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await timer

    # ── timer ──

    def _arm(self, handle: str) -> None:
        self._disarm()
        self._timer = asyncio.create_task(self._run(handle), name=f"poll-{handle}")

    def _disarm(self) -> None:
        timer, self._timer = self._timer, None
        if timer is None or timer.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if timer is not current:
            timer.cancel()

    async def _run(self, handle: str) -> None:
        try:
            while self._is_current(handle):
                await asyncio.sleep(self.interval)
                await self._tick(handle)
        except asyncio.CancelledError:
            logger.debug("Timer for task %s disarmed", handle)
            raise
        finally:
            if self._timer is asyncio.current_task():
                self._timer = None

    async def _tick(self, handle: str) -> None:
        try:
            status = await self._client.fetch_status(handle)
        except SoraGenError as exc:
            if self._is_current(handle):
                self.last_error = str(exc) or exc.__class__.__name__
                logger.warning("Status poll for task %s failed: %s", handle, self.last_error)
            return

        if not self._is_current(handle):
            logger.debug("Discarding stale status for task %s", handle)
            return

        self._apply(status)

    def _apply(self, status: TaskStatus) -> None:
        self.snapshot = status
        self.progress = normalize_progress(status.progress)
        self.last_error = None

        if status.status is TaskState.SUCCESS:
            if status.result_url:
                self.result_url = status.result_url
                self._finish(PollerState.SUCCEEDED)
            else:
                logger.info("Task %s reports SUCCESS without output yet", status.task_id)
        elif status.status is TaskState.FAILURE:
            self.failure_reason = status.fail_reason or DEFAULT_FAILURE_REASON
            self._finish(PollerState.FAILED)
        else:
            logger.debug("Task %s: %s %s", status.task_id, status.status.value, self.progress)

    def _finish(self, state: PollerState) -> None:
        self.state = state
        self._disarm()
        logger.info("Task %s finished: %s", self.active_handle, state.value)

    # ── helpers ──

    def _is_current(self, handle: str) -> bool:
        return self.state is PollerState.POLLING and self.active_handle == handle

    def _reset_observations(self) -> None:
        self.snapshot = None
        self.progress = ""
        self.result_url = None
        self.failure_reason = None
        self.last_error = None

    def _reset(self, clear_session: bool = True) -> None:
        self._disarm()
        self._reset_observations()
        self.active_handle = None
        self.state = PollerState.IDLE
        if clear_session:
            self._session.clear_task_id()

    def snapshot_view(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "task_id": self.active_handle,
            "status": self.snapshot.status.value if self.snapshot else None,
            "progress": self.progress,
            "result_url": self.result_url,
            "failure_reason": self.failure_reason,
            "last_error": self.last_error,
            "loading": self.loading,
        }
