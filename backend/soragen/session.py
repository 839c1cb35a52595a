"""Persisted session and startup resumption.

When the process restarts while a task is still in flight, in-progress
observation would otherwise be lost. ``resume_session`` picks the persisted
task id back up and restarts polling without re-submitting the job.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from soragen.credentials import CredentialStore, mask_key
from soragen.storage import KeyValueStore

if TYPE_CHECKING:
    from soragen.poller import TaskPoller

logger = logging.getLogger(__name__)


class SessionStore:
    """Durable record of the active task id."""

    def __init__(self, store: KeyValueStore, task_key: str = "current_task_id") -> None:
        self._store = store
        self._task_key = task_key

    def save_task_id(self, task_id: str) -> None:
        self._store.set(self._task_key, task_id)

    def load_task_id(self) -> str | None:
        return self._store.get(self._task_key) or None

    def clear_task_id(self) -> None:
        self._store.delete(self._task_key)


async def resume_session(
    credentials: CredentialStore,
    session: SessionStore,
    poller: TaskPoller,
) -> str | None:
    """Restore the credential cache and resume polling a persisted task.

    Returns the resumed task id, or None when there was nothing to resume.
    A persisted task id without a credential is kept in storage and left
    idle until a key is committed.
    """
    api_key = credentials.load()
    if api_key:
        logger.info("Restored API key %s (valid=%s)", mask_key(api_key), credentials.is_valid)

    task_id = session.load_task_id()
    if not task_id:
        return None

    if not api_key:
        logger.warning("Persisted task %s found but no API key is set; not resuming", task_id)
        return None

    logger.info("Resuming polling for persisted task %s", task_id)
    await poller.start(task_id)
    return task_id
