"""Generation service — credential handling, submission, and task tracking.

One ``GenerationService`` per client session. It owns the poller and is the
single entry point used by the API layer.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from soragen.client import RemoteJobClient
from soragen.config import Settings, get_settings
from soragen.credentials import CredentialStore
from soragen.errors import SoraGenError, Unauthenticated, ValidationError
from soragen.poller import TaskPoller
from soragen.schemas import GenerationMode, GenerationRequest
from soragen.session import SessionStore, resume_session
from soragen.storage import KeyValueStore, build_store

logger = logging.getLogger(__name__)


def check_request(request: GenerationRequest) -> None:
    """Required-field checks, before any network call."""
    if not request.prompt.strip():
        raise ValidationError("A prompt is required")
    if request.mode is GenerationMode.IMAGE_TO_VIDEO and not request.images:
        raise ValidationError("Upload at least one image for image-to-video")


class GenerationService:
    def __init__(
        self,
        credentials: CredentialStore,
        session: SessionStore,
        client: RemoteJobClient,
        poller: TaskPoller,
    ) -> None:
        self.credentials = credentials
        self.session = session
        self.client = client
        self.poller = poller
        self.submitting = False
        self.error: str | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        store: KeyValueStore | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> GenerationService:
        """Wire up all components from application settings."""
        settings = settings or get_settings()
        store = store or build_store(settings)
        credentials = CredentialStore(store, settings.CREDENTIAL_KEY)
        session = SessionStore(store, settings.TASK_ID_KEY)
        client = RemoteJobClient(
            credentials,
            settings.API_BASE_URL,
            http_client=http_client,
            timeout=settings.HTTP_TIMEOUT,
            notify_hook=settings.NOTIFY_HOOK,
        )
        poller = TaskPoller(client, session, interval=settings.POLL_INTERVAL)
        return cls(credentials, session, client, poller)

    @property
    def loading(self) -> bool:
        return self.submitting or self.poller.loading

    # ── credential ──

    async def set_credential(self, candidate: str) -> bool:
        """Validate and store an API key.

        Raises ``ValidationError`` for a malformed key. A task left over from
        a previous run without a key is resumed once a valid key arrives.
        """
        if not self.credentials.commit(candidate):
            raise ValidationError("API key must be 51 characters starting with 'sk-'")

        if self.poller.active_handle is None and self.session.load_task_id():
            await self.resume()
        return True

    def clear_credential(self) -> None:
        self.credentials.clear()

    # ── lifecycle ──

    async def resume(self) -> str | None:
        return await resume_session(self.credentials, self.session, self.poller)

    async def generate(self, request: GenerationRequest) -> str:
        """Submit a new job and start polling it. Returns the task id.

        Any task already being polled is disarmed before submission. Its task
        id stays persisted until the new submission returns one, so a failed
        submission goes back to polling the previous task.
        """
        try:
            self.client.require_credential()
            check_request(request)
        except (Unauthenticated, ValidationError) as exc:
            self.error = str(exc)
            raise

        self.poller.cancel(clear_session=False)
        self.error = None
        self.submitting = True
        try:
            task_id = await self.client.submit(request)
        except SoraGenError as exc:
            self.error = str(exc)
            logger.error("Video generation request failed: %s", exc)
            self.submitting = False
            if self.session.load_task_id():
                await self.resume()
            raise
        finally:
            self.submitting = False

        await self.poller.start(task_id)
        return task_id

    def acknowledge(self) -> None:
        self.poller.acknowledge()
        self.error = None

    def cancel(self) -> None:
        self.poller.cancel()
        self.error = None

    async def aclose(self) -> None:
        await self.poller.shutdown()
        await self.client.aclose()

    def status_view(self) -> dict[str, Any]:
        view = self.poller.snapshot_view()
        view["loading"] = self.loading
        view["error"] = self.error or view["failure_reason"] or view["last_error"]
        return view
