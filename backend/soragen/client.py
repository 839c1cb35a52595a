"""Sora-2 video generation API client.

Two calls against one base URL:
1. POST /v2/videos/generations            → create task, returns task_id
2. GET  /v2/videos/generations/{task_id}  → task status snapshot

No retries here. Transport failures surface as ``TransportError``; polling
cadence and tolerance of bad ticks live in the poller.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from soragen.credentials import CredentialStore
from soragen.errors import MalformedResponse, RemoteRejected, TransportError, Unauthenticated
from soragen.schemas import GenerationMode, GenerationRequest, TaskStatus, strip_data_url

logger = logging.getLogger(__name__)

GENERATIONS_PATH = "/v2/videos/generations"


def build_payload(request: GenerationRequest, notify_hook: str | None = None) -> dict[str, Any]:
    """Build the JSON body for task creation.

    ``hd`` and ``duration`` are only sent for ``sora-2-pro``; ``hd`` only when
    true. Images are only sent in image-to-video mode, stripped of any
    data-URL prefix.
    """
    body: dict[str, Any] = {
        "prompt": request.prompt.strip(),
        "model": request.model.value,
        "images": [],
    }

    if request.mode is GenerationMode.IMAGE_TO_VIDEO:
        body["images"] = [strip_data_url(image) for image in request.images]

    if request.aspect_ratio is not None:
        body["aspect_ratio"] = request.aspect_ratio.value

    if request.is_pro:
        if request.hd:
            body["hd"] = True
        if request.duration is not None:
            body["duration"] = request.duration.value

    hook = request.notify_hook or notify_hook
    if hook:
        body["notify_hook"] = hook

    return body


class RemoteJobClient:
    """Submits generation tasks and fetches their status.

    The API key is read from the credential store on every call and only
    lives on the call stack.
    """

    def __init__(
        self,
        credentials: CredentialStore,
        base_url: str,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
        notify_hook: str | None = None,
    ) -> None:
        self._credentials = credentials
        self._base_url = base_url.rstrip("/")
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._own_client = http_client is None
        self._notify_hook = notify_hook or None

    def require_credential(self) -> str:
        """Return the current API key or raise ``Unauthenticated``."""
        api_key = self._credentials.current()
        if not api_key:
            raise Unauthenticated()
        return api_key

    def _headers(self, api_key: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    async def submit(self, request: GenerationRequest) -> str:
        """Create a generation task and return its task id."""
        api_key = self.require_credential()
        body = build_payload(request, self._notify_hook)

        try:
            resp = await self._client.post(
                f"{self._base_url}{GENERATIONS_PATH}",
                json=body,
                headers=self._headers(api_key),
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"Could not reach generation API: {exc!r}") from exc
        if not resp.is_success:
            logger.error("Task creation failed: %s %s", resp.status_code, resp.text[:500])
            raise RemoteRejected(resp.status_code, resp.text)

        result = _decode_json(resp)
        task_id = result.get("task_id") if isinstance(result, dict) else None
        if not task_id:
            raise MalformedResponse(f"No task_id in creation response: {result}")

        logger.info("Sora task created: %s (model=%s)", task_id, request.model.value)
        return str(task_id)

    async def fetch_status(self, task_id: str) -> TaskStatus:
        """Fetch one status snapshot for ``task_id``."""
        api_key = self.require_credential()

        try:
            resp = await self._client.get(
                f"{self._base_url}{GENERATIONS_PATH}/{task_id}",
                headers={"Authorization": f"Bearer {api_key}"},
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"Could not reach generation API: {exc!r}") from exc
        if not resp.is_success:
            raise RemoteRejected(resp.status_code, resp.text)

        result = _decode_json(resp)
        try:
            return TaskStatus.model_validate(result)
        except PydanticValidationError as exc:
            raise MalformedResponse(f"Undecodable status for task {task_id}: {exc}") from exc

    async def aclose(self) -> None:
        if self._own_client:
            await self._client.aclose()


def _decode_json(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError as exc:
        raise MalformedResponse(f"Response is not JSON: {resp.text[:200]}") from exc
