"""Fakes shared by the test modules."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Callable

import httpx

from soragen.errors import Unauthenticated
from soragen.schemas import TaskStatus

BASE_URL = "https://api.test"
VALID_KEY = "sk-" + "a" * 48


def status_body(
    task_id: str,
    status: str,
    progress: str = "",
    output: str | None = None,
    fail_reason: str = "",
) -> dict[str, Any]:
    """A full status response body as the remote service sends it."""
    return {
        "task_id": task_id,
        "platform": "sora",
        "action": "generate",
        "status": status,
        "fail_reason": fail_reason,
        "submit_time": 1700000000,
        "start_time": 1700000001,
        "finish_time": 0,
        "progress": progress,
        "data": {"output": output} if output else {},
        "search_item": "",
    }


def make_status(task_id: str, status: str, **kwargs: Any) -> TaskStatus:
    return TaskStatus.model_validate(status_body(task_id, status, **kwargs))


def _response(code: int, body: Any) -> httpx.Response:
    if isinstance(body, (dict, list)):
        return httpx.Response(code, json=body)
    return httpx.Response(code, text=body)


class FakeRemote:
    """Stands in for the generation API behind an ``httpx.MockTransport``.

    Status responses are queued per task id; the last one repeats. Setting
    ``submit_response`` to an exception raises it from the transport.
    """

    def __init__(self) -> None:
        self.submissions: list[dict[str, Any]] = []
        self.submit_headers: list[httpx.Headers] = []
        self.status_calls: list[str] = []
        self.statuses: dict[str, list[tuple[int, Any]]] = {}
        self.submit_response: tuple[int, Any] | Exception = (200, {"task_id": "t-1"})

    def queue(self, task_id: str, *bodies: Any, code: int = 200) -> None:
        self.statuses.setdefault(task_id, []).extend((code, body) for body in bodies)

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            self.submissions.append(json.loads(request.content))
            self.submit_headers.append(request.headers)
            if isinstance(self.submit_response, Exception):
                raise self.submit_response
            return _response(*self.submit_response)

        task_id = request.url.path.rsplit("/", 1)[-1]
        self.status_calls.append(task_id)
        queue = self.statuses.get(task_id)
        if not queue:
            return _response(404, "task not found")
        code, body = queue.pop(0) if len(queue) > 1 else queue[0]
        return _response(code, body)


class ScriptedClient:
    """Duck-typed RemoteJobClient for driving the poller directly.

    Each task id maps to a list of TaskStatus objects or exceptions; the last
    entry repeats. A task id with a gate blocks until the gate is set.
    """

    def __init__(self, authenticated: bool = True) -> None:
        self.authenticated = authenticated
        self.calls: list[str] = []
        self.responses: dict[str, list[Any]] = {}
        self.gates: dict[str, asyncio.Event] = {}

    def require_credential(self) -> str:
        if not self.authenticated:
            raise Unauthenticated()
        return VALID_KEY

    async def fetch_status(self, task_id: str) -> TaskStatus:
        self.calls.append(task_id)
        gate = self.gates.get(task_id)
        if gate is not None:
            await gate.wait()
        queue = self.responses[task_id]
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        return item


async def wait_for(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Yield to the event loop until ``predicate`` holds."""
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached before timeout")
        await asyncio.sleep(0.005)


def active_timers() -> list[asyncio.Task]:
    return [
        t for t in asyncio.all_tasks()
        if t.get_name().startswith("poll-") and not t.done()
    ]
