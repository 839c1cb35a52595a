"""Video generation submission and task tracking."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from soragen.api.deps import get_service, to_http_error
from soragen.errors import SoraGenError
from soragen.schemas import GenerationRequest
from soragen.service import GenerationService

router = APIRouter()


@router.post("")
async def create_generation(
    req: GenerationRequest,
    service: GenerationService = Depends(get_service),
) -> dict[str, Any]:
    """Submit a job and start polling it. Replaces any task being tracked."""
    try:
        task_id = await service.generate(req)
    except SoraGenError as exc:
        raise to_http_error(exc) from exc
    return {"task_id": task_id, **service.status_view()}


@router.get("/current")
async def get_current(service: GenerationService = Depends(get_service)) -> dict[str, Any]:
    """Latest observed state of the tracked task."""
    return service.status_view()


@router.post("/acknowledge")
async def acknowledge(service: GenerationService = Depends(get_service)) -> dict[str, Any]:
    """Dismiss a finished task."""
    try:
        service.acknowledge()
    except SoraGenError as exc:
        raise to_http_error(exc) from exc
    return service.status_view()


@router.post("/cancel")
async def cancel(service: GenerationService = Depends(get_service)) -> dict[str, Any]:
    """Stop tracking the current task. The remote job itself keeps running."""
    service.cancel()
    return service.status_view()
