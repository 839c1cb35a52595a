"""API key management."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from soragen.api.deps import get_service, to_http_error
from soragen.errors import SoraGenError
from soragen.service import GenerationService

router = APIRouter()


class CredentialUpdate(BaseModel):
    key: str


@router.get("")
async def get_credential(service: GenerationService = Depends(get_service)) -> dict[str, Any]:
    """Report whether a key is stored, without revealing it."""
    masked = service.credentials.masked()
    return {
        "present": masked is not None,
        "valid": service.credentials.is_valid,
        "masked": masked,
    }


@router.put("")
async def set_credential(
    body: CredentialUpdate,
    service: GenerationService = Depends(get_service),
) -> dict[str, Any]:
    try:
        await service.set_credential(body.key)
    except SoraGenError as exc:
        raise to_http_error(exc) from exc
    return {"valid": True, "masked": service.credentials.masked()}


@router.delete("")
async def clear_credential(service: GenerationService = Depends(get_service)) -> dict[str, Any]:
    service.clear_credential()
    return {"present": False}
