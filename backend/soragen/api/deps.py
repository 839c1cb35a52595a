"""Request-scoped access to the application's GenerationService."""

from __future__ import annotations

from fastapi import HTTPException, Request

from soragen.errors import (
    InvalidTransition,
    MalformedResponse,
    RemoteRejected,
    SoraGenError,
    TransportError,
    Unauthenticated,
    ValidationError,
)
from soragen.service import GenerationService


def get_service(request: Request) -> GenerationService:
    return request.app.state.service


def to_http_error(exc: SoraGenError) -> HTTPException:
    """Map a SoraGen error to the HTTP status the API reports it with."""
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, Unauthenticated):
        return HTTPException(status_code=401, detail=str(exc))
    if isinstance(exc, InvalidTransition):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, (RemoteRejected, MalformedResponse, TransportError)):
        return HTTPException(status_code=502, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))
