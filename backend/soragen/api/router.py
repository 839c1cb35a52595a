"""Master API router — mounts all sub-routers."""

from fastapi import APIRouter

from soragen.api.credentials import router as credentials_router
from soragen.api.generations import router as generations_router

api_router = APIRouter(prefix="/api", redirect_slashes=False)

api_router.include_router(credentials_router, prefix="/credential", tags=["Credential"])
api_router.include_router(generations_router, prefix="/generations", tags=["Generations"])
