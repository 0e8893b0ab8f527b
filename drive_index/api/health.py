# drive_index/api/health.py
"""
Health endpoints for shallow and deep readiness checks.
"""
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.status import HTTP_200_OK, HTTP_503_SERVICE_UNAVAILABLE

from drive_index import __version__
from drive_index.integrations.errors import DriveError

router = APIRouter(prefix="/admin", tags=["health"])


@router.get("/health", status_code=HTTP_200_OK)
async def health() -> dict:
    """Shallow health endpoint."""
    return {"status": "ok", "version": __version__}


@router.get("/health/deep", status_code=HTTP_200_OK)
async def health_deep(request: Request):
    """
    Deep health endpoint: verifies the refresh token can mint an access token.
    """
    drive = request.app.state.drive
    try:
        await drive.authorize()
    except DriveError as exc:
        return JSONResponse(
            status_code=HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "degraded", "drive": {"healthy": False, "message": exc.message}},
        )
    return {"status": "ready", "drive": {"healthy": True, "message": "Authorized"}}
