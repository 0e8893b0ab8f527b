# drive_index/main.py
"""
Main FastAPI app exposing the drive index and health endpoints.
"""
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from drive_index.api.drive import router as drive_router
from drive_index.api.health import router as health_router
from drive_index.integrations.errors import DriveError
from drive_index.integrations.google_drive_client import GoogleDrive
from drive_index.monitoring.context import set_request_context
from drive_index.monitoring.logger import log


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Tests may install their own client before startup
    if getattr(app.state, "drive", None) is None:
        app.state.drive = GoogleDrive()
    log("INFO", "Drive index started", module="main")
    try:
        yield
    finally:
        await app.state.drive.close()


app = FastAPI(title="Drive Index", lifespan=lifespan)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = str(uuid4())
    request.state.request_id = request_id
    set_request_context(request_id=request_id)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(DriveError)
async def drive_error_handler(request: Request, exc: DriveError):
    request_id = getattr(request.state, "request_id", None)
    log("WARNING" if exc.status < 500 else "ERROR", f"Drive error: {exc}", module="main",
        request_id=request_id, status=exc.status)
    return JSONResponse(
        status_code=exc.status,
        content={"error": exc.kind.value, "message": exc.message, "request_id": request_id},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    request_id = getattr(request.state, "request_id", None)
    log("ERROR", f"Unhandled exception: {exc}", module="main", request_id=request_id, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "request_id": request_id,
            "detail": "An unexpected error occurred."
        }
    )


# Mount routers
app.include_router(health_router)
app.include_router(drive_router)
