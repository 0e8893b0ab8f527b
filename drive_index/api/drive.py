# drive_index/api/drive.py
"""
Drive index routes: folders render as JSON listings, files stream their bytes.
"""
from urllib.parse import quote

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from drive_index.integrations.google_drive_client import GoogleDrive

router = APIRouter(prefix="/drive", tags=["drive"])


def get_drive(request: Request) -> GoogleDrive:
    return request.app.state.drive


def encoded_path(request: Request) -> str:
    """Return the requested path below the router prefix, still percent-encoded.

    Segments are decoded once, by the resolver.
    """
    raw_path = request.scope.get("raw_path")
    if not raw_path:
        return quote(request.path_params.get("path", ""), safe="/")
    path = raw_path.decode("latin-1").split("?", 1)[0]
    _, _, rest = path.partition(router.prefix + "/")
    return rest


@router.get("/")
@router.get("/{path:path}")
async def index(request: Request, path: str = ""):
    """Serve the object at `path`.

    Folders return `{"metadata": ..., "files": [...]}`. Files are streamed
    with the client's Range header forwarded to Drive.
    """
    drive = get_drive(request)
    view = await drive.index(encoded_path(request))
    if view.is_folder:
        children = await view.list()
        return {
            "metadata": view.to_dict(),
            "files": [child.to_dict() for child in children],
        }

    raw = await view.raw(request.headers.get("range", ""))
    return StreamingResponse(
        raw.iter_chunked(),
        status_code=raw.status,
        headers=raw.headers,
        media_type=view.metadata.mime_type or "application/octet-stream",
    )
