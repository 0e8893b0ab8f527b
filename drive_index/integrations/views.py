"""drive_index/integrations/views.py
What `GoogleDrive.index()` hands back: a folder or a file view.

The two views form a tagged union on `is_folder`. A folder can list its
children; a file can stream its bytes. Neither exposes the other's
capability.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, AsyncIterator, Dict, List, Union

import aiohttp

from drive_index.integrations.models import RemoteObject

if TYPE_CHECKING:
    from drive_index.integrations.google_drive_client import GoogleDrive

# Upstream headers worth forwarding to whoever consumes the bytes
PASSTHROUGH_HEADERS = (
    "Content-Type",
    "Content-Length",
    "Content-Range",
    "Accept-Ranges",
    "Last-Modified",
    "ETag",
)


class RawContent:
    """An open media response; release it or exhaust `iter_chunked()`."""

    def __init__(self, response: aiohttp.ClientResponse):
        self._response = response

    @property
    def status(self) -> int:
        return self._response.status

    @property
    def headers(self) -> Dict[str, str]:
        return {
            name: self._response.headers[name]
            for name in PASSTHROUGH_HEADERS
            if name in self._response.headers
        }

    async def iter_chunked(self, chunk_size: int = 1024 * 64) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._response.content.iter_chunked(chunk_size):
                yield chunk
        finally:
            self.release()

    async def read(self) -> bytes:
        try:
            return await self._response.read()
        finally:
            self.release()

    def release(self) -> None:
        self._response.release()

    async def __aenter__(self) -> "RawContent":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.release()
        return False


@dataclass(frozen=True)
class FolderView:
    metadata: RemoteObject
    _drive: "GoogleDrive" = field(repr=False, compare=False)

    is_folder = True

    async def list(self) -> List[RemoteObject]:
        """Direct children, folders first then by name."""
        return await self._drive.list_files(self.metadata.id)

    def to_dict(self) -> Dict[str, Any]:
        return self.metadata.to_dict()


@dataclass(frozen=True)
class FileView:
    metadata: RemoteObject
    _drive: "GoogleDrive" = field(repr=False, compare=False)

    is_folder = False

    async def raw(self, range_header: str = "") -> RawContent:
        """Open the file's bytes, optionally limited by an HTTP Range value."""
        return await self._drive.get_raw_data(self.metadata.id, range_header)

    def to_dict(self) -> Dict[str, Any]:
        return self.metadata.to_dict()


IndexView = Union[FolderView, FileView]
