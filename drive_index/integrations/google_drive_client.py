"""drive_index/integrations/google_drive_client.py
Path-addressable, read-only access to Google Drive.

Responsibilities:
- Own one `DriveSession` (credentials, path cache, HTTP session)
- Wire the token manager, query executor, folder listing and path resolver
- Expose `authorize()` and `index(path)`; `index` returns a `FolderView`
  (with `list()`) or a `FileView` (with `raw(range)`)

Usage:
    async with GoogleDrive() as drive:
        view = await drive.index("photos/2023")
        if view.is_folder:
            children = await view.list()
"""
from __future__ import annotations

import time
from typing import List, Optional

import aiohttp

from drive_index.config import settings
from drive_index.integrations.errors import NotFound, RangeReadFailure
from drive_index.integrations.listing import list_children
from drive_index.integrations.models import RemoteObject
from drive_index.integrations.query import QueryExecutor
from drive_index.integrations.resolver import PathResolver
from drive_index.integrations.session import Credentials, DriveSession
from drive_index.integrations.token_manager import TokenManager
from drive_index.integrations.views import FileView, FolderView, IndexView, RawContent
from drive_index.monitoring.logger import log

_UNSET = object()


class GoogleDrive:
    """Google Drive client addressed by path.

    Arguments left as None fall back to the GDRIVE_* settings.
    """

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        refresh_token: Optional[str] = None,
        root_id: Optional[str] = None,
        access_token: Optional[str] = None,
        expires_on: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
        *,
        page_size: Optional[int] = None,
        rate_limit_retries=_UNSET,
        rate_limit_backoff: Optional[float] = None,
        timing_logs: Optional[bool] = None,
        token_url: Optional[str] = None,
        files_url: Optional[str] = None,
        password_filename: Optional[str] = None,
    ):
        credentials = Credentials(
            client_id=client_id or settings.GDRIVE_CLIENT_ID,
            client_secret=client_secret or settings.GDRIVE_CLIENT_SECRET,
            refresh_token=refresh_token or settings.GDRIVE_REFRESH_TOKEN,
            access_token=access_token or settings.GDRIVE_ACCESS_TOKEN,
            expires_on=expires_on or settings.GDRIVE_EXPIRES_ON,
        )
        self.session = DriveSession(credentials, root_id or settings.GDRIVE_ROOT_ID, http=session)
        self.files_url = files_url or settings.GDRIVE_FILES_URL
        self.page_size = page_size or settings.GDRIVE_PAGE_SIZE
        self.password_filename = (
            password_filename if password_filename is not None else settings.GDRIVE_PASSWORD_FILENAME
        )
        self.timing_logs = settings.GDRIVE_TIMING_LOGS if timing_logs is None else timing_logs

        self.tokens = TokenManager(self.session, token_url=token_url or settings.GDRIVE_TOKEN_URL)
        self.executor = QueryExecutor(
            self.session,
            self.tokens,
            files_url=self.files_url,
            max_retries=settings.GDRIVE_RATE_LIMIT_RETRIES if rate_limit_retries is _UNSET else rate_limit_retries,
            backoff=settings.GDRIVE_RATE_LIMIT_BACKOFF if rate_limit_backoff is None else rate_limit_backoff,
        )
        self.resolver = PathResolver(self.executor, self.session.cache, timing_logs=self.timing_logs)

    async def authorize(self) -> None:
        """Make sure a valid access token is held; a no-op while it is."""
        await self.tokens.ensure_valid()

    async def index(self, path: Optional[str] = "") -> IndexView:
        """Resolve `path` and wrap it in a folder or file view.

        Raises:
            NotFound: if no object lives at `path`.
        """
        metadata = await self.get_metadata(path)
        if metadata is None:
            raise NotFound(404, "Path not found")
        if metadata.is_folder:
            return FolderView(metadata, self)
        return FileView(metadata, self)

    async def get_metadata(self, path: Optional[str] = "") -> Optional[RemoteObject]:
        return await self.resolver.resolve(path)

    async def list_files(self, folder_id: str) -> List[RemoteObject]:
        return await list_children(
            self.executor,
            folder_id,
            page_size=self.page_size,
            exclude_name=self.password_filename,
            timing_logs=self.timing_logs,
        )

    async def get_raw_data(self, file_id: str, range_header: str = "") -> RawContent:
        """Open the media stream of a file.

        Raises:
            RangeReadFailure: if Drive answers with a non-success status.
        """
        started = time.monotonic()
        headers = await self.tokens.auth_headers()
        if range_header:
            headers["Range"] = range_header
        http = await self.session.http()
        resp = await http.get(f"{self.files_url}/{file_id}", params={"alt": "media"}, headers=headers)
        if resp.status >= 400:
            try:
                result = await resp.json(content_type=None)
                error = (result.get("error") if isinstance(result, dict) else result) or {}
                message = error.get("message", "") if isinstance(error, dict) else str(error)
            except ValueError:
                message = await resp.text()
            finally:
                resp.release()
            log("ERROR", f"Raw data request failed: {resp.status} {message}", module="google_drive", file_id=file_id)
            raise RangeReadFailure(resp.status, message)
        log("INFO" if self.timing_logs else "DEBUG", "Raw data requested", module="google_drive",
            file_id=file_id, elapsed_ms=round((time.monotonic() - started) * 1000, 1))
        return RawContent(resp)

    async def close(self) -> None:
        await self.session.close()

    async def __aenter__(self) -> "GoogleDrive":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
        return False
