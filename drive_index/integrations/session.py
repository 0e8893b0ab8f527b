"""drive_index/integrations/session.py
Per-client state shared by the drive components.

A `DriveSession` bundles what must live exactly as long as one client:
the OAuth credentials, the path cache and the aiohttp session. Components
receive it by reference; nothing here is process-global.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import aiohttp

from drive_index.integrations.models import RemoteObject
from drive_index.integrations.path_cache import PathCache


@dataclass
class Credentials:
    client_id: Optional[str]
    client_secret: Optional[str]
    refresh_token: Optional[str]
    access_token: Optional[str] = None
    # epoch seconds; None forces a refresh on first use
    expires_on: Optional[float] = None


class DriveSession:
    def __init__(self, credentials: Credentials, root_id: str = "root", http: Optional[aiohttp.ClientSession] = None):
        self.credentials = credentials
        self.root_id = root_id
        self.cache = PathCache(RemoteObject.root(root_id))
        self._http = http
        self._owns_http = http is None

    async def http(self) -> aiohttp.ClientSession:
        """Return the HTTP session, creating it inside the running loop if needed."""
        if self._http is None:
            self._http = aiohttp.ClientSession()
        return self._http

    async def close(self) -> None:
        # Injected sessions belong to the caller
        if self._owns_http and self._http is not None:
            await self._http.close()
            self._http = None
