"""drive_index/integrations/token_manager.py
Access-token lifecycle for the drive client.
"""
from __future__ import annotations

import asyncio
import time
from typing import Callable, Dict

from drive_index.integrations.errors import AuthorizationFailure
from drive_index.integrations.oauth import post_token_form
from drive_index.integrations.session import DriveSession
from drive_index.monitoring.logger import log

TOKEN_URL = "https://www.googleapis.com/oauth2/v4/token"

# Seconds shaved off the declared lifetime
EXPIRY_MARGIN = 300


class TokenManager:
    """Keeps the session's access token valid.

    - Refreshes through the token endpoint only when no expiry is held or it
      has passed
    - Stores expiry as now + expires_in - EXPIRY_MARGIN
    - Concurrent callers share a single refresh
    """

    def __init__(self, session: DriveSession, token_url: str = TOKEN_URL, clock: Callable[[], float] = time.time):
        self._session = session
        self._token_url = token_url
        self._clock = clock
        self._lock = asyncio.Lock()

    def is_valid(self) -> bool:
        expires_on = self._session.credentials.expires_on
        return bool(expires_on) and expires_on > self._clock()

    async def ensure_valid(self) -> None:
        if self.is_valid():
            return
        async with self._lock:
            # another task may have refreshed while we waited
            if self.is_valid():
                return
            await self._refresh()

    async def _refresh(self) -> None:
        creds = self._session.credentials
        missing = [
            name for name, value in (
                ("GDRIVE_CLIENT_ID", creds.client_id),
                ("GDRIVE_CLIENT_SECRET", creds.client_secret),
                ("GDRIVE_REFRESH_TOKEN", creds.refresh_token),
            ) if not value
        ]
        if missing:
            log("ERROR", "Google Drive credentials not configured", module="token_manager", missing=missing)
            raise AuthorizationFailure(401, f"Missing credentials: {', '.join(missing)}")

        started = time.monotonic()
        http = await self._session.http()
        result = await post_token_form(http, self._token_url, {
            "client_id": creds.client_id,
            "client_secret": creds.client_secret,
            "refresh_token": creds.refresh_token,
            "grant_type": "refresh_token",
        })
        creds.expires_on = self._clock() + int(result["expires_in"]) - EXPIRY_MARGIN
        creds.access_token = result["access_token"]
        log("INFO", "Google Drive authorized", module="token_manager",
            elapsed_ms=round((time.monotonic() - started) * 1000, 1))

    async def auth_headers(self) -> Dict[str, str]:
        await self.ensure_valid()
        return {"Authorization": f"Bearer {self._session.credentials.access_token}"}
