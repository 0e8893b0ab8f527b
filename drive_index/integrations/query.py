"""drive_index/integrations/query.py
Authenticated list/search requests against the Drive files endpoint.
"""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

from drive_index.integrations.errors import RequestFailure
from drive_index.integrations.models import query_params
from drive_index.integrations.session import DriveSession
from drive_index.integrations.token_manager import TokenManager
from drive_index.monitoring.logger import log

FILES_URL = "https://www.googleapis.com/drive/v3/files"

# Prefix of the error message Google sends when throttling a user
RATE_LIMIT_MARKER = "User Rate Limit Exceeded"

MAX_BACKOFF = 30.0


class QueryExecutor:
    """Issues one files.list request per call, retrying rate-limited ones.

    `max_retries=None` keeps retrying for as long as the server throttles.
    Otherwise the rate-limit error surfaces as `RequestFailure` once the
    retries are used up. Delay before retry n is `backoff * 2 ** (n - 1)`, capped at MAX_BACKOFF.
    """

    def __init__(
        self,
        session: DriveSession,
        tokens: TokenManager,
        files_url: str = FILES_URL,
        max_retries: Optional[int] = 8,
        backoff: float = 0.5,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self._session = session
        self._tokens = tokens
        self._files_url = files_url
        self._max_retries = max_retries
        self._backoff = backoff
        self._sleep = sleep

    def _may_retry(self, attempt: int) -> bool:
        return self._max_retries is None or attempt < self._max_retries

    async def request(self, params: Mapping[str, Any]) -> Dict[str, Any]:
        """Return the decoded JSON body of a successful files.list call.

        Raises:
            AuthorizationFailure: if the token refresh is rejected.
            RequestFailure: for any other error payload.
        """
        attempt = 0
        while True:
            # every attempt re-checks the token; a long retry run can outlive it
            headers = await self._tokens.auth_headers()
            http = await self._session.http()
            async with http.get(self._files_url, params=query_params(params), headers=headers) as resp:
                status = resp.status
                try:
                    result = await resp.json(content_type=None)
                except ValueError:
                    # non-JSON error pages, e.g. an HTML 502 from the front end
                    result = {"error": {"message": await resp.text()}}

            error = result.get("error") if isinstance(result, dict) else {"message": str(result)}
            if not error:
                return result

            message = error.get("message", "") if isinstance(error, dict) else str(error)
            if message.startswith(RATE_LIMIT_MARKER):
                if self._may_retry(attempt):
                    attempt += 1
                    delay = min(self._backoff * (2 ** (attempt - 1)), MAX_BACKOFF)
                    log("WARNING", "Drive rate limit exceeded, retrying", module="query", attempt=attempt, delay_s=delay)
                    if delay > 0:
                        await self._sleep(delay)
                    continue
                log("ERROR", "Drive rate limit retries exhausted", module="query", attempts=attempt + 1)
            else:
                log("ERROR", f"Drive request failed: {status} {message}", module="query", status=status)
            raise RequestFailure(status, message)
