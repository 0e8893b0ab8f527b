"""Minimal aiohttp-like session and response objects for tests.

`FakeResp` works both as `async with session.get(...)` and as
`await session.get(...)`, like aiohttp's request context manager.
"""
import time
from typing import Any, Dict, List, Optional


class FakeContent:
    def __init__(self, chunks: List[bytes]):
        self._chunks = chunks

    async def iter_chunked(self, n):
        for c in self._chunks:
            yield c


class FakeResp:
    def __init__(self, status=200, json_payload=None, text_payload="", content_chunks=None, headers=None):
        self.status = status
        self._json = json_payload if json_payload is not None else {}
        self._text = text_payload
        self.content = FakeContent(content_chunks or [b""])
        self.headers = headers or {}
        self.released = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.released = True
        return False

    def __await__(self):
        return self._self().__await__()

    async def _self(self):
        return self

    async def json(self, content_type="application/json"):
        if isinstance(self._json, Exception):
            raise self._json
        return self._json

    async def text(self):
        return self._text

    async def read(self):
        return b"".join(self.content._chunks)

    def release(self):
        self.released = True


class FakeHttp:
    """Replays queued responses and records every call."""

    def __init__(self, get=None, post=None):
        self.get_responses: List[FakeResp] = list(get or [])
        self.post_responses: List[FakeResp] = list(post or [])
        self.get_calls: List[Dict[str, Any]] = []
        self.post_calls: List[Dict[str, Any]] = []
        self.closed = False

    def get(self, url, params=None, headers=None):
        self.get_calls.append({"url": url, "params": params, "headers": headers})
        return self._next(self.get_responses, "GET", url)

    def post(self, url, data=None, headers=None):
        self.post_calls.append({"url": url, "data": data, "headers": headers})
        return self._next(self.post_responses, "POST", url)

    @staticmethod
    def _next(queue, method, url):
        if not queue:
            raise AssertionError(f"unexpected {method} {url}")
        return queue.pop(0)

    async def close(self):
        self.closed = True


def token_resp(token="tok-1", expires_in=3600):
    return FakeResp(json_payload={"access_token": token, "expires_in": expires_in})


def files_resp(*files, next_page_token: Optional[str] = None):
    payload: Dict[str, Any] = {"files": list(files)}
    if next_page_token:
        payload["nextPageToken"] = next_page_token
    return FakeResp(json_payload=payload)


def error_resp(status, message):
    return FakeResp(status=status, json_payload={"error": {"code": status, "message": message}})


def folder(id, name):
    return {"id": id, "name": name, "mimeType": "application/vnd.google-apps.folder"}


def file(id, name, size=10, mime="text/plain"):
    return {"id": id, "name": name, "mimeType": mime, "size": str(size), "modifiedTime": "2023-05-01T10:00:00.000Z"}


def make_drive(http, seeded=True, **kwargs):
    """GoogleDrive on a fake session; `seeded` pre-loads a valid access token."""
    from drive_index.integrations.google_drive_client import GoogleDrive

    if seeded:
        kwargs.setdefault("access_token", "seeded-token")
        kwargs.setdefault("expires_on", time.time() + 3600)
    kwargs.setdefault("rate_limit_backoff", 0)
    return GoogleDrive(
        client_id="cid",
        client_secret="secret",
        refresh_token="refresh-1",
        session=http,
        **kwargs,
    )
