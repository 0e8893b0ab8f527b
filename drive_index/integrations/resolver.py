"""drive_index/integrations/resolver.py
Resolve human-readable paths to remote objects.

Drive only knows parent/child links between opaque ids, so "a/b/c" is
resolved one segment at a time from the root, with every intermediate
path recorded in the session's `PathCache`. A segment that does not exist
is cached as `NOT_FOUND` and ends the walk: deeper segments are never
queried, now or in later calls sharing that prefix.
"""
from __future__ import annotations

import time
from typing import Optional
from urllib.parse import unquote

from drive_index.integrations.models import FILE_ATTRS, RemoteObject
from drive_index.integrations.path_cache import (
    NOT_FOUND,
    CacheEntry,
    PathCache,
    escape_query_value,
    normalize_path,
    path_segments,
)
from drive_index.integrations.query import QueryExecutor
from drive_index.monitoring.logger import log


class PathResolver:
    def __init__(self, executor: QueryExecutor, cache: PathCache, timing_logs: bool = False):
        self._executor = executor
        self._cache = cache
        self._timing_logs = timing_logs

    async def resolve(self, path: Optional[str] = "") -> Optional[RemoteObject]:
        """Return the object at `path`, or None if it does not exist."""
        key = normalize_path(path)
        entry = self._cache.get(key)
        if entry is None:
            await self._walk(key)
            entry = self._cache.get(key)
        return entry or None

    async def _walk(self, key: str) -> None:
        full_path = "/"
        parent = self._cache.root
        for segment in path_segments(key):
            full_path += segment + "/"
            entry = self._cache.get(full_path)
            if entry is None:
                entry = await self._lookup(parent, unquote(segment), full_path)
                self._cache.put(full_path, entry)
            if entry is NOT_FOUND:
                return
            parent = entry

    async def _lookup(self, parent: RemoteObject, name: str, full_path: str) -> CacheEntry:
        started = time.monotonic()
        result = await self._executor.request({
            "q": (
                f"'{escape_query_value(parent.id)}' in parents"
                f" and name = '{escape_query_value(name)}' and trashed = false"
            ),
            "fields": f"files({FILE_ATTRS})",
            "pageSize": 1,
        })
        files = result.get("files") or []
        log("INFO" if self._timing_logs else "DEBUG", "Metadata requested", module="resolver",
            path=full_path, found=bool(files), elapsed_ms=round((time.monotonic() - started) * 1000, 1))
        return RemoteObject.from_api(files[0]) if files else NOT_FOUND
