"""drive_index/integrations/path_cache.py
Path -> metadata cache for the path resolver.

Keys are normalized absolute paths with a leading and trailing slash
("/a/b/"). Values are either a `RemoteObject` or the `NOT_FOUND` marker,
so a negative lookup is remembered just like a positive one. Entries are
never evicted for the lifetime of the owning session.
"""
from __future__ import annotations

import re
from typing import Dict, List, Optional, Union

from drive_index.integrations.models import RemoteObject

ROOT_PATH = "/"

_SLASHES = re.compile(r"/+")


class _NotFound:
    """Marker for a path known not to exist."""

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND = _NotFound()

CacheEntry = Union[RemoteObject, _NotFound]


def normalize_path(path: Optional[str] = "") -> str:
    """Collapse repeated slashes and wrap the path in single slashes.

    "", "/", "a//b/", "/a/b" all become either "/" or "/a/b/".
    """
    return _SLASHES.sub("/", f"/{path or ''}/")


def path_segments(path: str) -> List[str]:
    """Raw (still percent-encoded) segments of a normalized path."""
    return [s for s in path.strip("/").split("/") if s]


def escape_query_value(value: str) -> str:
    """Escape a value for a single-quoted Drive query literal."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


class PathCache:
    def __init__(self, root: RemoteObject) -> None:
        self._entries: Dict[str, CacheEntry] = {ROOT_PATH: root}

    @property
    def root(self) -> RemoteObject:
        return self._entries[ROOT_PATH]  # type: ignore[return-value]

    def get(self, path: str) -> Optional[CacheEntry]:
        """Cached entry for a normalized path, or None when never looked up."""
        return self._entries.get(path)

    def put(self, path: str, entry: CacheEntry) -> None:
        self._entries[path] = entry

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)
