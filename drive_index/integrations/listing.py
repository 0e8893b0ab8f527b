"""drive_index/integrations/listing.py
Folder listing across result pages.
"""
from __future__ import annotations

import time
from typing import List

from drive_index.integrations.models import FILE_ATTRS, RemoteObject
from drive_index.integrations.path_cache import escape_query_value
from drive_index.integrations.query import QueryExecutor
from drive_index.monitoring.logger import log

PASSWORD_FILENAME = ".password"


async def list_children(
    executor: QueryExecutor,
    parent_id: str,
    page_size: int = 1000,
    exclude_name: str = PASSWORD_FILENAME,
    timing_logs: bool = False,
) -> List[RemoteObject]:
    """Return every non-trashed child of `parent_id` in server order.

    Folders come first, then names in lexicographic order, as requested via
    `orderBy`; pages are concatenated without re-sorting.
    """
    query = f"'{escape_query_value(parent_id)}' in parents and trashed = false"
    if exclude_name:
        query += f" and name != '{escape_query_value(exclude_name)}'"
    params = {
        "q": query,
        "fields": f"nextPageToken, files({FILE_ATTRS})",
        "pageSize": page_size,
        "orderBy": "folder, name",
        "pageToken": None,
    }

    items: List[RemoteObject] = []
    page = 0
    while True:
        started = time.monotonic()
        result = await executor.request(params)
        page += 1
        items.extend(RemoteObject.from_api(raw) for raw in result.get("files", []))
        log("INFO" if timing_logs else "DEBUG", "Folder page fetched", module="listing",
            folder_id=parent_id, page=page, elapsed_ms=round((time.monotonic() - started) * 1000, 1))

        page_token = result.get("nextPageToken")
        if not page_token:
            return items
        params = {**params, "pageToken": page_token}
