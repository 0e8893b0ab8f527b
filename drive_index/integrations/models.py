"""drive_index/integrations/models.py
Remote object metadata and Drive API constants.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"

# Attribute set requested for every file resource
FILE_ATTRS = (
    "id, name, mimeType, size, modifiedTime, description, "
    "iconLink, thumbnailLink, imageMediaMetadata"
)


def query_params(params: Mapping[str, Any]) -> Dict[str, str]:
    """Drop empty values and stringify the rest for a query string."""
    out: Dict[str, str] = {}
    for key, value in params.items():
        if not value:
            continue
        if isinstance(value, bool):
            out[key] = "true"
        else:
            out[key] = str(value)
    return out


def _parse_time(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    # RFC 3339 with a trailing Z
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@dataclass(frozen=True)
class RemoteObject:
    """Metadata of a file or folder in the remote store."""
    id: str
    name: str = ""
    mime_type: str = ""
    size: Optional[int] = None
    modified_time: Optional[datetime] = None
    description: Optional[str] = None
    icon_link: Optional[str] = None
    thumbnail_link: Optional[str] = None
    image_media_metadata: Optional[Dict[str, Any]] = None

    @property
    def is_folder(self) -> bool:
        return self.mime_type == FOLDER_MIME_TYPE

    @classmethod
    def from_api(cls, raw: Mapping[str, Any]) -> "RemoteObject":
        size = raw.get("size")
        return cls(
            id=raw["id"],
            name=raw.get("name", ""),
            mime_type=raw.get("mimeType", ""),
            size=int(size) if size is not None else None,
            modified_time=_parse_time(raw.get("modifiedTime")),
            description=raw.get("description"),
            icon_link=raw.get("iconLink"),
            thumbnail_link=raw.get("thumbnailLink"),
            image_media_metadata=raw.get("imageMediaMetadata"),
        )

    @classmethod
    def root(cls, root_id: str) -> "RemoteObject":
        """Sentinel folder seeded at "/" in every path cache."""
        return cls(id=root_id, mime_type=FOLDER_MIME_TYPE)

    def to_dict(self) -> Dict[str, Any]:
        """Render with the Drive API field names plus `isFolder`."""
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "mimeType": self.mime_type,
            "size": self.size,
            "modifiedTime": self.modified_time.isoformat() if self.modified_time else None,
            "description": self.description,
            "iconLink": self.icon_link,
            "thumbnailLink": self.thumbnail_link,
            "imageMediaMetadata": self.image_media_metadata,
        }
        data = {k: v for k, v in data.items() if v is not None}
        data["isFolder"] = self.is_folder
        return data
