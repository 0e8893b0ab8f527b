"""drive_index/integrations/errors.py
Error taxonomy for Google Drive access.

Every failure the drive client raises on purpose is a `DriveError` carrying
the HTTP status and the server (or synthesized) message. Transport errors
from aiohttp are not wrapped and propagate as-is.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict


class ErrorKind(str, Enum):
    AUTHORIZATION_FAILURE = "authorization_failure"
    NOT_FOUND = "not_found"
    REQUEST_FAILURE = "request_failure"
    RANGE_READ_FAILURE = "range_read_failure"


class DriveError(Exception):
    """Base class for drive errors; subclasses fix the `kind`."""

    kind: ErrorKind

    def __init__(self, status: int, message: str) -> None:
        super().__init__(f"{self.kind.value} {status}: {message}")
        self.status = status
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.kind.value, "status": self.status, "message": self.message}


class AuthorizationFailure(DriveError):
    """The token endpoint rejected the exchange."""

    kind = ErrorKind.AUTHORIZATION_FAILURE


class NotFound(DriveError):
    """The path resolves to no remote object."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, status: int = 404, message: str = "Path not found") -> None:
        super().__init__(status, message)


class RequestFailure(DriveError):
    """The listing/search endpoint returned an error payload."""

    kind = ErrorKind.REQUEST_FAILURE


class RangeReadFailure(DriveError):
    """The media endpoint answered with a non-success status."""

    kind = ErrorKind.RANGE_READ_FAILURE
