# drive_index/monitoring/logger.py
"""
Structured JSON logger for the drive index.
"""
import logging
import json
from datetime import datetime, timezone

from drive_index.config import settings

# LogRecord attributes that are not structured fields
_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def get_request_context():
    # Import lazily to avoid import cycles
    from drive_index.monitoring.context import get_request_context as _g
    return _g()


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "component": getattr(record, "component", None) or record.module,
            "request_id": getattr(record, "request_id", None),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED and key not in log_record:
                log_record[key] = value
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_record, default=str)


logger = logging.getLogger("drive_index")
logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
handler = logging.StreamHandler()
handler.setFormatter(JsonFormatter())
logger.handlers = [handler]


# Helper to log with context
def log(level: str, message: str, component: str = None, request_id: str = None, **kwargs):
    # Map legacy 'module' kwarg to 'component' to avoid LogRecord collision
    if "module" in kwargs and not component:
        component = kwargs.pop("module")
    kwargs.pop("module", None)
    exc_info = kwargs.pop("exc_info", None)
    if request_id is None:
        request_id = get_request_context().get("request_id")

    extra = {
        "request_id": request_id,
        "component": component,
        **kwargs
    }
    logger.log(getattr(logging, level.upper(), logging.INFO), message, extra=extra, exc_info=exc_info)
