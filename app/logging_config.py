"""
Structured logging configuration with request ids
"""
import contextvars
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger.json import JsonFormatter
from app.config import settings

# Request id shared across the handling of one HTTP request
request_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("request_id", default=None)

CONTEXT_FIELDS = ("user_id", "booking_id", "venue_id", "vendor_id", "duration_ms", "status_code")


class SolenniaJsonFormatter(JsonFormatter):
    """JSON formatter adding timestamp, service name and request id"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = "solennia-api"

        request_id = request_id_var.get()
        if request_id:
            log_record["request_id"] = request_id

        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_record[field] = getattr(record, field)


class RequestIdFilter(logging.Filter):
    """Expose the request id to plain-text formats"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or "-"
        return True


_configured = False


def setup_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> logging.Logger:
    """Configure the root logger once."""
    global _configured

    root_logger = logging.getLogger()
    if _configured:
        return root_logger

    level = level or settings.log_level
    json_output = settings.log_json if json_output is None else json_output

    handler = logging.StreamHandler()
    if json_output:
        handler.setFormatter(SolenniaJsonFormatter("%(name)s %(message)s"))
    else:
        handler.addFilter(RequestIdFilter())
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s")
        )

    root_logger.setLevel(level.upper())
    root_logger.addHandler(handler)

    # Reduce noise from libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    _configured = True
    return root_logger


def generate_request_id() -> str:
    return uuid.uuid4().hex
