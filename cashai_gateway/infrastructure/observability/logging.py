"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = "cashai-gateway"

# httpx logs every Plaid call at INFO and uvicorn.access repeats the middleware access line
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


class CustomJsonFormatter(JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def __init__(self, *args: Any, service_name: str = SERVICE_NAME, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service_name


def setup_logging(level: str = "INFO", service_name: str = SERVICE_NAME) -> None:
    """Send JSON records for this service to stdout, replacing any prior handlers"""
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s", service_name=service_name))
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def mask_token(token: Optional[str], visible: int = 4) -> str:
    """Redact a Plaid token for logs, keeping only the last few characters"""
    if not token:
        return "<empty>"
    if len(token) <= visible:
        return "*" * len(token)
    return f"...{token[-visible:]}"


def log_retrieval(
    request_id: str,
    access_token: str,
    outcome: str,
    record_count: int,
    total: int,
    coverage_gap_days: Optional[int],
    duration_ms: float,
) -> None:
    """Log structured retrieval outcome for analysis"""
    logging.info(
        "Transactions retrieved",
        extra={
            "request_id": request_id,
            "access_token": mask_token(access_token),
            "step": "transactions_complete",
            "outcome": outcome,
            "record_count": record_count,
            "total_transactions": total,
            "coverage_gap_days": coverage_gap_days,
            "duration_ms": duration_ms,
        },
    )
