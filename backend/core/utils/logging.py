"""
Structured logging for the reviews service.

Every entry is a single JSON line. Review and product ids are promoted to
top-level keys so log queries can follow one review (or every review of a
product) across submission, votes, reports and moderation.
"""
import logging
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID

SERVICE_NAME = "reviews-api"


class StructuredLogger:
    """
    Structured logger that outputs JSON formatted logs
    """

    def __init__(self, name: str = "reviews"):
        self.logger = logging.getLogger(name)

    def _create_log_entry(
        self,
        level: str,
        message: str,
        user_id: Optional[UUID] = None,
        review_id: Optional[UUID] = None,
        product_id: Optional[UUID] = None,
        metadata: Optional[Dict[str, Any]] = None,
        exception: Optional[Exception] = None
    ) -> Dict[str, Any]:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level.upper(),
            "service": SERVICE_NAME,
            "message": message,
        }

        for key, value in (("user_id", user_id), ("review_id", review_id), ("product_id", product_id)):
            if value:
                log_entry[key] = str(value)

        if metadata:
            log_entry["metadata"] = metadata

        if exception:
            log_entry["exception"] = {
                "type": type(exception).__name__,
                "message": str(exception),
            }

        return log_entry

    def _emit(self, level: int, name: str, message: str, **fields):
        if not self.logger.isEnabledFor(level):
            return
        log_entry = self._create_log_entry(name, message, **fields)
        self.logger.log(level, json.dumps(log_entry, default=str))

    def info(self, message: str, **fields):
        """Log info message; accepts user_id, review_id, product_id and metadata"""
        self._emit(logging.INFO, "info", message, **fields)

    def warning(self, message: str, **fields):
        self._emit(logging.WARNING, "warning", message, **fields)

    def error(self, message: str, **fields):
        """Log error message; pass exception= to record the failure type"""
        self._emit(logging.ERROR, "error", message, **fields)


# Create global logger instance
structured_logger = StructuredLogger()
