"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from pos_gateway.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_sale(
    request_id: str,
    company_id: str,
    sale_id: str,
    total_cents: int,
    payment_method: str,
    duration_ms: float,
) -> None:
    """Log structured sale outcome for analysis"""
    logging.info(
        "Sale completed",
        extra={
            "request_id": request_id,
            "company_id": company_id,
            "sale_id": sale_id,
            "step": "sale_complete",
            "total_cents": total_cents,
            "payment_method": payment_method,
            "duration_ms": duration_ms,
        },
    )


def log_checkout_rejected(request_id: str, company_id: str, reason: str, detail: str) -> None:
    """Log a rejected checkout action"""
    logging.warning(
        "Checkout rejected",
        extra={
            "request_id": request_id,
            "company_id": company_id,
            "step": "checkout_rejected",
            "reason": reason,
            "detail": detail,
        },
    )
