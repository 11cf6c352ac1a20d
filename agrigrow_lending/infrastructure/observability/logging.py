"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from agrigrow_lending.config import settings


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


def log_schedule_created(
    request_id: str,
    loan_id: str,
    installment_count: int,
    total_amount: str,
    duration_ms: float,
) -> None:
    """Log a persisted repayment schedule"""
    logging.info(
        "Schedule created",
        extra={
            "request_id": request_id,
            "loan_id": loan_id,
            "step": "schedule_created",
            "installment_count": installment_count,
            "total_amount": total_amount,
            "duration_ms": duration_ms,
        },
    )


def log_sweep(request_id: str, as_of_date: str, loans_checked: int, marked_overdue: int) -> None:
    """Log the outcome of an overdue sweep"""
    logging.info(
        "Overdue sweep completed",
        extra={
            "request_id": request_id,
            "step": "overdue_sweep",
            "as_of_date": as_of_date,
            "loans_checked": loans_checked,
            "marked_overdue": marked_overdue,
        },
    )


def log_assessment(request_id: str, loan_id: str | None, score: int, tier: str, factors: list[str]) -> None:
    """Log a risk assessment for later analysis"""
    logging.info(
        "Risk assessment completed",
        extra={
            "request_id": request_id,
            "loan_id": loan_id,
            "step": "risk_assessment",
            "score": score,
            "tier": tier,
            "factors": factors,
        },
    )
