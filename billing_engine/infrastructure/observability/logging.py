"""JSON logging setup and billing event log helpers"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO

from pythonjsonlogger import jsonlogger

from billing_engine.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Adds UTC timestamp, level name and the configured service name to every record"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: Optional[str] = None, stream: Optional[TextIO] = None) -> None:
    """Send every log record to one JSON handler (stdout unless a stream is given)"""
    root = logging.getLogger()
    root.setLevel(level or settings.log_level)
    root.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    root.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def log_schedule_prepared(
    client_id: str,
    amount_cents: int,
    installment_count: int,
    custom: bool,
) -> None:
    """Log a service schedule that passed generation or validation"""
    logging.getLogger("billing_engine.schedule").info(
        "Schedule prepared",
        extra={
            "client_id": client_id,
            "step": "schedule_prepared",
            "schedule_kind": "custom" if custom else "generated",
            "amount_cents": amount_cents,
            "installment_count": installment_count,
        },
    )


def log_installment_paid(
    installment_id: str,
    service_id: str,
    amount_cents: int,
    paid_at: Optional[datetime],
) -> None:
    """Log an installment flipped to paid"""
    logging.getLogger("billing_engine.ledger").info(
        "Installment marked as paid",
        extra={
            "installment_id": installment_id,
            "service_id": service_id,
            "step": "installment_paid",
            "amount_cents": amount_cents,
            "paid_at": paid_at.isoformat() if paid_at else None,
        },
    )
