"""Installment schedule generation for service billing"""

import logging
from datetime import date
from typing import Iterable, List

from billing_engine.config import settings
from billing_engine.domain.exceptions import IncompleteSchedule, InvalidAmount, InvalidInstallmentCount
from billing_engine.domain.models import Installment, ScheduleEntry
from billing_engine.utils.date_utils import add_months

logger = logging.getLogger(__name__)


def generate_installment_schedule(
    amount_cents: int,
    count: int,
    first_due_date: date,
) -> List[ScheduleEntry]:
    """
    Split a service amount into monthly installments.

    Requirements:
    - `count` equal installments (1..max_installments)
    - Due dates one calendar month apart, starting at first_due_date
    - Day of month is kept where it exists, otherwise clamped to month end
    - Last installment absorbs the rounding remainder so the sum is exact

    Args:
        amount_cents: Total service amount, must be > 0
        count: Number of installments
        first_due_date: Due date of installment 1

    Returns:
        List of ScheduleEntry numbered 1..count

    Example:
        R$ 100,00 in 3 → [3333, 3333, 3334]
        31/01/2024 x3 → 31/01, 29/02, 31/03
    """
    if isinstance(amount_cents, bool) or not isinstance(amount_cents, int) or amount_cents <= 0:
        raise InvalidAmount(f"Amount must be positive integer cents, got {amount_cents!r}")

    if (
        isinstance(count, bool)
        or not isinstance(count, int)
        or not 1 <= count <= settings.max_installments
    ):
        raise InvalidInstallmentCount(
            f"Installment count must be between 1 and {settings.max_installments}, got {count!r}"
        )

    base_amount = amount_cents // count
    last_amount = amount_cents - base_amount * (count - 1)

    schedule = []
    for i in range(count):
        # Always offset from the first date so a clamped month does not shift the rest
        due_date = add_months(first_due_date, i)
        amount = last_amount if i == count - 1 else base_amount
        schedule.append(ScheduleEntry(installment_number=i + 1, amount_cents=amount, due_date=due_date))

    logger.debug(
        "Generated installment schedule",
        extra={"amount_cents": amount_cents, "count": count, "first_due_date": first_due_date.isoformat()},
    )
    return schedule


def materialize_installments(service_id: str, entries: Iterable[ScheduleEntry]) -> List[Installment]:
    """Turn schedule rows into unpaid installments of a service (ids are assigned by the store)"""
    installments = []
    for entry in entries:
        if entry.due_date is None:
            raise IncompleteSchedule(
                f"Installment {entry.installment_number} has no due date",
                [entry.installment_number],
            )
        installments.append(
            Installment(
                id=None,
                service_id=service_id,
                installment_number=entry.installment_number,
                amount_cents=entry.amount_cents,
                due_date=entry.due_date,
            )
        )
    return installments
