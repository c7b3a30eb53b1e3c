"""Payment status classification, computed on every read and never stored"""

from datetime import date, datetime
from typing import Optional, Union

from billing_engine.domain.models import Installment, PaymentStatus


def _date_only(value: Union[date, datetime]) -> date:
    # datetime is a subclass of date, so check it first
    if isinstance(value, datetime):
        return value.date()
    return value


def classify_payment_status(
    due_date: Union[date, datetime],
    paid_at: Optional[datetime],
    today: Optional[Union[date, datetime]] = None,
) -> PaymentStatus:
    """
    Derive the display status of an installment.

    - paid: paid_at is set (wins over any due date)
    - overdue: unpaid and due strictly before today
    - pending: unpaid and due today or later

    Time of day is ignored on both sides.
    """
    if paid_at is not None:
        return PaymentStatus.PAID

    today_only = _date_only(today) if today is not None else date.today()
    if _date_only(due_date) < today_only:
        return PaymentStatus.OVERDUE
    return PaymentStatus.PENDING


def installment_status(
    installment: Installment,
    today: Optional[Union[date, datetime]] = None,
) -> PaymentStatus:
    return classify_payment_status(installment.due_date, installment.paid_at, today)
