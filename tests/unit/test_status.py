"""Unit tests for payment status classification"""

from datetime import date, datetime, timedelta, timezone

from billing_engine.domain.models import Installment, PaymentStatus
from billing_engine.domain.status import classify_payment_status, installment_status


def _installment(due_date, paid_at=None):
    return Installment(
        id="i1",
        service_id="s1",
        installment_number=1,
        amount_cents=1000,
        due_date=due_date,
        paid_at=paid_at,
    )


def test_due_yesterday_unpaid_is_overdue(today):
    assert installment_status(_installment(today - timedelta(days=1)), today) is PaymentStatus.OVERDUE


def test_paid_wins_over_due_date(today):
    paid_at = datetime(2020, 1, 1, tzinfo=timezone.utc)
    assert installment_status(_installment(today - timedelta(days=400), paid_at), today) is PaymentStatus.PAID
    assert installment_status(_installment(today + timedelta(days=30), paid_at), today) is PaymentStatus.PAID


def test_due_today_is_pending(today):
    assert installment_status(_installment(today), today) is PaymentStatus.PENDING


def test_due_later_is_pending(today):
    assert installment_status(_installment(today + timedelta(days=1)), today) is PaymentStatus.PENDING


def test_time_of_day_is_ignored():
    """Test late-evening 'now' does not push a same-day due date into overdue"""
    now = datetime(2024, 3, 15, 23, 59, 59)
    due = datetime(2024, 3, 15, 0, 0, 0)

    assert classify_payment_status(due, None, now) is PaymentStatus.PENDING
    assert classify_payment_status(date(2024, 3, 14), None, now) is PaymentStatus.OVERDUE


def test_defaults_to_wall_clock():
    assert classify_payment_status(date.today(), None) is PaymentStatus.PENDING
    assert classify_payment_status(date.today() - timedelta(days=1), None) is PaymentStatus.OVERDUE
