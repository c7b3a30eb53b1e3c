"""Preparation of service and company requests before they are sent to the store"""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import List, Optional

from billing_engine.config import settings
from billing_engine.domain.exceptions import (
    AmountMismatch,
    IncompleteSchedule,
    InvalidAmount,
    InvalidDateFormat,
    InvalidInstallmentCount,
)
from billing_engine.domain.installments import generate_installment_schedule
from billing_engine.domain.models import Company, PaymentMethod, ScheduleEntry, Service
from billing_engine.domain.schedule import validate_custom_schedule
from billing_engine.infrastructure.observability.logging import log_schedule_prepared
from billing_engine.infrastructure.observability.metrics import (
    schedule_prepared_counter,
    schedule_rejected_counter,
)


@dataclass
class ServiceDraft:
    """Service form contents as entered by the user"""

    company_id: str
    client_id: str
    description: str
    amount_cents: int
    payment_method: PaymentMethod
    first_payment_date: Optional[date]
    service_date: Optional[date]
    installment_count: int = 1
    template_notification_message: Optional[str] = None
    id: Optional[str] = None


@dataclass
class PreparedService:
    """A service ready to be created or updated, with the schedule it will get"""

    service: Service
    schedule: List[ScheduleEntry] = field(default_factory=list)

    @property
    def is_custom(self) -> bool:
        return self.service.custom_installments is not None


_REJECTION_REASONS = {
    IncompleteSchedule: "incomplete",
    AmountMismatch: "amount_mismatch",
    InvalidAmount: "invalid_amount",
    InvalidInstallmentCount: "invalid_count",
    InvalidDateFormat: "invalid_date",
}


def _check_draft(draft: ServiceDraft) -> None:
    if not draft.client_id or not draft.description or not draft.description.strip():
        raise ValueError("Client and description are required")
    if isinstance(draft.amount_cents, bool) or not isinstance(draft.amount_cents, int) or draft.amount_cents <= 0:
        raise InvalidAmount(f"Service amount must be positive integer cents, got {draft.amount_cents!r}")
    if draft.first_payment_date is None or draft.service_date is None:
        raise InvalidDateFormat("First payment date and service date are required")


def prepare_service(
    draft: ServiceDraft,
    custom_entries: Optional[List[ScheduleEntry]] = None,
) -> PreparedService:
    """
    Validate a service form and attach its schedule.

    Flow:
    1. Required fields, positive amount and both dates
    2a. Custom entries: validate them, installment_count follows their length
    2b. Otherwise: generate the even monthly split as a preview
    3. Return the service; nothing is sent or stored here

    Raises on the first problem, leaving the caller's state untouched.
    """
    try:
        _check_draft(draft)

        if custom_entries is not None:
            schedule = validate_custom_schedule(draft.amount_cents, custom_entries)
            count = len(schedule)
            if count > settings.max_installments:
                raise InvalidInstallmentCount(
                    f"Installment count must be between 1 and {settings.max_installments}, got {count}"
                )
        else:
            schedule = generate_installment_schedule(
                draft.amount_cents, draft.installment_count, draft.first_payment_date
            )
            count = draft.installment_count

    except tuple(_REJECTION_REASONS) as e:
        schedule_rejected_counter.labels(reason=_REJECTION_REASONS[type(e)]).inc()
        raise

    service = Service(
        id=draft.id,
        company_id=draft.company_id,
        client_id=draft.client_id,
        description=draft.description.strip(),
        amount_cents=draft.amount_cents,
        payment_method=PaymentMethod(draft.payment_method),
        first_payment_date=draft.first_payment_date,
        service_date=draft.service_date,
        installment_count=count,
        template_notification_message=draft.template_notification_message or None,
        custom_installments=[replace(entry) for entry in schedule] if custom_entries is not None else None,
    )

    kind = "custom" if custom_entries is not None else "generated"
    schedule_prepared_counter.labels(kind=kind).inc()
    log_schedule_prepared(draft.client_id, draft.amount_cents, count, custom_entries is not None)

    return PreparedService(service=service, schedule=schedule)


def prepare_company(
    user_id: str,
    name: str,
    subscription_plan_id: str,
    url_logo: Optional[str] = None,
    pix_code: Optional[str] = None,
) -> Company:
    """Company setup request; the chosen plan is passed in explicitly"""
    if not user_id:
        raise ValueError("A company needs an owner")
    if not name or not name.strip():
        raise ValueError("Company name is required")
    if not subscription_plan_id:
        raise ValueError("A subscription plan must be selected")

    return Company(
        id=None,
        user_id=user_id,
        subscription_plan_id=subscription_plan_id,
        name=name.strip(),
        url_logo=url_logo or None,
        pix_code=pix_code or None,
    )
