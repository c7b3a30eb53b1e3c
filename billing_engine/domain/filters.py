"""Filtering, ordering, search and pagination of listings"""

import math
from datetime import date
from typing import Iterable, List, Optional

from billing_engine.config import settings
from billing_engine.domain.aggregation import InstallmentSource, flatten_installments, monthly_summary
from billing_engine.domain.models import (
    Client,
    Installment,
    MonthView,
    Page,
    PaymentStatus,
    Service,
    StatusFilter,
)
from billing_engine.domain.status import installment_status


def filter_by_status(
    installments: Iterable[Installment],
    status_filter: StatusFilter,
    today: Optional[date] = None,
) -> List[Installment]:
    """Keep installments whose derived status matches the filter"""
    status_filter = StatusFilter(status_filter)
    if status_filter is StatusFilter.ALL:
        return list(installments)

    wanted = PaymentStatus(status_filter.value)
    return [inst for inst in installments if installment_status(inst, today) is wanted]


def sort_by_due_date(installments: Iterable[Installment]) -> List[Installment]:
    return sorted(installments, key=lambda inst: (inst.due_date, inst.installment_number))


def sort_by_installment_number(installments: Iterable[Installment]) -> List[Installment]:
    return sorted(installments, key=lambda inst: inst.installment_number)


def month_view(
    source: InstallmentSource,
    year: int,
    month: int,
    status_filter: StatusFilter = StatusFilter.ALL,
    today: Optional[date] = None,
) -> MonthView:
    """
    Everything the month screen shows.

    Totals always describe the whole month; only the installment list is
    narrowed by the status filter.
    """
    month_installments = [
        inst
        for inst in flatten_installments(source)
        if inst.due_date.year == year and inst.due_date.month == month
    ]

    # Display-only split of the uncollected amount
    pending_amount = 0
    overdue_amount = 0
    for inst in month_installments:
        status = installment_status(inst, today)
        if status is PaymentStatus.PENDING:
            pending_amount += inst.amount_cents
        elif status is PaymentStatus.OVERDUE:
            overdue_amount += inst.amount_cents

    return MonthView(
        summary=monthly_summary(month_installments, year, month),
        installments=sort_by_due_date(filter_by_status(month_installments, status_filter, today)),
        pending_cents=pending_amount,
        overdue_cents=overdue_amount,
    )


def search_clients(clients: Iterable[Client], term: str) -> List[Client]:
    """Case-insensitive match on client name or email"""
    needle = (term or "").strip().lower()
    if not needle:
        return list(clients)
    return [c for c in clients if needle in c.name.lower() or needle in c.email.lower()]


def search_services(services: Iterable[Service], clients: Iterable[Client], term: str) -> List[Service]:
    """Case-insensitive match on the name of the service's client"""
    needle = (term or "").strip().lower()
    if not needle:
        return list(services)

    client_names = {c.id: c.name.lower() for c in clients}
    return [s for s in services if needle in client_names.get(s.client_id, "")]


def paginate(items: Iterable, page: int, per_page: Optional[int] = None) -> Page:
    """1-based page of a listing, with the page number clamped into range"""
    per_page = per_page or settings.page_size
    items = list(items)
    total_pages = math.ceil(len(items) / per_page)

    page = max(1, min(page, total_pages)) if total_pages else 1
    start = (page - 1) * per_page

    return Page(
        items=items[start:start + per_page],
        page=page,
        per_page=per_page,
        total_items=len(items),
        total_pages=total_pages,
    )
