"""Revenue aggregation engine - rolls installments up into monthly and annual summaries"""

from typing import Dict, Iterable, List, Mapping, Union

from billing_engine.domain.models import (
    AnnualSummary,
    ClientSummary,
    CompanyTotals,
    Installment,
    MonthlySummary,
    Service,
    ServiceProgress,
)

InstallmentSource = Union[Iterable[Installment], Mapping[str, Iterable[Installment]]]


def flatten_installments(source: InstallmentSource) -> List[Installment]:
    """Accept either a flat iterable or a service_id -> installments mapping"""
    if isinstance(source, Mapping):
        return [inst for installments in source.values() for inst in installments]
    return list(source)


def _payment_rate(paid_cents: int, total_cents: int) -> float:
    return paid_cents / total_cents if total_cents > 0 else 0.0


def monthly_summary(source: InstallmentSource, year: int, month: int) -> MonthlySummary:
    """
    Totals for installments due in a given month.

    pending_cents folds overdue and not-yet-due together as "not collected";
    the overdue/pending split is a display concern (see filters.month_view).
    """
    month_installments = [
        inst
        for inst in flatten_installments(source)
        if inst.due_date.year == year and inst.due_date.month == month
    ]

    total_revenue = sum(inst.amount_cents for inst in month_installments)
    paid_amount = sum(inst.amount_cents for inst in month_installments if inst.is_paid)
    paid_count = sum(1 for inst in month_installments if inst.is_paid)

    return MonthlySummary(
        year=year,
        month=month,
        total_revenue_cents=total_revenue,
        paid_cents=paid_amount,
        pending_cents=total_revenue - paid_amount,
        installment_count=len(month_installments),
        paid_count=paid_count,
        pending_count=len(month_installments) - paid_count,
        payment_rate=_payment_rate(paid_amount, total_revenue),
    )


def monthly_breakdown(source: InstallmentSource, year: int) -> List[MonthlySummary]:
    """Twelve monthly summaries of a year, January first"""
    installments = flatten_installments(source)
    return [monthly_summary(installments, year, month) for month in range(1, 13)]


def annual_summary(source: InstallmentSource, year: int) -> AnnualSummary:
    """
    Totals for installments due in a given year.

    Averages:
    - average_monthly_revenue: total / 12, a straight-line run rate
      regardless of how many months have installments
    - average_monthly_received: received / months with at least one paid
      installment (0 when nothing was paid)

    Both are integer cents (floor division).
    """
    year_installments = [inst for inst in flatten_installments(source) if inst.due_date.year == year]

    if not year_installments:
        return AnnualSummary(year=year)

    total_revenue = sum(inst.amount_cents for inst in year_installments)
    total_received = sum(inst.amount_cents for inst in year_installments if inst.is_paid)
    pending_amount = sum(inst.amount_cents for inst in year_installments if not inst.is_paid)
    paid_count = sum(1 for inst in year_installments if inst.is_paid)

    months_with_data = {inst.due_date.month for inst in year_installments}
    months_with_payments = {inst.due_date.month for inst in year_installments if inst.is_paid}

    average_received = total_received // len(months_with_payments) if months_with_payments else 0

    return AnnualSummary(
        year=year,
        total_revenue_cents=total_revenue,
        total_received_cents=total_received,
        pending_cents=pending_amount,
        average_monthly_revenue_cents=total_revenue // 12,
        average_monthly_received_cents=average_received,
        months_with_data=len(months_with_data),
        months_with_payments=len(months_with_payments),
        installment_count=len(year_installments),
        paid_count=paid_count,
        payment_rate=_payment_rate(total_received, total_revenue),
    )


def client_summary(
    client_id: str,
    services: Iterable[Service],
    installments_by_service: Mapping[str, Iterable[Installment]],
) -> ClientSummary:
    """Contracted amount of a client's services against what has been collected"""
    client_services = [s for s in services if s.client_id == client_id]
    service_ids = {s.id for s in client_services}

    # Only installments of this client's services; anything else is ignored
    installments = [
        inst
        for service_id, items in installments_by_service.items()
        if service_id in service_ids
        for inst in items
    ]

    contracted = sum(s.amount_cents for s in client_services)
    paid_amount = sum(inst.amount_cents for inst in installments if inst.is_paid)
    paid_count = sum(1 for inst in installments if inst.is_paid)

    return ClientSummary(
        client_id=client_id,
        service_count=len(client_services),
        total_contracted_cents=contracted,
        paid_cents=paid_amount,
        pending_cents=contracted - paid_amount,
        paid_count=paid_count,
        pending_count=len(installments) - paid_count,
    )


def service_progress(service: Service, installments: Iterable[Installment]) -> ServiceProgress:
    """How far a single service is paid, with its installments in number order"""
    ordered = sorted(installments, key=lambda inst: inst.installment_number)
    paid_amount = sum(inst.amount_cents for inst in ordered if inst.is_paid)

    return ServiceProgress(
        service_id=service.id,
        total_count=len(ordered),
        paid_count=sum(1 for inst in ordered if inst.is_paid),
        paid_cents=paid_amount,
        remaining_cents=sum(inst.amount_cents for inst in ordered) - paid_amount,
        installments=ordered,
    )


def services_for_month(services: Iterable[Service], year: int, month: int) -> List[Service]:
    """Services performed in a month, earliest first (agenda view)"""
    return sorted(
        (s for s in services if s.service_date.year == year and s.service_date.month == month),
        key=lambda s: s.service_date,
    )


def company_totals(services: Iterable[Service], source: InstallmentSource) -> CompanyTotals:
    """Contracted total of every service and the amount already collected"""
    return CompanyTotals(
        contracted_cents=sum(s.amount_cents for s in services),
        paid_cents=sum(inst.amount_cents for inst in flatten_installments(source) if inst.is_paid),
    )


def group_by_service(installments: Iterable[Installment]) -> Dict[str, List[Installment]]:
    """Index a flat installment list by owning service"""
    grouped: Dict[str, List[Installment]] = {}
    for inst in installments:
        grouped.setdefault(inst.service_id, []).append(inst)
    return grouped
