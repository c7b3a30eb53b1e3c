"""In-memory ledger over one company's fetched services and installments"""

import asyncio
import logging
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Dict, Iterable, List, Mapping, Optional

from billing_engine.domain import aggregation
from billing_engine.domain.exceptions import InstallmentAlreadyPaid, InstallmentNotFound, NotFound
from billing_engine.domain.filters import month_view
from billing_engine.domain.models import (
    AnnualSummary,
    Client,
    ClientSummary,
    CompanyTotals,
    Installment,
    MonthlySummary,
    MonthView,
    Service,
    ServiceProgress,
    StatusFilter,
)
from billing_engine.infrastructure.clients.store import BillingStoreClient
from billing_engine.infrastructure.observability.logging import log_installment_paid
from billing_engine.infrastructure.observability.metrics import record_installment_paid

logger = logging.getLogger(__name__)


class InstallmentLedger:
    """
    Read model for the dashboard, agenda and client screens.

    Summaries are memoized per period and the cache is dropped whenever the
    installment set changes.
    """

    def __init__(
        self,
        services: Iterable[Service] = (),
        installments_by_service: Optional[Mapping[str, Iterable[Installment]]] = None,
        clients: Iterable[Client] = (),
    ):
        self._services: Dict[str, Service] = {s.id: s for s in services}
        self._clients: Dict[str, Client] = {c.id: c for c in clients}
        self._installments: Dict[str, List[Installment]] = {
            service_id: list(items) for service_id, items in (installments_by_service or {}).items()
        }
        self._cache: Dict[tuple, object] = {}

    @property
    def services(self) -> Dict[str, Service]:
        return dict(self._services)

    @property
    def clients(self) -> Dict[str, Client]:
        return dict(self._clients)

    @property
    def installments_by_service(self) -> Dict[str, List[Installment]]:
        return {service_id: list(items) for service_id, items in self._installments.items()}

    def all_installments(self) -> List[Installment]:
        return aggregation.flatten_installments(self._installments)

    def invalidate(self) -> None:
        self._cache.clear()

    def _cached(self, key: tuple, compute):
        if key not in self._cache:
            self._cache[key] = compute()
        return self._cache[key]

    # Aggregates

    def monthly_summary(self, year: int, month: int) -> MonthlySummary:
        return self._cached(
            ("month", year, month),
            lambda: aggregation.monthly_summary(self._installments, year, month),
        )

    def monthly_breakdown(self, year: int) -> List[MonthlySummary]:
        return [self.monthly_summary(year, month) for month in range(1, 13)]

    def annual_summary(self, year: int) -> AnnualSummary:
        return self._cached(("year", year), lambda: aggregation.annual_summary(self._installments, year))

    def company_totals(self) -> CompanyTotals:
        return self._cached(
            ("company",),
            lambda: aggregation.company_totals(self._services.values(), self._installments),
        )

    # Views (status depends on today, so these are not cached)

    def month_view(
        self,
        year: int,
        month: int,
        status_filter: StatusFilter = StatusFilter.ALL,
        today: Optional[date] = None,
    ) -> MonthView:
        return month_view(self._installments, year, month, status_filter, today)

    def client_summary(self, client_id: str) -> ClientSummary:
        return aggregation.client_summary(client_id, self._services.values(), self._installments)

    def service_progress(self, service_id: str) -> ServiceProgress:
        service = self._services.get(service_id)
        if service is None:
            raise NotFound(f"Service {service_id} is not loaded")
        return aggregation.service_progress(service, self._installments.get(service_id, []))

    def services_for_month(self, year: int, month: int) -> List[Service]:
        return aggregation.services_for_month(self._services.values(), year, month)

    # Mutations

    def find_installment(self, installment_id: str) -> Installment:
        for items in self._installments.values():
            for inst in items:
                if inst.id == installment_id:
                    return inst
        raise InstallmentNotFound(f"Installment {installment_id} is not loaded")

    def mark_paid(self, installment_id: str, paid_at: Optional[datetime] = None) -> Installment:
        """
        Set paid_at on a loaded installment.

        paid_at is written once and never cleared; a second call raises
        InstallmentAlreadyPaid instead of moving the timestamp.
        """
        current = self.find_installment(installment_id)
        if current.is_paid:
            raise InstallmentAlreadyPaid(f"Installment {installment_id} was paid at {current.paid_at.isoformat()}")

        return self.apply_installment(replace(current, paid_at=paid_at or datetime.now(timezone.utc)))

    def apply_installment(self, installment: Installment) -> Installment:
        """Merge a store-returned installment into the ledger"""
        items = self._installments.setdefault(installment.service_id, [])
        for position, inst in enumerate(items):
            if inst.id == installment.id:
                was_paid = inst.is_paid
                # paid_at never goes back to None
                if was_paid and not installment.is_paid:
                    installment = replace(installment, paid_at=inst.paid_at)
                items[position] = installment
                break
        else:
            was_paid = False
            items.append(installment)

        if installment.is_paid and not was_paid:
            record_installment_paid(installment.amount_cents)
            log_installment_paid(installment.id, installment.service_id, installment.amount_cents, installment.paid_at)

        self.invalidate()
        return installment

    def replace_service_installments(self, service_id: str, installments: Iterable[Installment]) -> None:
        """Full update of a service's schedule"""
        self._installments[service_id] = list(installments)
        self.invalidate()

    def upsert_service(self, service: Service) -> None:
        """Add a created service or replace an updated one"""
        self._services[service.id] = service
        self.invalidate()

    def remove_service(self, service_id: str) -> None:
        self._services.pop(service_id, None)
        self._installments.pop(service_id, None)
        self.invalidate()

    async def settle_installment(self, store: BillingStoreClient, installment_id: str) -> Installment:
        """Write mark-as-paid to the store, then apply the stored record locally"""
        current = self.find_installment(installment_id)
        if current.is_paid:
            raise InstallmentAlreadyPaid(f"Installment {installment_id} is already paid")

        updated = await store.mark_installment_as_paid(installment_id)
        return self.apply_installment(updated)


async def load_ledger(store: BillingStoreClient, client_id: Optional[str] = None) -> InstallmentLedger:
    """
    Fetch everything a view needs, then build the ledger.

    All fetches complete before the ledger exists, so no summary is ever
    computed over partial data. With client_id, only that client's services
    are kept (client detail view).
    """
    clients, services = await asyncio.gather(store.get_clients(), store.get_services())

    if client_id is not None:
        if not any(c.id == client_id for c in clients):
            raise NotFound(f"Client {client_id} not found")
        services = [s for s in services if s.client_id == client_id]

    schedules = await asyncio.gather(*(store.get_service_installments(s.id) for s in services))
    installments_by_service = {service.id: items for service, items in zip(services, schedules)}

    logger.info(
        "Ledger loaded",
        extra={
            "client_count": len(clients),
            "service_count": len(services),
            "installment_count": sum(len(items) for items in schedules),
        },
    )
    return InstallmentLedger(services=services, installments_by_service=installments_by_service, clients=clients)
