"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional


class PaymentMethod(str, Enum):
    """How a service is charged"""

    PIX = "PIX"
    CREDIT_CARD = "CREDIT_CARD"
    BOLETO = "BOLETO"


class PaymentStatus(str, Enum):
    """Display status of an installment, derived on demand"""

    PAID = "paid"
    OVERDUE = "overdue"
    PENDING = "pending"


class StatusFilter(str, Enum):
    """Status selector for a month's installment list"""

    ALL = "all"
    PAID = "paid"
    PENDING = "pending"
    OVERDUE = "overdue"


@dataclass
class Company:
    """Company that owns clients and services"""

    id: Optional[str]
    user_id: str
    subscription_plan_id: str
    name: str
    url_logo: Optional[str] = None
    pix_code: Optional[str] = None


@dataclass
class SubscriptionPlan:
    """Plan a company subscribes to (price in major units, as the store reports it)"""

    id: Optional[str]
    name: str
    description: str
    type: str
    price: Optional[float] = None


@dataclass
class Client:
    """Customer of a company"""

    id: Optional[str]
    company_id: str
    name: str
    email: str
    phone_number: str


@dataclass
class ScheduleEntry:
    """Row of a generated or hand-edited payment schedule, before it is persisted"""

    installment_number: int
    amount_cents: Optional[int]
    due_date: Optional[date]


@dataclass
class Service:
    """Billable service sold to a client, paid in one or more installments"""

    id: Optional[str]
    company_id: str
    client_id: str
    description: str
    amount_cents: int
    payment_method: PaymentMethod
    first_payment_date: date
    service_date: date
    installment_count: int = 1
    template_notification_message: Optional[str] = None
    custom_installments: Optional[List[ScheduleEntry]] = None


@dataclass
class Installment:
    """Single payment of a service"""

    id: Optional[str]
    service_id: str
    installment_number: int
    amount_cents: int
    due_date: date
    paid_at: Optional[datetime] = None
    notified_at: Optional[datetime] = None

    @property
    def is_paid(self) -> bool:
        return self.paid_at is not None


@dataclass(frozen=True)
class MonthlySummary:
    """Revenue totals for the installments due in one month"""

    year: int
    month: int
    total_revenue_cents: int = 0
    paid_cents: int = 0
    pending_cents: int = 0
    installment_count: int = 0
    paid_count: int = 0
    pending_count: int = 0
    payment_rate: float = 0.0


@dataclass(frozen=True)
class AnnualSummary:
    """Revenue totals for the installments due in one year"""

    year: int
    total_revenue_cents: int = 0
    total_received_cents: int = 0
    pending_cents: int = 0
    average_monthly_revenue_cents: int = 0
    average_monthly_received_cents: int = 0
    months_with_data: int = 0
    months_with_payments: int = 0
    installment_count: int = 0
    paid_count: int = 0
    payment_rate: float = 0.0


@dataclass
class MonthView:
    """A month's summary plus the installment list shown for it"""

    summary: MonthlySummary
    installments: List[Installment] = field(default_factory=list)
    pending_cents: int = 0
    overdue_cents: int = 0


@dataclass(frozen=True)
class ClientSummary:
    """Contracted vs collected totals for one client"""

    client_id: str
    service_count: int = 0
    total_contracted_cents: int = 0
    paid_cents: int = 0
    pending_cents: int = 0
    paid_count: int = 0
    pending_count: int = 0


@dataclass
class ServiceProgress:
    """Payment progress of a single service"""

    service_id: str
    total_count: int = 0
    paid_count: int = 0
    paid_cents: int = 0
    remaining_cents: int = 0
    installments: List[Installment] = field(default_factory=list)


@dataclass(frozen=True)
class CompanyTotals:
    """Dashboard header totals across every service of a company"""

    contracted_cents: int = 0
    paid_cents: int = 0


@dataclass
class Page:
    """Slice of a listing"""

    items: list
    page: int
    per_page: int
    total_items: int
    total_pages: int
