"""Pytest fixtures for testing"""

import json
from datetime import date, datetime, timezone
from typing import Callable, Dict, List

import httpx
import pytest

from billing_engine.domain.models import Client, Installment, PaymentMethod, Service
from billing_engine.infrastructure.clients.store import BillingStoreClient


TODAY = date(2024, 3, 15)


@pytest.fixture
def today() -> date:
    """Fixed reference date so status checks do not depend on the wall clock"""
    return TODAY


@pytest.fixture
def sample_clients() -> List[Client]:
    return [
        Client(id="c1", company_id="co1", name="Ana Souza", email="ana@example.com", phone_number="11999990000"),
        Client(id="c2", company_id="co1", name="Bruno Lima", email="bruno@lima.dev", phone_number="21988880000"),
    ]


@pytest.fixture
def sample_services() -> List[Service]:
    return [
        Service(
            id="s1",
            company_id="co1",
            client_id="c1",
            description="Website redesign",
            amount_cents=300000,  # R$ 3.000,00
            payment_method=PaymentMethod.PIX,
            first_payment_date=date(2024, 2, 10),
            service_date=date(2024, 2, 1),
            installment_count=3,
        ),
        Service(
            id="s2",
            company_id="co1",
            client_id="c2",
            description="Logo design",
            amount_cents=50000,  # R$ 500,00
            payment_method=PaymentMethod.BOLETO,
            first_payment_date=date(2024, 3, 20),
            service_date=date(2024, 3, 5),
            installment_count=1,
        ),
    ]


@pytest.fixture
def sample_installments() -> Dict[str, List[Installment]]:
    """Installments indexed by service, as the store returns them"""
    paid = datetime(2024, 2, 10, 14, 30, tzinfo=timezone.utc)
    return {
        "s1": [
            Installment(id="i1", service_id="s1", installment_number=1, amount_cents=100000,
                        due_date=date(2024, 2, 10), paid_at=paid),
            Installment(id="i2", service_id="s1", installment_number=2, amount_cents=100000,
                        due_date=date(2024, 3, 10)),
            Installment(id="i3", service_id="s1", installment_number=3, amount_cents=100000,
                        due_date=date(2024, 4, 10)),
        ],
        "s2": [
            Installment(id="i4", service_id="s2", installment_number=1, amount_cents=50000,
                        due_date=date(2024, 3, 20)),
        ],
    }


@pytest.fixture
def store_payloads() -> Dict[str, dict]:
    """JSON bodies served by the fake billing store, keyed by request path"""
    return {
        "/company": {
            "companies": [
                {"id": "co1", "userId": "u1", "subscriptionPlanId": "plan-basic", "name": "Acme",
                 "pixCode": "acme@pix"}
            ]
        },
        "/subscription-plans": {
            "subscriptionPlans": [
                {"id": "plan-basic", "name": "Basic", "description": "Up to 50 clients", "type": "MONTHLY",
                 "price": 49.9},
                {"id": "plan-pro", "name": "Pro", "description": "Unlimited", "type": "MONTHLY", "amount": 99},
            ]
        },
        "/clients": {
            "clients": [
                {"id": "c1", "companyId": "co1", "name": "Ana Souza", "email": "ana@example.com",
                 "phoneNumber": "11999990000"},
                {"id": "c2", "companyId": "co1", "name": "Bruno Lima", "email": "bruno@lima.dev",
                 "phoneNumber": "21988880000"},
            ]
        },
        "/services": {
            "services": [
                {"id": "s1", "companyId": "co1", "clientId": "c1", "description": "Website redesign",
                 "amount": 300000, "paymentMethod": "PIX", "firstPaymentDate": "2024-02-10T00:00:00.000Z",
                 "serviceDate": "2024-02-01", "installments": 3},
                {"id": "s2", "companyId": "co1", "clientId": "c2", "description": "Logo design",
                 "amount": 50000, "paymentMethod": "BOLETO", "firstPaymentDate": "2024-03-20",
                 "serviceDate": "2024-03-05", "installments": 1},
            ]
        },
        "/services/s1/installments": {
            "installments": [
                {"id": "i1", "serviceId": "s1", "installmentNumber": 1, "amount": 100000,
                 "dueDate": "2024-02-10T00:00:00.000Z", "paidAt": "2024-02-10T14:30:00Z"},
                {"id": "i2", "serviceId": "s1", "installmentNumber": 2, "amount": 100000,
                 "dueDate": "2024-03-10"},
                {"id": "i3", "serviceId": "s1", "installmentNumber": 3, "amount": 100000,
                 "dueDate": "2024-04-10"},
            ]
        },
        "/services/s2/installments": {
            "installments": [
                {"id": "i4", "serviceId": "s2", "installmentNumber": 1, "amount": 50000,
                 "dueDate": "2024-03-20"},
            ]
        },
    }


@pytest.fixture
def store_requests() -> List[httpx.Request]:
    """Every request the fake store received, in order"""
    return []


@pytest.fixture
def make_store(store_payloads, store_requests) -> Callable[..., BillingStoreClient]:
    """Build a BillingStoreClient backed by an in-process fake store"""

    def factory(handler: Callable[[httpx.Request], httpx.Response] | None = None) -> BillingStoreClient:
        def default_handler(request: httpx.Request) -> httpx.Response:
            path = request.url.path
            if request.method == "PUT" and path.startswith("/service-installments/"):
                installment_id = path.split("/")[2]
                for body in store_payloads.values():
                    for inst in body.get("installments", []):
                        if inst["id"] == installment_id:
                            updated = dict(inst, paidAt="2024-03-15T12:00:00Z")
                            return httpx.Response(200, json={"installment": updated})
                return httpx.Response(404, json={"message": "not found"})
            if request.method in ("POST", "PUT") and path.startswith("/services"):
                body = json.loads(request.content)
                body.setdefault("id", path.split("/")[2] if request.method == "PUT" else "s-new")
                return httpx.Response(200, json={"service": body})
            if request.method == "POST" and path == "/company":
                body = json.loads(request.content)
                return httpx.Response(201, json={"company": dict(body, id="co-new")})
            if path in store_payloads:
                return httpx.Response(200, json=store_payloads[path])
            return httpx.Response(404, json={"message": "not found"})

        def recording_handler(request: httpx.Request) -> httpx.Response:
            store_requests.append(request)
            return (handler or default_handler)(request)

        return BillingStoreClient(
            base_url="http://store.test",
            token="test-token",
            transport=httpx.MockTransport(recording_handler),
        )

    return factory
