"""Integration tests for the billing store client and ledger loading"""

import json

import httpx
import pytest
from datetime import date

from billing_engine.application.ledger import load_ledger
from billing_engine.domain.exceptions import InstallmentAlreadyPaid, NotFound, StoreAPIError
from billing_engine.domain.models import Company, PaymentMethod, ScheduleEntry, Service


async def test_get_clients_and_services(make_store, store_requests):
    """Test payloads are mapped into domain models"""
    store = make_store()

    clients = await store.get_clients()
    services = await store.get_services()

    assert [c.name for c in clients] == ["Ana Souza", "Bruno Lima"]
    assert services[0].amount_cents == 300000
    assert services[0].payment_method is PaymentMethod.PIX
    assert services[0].first_payment_date == date(2024, 2, 10)
    assert services[0].installment_count == 3
    assert store_requests[0].headers["Authorization"] == "Bearer test-token"


async def test_get_service_installments(make_store):
    installments = await make_store().get_service_installments("s1")

    assert [i.installment_number for i in installments] == [1, 2, 3]
    assert installments[0].due_date == date(2024, 2, 10)
    assert installments[0].is_paid
    assert not installments[1].is_paid


async def test_get_company_and_plans(make_store):
    store = make_store()

    company = await store.get_company()
    plans = await store.get_subscription_plans()

    assert company.id == "co1"
    assert company.pix_code == "acme@pix"
    assert [p.price for p in plans] == [49.9, 99]


async def test_get_company_none_when_not_set_up(make_store):
    store = make_store(lambda request: httpx.Response(200, json={"companies": []}))
    assert await store.get_company() is None


async def test_create_company_sends_explicit_plan(make_store, store_requests):
    company = Company(id=None, user_id="u1", subscription_plan_id="plan-pro", name="Acme")

    created = await make_store().create_company(company)

    body = json.loads(store_requests[-1].content)
    assert body == {"userId": "u1", "subscriptionPlanId": "plan-pro", "name": "Acme"}
    assert created.id == "co-new"


async def test_create_service_with_custom_installments(make_store, store_requests):
    service = Service(
        id=None,
        company_id="co1",
        client_id="c1",
        description="Consulting",
        amount_cents=10000,
        payment_method=PaymentMethod.CREDIT_CARD,
        first_payment_date=date(2024, 5, 1),
        service_date=date(2024, 4, 20),
        installment_count=2,
        custom_installments=[
            ScheduleEntry(installment_number=1, amount_cents=4000, due_date=date(2024, 5, 1)),
            ScheduleEntry(installment_number=2, amount_cents=6000, due_date=date(2024, 6, 1)),
        ],
    )

    created = await make_store().create_service(service)

    body = json.loads(store_requests[-1].content)
    assert store_requests[-1].method == "POST"
    assert body["amount"] == 10000
    assert body["paymentMethod"] == "CREDIT_CARD"
    assert body["installments"] == 2
    assert body["customInstallments"][1] == {"installmentNumber": 2, "amount": 6000, "dueDate": "2024-06-01"}
    assert "id" not in body
    assert created.id == "s-new"
    assert created.custom_installments[0].amount_cents == 4000


async def test_update_service(make_store, store_requests, sample_services):
    updated = await make_store().update_service("s1", sample_services[0])

    assert store_requests[-1].method == "PUT"
    assert store_requests[-1].url.path == "/services/s1"
    assert "customInstallments" not in json.loads(store_requests[-1].content)
    assert updated.id == "s1"


async def test_mark_installment_as_paid(make_store):
    installment = await make_store().mark_installment_as_paid("i2")

    assert installment.id == "i2"
    assert installment.is_paid


async def test_not_found_maps_to_domain_error(make_store):
    with pytest.raises(NotFound):
        await make_store().mark_installment_as_paid("missing")


async def test_server_error_maps_to_store_error(make_store):
    store = make_store(lambda request: httpx.Response(500, json={"message": "boom"}))
    with pytest.raises(StoreAPIError):
        await store.get_clients()


async def test_timeout_maps_to_store_error(make_store):
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(StoreAPIError):
        await make_store(handler).get_services()


async def test_malformed_payload_maps_to_store_error(make_store):
    store = make_store(lambda request: httpx.Response(200, json={"clients": [{"id": "c1"}]}))
    with pytest.raises(StoreAPIError):
        await store.get_clients()


async def test_non_json_body_maps_to_store_error(make_store):
    store = make_store(lambda request: httpx.Response(200, content=b"<html>"))
    with pytest.raises(StoreAPIError):
        await store.get_clients()


async def test_load_ledger_fetches_everything_before_aggregating(make_store, store_requests):
    ledger = await load_ledger(make_store())

    paths = sorted(r.url.path for r in store_requests)
    assert paths == ["/clients", "/services", "/services/s1/installments", "/services/s2/installments"]
    assert ledger.annual_summary(2024).total_revenue_cents == 350000
    assert ledger.monthly_summary(2024, 2).paid_cents == 100000


async def test_load_ledger_for_one_client(make_store):
    ledger = await load_ledger(make_store(), client_id="c2")

    assert list(ledger.services) == ["s2"]
    assert ledger.client_summary("c2").total_contracted_cents == 50000


async def test_load_ledger_unknown_client(make_store):
    with pytest.raises(NotFound):
        await load_ledger(make_store(), client_id="ghost")


async def test_settle_installment_updates_ledger(make_store):
    store = make_store()
    ledger = await load_ledger(store)
    assert ledger.monthly_summary(2024, 3).paid_cents == 0

    settled = await ledger.settle_installment(store, "i2")

    assert settled.is_paid
    assert ledger.monthly_summary(2024, 3).paid_cents == 100000


async def test_settle_installment_refuses_paid(make_store, store_requests):
    store = make_store()
    ledger = await load_ledger(store)
    sent = len(store_requests)

    with pytest.raises(InstallmentAlreadyPaid):
        await ledger.settle_installment(store, "i1")

    assert len(store_requests) == sent
