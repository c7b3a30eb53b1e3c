"""Billing store HTTP client for clients, services and installments"""

from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from billing_engine.config import settings
from billing_engine.domain.exceptions import NotFound, StoreAPIError
from billing_engine.domain.models import Client, Company, Installment, Service, SubscriptionPlan
from billing_engine.infrastructure.clients.schemas import (
    ClientSchema,
    CompanySchema,
    InstallmentSchema,
    ServiceSchema,
    SubscriptionPlanSchema,
)
from billing_engine.infrastructure.observability.metrics import (
    store_latency_histogram,
    store_request_failures_counter,
)


class BillingStoreClient:
    """Client for the external REST store that owns companies, clients, services and installments"""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.store_api_base).rstrip("/")
        self.token = token if token is not None else settings.store_api_token
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Send one request and return the decoded JSON body.

        Raises:
            NotFound: store answered 404
            StoreAPIError: on timeout, other HTTP errors, or a non-JSON body
        """
        async with httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers(),
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            try:
                with store_latency_histogram.labels(operation=operation).time():
                    response = await client.request(method, path, json=json)
                response.raise_for_status()
                return response.json()

            except httpx.TimeoutException as e:
                store_request_failures_counter.labels(operation=operation).inc()
                raise StoreAPIError(f"Billing store timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                if e.response.status_code == 404:
                    raise NotFound(f"{operation}: resource not found at {path}") from e
                store_request_failures_counter.labels(operation=operation).inc()
                raise StoreAPIError(f"Billing store error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                store_request_failures_counter.labels(operation=operation).inc()
                raise StoreAPIError(f"Billing store unreachable: {e}") from e
            except ValueError as e:
                store_request_failures_counter.labels(operation=operation).inc()
                raise StoreAPIError(f"Invalid JSON from billing store: {e}") from e

    def _parse(self, operation: str, schema, payload: Any):
        try:
            return schema.model_validate(payload).to_domain()
        except ValidationError as e:
            store_request_failures_counter.labels(operation=operation).inc()
            raise StoreAPIError(f"Invalid {operation} data from billing store: {e}") from e

    async def get_company(self) -> Optional[Company]:
        """The caller's company, or None when the company setup has not been done"""
        data = await self._request("get_company", "GET", "/company")
        companies = data.get("companies", [])
        if not companies:
            return None
        return self._parse("get_company", CompanySchema, companies[0])

    async def create_company(self, company: Company) -> Company:
        payload = CompanySchema.from_domain(company).model_dump(by_alias=True, exclude_none=True)
        data = await self._request("create_company", "POST", "/company", json=payload)
        return self._parse("create_company", CompanySchema, data.get("company"))

    async def get_subscription_plans(self) -> List[SubscriptionPlan]:
        data = await self._request("get_subscription_plans", "GET", "/subscription-plans")
        return [
            self._parse("get_subscription_plans", SubscriptionPlanSchema, plan)
            for plan in data.get("subscriptionPlans", [])
        ]

    async def get_clients(self) -> List[Client]:
        data = await self._request("get_clients", "GET", "/clients")
        return [self._parse("get_clients", ClientSchema, c) for c in data.get("clients", [])]

    async def get_services(self) -> List[Service]:
        data = await self._request("get_services", "GET", "/services")
        return [self._parse("get_services", ServiceSchema, s) for s in data.get("services", [])]

    async def create_service(self, service: Service) -> Service:
        payload = ServiceSchema.from_domain(service).model_dump(by_alias=True, mode="json", exclude_none=True)
        data = await self._request("create_service", "POST", "/services", json=payload)
        return self._parse("create_service", ServiceSchema, data.get("service"))

    async def update_service(self, service_id: str, service: Service) -> Service:
        payload = ServiceSchema.from_domain(service).model_dump(by_alias=True, mode="json", exclude_none=True)
        payload.pop("id", None)
        data = await self._request("update_service", "PUT", f"/services/{service_id}", json=payload)
        return self._parse("update_service", ServiceSchema, data.get("service"))

    async def get_service_installments(self, service_id: str) -> List[Installment]:
        data = await self._request("get_service_installments", "GET", f"/services/{service_id}/installments")
        return [
            self._parse("get_service_installments", InstallmentSchema, inst)
            for inst in data.get("installments", [])
        ]

    async def mark_installment_as_paid(self, installment_id: str) -> Installment:
        """Flip an installment to paid; the store stamps paidAt with its own clock"""
        data = await self._request(
            "mark_installment_as_paid",
            "PUT",
            f"/service-installments/{installment_id}/mark-as-paid",
        )
        return self._parse("mark_installment_as_paid", InstallmentSchema, data.get("installment"))
