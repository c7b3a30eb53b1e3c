"""Pydantic schemas for billing store payload validation"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from billing_engine.domain.models import (
    Client,
    Company,
    Installment,
    PaymentMethod,
    ScheduleEntry,
    Service,
    SubscriptionPlan,
)


def _iso_date(value):
    """The store sometimes sends full timestamps for date-only fields"""
    if isinstance(value, str) and len(value) > 10:
        return value[:10]
    return value


class StoreModel(BaseModel):
    """Base for camelCase store payloads"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class CompanySchema(StoreModel):
    id: Optional[str] = None
    user_id: str = Field(..., alias="userId")
    subscription_plan_id: str = Field(..., alias="subscriptionPlanId")
    name: str = Field(..., min_length=1)
    url_logo: Optional[str] = Field(None, alias="urlLogo")
    pix_code: Optional[str] = Field(None, alias="pixCode")

    def to_domain(self) -> Company:
        return Company(
            id=self.id,
            user_id=self.user_id,
            subscription_plan_id=self.subscription_plan_id,
            name=self.name,
            url_logo=self.url_logo,
            pix_code=self.pix_code,
        )

    @classmethod
    def from_domain(cls, company: Company) -> "CompanySchema":
        return cls(
            id=company.id,
            user_id=company.user_id,
            subscription_plan_id=company.subscription_plan_id,
            name=company.name,
            url_logo=company.url_logo,
            pix_code=company.pix_code,
        )


class SubscriptionPlanSchema(StoreModel):
    id: Optional[str] = None
    name: str
    description: str = ""
    type: str = ""
    price: Optional[float] = None
    amount: Optional[float] = None

    def to_domain(self) -> SubscriptionPlan:
        return SubscriptionPlan(
            id=self.id,
            name=self.name,
            description=self.description,
            type=self.type,
            price=self.price if self.price is not None else self.amount,
        )


class ClientSchema(StoreModel):
    id: Optional[str] = None
    company_id: str = Field(..., alias="companyId")
    name: str
    email: str
    phone_number: str = Field("", alias="phoneNumber")

    def to_domain(self) -> Client:
        return Client(
            id=self.id,
            company_id=self.company_id,
            name=self.name,
            email=self.email,
            phone_number=self.phone_number,
        )


class CustomInstallmentSchema(StoreModel):
    installment_number: int = Field(..., ge=1, alias="installmentNumber")
    amount: int = Field(..., gt=0, description="Amount in cents")
    due_date: date = Field(..., alias="dueDate")

    @field_validator("due_date", mode="before")
    @classmethod
    def strip_time(cls, value):
        return _iso_date(value)

    def to_domain(self) -> ScheduleEntry:
        return ScheduleEntry(
            installment_number=self.installment_number,
            amount_cents=self.amount,
            due_date=self.due_date,
        )


class ServiceSchema(StoreModel):
    id: Optional[str] = None
    company_id: str = Field(..., alias="companyId")
    client_id: str = Field(..., alias="clientId")
    description: str
    amount: int = Field(..., gt=0, description="Amount in cents")
    payment_method: PaymentMethod = Field(..., alias="paymentMethod")
    template_notification_message: Optional[str] = Field(None, alias="templateNotificationMessage")
    first_payment_date: date = Field(..., alias="firstPaymentDate")
    service_date: date = Field(..., alias="serviceDate")
    installments: int = Field(1, ge=1)
    custom_installments: Optional[List[CustomInstallmentSchema]] = Field(None, alias="customInstallments")

    @field_validator("first_payment_date", "service_date", mode="before")
    @classmethod
    def strip_time(cls, value):
        return _iso_date(value)

    def to_domain(self) -> Service:
        return Service(
            id=self.id,
            company_id=self.company_id,
            client_id=self.client_id,
            description=self.description,
            amount_cents=self.amount,
            payment_method=self.payment_method,
            first_payment_date=self.first_payment_date,
            service_date=self.service_date,
            installment_count=self.installments,
            template_notification_message=self.template_notification_message,
            custom_installments=(
                [entry.to_domain() for entry in self.custom_installments]
                if self.custom_installments
                else None
            ),
        )

    @classmethod
    def from_domain(cls, service: Service) -> "ServiceSchema":
        custom = None
        if service.custom_installments:
            custom = [
                CustomInstallmentSchema(
                    installment_number=entry.installment_number,
                    amount=entry.amount_cents,
                    due_date=entry.due_date,
                )
                for entry in service.custom_installments
            ]
        return cls(
            id=service.id,
            company_id=service.company_id,
            client_id=service.client_id,
            description=service.description,
            amount=service.amount_cents,
            payment_method=service.payment_method,
            template_notification_message=service.template_notification_message,
            first_payment_date=service.first_payment_date,
            service_date=service.service_date,
            installments=service.installment_count,
            custom_installments=custom,
        )


class InstallmentSchema(StoreModel):
    id: Optional[str] = None
    service_id: str = Field(..., alias="serviceId")
    installment_number: int = Field(..., ge=1, alias="installmentNumber")
    amount: int = Field(..., description="Amount in cents")
    due_date: date = Field(..., alias="dueDate")
    notificated_at: Optional[datetime] = Field(None, alias="notificatedAt")
    paid_at: Optional[datetime] = Field(None, alias="paidAt")

    @field_validator("due_date", mode="before")
    @classmethod
    def strip_time(cls, value):
        return _iso_date(value)

    def to_domain(self) -> Installment:
        return Installment(
            id=self.id,
            service_id=self.service_id,
            installment_number=self.installment_number,
            amount_cents=self.amount,
            due_date=self.due_date,
            paid_at=self.paid_at,
            notified_at=self.notificated_at,
        )
