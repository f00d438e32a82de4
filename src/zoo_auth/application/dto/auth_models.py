"""Pydantic models for customer auth and profile HTTP contracts."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from zoo_auth.application.ports.customer_repository_port import CustomerRecord


class CamelModel(BaseModel):
    """Base model accepting the storefront's camelCase payload keys."""

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class CustomerRegisterRequest(CamelModel):
    """HTTP request model for customer self-registration."""

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    phone: str | None = None
    password: str = Field(min_length=1)


class CustomerLoginRequest(CamelModel):
    """HTTP request model for customer login."""

    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class CustomerProfileUpdateRequest(CamelModel):
    """HTTP request model for customer profile edits."""

    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    phone: str | None = None


class CustomerPasswordChangeRequest(CamelModel):
    """HTTP request model for customer password change."""

    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=1)


class CustomerProfile(CamelModel):
    """Customer profile as returned to the storefront; never carries the password."""

    customer_id: int
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: CustomerRecord) -> CustomerProfile:
        return cls(
            customer_id=record.customer_id,
            first_name=record.first_name,
            last_name=record.last_name,
            email=record.email,
            phone=record.phone,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class CustomerAuthResponse(CamelModel):
    """HTTP response model wrapping one customer profile."""

    message: str
    customer: CustomerProfile


class MessageResponse(CamelModel):
    """HTTP response model carrying a single status message."""

    message: str
