"""FastAPI router for customer registration, login and profile endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from zoo_auth.application.dto.auth_models import (
    CustomerAuthResponse,
    CustomerLoginRequest,
    CustomerPasswordChangeRequest,
    CustomerProfile,
    CustomerProfileUpdateRequest,
    CustomerRegisterRequest,
    MessageResponse,
)
from zoo_auth.application.services.auth_service import (
    AuthOutcome,
    AuthResult,
    CustomerAuthService,
    RegistrationInput,
)

INVALID_CREDENTIALS_DETAIL = "Invalid email or password"


def build_auth_router(*, auth_service: CustomerAuthService) -> APIRouter:
    """Build router exposing customer auth and profile endpoints."""

    router = APIRouter(prefix="/api/auth/customer", tags=["auth"])

    @router.post(
        "/register",
        response_model=CustomerAuthResponse,
        status_code=status.HTTP_201_CREATED,
    )
    async def register(payload: CustomerRegisterRequest) -> CustomerAuthResponse:
        result = await auth_service.register(
            RegistrationInput(
                first_name=payload.first_name,
                last_name=payload.last_name,
                email=payload.email,
                phone=payload.phone,
                password=payload.password,
            )
        )
        if result.outcome is AuthOutcome.EMAIL_TAKEN:
            raise HTTPException(status_code=409, detail="Email already registered")
        return CustomerAuthResponse(
            message="Customer registered successfully",
            customer=_require_profile(result),
        )

    @router.post("/login", response_model=CustomerAuthResponse)
    async def login(payload: CustomerLoginRequest) -> CustomerAuthResponse:
        result = await auth_service.authenticate(email=payload.email, password=payload.password)
        if result.outcome is not AuthOutcome.SUCCESS:
            raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS_DETAIL)
        return CustomerAuthResponse(message="Login successful", customer=_require_profile(result))

    @router.get("/{customer_id}", response_model=CustomerProfile)
    async def get_profile(customer_id: int) -> CustomerProfile:
        result = await auth_service.get_profile(customer_id=customer_id)
        if result.outcome is AuthOutcome.NOT_FOUND:
            raise HTTPException(status_code=404, detail="Customer not found")
        return _require_profile(result)

    @router.put("/{customer_id}", response_model=CustomerAuthResponse)
    async def update_profile(
        customer_id: int,
        payload: CustomerProfileUpdateRequest,
    ) -> CustomerAuthResponse:
        result = await auth_service.update_profile(
            customer_id=customer_id,
            first_name=payload.first_name,
            last_name=payload.last_name,
            email=payload.email,
            phone=payload.phone,
        )
        if result.outcome is AuthOutcome.NOT_FOUND:
            raise HTTPException(status_code=404, detail="Customer not found")
        if result.outcome is AuthOutcome.EMAIL_TAKEN:
            raise HTTPException(status_code=409, detail="Email already in use by another account")
        return CustomerAuthResponse(
            message="Profile updated successfully",
            customer=_require_profile(result),
        )

    @router.put("/{customer_id}/password", response_model=MessageResponse)
    async def change_password(
        customer_id: int,
        payload: CustomerPasswordChangeRequest,
    ) -> MessageResponse:
        result = await auth_service.change_password(
            customer_id=customer_id,
            current_password=payload.current_password,
            new_password=payload.new_password,
        )
        if result.outcome is AuthOutcome.NOT_FOUND:
            raise HTTPException(status_code=404, detail="Customer not found")
        if result.outcome is AuthOutcome.INVALID_CREDENTIALS:
            raise HTTPException(status_code=401, detail="Current password is incorrect")
        return MessageResponse(message="Password changed successfully")

    return router


def _require_profile(result: AuthResult) -> CustomerProfile:
    if result.customer is None:  # pragma: no cover - success outcomes carry the customer.
        raise HTTPException(status_code=500, detail="customer profile unavailable")
    return CustomerProfile.from_record(result.customer)
